import logging
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from eletrica.budgets.dependencies import BudgetRepositoryDep
from eletrica.catalog.dependencies import MaterialRepositoryDep
from eletrica.clients.dependencies import ClientRepositoryDep
from eletrica.database import get_db_session
from eletrica.material_lists.interfaces.repositories import AbstractMaterialListRepository
from eletrica.material_lists.repositories import SQLAlchemyMaterialListRepository
from eletrica.material_lists.service import MaterialListService

logger = logging.getLogger(__name__)


def get_material_list_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)]
) -> AbstractMaterialListRepository:
    logger.debug("Fourniture de SQLAlchemyMaterialListRepository")
    return SQLAlchemyMaterialListRepository(db_session=session)

MaterialListRepositoryDep = Annotated[AbstractMaterialListRepository, Depends(get_material_list_repository)]


def get_material_list_service(
    material_list_repo: MaterialListRepositoryDep,
    budget_repo: BudgetRepositoryDep,
    client_repo: ClientRepositoryDep,
    material_repo: MaterialRepositoryDep,
) -> MaterialListService:
    logger.debug("Fourniture de MaterialListService")
    return MaterialListService(
        material_list_repo=material_list_repo,
        budget_repo=budget_repo,
        client_repo=client_repo,
        material_repo=material_repo,
    )

MaterialListServiceDep = Annotated[MaterialListService, Depends(get_material_list_service)]
