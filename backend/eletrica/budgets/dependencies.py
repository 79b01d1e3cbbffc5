import logging
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from eletrica.budgets.interfaces.repositories import AbstractBudgetRepository
from eletrica.budgets.repositories import SQLAlchemyBudgetRepository
from eletrica.budgets.service import BudgetService
from eletrica.catalog.dependencies import MaterialRepositoryDep, ServiceRepositoryDep
from eletrica.clients.dependencies import ClientRepositoryDep
from eletrica.database import get_db_session

logger = logging.getLogger(__name__)


def get_budget_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)]
) -> AbstractBudgetRepository:
    """Fournit une instance du repository des orçamentos (implémentation SQLAlchemy)."""
    logger.debug("Fourniture de SQLAlchemyBudgetRepository")
    return SQLAlchemyBudgetRepository(db_session=session)

BudgetRepositoryDep = Annotated[AbstractBudgetRepository, Depends(get_budget_repository)]


def get_budget_service(
    budget_repo: BudgetRepositoryDep,
    client_repo: ClientRepositoryDep,
    service_repo: ServiceRepositoryDep,
    material_repo: MaterialRepositoryDep,
) -> BudgetService:
    """Fournit une instance de BudgetService avec ses repositories."""
    logger.debug("Fourniture de BudgetService")
    return BudgetService(
        budget_repo=budget_repo,
        client_repo=client_repo,
        service_repo=service_repo,
        material_repo=material_repo,
    )

BudgetServiceDep = Annotated[BudgetService, Depends(get_budget_service)]
