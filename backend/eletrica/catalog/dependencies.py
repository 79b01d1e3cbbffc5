import logging
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from eletrica.budgets.models import BudgetItem
from eletrica.catalog.exceptions import MaterialNotFoundException, ServiceNotFoundException
from eletrica.catalog.interfaces.repositories import AbstractCatalogRepository
from eletrica.catalog.models import Material, Service
from eletrica.catalog.repositories import SQLAlchemyCatalogRepository
from eletrica.catalog.service import CatalogService
from eletrica.database import get_db_session
from eletrica.material_lists.models import MaterialListItem

logger = logging.getLogger(__name__)

DbSessionDep = Annotated[AsyncSession, Depends(get_db_session)]

# --- Dépendances Repository ---

def get_service_repository(session: DbSessionDep) -> AbstractCatalogRepository:
    """Repository des services; référencés uniquement par les items d'orçamento."""
    return SQLAlchemyCatalogRepository(session, Service, reference_columns=(BudgetItem.service_id,))

def get_material_repository(session: DbSessionDep) -> AbstractCatalogRepository:
    """Repository des matériels; référencés par les items d'orçamento et de liste."""
    return SQLAlchemyCatalogRepository(
        session, Material, reference_columns=(BudgetItem.material_id, MaterialListItem.material_id)
    )

ServiceRepositoryDep = Annotated[AbstractCatalogRepository, Depends(get_service_repository)]
MaterialRepositoryDep = Annotated[AbstractCatalogRepository, Depends(get_material_repository)]

# --- Dépendances Service ---

def get_service_catalog_service(repo: ServiceRepositoryDep) -> CatalogService:
    logger.debug("Fourniture de CatalogService (services)")
    return CatalogService(repo, Service, ServiceNotFoundException)

def get_material_catalog_service(repo: MaterialRepositoryDep) -> CatalogService:
    logger.debug("Fourniture de CatalogService (matériels)")
    return CatalogService(repo, Material, MaterialNotFoundException)
