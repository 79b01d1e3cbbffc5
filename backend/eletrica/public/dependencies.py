import logging
from typing import Annotated

from fastapi import Depends

from eletrica.budgets.dependencies import BudgetRepositoryDep, BudgetServiceDep
from eletrica.clients.dependencies import ClientRepositoryDep
from eletrica.material_lists.dependencies import MaterialListRepositoryDep, MaterialListServiceDep
from eletrica.public.service import PublicPortalService

logger = logging.getLogger(__name__)


def get_public_portal_service(
    client_repo: ClientRepositoryDep,
    budget_repo: BudgetRepositoryDep,
    material_list_repo: MaterialListRepositoryDep,
    budget_service: BudgetServiceDep,
    material_list_service: MaterialListServiceDep,
) -> PublicPortalService:
    logger.debug("Fourniture de PublicPortalService")
    return PublicPortalService(
        client_repo=client_repo,
        budget_repo=budget_repo,
        material_list_repo=material_list_repo,
        budget_service=budget_service,
        material_list_service=material_list_service,
    )

PublicPortalServiceDep = Annotated[PublicPortalService, Depends(get_public_portal_service)]
