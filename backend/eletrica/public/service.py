import logging
from typing import List, Optional

from eletrica.budgets.interfaces.repositories import AbstractBudgetRepository
from eletrica.budgets.models import BudgetRead
from eletrica.budgets.service import BudgetService
from eletrica.clients.exceptions import ClientNotFoundException
from eletrica.clients.interfaces.repositories import AbstractClientRepository
from eletrica.clients.models import Client, ClientPortalRead, ClientPublicRead, PortalBudgetRead, PortalMaterialListRead
from eletrica.material_lists.interfaces.repositories import AbstractMaterialListRepository
from eletrica.material_lists.models import MaterialListRead
from eletrica.material_lists.service import MaterialListService
from eletrica.quotes.constants import PUBLIC_VISIBLE_STATUS, QuoteStatus

logger = logging.getLogger(__name__)


class PublicPortalService:
    """
    Portail public d'un client, accessible par lien public ou code d'accès.

    Le lien résout un client actif; chaque orçamento ou liste demandé doit
    appartenir à ce client, sinon il est traité comme inexistant.
    """

    def __init__(
        self,
        client_repo: AbstractClientRepository,
        budget_repo: AbstractBudgetRepository,
        material_list_repo: AbstractMaterialListRepository,
        budget_service: BudgetService,
        material_list_service: MaterialListService,
    ):
        self.client_repo = client_repo
        self.budget_repo = budget_repo
        self.material_list_repo = material_list_repo
        self.budget_service = budget_service
        self.material_list_service = material_list_service

    async def _resolve_client(self, link: str) -> Client:
        client = await self.client_repo.get_active_by_link(link)
        if not client:
            logger.warning("[PublicPortalService] Client non trouvé ou inactif pour le lien fourni.")
            raise ClientNotFoundException()
        return client

    async def get_client_portal(self, link: str) -> ClientPortalRead:
        """Renvoie le client actif et ses orçamentos / listes PENDING ou APPROVED."""
        client = await self._resolve_client(link)

        budgets = await self.budget_repo.list_for_client(client.id, PUBLIC_VISIBLE_STATUS)
        material_lists = await self.material_list_repo.list_for_client(client.id, PUBLIC_VISIBLE_STATUS)
        logger.debug(
            f"[PublicPortalService] Portail client {client.id}: "
            f"{len(budgets)} orçamento(s), {len(material_lists)} liste(s)."
        )
        return ClientPortalRead(
            client=ClientPublicRead.model_validate(client),
            budgets=[PortalBudgetRead.model_validate(b) for b in budgets],
            material_lists=[PortalMaterialListRead.model_validate(m) for m in material_lists],
        )

    # --- Orçamentos du client ---

    async def get_budget(self, link: str, budget_id: int) -> BudgetRead:
        client = await self._resolve_client(link)
        return await self.budget_service.get_budget_for_client(client.id, budget_id)

    async def decide_budget(
        self, link: str, budget_id: int, new_status: QuoteStatus, reason: Optional[str] = None
    ) -> BudgetRead:
        client = await self._resolve_client(link)
        return await self.budget_service.set_status_for_client(client.id, budget_id, new_status, reason)

    # --- Listes de matériel du client ---

    async def list_material_lists(self, link: str) -> List[MaterialListRead]:
        client = await self._resolve_client(link)
        return await self.material_list_service.list_material_lists_for_client(client.id)

    async def get_material_list(self, link: str, material_list_id: int) -> MaterialListRead:
        client = await self._resolve_client(link)
        return await self.material_list_service.get_material_list_for_client(client.id, material_list_id)

    async def decide_material_list(
        self, link: str, material_list_id: int, new_status: QuoteStatus, reason: Optional[str] = None
    ) -> MaterialListRead:
        client = await self._resolve_client(link)
        return await self.material_list_service.set_status_for_client(
            client.id, material_list_id, new_status, reason
        )
