import logging
import secrets
from typing import Optional

from eletrica.budgets.exceptions import BudgetItemNotFoundException, BudgetNotFoundException
from eletrica.budgets.interfaces.repositories import AbstractBudgetRepository
from eletrica.budgets.models import (
    Budget,
    BudgetCreate,
    BudgetFilters,
    BudgetItem,
    BudgetItemCreate,
    BudgetItemUpdate,
    BudgetRead,
    BudgetUpdate,
    PaginatedBudgetRead,
)
from eletrica.catalog.exceptions import CatalogDomainException, MaterialNotFoundException, ServiceNotFoundException
from eletrica.catalog.interfaces.repositories import AbstractCatalogRepository
from eletrica.clients.exceptions import ClientDomainException, ClientNotFoundException
from eletrica.clients.interfaces.repositories import AbstractClientRepository
from eletrica.quotes.calculations import apply_totals
from eletrica.quotes.constants import QuoteStatus
from eletrica.quotes.exceptions import AccessLinkMismatchException, QuoteDomainException, QuoteNotFoundException
from eletrica.quotes.lifecycle import (
    apply_item_patch,
    apply_status_transition,
    ensure_editable,
    finalize_item_values,
    snapshot_catalog_fields,
)
from eletrica.quotes.models import DiscountApply, QuoteSummary, StatusUpdate
from eletrica.utils import utcnow

logger = logging.getLogger(__name__)

ENTITY_LABEL = "orçamento"

# Champs recopiés lors de la duplication d'un item
ITEM_COPY_FIELDS = (
    "name", "description", "quantity", "unit_price", "total_price", "unit", "service_id", "material_id",
)

DOMAIN_EXCEPTIONS = (QuoteDomainException, CatalogDomainException, ClientDomainException)


class BudgetService:
    """
    Service applicatif des orçamentos.

    Chaque mutation composée (item, remise, statut, duplication) s'exécute dans
    une seule transaction: verrouillage de l'orçamento, validation, écriture,
    recalcul des totaux puis commit. Toute erreur annule la transaction.
    """

    def __init__(
        self,
        budget_repo: AbstractBudgetRepository,
        client_repo: AbstractClientRepository,
        service_repo: AbstractCatalogRepository,
        material_repo: AbstractCatalogRepository,
    ):
        self.budget_repo = budget_repo
        self.client_repo = client_repo
        self.service_repo = service_repo
        self.material_repo = material_repo

    # --- Helpers ---

    def _map_budget_to_read(self, budget: Budget) -> BudgetRead:
        return BudgetRead.model_validate(budget)

    async def _get_owned_budget(self, budget_id: int, user_id: int, for_update: bool = False) -> Budget:
        budget = await self.budget_repo.get_by_id(budget_id, user_id, for_update=for_update)
        if not budget:
            logger.warning(f"[BudgetService] Orçamento ID {budget_id} non trouvé pour user {user_id}.")
            raise BudgetNotFoundException(budget_id)
        return budget

    async def _abort(self, action: str, error: Exception) -> None:
        if not isinstance(error, DOMAIN_EXCEPTIONS):
            logger.error(f"[BudgetService] Erreur inattendue ({action}): {error}", exc_info=True)
        await self.budget_repo.rollback()

    async def _recalculate_totals(self, budget: Budget) -> None:
        """Recalcule sous-total et total à partir de tous les items courants."""
        item_totals = await self.budget_repo.list_item_totals(budget.id)
        apply_totals(budget, item_totals)
        budget.updated_at = utcnow()
        await self.budget_repo.save(budget)

    async def _commit_and_reload(self, budget_id: int) -> BudgetRead:
        await self.budget_repo.commit()
        return self._map_budget_to_read(await self.budget_repo.reload(budget_id))

    async def _snapshot_catalog(self, user_id: int, values: dict) -> dict:
        """Copie les valeurs du catalogue (matériel puis service) dans les champs non fournis."""
        material_id = values.get("material_id")
        if material_id is not None:
            material = await self.material_repo.get_by_id(material_id, user_id)
            if not material:
                raise MaterialNotFoundException(material_id)
            snapshot_catalog_fields(values, material)
        service_id = values.get("service_id")
        if service_id is not None:
            service = await self.service_repo.get_by_id(service_id, user_id)
            if not service:
                raise ServiceNotFoundException(service_id)
            snapshot_catalog_fields(values, service)
        return values

    # --- Orçamento ---

    async def create_budget(self, user_id: int, budget_data: BudgetCreate) -> BudgetRead:
        logger.info(f"[BudgetService] Création orçamento '{budget_data.name}' pour user {user_id}")
        if not await self.client_repo.get_by_id(budget_data.client_id, user_id):
            raise ClientNotFoundException(budget_data.client_id)

        budget = Budget(**budget_data.model_dump(), user_id=user_id, status=QuoteStatus.PENDING)
        apply_totals(budget, [])
        try:
            await self.budget_repo.add(budget)
            budget_id = budget.id
            result = await self._commit_and_reload(budget_id)
        except Exception as e:
            await self._abort(f"création orçamento user {user_id}", e)
            raise
        logger.info(f"[BudgetService] Orçamento ID {budget_id} créé pour user {user_id}.")
        return result

    async def get_budget(self, budget_id: int, user_id: int) -> BudgetRead:
        return self._map_budget_to_read(await self._get_owned_budget(budget_id, user_id))

    async def list_budgets(
        self, user_id: int, filters: BudgetFilters, limit: int = 10, offset: int = 0
    ) -> PaginatedBudgetRead:
        logger.debug(f"[BudgetService] Listage orçamentos user {user_id}, filtres={filters.model_dump(exclude_none=True)}")
        budgets, total = await self.budget_repo.list(user_id, filters, offset=offset, limit=limit)
        return PaginatedBudgetRead(items=[self._map_budget_to_read(b) for b in budgets], total=total)

    async def update_budget(self, budget_id: int, user_id: int, budget_data: BudgetUpdate) -> BudgetRead:
        """Modifie nom, notes et validité d'un orçamento PENDING."""
        try:
            budget = await self._get_owned_budget(budget_id, user_id, for_update=True)
            ensure_editable(budget, ENTITY_LABEL)
            for field, value in budget_data.model_dump(exclude_unset=True).items():
                if field == "name" and value is None:
                    continue
                setattr(budget, field, value)
            budget.updated_at = utcnow()
            await self.budget_repo.save(budget)
            return await self._commit_and_reload(budget_id)
        except Exception as e:
            await self._abort(f"MAJ orçamento {budget_id}", e)
            raise

    async def delete_budget(self, budget_id: int, user_id: int) -> None:
        """Supprime l'orçamento et ses items; les listes dérivées sont conservées."""
        try:
            budget = await self._get_owned_budget(budget_id, user_id, for_update=True)
            await self.budget_repo.delete(budget)
            await self.budget_repo.commit()
        except Exception as e:
            await self._abort(f"suppression orçamento {budget_id}", e)
            raise
        logger.info(f"[BudgetService] Orçamento ID {budget_id} supprimé.")

    # --- Items ---

    async def add_item(self, budget_id: int, user_id: int, item_data: BudgetItemCreate) -> BudgetRead:
        logger.info(f"[BudgetService] Ajout item à l'orçamento {budget_id} (user {user_id})")
        try:
            budget = await self._get_owned_budget(budget_id, user_id, for_update=True)
            ensure_editable(budget, ENTITY_LABEL)
            values = await self._snapshot_catalog(user_id, item_data.model_dump())
            finalize_item_values(values)
            await self.budget_repo.add_item(BudgetItem(**values, budget_id=budget_id))
            await self._recalculate_totals(budget)
            return await self._commit_and_reload(budget_id)
        except Exception as e:
            await self._abort(f"ajout item orçamento {budget_id}", e)
            raise

    async def update_item(
        self, budget_id: int, item_id: int, user_id: int, item_data: BudgetItemUpdate
    ) -> BudgetRead:
        try:
            budget = await self._get_owned_budget(budget_id, user_id, for_update=True)
            ensure_editable(budget, ENTITY_LABEL)
            item = await self.budget_repo.get_item(budget_id, item_id)
            if not item:
                raise BudgetItemNotFoundException(budget_id, item_id)
            apply_item_patch(item, item_data.model_dump(exclude_unset=True))
            await self.budget_repo.save_item(item)
            await self._recalculate_totals(budget)
            return await self._commit_and_reload(budget_id)
        except Exception as e:
            await self._abort(f"MAJ item {item_id} orçamento {budget_id}", e)
            raise

    async def remove_item(self, budget_id: int, item_id: int, user_id: int) -> BudgetRead:
        try:
            budget = await self._get_owned_budget(budget_id, user_id, for_update=True)
            ensure_editable(budget, ENTITY_LABEL)
            item = await self.budget_repo.get_item(budget_id, item_id)
            if not item:
                raise BudgetItemNotFoundException(budget_id, item_id)
            await self.budget_repo.delete_item(budget, item)
            await self._recalculate_totals(budget)
            return await self._commit_and_reload(budget_id)
        except Exception as e:
            await self._abort(f"suppression item {item_id} orçamento {budget_id}", e)
            raise

    # --- Remise ---

    async def apply_discount(self, budget_id: int, user_id: int, discount_data: DiscountApply) -> BudgetRead:
        logger.info(
            f"[BudgetService] Remise {discount_data.discount} ({discount_data.discount_type.value}) "
            f"sur orçamento {budget_id}"
        )
        try:
            budget = await self._get_owned_budget(budget_id, user_id, for_update=True)
            ensure_editable(budget, ENTITY_LABEL)
            budget.discount = discount_data.discount
            budget.discount_type = discount_data.discount_type
            budget.discount_reason = discount_data.discount_reason
            await self._recalculate_totals(budget)
            return await self._commit_and_reload(budget_id)
        except Exception as e:
            await self._abort(f"remise orçamento {budget_id}", e)
            raise

    async def remove_discount(self, budget_id: int, user_id: int) -> BudgetRead:
        try:
            budget = await self._get_owned_budget(budget_id, user_id, for_update=True)
            ensure_editable(budget, ENTITY_LABEL)
            budget.discount = None
            budget.discount_type = None
            budget.discount_reason = None
            await self._recalculate_totals(budget)
            return await self._commit_and_reload(budget_id)
        except Exception as e:
            await self._abort(f"retrait remise orçamento {budget_id}", e)
            raise

    # --- Statut ---

    async def update_status(self, budget_id: int, user_id: int, status_data: StatusUpdate) -> BudgetRead:
        logger.info(f"[BudgetService] Statut orçamento {budget_id} -> {status_data.status.value}")
        try:
            budget = await self._get_owned_budget(budget_id, user_id, for_update=True)
            apply_status_transition(budget, status_data.status, status_data.rejection_reason)
            budget.updated_at = utcnow()
            await self.budget_repo.save(budget)
            return await self._commit_and_reload(budget_id)
        except Exception as e:
            await self._abort(f"statut orçamento {budget_id}", e)
            raise

    async def duplicate_budget(self, budget_id: int, user_id: int, new_name: str) -> BudgetRead:
        """Crée une copie PENDING de l'orçamento avec de nouveaux items et un nouveau lien."""
        source = await self._get_owned_budget(budget_id, user_id)
        copy = Budget(
            name=new_name,
            notes=source.notes,
            valid_until=source.valid_until,
            client_id=source.client_id,
            user_id=user_id,
            status=QuoteStatus.PENDING,
            discount=source.discount,
            discount_type=source.discount_type,
            discount_reason=source.discount_reason,
        )
        copy.items = [
            BudgetItem(**{field: getattr(item, field) for field in ITEM_COPY_FIELDS})
            for item in source.items
        ]
        apply_totals(copy, [])
        try:
            await self.budget_repo.add(copy)
            copy_id = copy.id
            await self._recalculate_totals(copy)
            result = await self._commit_and_reload(copy_id)
        except Exception as e:
            await self._abort(f"duplication orçamento {budget_id}", e)
            raise
        logger.info(f"[BudgetService] Orçamento ID {budget_id} dupliqué en ID {copy_id}.")
        return result

    async def get_summary(self, user_id: int) -> QuoteSummary:
        counts = await self.budget_repo.count_by_status(user_id)
        by_status = {s.value: counts.get(s.value, 0) for s in QuoteStatus}
        return QuoteSummary(
            total=sum(by_status.values()),
            by_status=by_status,
            approved_value=await self.budget_repo.sum_total_value(user_id, QuoteStatus.APPROVED),
            pending_value=await self.budget_repo.sum_total_value(user_id, QuoteStatus.PENDING),
        )

    # --- Accès public ---

    async def _apply_public_decision(
        self, budget: Budget, new_status: QuoteStatus, reason: Optional[str]
    ) -> BudgetRead:
        apply_status_transition(budget, new_status, reason)
        budget.updated_at = utcnow()
        await self.budget_repo.save(budget)
        return await self._commit_and_reload(budget.id)

    async def get_public_budget(self, access_link: str) -> BudgetRead:
        budget = await self.budget_repo.get_by_access_link(access_link)
        if not budget:
            logger.warning("[BudgetService] Aucun orçamento pour le lien public fourni.")
            raise QuoteNotFoundException("Orçamento non trouvé pour ce lien.")
        return self._map_budget_to_read(budget)

    async def get_budget_for_client(self, client_id: int, budget_id: int) -> BudgetRead:
        """Détail d'un orçamento depuis le portail du client auquel il appartient."""
        budget = await self.budget_repo.get_unscoped(budget_id)
        if not budget or budget.client_id != client_id:
            raise BudgetNotFoundException(budget_id)
        return self._map_budget_to_read(budget)

    async def set_status_public(
        self,
        access_link: str,
        budget_id: int,
        new_status: QuoteStatus,
        reason: Optional[str] = None,
    ) -> BudgetRead:
        """Approuve ou refuse un orçamento depuis son lien public."""
        logger.info(f"[BudgetService] Décision publique {new_status.value} sur orçamento {budget_id}")
        try:
            budget = await self.budget_repo.get_unscoped(budget_id, for_update=True)
            if not budget:
                raise BudgetNotFoundException(budget_id)
            if not secrets.compare_digest(budget.access_link.encode(), access_link.encode()):
                logger.warning(f"[BudgetService] Lien public invalide pour orçamento {budget_id}.")
                raise AccessLinkMismatchException(ENTITY_LABEL, budget_id)
            return await self._apply_public_decision(budget, new_status, reason)
        except Exception as e:
            await self._abort(f"décision publique orçamento {budget_id}", e)
            raise

    async def set_status_for_client(
        self,
        client_id: int,
        budget_id: int,
        new_status: QuoteStatus,
        reason: Optional[str] = None,
    ) -> BudgetRead:
        """Approuve ou refuse un orçamento depuis le portail de son client."""
        logger.info(f"[BudgetService] Décision portail {new_status.value} sur orçamento {budget_id} (client {client_id})")
        try:
            budget = await self.budget_repo.get_unscoped(budget_id, for_update=True)
            if not budget or budget.client_id != client_id:
                raise BudgetNotFoundException(budget_id)
            return await self._apply_public_decision(budget, new_status, reason)
        except Exception as e:
            await self._abort(f"décision portail orçamento {budget_id}", e)
            raise
