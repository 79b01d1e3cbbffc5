import logging
import secrets
from typing import List, Optional

from eletrica.budgets.exceptions import BudgetNotFoundException
from eletrica.budgets.interfaces.repositories import AbstractBudgetRepository
from eletrica.catalog.exceptions import CatalogDomainException, MaterialNotFoundException
from eletrica.catalog.interfaces.repositories import AbstractCatalogRepository
from eletrica.clients.exceptions import ClientDomainException, ClientNotFoundException
from eletrica.clients.interfaces.repositories import AbstractClientRepository
from eletrica.material_lists.exceptions import MaterialListItemNotFoundException, MaterialListNotFoundException
from eletrica.material_lists.interfaces.repositories import AbstractMaterialListRepository
from eletrica.material_lists.models import (
    MaterialList,
    MaterialListCreate,
    MaterialListFilters,
    MaterialListItem,
    MaterialListItemCreate,
    MaterialListItemUpdate,
    MaterialListRead,
    MaterialListUpdate,
    PaginatedMaterialListRead,
)
from eletrica.quotes.calculations import apply_totals
from eletrica.quotes.constants import (
    DERIVED_LIST_NAME_TEMPLATE,
    DERIVED_LIST_NOTES_TEMPLATE,
    PUBLIC_VISIBLE_STATUS,
    QuoteStatus,
)
from eletrica.quotes.exceptions import AccessLinkMismatchException, QuoteDomainException, QuoteNotFoundException
from eletrica.quotes.lifecycle import (
    apply_item_patch,
    apply_status_transition,
    ensure_editable,
    finalize_item_values,
    snapshot_catalog_fields,
)
from eletrica.quotes.models import QuoteSummary, StatusUpdate
from eletrica.utils import utcnow

logger = logging.getLogger(__name__)

ENTITY_LABEL = "liste de matériel"

ITEM_COPY_FIELDS = ("name", "description", "quantity", "unit_price", "total_price", "unit", "material_id")

DOMAIN_EXCEPTIONS = (QuoteDomainException, CatalogDomainException, ClientDomainException)


class MaterialListService:
    """Service applicatif des listes de matériel (valeur totale = sous-total, sans remise)."""

    def __init__(
        self,
        material_list_repo: AbstractMaterialListRepository,
        budget_repo: AbstractBudgetRepository,
        client_repo: AbstractClientRepository,
        material_repo: AbstractCatalogRepository,
    ):
        self.material_list_repo = material_list_repo
        self.budget_repo = budget_repo
        self.client_repo = client_repo
        self.material_repo = material_repo

    def _map_list_to_read(self, material_list: MaterialList) -> MaterialListRead:
        return MaterialListRead.model_validate(material_list)

    async def _get_owned_list(self, material_list_id: int, user_id: int, for_update: bool = False) -> MaterialList:
        material_list = await self.material_list_repo.get_by_id(material_list_id, user_id, for_update=for_update)
        if not material_list:
            logger.warning(f"[MaterialListService] Liste ID {material_list_id} non trouvée pour user {user_id}.")
            raise MaterialListNotFoundException(material_list_id)
        return material_list

    async def _abort(self, action: str, error: Exception) -> None:
        if not isinstance(error, DOMAIN_EXCEPTIONS):
            logger.error(f"[MaterialListService] Erreur inattendue ({action}): {error}", exc_info=True)
        await self.material_list_repo.rollback()

    async def _recalculate_totals(self, material_list: MaterialList) -> None:
        item_totals = await self.material_list_repo.list_item_totals(material_list.id)
        apply_totals(material_list, item_totals)
        material_list.updated_at = utcnow()
        await self.material_list_repo.save(material_list)

    async def _commit_and_reload(self, material_list_id: int) -> MaterialListRead:
        await self.material_list_repo.commit()
        return self._map_list_to_read(await self.material_list_repo.reload(material_list_id))

    async def _insert_with_items(self, material_list: MaterialList, action: str) -> MaterialListRead:
        """Insère une nouvelle liste (items compris), recalcule ses totaux et valide."""
        apply_totals(material_list, [])
        try:
            await self.material_list_repo.add(material_list)
            material_list_id = material_list.id
            await self._recalculate_totals(material_list)
            result = await self._commit_and_reload(material_list_id)
        except Exception as e:
            await self._abort(action, e)
            raise
        logger.info(f"[MaterialListService] Liste ID {material_list_id} créée ({action}).")
        return result

    # --- Liste ---

    async def create_material_list(self, user_id: int, list_data: MaterialListCreate) -> MaterialListRead:
        logger.info(f"[MaterialListService] Création liste '{list_data.name}' pour user {user_id}")
        if not await self.client_repo.get_by_id(list_data.client_id, user_id):
            raise ClientNotFoundException(list_data.client_id)
        if list_data.budget_id is not None and not await self.budget_repo.get_by_id(list_data.budget_id, user_id):
            raise BudgetNotFoundException(list_data.budget_id)

        material_list = MaterialList(**list_data.model_dump(), user_id=user_id, status=QuoteStatus.PENDING)
        return await self._insert_with_items(material_list, f"création liste user {user_id}")

    async def derive_from_budget(self, budget_id: int, user_id: int, name: Optional[str] = None) -> MaterialListRead:
        """
        Crée une liste de matériel à partir d'un orçamento.

        Seuls les items de l'orçamento qui référencent un matériel sont copiés;
        la liste reste liée à l'orçamento et à son client.
        """
        budget = await self.budget_repo.get_by_id(budget_id, user_id)
        if not budget:
            logger.warning(f"[MaterialListService] Orçamento ID {budget_id} non trouvé pour dérivation.")
            raise BudgetNotFoundException(budget_id)

        material_list = MaterialList(
            name=name or DERIVED_LIST_NAME_TEMPLATE.format(budget_name=budget.name),
            notes=DERIVED_LIST_NOTES_TEMPLATE.format(budget_name=budget.name),
            client_id=budget.client_id,
            budget_id=budget.id,
            user_id=user_id,
            status=QuoteStatus.PENDING,
        )
        material_list.items = [
            MaterialListItem(**{field: getattr(item, field) for field in ITEM_COPY_FIELDS})
            for item in budget.items
            if item.material_id is not None
        ]
        logger.info(
            f"[MaterialListService] Dérivation de l'orçamento {budget_id}: "
            f"{len(material_list.items)}/{len(budget.items)} item(s) matériel."
        )
        return await self._insert_with_items(material_list, f"dérivation orçamento {budget_id}")

    async def get_material_list(self, material_list_id: int, user_id: int) -> MaterialListRead:
        return self._map_list_to_read(await self._get_owned_list(material_list_id, user_id))

    async def list_material_lists(
        self, user_id: int, filters: MaterialListFilters, limit: int = 10, offset: int = 0
    ) -> PaginatedMaterialListRead:
        lists, total = await self.material_list_repo.list(user_id, filters, offset=offset, limit=limit)
        return PaginatedMaterialListRead(items=[self._map_list_to_read(m) for m in lists], total=total)

    async def update_material_list(
        self, material_list_id: int, user_id: int, list_data: MaterialListUpdate
    ) -> MaterialListRead:
        try:
            material_list = await self._get_owned_list(material_list_id, user_id, for_update=True)
            ensure_editable(material_list, ENTITY_LABEL)
            for field, value in list_data.model_dump(exclude_unset=True).items():
                if field == "name" and value is None:
                    continue
                setattr(material_list, field, value)
            material_list.updated_at = utcnow()
            await self.material_list_repo.save(material_list)
            return await self._commit_and_reload(material_list_id)
        except Exception as e:
            await self._abort(f"MAJ liste {material_list_id}", e)
            raise

    async def delete_material_list(self, material_list_id: int, user_id: int) -> None:
        try:
            material_list = await self._get_owned_list(material_list_id, user_id, for_update=True)
            await self.material_list_repo.delete(material_list)
            await self.material_list_repo.commit()
        except Exception as e:
            await self._abort(f"suppression liste {material_list_id}", e)
            raise
        logger.info(f"[MaterialListService] Liste ID {material_list_id} supprimée.")

    # --- Items ---

    async def add_item(self, material_list_id: int, user_id: int, item_data: MaterialListItemCreate) -> MaterialListRead:
        try:
            material_list = await self._get_owned_list(material_list_id, user_id, for_update=True)
            ensure_editable(material_list, ENTITY_LABEL)
            values = item_data.model_dump()
            if values.get("material_id") is not None:
                material = await self.material_repo.get_by_id(values["material_id"], user_id)
                if not material:
                    raise MaterialNotFoundException(values["material_id"])
                snapshot_catalog_fields(values, material)
            finalize_item_values(values)
            await self.material_list_repo.add_item(MaterialListItem(**values, material_list_id=material_list_id))
            await self._recalculate_totals(material_list)
            return await self._commit_and_reload(material_list_id)
        except Exception as e:
            await self._abort(f"ajout item liste {material_list_id}", e)
            raise

    async def update_item(
        self, material_list_id: int, item_id: int, user_id: int, item_data: MaterialListItemUpdate
    ) -> MaterialListRead:
        try:
            material_list = await self._get_owned_list(material_list_id, user_id, for_update=True)
            ensure_editable(material_list, ENTITY_LABEL)
            item = await self.material_list_repo.get_item(material_list_id, item_id)
            if not item:
                raise MaterialListItemNotFoundException(material_list_id, item_id)
            apply_item_patch(item, item_data.model_dump(exclude_unset=True))
            await self.material_list_repo.save_item(item)
            await self._recalculate_totals(material_list)
            return await self._commit_and_reload(material_list_id)
        except Exception as e:
            await self._abort(f"MAJ item {item_id} liste {material_list_id}", e)
            raise

    async def remove_item(self, material_list_id: int, item_id: int, user_id: int) -> MaterialListRead:
        try:
            material_list = await self._get_owned_list(material_list_id, user_id, for_update=True)
            ensure_editable(material_list, ENTITY_LABEL)
            item = await self.material_list_repo.get_item(material_list_id, item_id)
            if not item:
                raise MaterialListItemNotFoundException(material_list_id, item_id)
            await self.material_list_repo.delete_item(material_list, item)
            await self._recalculate_totals(material_list)
            return await self._commit_and_reload(material_list_id)
        except Exception as e:
            await self._abort(f"suppression item {item_id} liste {material_list_id}", e)
            raise

    # --- Statut et duplication ---

    async def update_status(self, material_list_id: int, user_id: int, status_data: StatusUpdate) -> MaterialListRead:
        logger.info(f"[MaterialListService] Statut liste {material_list_id} -> {status_data.status.value}")
        try:
            material_list = await self._get_owned_list(material_list_id, user_id, for_update=True)
            apply_status_transition(material_list, status_data.status, status_data.rejection_reason)
            material_list.updated_at = utcnow()
            await self.material_list_repo.save(material_list)
            return await self._commit_and_reload(material_list_id)
        except Exception as e:
            await self._abort(f"statut liste {material_list_id}", e)
            raise

    async def duplicate_material_list(self, material_list_id: int, user_id: int, new_name: str) -> MaterialListRead:
        source = await self._get_owned_list(material_list_id, user_id)
        duplicate = MaterialList(
            name=new_name,
            notes=source.notes,
            valid_until=source.valid_until,
            client_id=source.client_id,
            budget_id=source.budget_id,
            user_id=user_id,
            status=QuoteStatus.PENDING,
        )
        duplicate.items = [
            MaterialListItem(**{field: getattr(item, field) for field in ITEM_COPY_FIELDS})
            for item in source.items
        ]
        return await self._insert_with_items(duplicate, f"duplication liste {material_list_id}")

    async def get_summary(self, user_id: int) -> QuoteSummary:
        counts = await self.material_list_repo.count_by_status(user_id)
        by_status = {s.value: counts.get(s.value, 0) for s in QuoteStatus}
        return QuoteSummary(
            total=sum(by_status.values()),
            by_status=by_status,
            approved_value=await self.material_list_repo.sum_total_value(user_id, QuoteStatus.APPROVED),
            pending_value=await self.material_list_repo.sum_total_value(user_id, QuoteStatus.PENDING),
        )

    # --- Accès public ---

    async def _apply_public_decision(
        self, material_list: MaterialList, new_status: QuoteStatus, reason: Optional[str]
    ) -> MaterialListRead:
        apply_status_transition(material_list, new_status, reason)
        material_list.updated_at = utcnow()
        await self.material_list_repo.save(material_list)
        return await self._commit_and_reload(material_list.id)

    async def get_public_material_list(self, access_link: str) -> MaterialListRead:
        material_list = await self.material_list_repo.get_by_access_link(access_link)
        if not material_list:
            raise QuoteNotFoundException("Liste de matériel non trouvée pour ce lien.")
        return self._map_list_to_read(material_list)

    async def get_material_list_for_client(self, client_id: int, material_list_id: int) -> MaterialListRead:
        material_list = await self.material_list_repo.get_unscoped(material_list_id)
        if not material_list or material_list.client_id != client_id:
            raise MaterialListNotFoundException(material_list_id)
        return self._map_list_to_read(material_list)

    async def list_material_lists_for_client(self, client_id: int) -> List[MaterialListRead]:
        """Listes PENDING ou APPROVED du client, items compris."""
        lists = await self.material_list_repo.list_for_client(client_id, PUBLIC_VISIBLE_STATUS)
        return [self._map_list_to_read(m) for m in lists]

    async def set_status_public(
        self,
        access_link: str,
        material_list_id: int,
        new_status: QuoteStatus,
        reason: Optional[str] = None,
    ) -> MaterialListRead:
        """Approuve ou refuse une liste depuis son lien public."""
        logger.info(f"[MaterialListService] Décision publique {new_status.value} sur liste {material_list_id}")
        try:
            material_list = await self.material_list_repo.get_unscoped(material_list_id, for_update=True)
            if not material_list:
                raise MaterialListNotFoundException(material_list_id)
            if not secrets.compare_digest(material_list.access_link.encode(), access_link.encode()):
                logger.warning(f"[MaterialListService] Lien public invalide pour liste {material_list_id}.")
                raise AccessLinkMismatchException(ENTITY_LABEL, material_list_id)
            return await self._apply_public_decision(material_list, new_status, reason)
        except Exception as e:
            await self._abort(f"décision publique liste {material_list_id}", e)
            raise

    async def set_status_for_client(
        self,
        client_id: int,
        material_list_id: int,
        new_status: QuoteStatus,
        reason: Optional[str] = None,
    ) -> MaterialListRead:
        """Approuve ou refuse une liste depuis le portail de son client."""
        logger.info(
            f"[MaterialListService] Décision portail {new_status.value} sur liste {material_list_id} (client {client_id})"
        )
        try:
            material_list = await self.material_list_repo.get_unscoped(material_list_id, for_update=True)
            if not material_list or material_list.client_id != client_id:
                raise MaterialListNotFoundException(material_list_id)
            return await self._apply_public_decision(material_list, new_status, reason)
        except Exception as e:
            await self._abort(f"décision portail liste {material_list_id}", e)
            raise
