import logging
from typing import List, Optional, Type

from eletrica.catalog.exceptions import (
    CatalogEntryInUseException,
    CatalogEntryNotFoundException,
    DuplicateCatalogEntryException,
)
from eletrica.catalog.interfaces.repositories import AbstractCatalogRepository, CatalogEntry
from eletrica.catalog.models import (
    CatalogEntryCreate,
    CatalogEntryRead,
    CatalogEntryUpdate,
    PaginatedCatalogRead,
)
from eletrica.utils import utcnow

logger = logging.getLogger(__name__)


class CatalogService:
    """Service applicatif pour un catalogue (services ou matériels) du professionnel."""

    def __init__(
        self,
        catalog_repo: AbstractCatalogRepository,
        model: Type[CatalogEntry],
        not_found_exception: Type[CatalogEntryNotFoundException] = CatalogEntryNotFoundException,
    ):
        self.catalog_repo = catalog_repo
        self.model = model
        self.not_found_exception = not_found_exception
        self.label = model.__name__

    async def _get_owned_entry(self, entry_id: int, user_id: int) -> CatalogEntry:
        entry = await self.catalog_repo.get_by_id(entry_id, user_id)
        if not entry:
            logger.warning(f"[CatalogService] {self.label} ID {entry_id} non trouvé pour user {user_id}.")
            raise self.not_found_exception(entry_id)
        return entry

    async def create_entry(self, user_id: int, entry_data: CatalogEntryCreate) -> CatalogEntryRead:
        logger.info(f"[CatalogService] Création {self.label} '{entry_data.name}' pour user {user_id}")
        if await self.catalog_repo.get_by_name(user_id, entry_data.name):
            raise DuplicateCatalogEntryException(entry_data.name)

        entry = self.model(**entry_data.model_dump(), user_id=user_id)
        try:
            await self.catalog_repo.add(entry)
            await self.catalog_repo.commit()
        except Exception as e:
            logger.error(f"[CatalogService] Erreur création {self.label} pour user {user_id}: {e}", exc_info=True)
            await self.catalog_repo.rollback()
            raise
        return CatalogEntryRead.model_validate(entry)

    async def get_entry(self, entry_id: int, user_id: int) -> CatalogEntryRead:
        return CatalogEntryRead.model_validate(await self._get_owned_entry(entry_id, user_id))

    async def list_entries(
        self,
        user_id: int,
        search: Optional[str] = None,
        category: Optional[str] = None,
        is_active: Optional[bool] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> PaginatedCatalogRead:
        entries, total = await self.catalog_repo.list(
            user_id, search=search, category=category, is_active=is_active, offset=offset, limit=limit
        )
        return PaginatedCatalogRead(items=[CatalogEntryRead.model_validate(e) for e in entries], total=total)

    async def list_categories(self, user_id: int) -> List[str]:
        return await self.catalog_repo.list_categories(user_id)

    async def update_entry(self, entry_id: int, user_id: int, entry_data: CatalogEntryUpdate) -> CatalogEntryRead:
        """
        Met à jour une entrée du catalogue.

        Les items déjà créés à partir de cette entrée gardent leurs valeurs copiées.
        """
        entry = await self._get_owned_entry(entry_id, user_id)
        values = entry_data.model_dump(exclude_unset=True)
        new_name = values.get("name")
        if new_name and new_name.strip().lower() != entry.name.strip().lower():
            if await self.catalog_repo.get_by_name(user_id, new_name):
                raise DuplicateCatalogEntryException(new_name)

        for field, value in values.items():
            if value is None and field in ("name", "price", "unit", "is_active"):
                continue
            setattr(entry, field, value)
        entry.updated_at = utcnow()
        try:
            await self.catalog_repo.save(entry)
            await self.catalog_repo.commit()
        except Exception as e:
            logger.error(f"[CatalogService] Erreur MAJ {self.label} {entry_id}: {e}", exc_info=True)
            await self.catalog_repo.rollback()
            raise
        return CatalogEntryRead.model_validate(entry)

    async def delete_entry(self, entry_id: int, user_id: int) -> None:
        entry = await self._get_owned_entry(entry_id, user_id)
        usage_count = await self.catalog_repo.count_references(entry_id)
        if usage_count:
            raise CatalogEntryInUseException(entry_id, usage_count)
        try:
            await self.catalog_repo.delete(entry)
            await self.catalog_repo.commit()
        except Exception as e:
            logger.error(f"[CatalogService] Erreur suppression {self.label} {entry_id}: {e}", exc_info=True)
            await self.catalog_repo.rollback()
            raise
        logger.info(f"[CatalogService] {self.label} ID {entry_id} supprimé.")
