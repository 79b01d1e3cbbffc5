from abc import ABC, abstractmethod
from typing import List, Optional, Tuple, Union

from eletrica.catalog.models import Material, Service

CatalogEntry = Union[Service, Material]


class AbstractCatalogRepository(ABC):
    """Interface abstraite pour le repository d'un catalogue (services ou matériels)."""

    @abstractmethod
    async def get_by_id(self, entry_id: int, user_id: int) -> Optional[CatalogEntry]:
        """Récupère une entrée appartenant au professionnel."""
        pass

    @abstractmethod
    async def get_by_name(self, user_id: int, name: str) -> Optional[CatalogEntry]:
        pass

    @abstractmethod
    async def list(
        self,
        user_id: int,
        search: Optional[str] = None,
        category: Optional[str] = None,
        is_active: Optional[bool] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> Tuple[List[CatalogEntry], int]:
        pass

    @abstractmethod
    async def list_categories(self, user_id: int) -> List[str]:
        pass

    @abstractmethod
    async def count_references(self, entry_id: int) -> int:
        """Nombre d'items d'orçamento ou de liste qui référencent l'entrée."""
        pass

    @abstractmethod
    async def add(self, entry: CatalogEntry) -> CatalogEntry:
        pass

    @abstractmethod
    async def save(self, entry: CatalogEntry) -> CatalogEntry:
        pass

    @abstractmethod
    async def delete(self, entry: CatalogEntry) -> None:
        pass

    @abstractmethod
    async def commit(self) -> None:
        pass

    @abstractmethod
    async def rollback(self) -> None:
        pass
