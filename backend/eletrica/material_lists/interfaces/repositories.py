from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from eletrica.material_lists.models import MaterialList, MaterialListFilters, MaterialListItem
from eletrica.quotes.constants import QuoteStatus


class AbstractMaterialListRepository(ABC):
    """Interface abstraite pour le repository des listes de matériel."""

    @abstractmethod
    async def get_by_id(self, material_list_id: int, user_id: int, *, for_update: bool = False) -> Optional[MaterialList]:
        pass

    @abstractmethod
    async def get_unscoped(self, material_list_id: int, *, for_update: bool = False) -> Optional[MaterialList]:
        """Récupère une liste sans filtre de propriétaire (accès par lien public)."""
        pass

    @abstractmethod
    async def get_by_access_link(self, access_link: str) -> Optional[MaterialList]:
        pass

    @abstractmethod
    async def reload(self, material_list_id: int) -> Optional[MaterialList]:
        pass

    @abstractmethod
    async def list(
        self, user_id: int, filters: MaterialListFilters, offset: int = 0, limit: int = 10
    ) -> Tuple[List[MaterialList], int]:
        pass

    @abstractmethod
    async def list_for_client(self, client_id: int, statuses: List[QuoteStatus]) -> List[MaterialList]:
        pass

    @abstractmethod
    async def add(self, material_list: MaterialList) -> MaterialList:
        pass

    @abstractmethod
    async def save(self, material_list: MaterialList) -> MaterialList:
        pass

    @abstractmethod
    async def delete(self, material_list: MaterialList) -> None:
        pass

    @abstractmethod
    async def get_item(self, material_list_id: int, item_id: int) -> Optional[MaterialListItem]:
        pass

    @abstractmethod
    async def add_item(self, item: MaterialListItem) -> MaterialListItem:
        pass

    @abstractmethod
    async def save_item(self, item: MaterialListItem) -> MaterialListItem:
        pass

    @abstractmethod
    async def delete_item(self, material_list: MaterialList, item: MaterialListItem) -> None:
        """Retire l'item de la collection de la liste (supprimé par delete-orphan)."""
        pass

    @abstractmethod
    async def list_item_totals(self, material_list_id: int) -> List[Decimal]:
        """Relit le prix total de chaque item courant de la liste."""
        pass

    @abstractmethod
    async def count_by_status(self, user_id: int) -> Dict[str, int]:
        pass

    @abstractmethod
    async def sum_total_value(self, user_id: int, status: QuoteStatus) -> Decimal:
        pass

    @abstractmethod
    async def commit(self) -> None:
        pass

    @abstractmethod
    async def rollback(self) -> None:
        pass
