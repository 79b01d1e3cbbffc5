from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from eletrica.budgets.models import Budget, BudgetFilters, BudgetItem
from eletrica.quotes.constants import QuoteStatus


class AbstractBudgetRepository(ABC):
    """Interface abstraite pour le repository des orçamentos."""

    @abstractmethod
    async def get_by_id(self, budget_id: int, user_id: int, *, for_update: bool = False) -> Optional[Budget]:
        """Récupère un orçamento du professionnel avec ses items (verrouillé si `for_update`)."""
        pass

    @abstractmethod
    async def get_unscoped(self, budget_id: int, *, for_update: bool = False) -> Optional[Budget]:
        """Récupère un orçamento sans filtre de propriétaire (accès par lien public)."""
        pass

    @abstractmethod
    async def get_by_access_link(self, access_link: str) -> Optional[Budget]:
        pass

    @abstractmethod
    async def reload(self, budget_id: int) -> Optional[Budget]:
        """Relit l'orçamento et ses items depuis la base en écrasant l'état en session."""
        pass

    @abstractmethod
    async def list(self, user_id: int, filters: BudgetFilters, offset: int = 0, limit: int = 10) -> Tuple[List[Budget], int]:
        pass

    @abstractmethod
    async def list_for_client(self, client_id: int, statuses: List[QuoteStatus]) -> List[Budget]:
        pass

    @abstractmethod
    async def add(self, budget: Budget) -> Budget:
        pass

    @abstractmethod
    async def save(self, budget: Budget) -> Budget:
        pass

    @abstractmethod
    async def delete(self, budget: Budget) -> None:
        """Supprime l'orçamento et ses items; les listes dérivées perdent leur lien."""
        pass

    @abstractmethod
    async def get_item(self, budget_id: int, item_id: int) -> Optional[BudgetItem]:
        pass

    @abstractmethod
    async def add_item(self, item: BudgetItem) -> BudgetItem:
        pass

    @abstractmethod
    async def save_item(self, item: BudgetItem) -> BudgetItem:
        pass

    @abstractmethod
    async def delete_item(self, budget: Budget, item: BudgetItem) -> None:
        """Retire l'item de la collection de l'orçamento (supprimé par delete-orphan)."""
        pass

    @abstractmethod
    async def list_item_totals(self, budget_id: int) -> List[Decimal]:
        """Relit le prix total de chaque item courant de l'orçamento."""
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
