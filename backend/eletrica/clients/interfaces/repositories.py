from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Tuple

from eletrica.clients.models import Client, ClientStats


class AbstractClientRepository(ABC):
    """Interface abstraite pour le repository des clients."""

    @abstractmethod
    async def get_by_id(self, client_id: int, user_id: int) -> Optional[Client]:
        """Récupère un client appartenant au professionnel."""
        pass

    @abstractmethod
    async def get_active_by_link(self, link: str) -> Optional[Client]:
        """Récupère un client actif par son lien public ou son code d'accès."""
        pass

    @abstractmethod
    async def list(
        self,
        user_id: int,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> Tuple[List[Client], int]:
        """Liste les clients du professionnel avec filtres et pagination."""
        pass

    @abstractmethod
    async def find_duplicate(self, user_id: int, field: str, value: str, exclude_id: Optional[int] = None) -> Optional[Client]:
        """Cherche un autre client du professionnel ayant la même valeur pour `field`."""
        pass

    @abstractmethod
    async def public_link_exists(self, public_link: str) -> bool:
        pass

    @abstractmethod
    async def access_code_exists(self, access_code: str) -> bool:
        pass

    @abstractmethod
    async def add(self, client: Client) -> Client:
        pass

    @abstractmethod
    async def save(self, client: Client) -> Client:
        pass

    @abstractmethod
    async def delete(self, client: Client) -> None:
        pass

    @abstractmethod
    async def count_dependents(self, client_id: int) -> Tuple[int, int]:
        """Retourne le nombre d'orçamentos et de listes de matériel liés au client."""
        pass

    @abstractmethod
    async def get_stats(self, user_id: int, recent_since: datetime) -> ClientStats:
        pass

    @abstractmethod
    async def commit(self) -> None:
        pass

    @abstractmethod
    async def rollback(self) -> None:
        pass
