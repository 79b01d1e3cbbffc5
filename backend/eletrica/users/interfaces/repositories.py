from abc import ABC, abstractmethod
from typing import Optional

from eletrica.users.models import User


class AbstractUserRepository(ABC):
    """Interface abstraite pour le repository des utilisateurs."""

    @abstractmethod
    async def get_by_id(self, user_id: int) -> Optional[User]:
        """Récupère un utilisateur par son ID. Retourne le modèle de table."""
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """Récupère un utilisateur par son email. Retourne le modèle de table."""
        pass

    @abstractmethod
    async def create(self, user: User) -> User:
        """Persiste un nouvel utilisateur et valide la transaction."""
        pass

    @abstractmethod
    async def update(self, user: User) -> User:
        """Persiste les modifications d'un utilisateur et valide la transaction."""
        pass
