"""
Module contenant la logique métier (services) pour les utilisateurs.
"""
import logging

from eletrica.auth.security import get_password_hash, verify_password
from eletrica.users.exceptions import InvalidCurrentPasswordError, UserAlreadyExistsError, UserNotFoundError
from eletrica.users.interfaces.repositories import AbstractUserRepository
from eletrica.users.models import User, UserCreate, UserRead, UserUpdate
from eletrica.utils import utcnow

logger = logging.getLogger(__name__)

class UserService:
    """Service pour gérer les opérations sur les utilisateurs."""

    def __init__(self, user_repository: AbstractUserRepository):
        self.user_repository = user_repository

    async def create_user(self, user_data: UserCreate) -> UserRead:
        """Crée un nouvel utilisateur et retourne le schéma UserRead."""
        logger.debug(f"[UserService] Tentative de création utilisateur: {user_data.email}")

        # 1. Vérifier si l'email existe déjà
        existing = await self.user_repository.get_by_email(user_data.email)
        if existing:
            logger.warning(f"[UserService] Email déjà existant: {user_data.email}")
            raise UserAlreadyExistsError(user_data.email)

        # 2. Hacher le mot de passe et créer
        user = User(
            email=user_data.email,
            name=user_data.name,
            phone=user_data.phone,
            password_hash=get_password_hash(user_data.password),
        )
        created_user = await self.user_repository.create(user)
        logger.info(f"[UserService] Utilisateur créé avec ID: {created_user.id}")
        return UserRead.model_validate(created_user)

    async def is_email_available(self, email: str) -> bool:
        return await self.user_repository.get_by_email(email) is None

    async def update_user(self, user_id: int, user_data: UserUpdate) -> UserRead:
        """
        Met à jour le profil du professionnel connecté.

        Raises:
            UserNotFoundError: Si l'utilisateur n'existe plus.
            UserAlreadyExistsError: Si le nouvel email appartient à un autre compte.
            InvalidCurrentPasswordError: Si le mot de passe actuel est absent ou faux.
        """
        user = await self.user_repository.get_by_id(user_id)
        if not user:
            logger.warning(f"[UserService] Utilisateur ID {user_id} non trouvé.")
            raise UserNotFoundError(user_id)

        changes = user_data.model_dump(exclude_unset=True, exclude={"current_password", "new_password"})
        logger.debug(f"[UserService] MAJ profil user {user.id}, champs: {list(changes)}")

        new_email = changes.get("email")
        if new_email and new_email != user.email and not await self.is_email_available(new_email):
            logger.warning(f"[UserService] Email {new_email} déjà utilisé, MAJ refusée pour user {user.id}.")
            raise UserAlreadyExistsError(new_email)

        if user_data.new_password:
            if not user_data.current_password or not verify_password(user_data.current_password, user.password_hash):
                raise InvalidCurrentPasswordError()
            user.password_hash = get_password_hash(user_data.new_password)

        for field, value in changes.items():
            # email et nom ne sont jamais effacés par une valeur nulle
            if value is None and field in ("email", "name"):
                continue
            setattr(user, field, value)
        user.updated_at = utcnow()

        updated_user = await self.user_repository.update(user)
        logger.info(f"[UserService] Profil user {updated_user.id} mis à jour.")
        return UserRead.model_validate(updated_user)
