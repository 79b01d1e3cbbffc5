"""
Service d'authentification pour l'API.

Contient la logique métier pour:
- L'authentification des utilisateurs
- L'obtention des informations utilisateur à partir d'un token
"""
import logging
from typing import Optional

from eletrica.auth.security import verify_password, decode_access_token
from eletrica.users.interfaces.repositories import AbstractUserRepository
from eletrica.users.models import User, UserRead

logger = logging.getLogger(__name__)

class AuthService:
    """Service pour gérer l'authentification des professionnels."""

    def __init__(self, user_repository: AbstractUserRepository):
        self.user_repository = user_repository

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """
        Authentifie un utilisateur par email et mot de passe.
        Retourne le modèle User (table) si succès, sinon None.
        """
        logger.debug(f"[AuthService] Tentative d'authentification pour: {email}")

        user = await self.user_repository.get_by_email(email)
        if user is None:
            logger.warning(f"[AuthService] Utilisateur non trouvé: {email}")
            return None

        if not verify_password(password, user.password_hash):
            logger.warning(f"[AuthService] Mot de passe incorrect pour: {email}")
            return None

        logger.info(f"[AuthService] Authentification réussie pour: {email} (ID: {user.id})")
        return user

    async def get_user_from_token(self, token: str) -> Optional[UserRead]:
        """
        Récupère un utilisateur à partir d'un token JWT.
        Retourne le schéma UserRead si succès, sinon None.
        """
        user_id = decode_access_token(token)
        if user_id is None:
            logger.warning("[AuthService] Token invalide ou expiré")
            return None

        user = await self.user_repository.get_by_id(user_id)
        if user is None:
            logger.warning(f"[AuthService] Utilisateur ID {user_id} du token non trouvé en base")
            return None

        logger.debug(f"[AuthService] Utilisateur récupéré depuis token: ID {user_id}")
        return UserRead.model_validate(user)
