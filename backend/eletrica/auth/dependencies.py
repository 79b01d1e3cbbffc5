"""
Module définissant les dépendances FastAPI pour l'authentification.

Fournit des dépendances pour:
- Le service d'authentification (AuthService)
- L'obtention de l'utilisateur courant à partir du token JWT
"""
import logging
from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from eletrica.auth.config import OAUTH2_TOKEN_URL
from eletrica.auth.exceptions import InactiveUserException, TokenInvalidException, TokenMissingException
from eletrica.auth.service import AuthService
from eletrica.users.dependencies import UserRepositoryDep
from eletrica.users.models import UserRead

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=OAUTH2_TOKEN_URL, auto_error=False)

def get_auth_service(user_repository: UserRepositoryDep) -> AuthService:
    """
    Fournit une instance du service d'authentification.

    Args:
        user_repository: Instance du repository utilisateur fournie par dépendance.

    Returns:
        AuthService: Instance du service d'authentification.
    """
    logger.debug("Fourniture de AuthService avec UserRepository injecté")
    return AuthService(user_repository=user_repository)

AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]

async def get_current_user(
    token: Annotated[Optional[str], Depends(oauth2_scheme)],
    auth_service: AuthServiceDep
) -> UserRead:
    """
    Vérifie le token JWT et retourne l'utilisateur courant.

    Raises:
        TokenMissingException: Si le token est manquant
        TokenInvalidException: Si le token est invalide
    """
    if token is None:
        logger.warning("Token manquant dans la requête.")
        raise TokenMissingException()

    user = await auth_service.get_user_from_token(token)
    if user is None:
        logger.warning("Token invalide ou utilisateur non trouvé.")
        raise TokenInvalidException()

    logger.debug(f"Utilisateur authentifié: ID {user.id}")
    return user

async def get_current_active_user(
    current_user: Annotated[UserRead, Depends(get_current_user)]
) -> UserRead:
    """
    Vérifie que l'utilisateur courant est actif.

    Raises:
        InactiveUserException: Si l'utilisateur est inactif
    """
    if not current_user.is_active:
        logger.warning(f"Tentative d'accès par un utilisateur inactif: ID {current_user.id}")
        raise InactiveUserException()
    return current_user

# Dépendance typée utilisée par tous les routeurs protégés
CurrentUserDep = Annotated[UserRead, Depends(get_current_active_user)]
