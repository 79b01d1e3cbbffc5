"""
Module définissant les dépendances FastAPI pour le module utilisateur.
"""
import logging
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from eletrica.database import get_db_session
from eletrica.users.interfaces.repositories import AbstractUserRepository
from eletrica.users.repositories import SQLAlchemyUserRepository
from eletrica.users.service import UserService

logger = logging.getLogger(__name__)

# Type hint pour la dépendance de session DB
DbSessionDep = Annotated[AsyncSession, Depends(get_db_session)]

def get_user_repository(session: DbSessionDep) -> AbstractUserRepository:
    """Fournit une instance du repository utilisateur (implémentation SQLAlchemy)."""
    logger.debug("Fourniture de SQLAlchemyUserRepository")
    return SQLAlchemyUserRepository(session=session)

UserRepositoryDep = Annotated[AbstractUserRepository, Depends(get_user_repository)]

def get_user_service(user_repository: UserRepositoryDep) -> UserService:
    """
    Fournit une instance du service de gestion des utilisateurs.

    Args:
        user_repository: Repository utilisateur injecté.

    Returns:
        UserService: Instance du service de gestion des utilisateurs
    """
    logger.debug("Fourniture de UserService")
    return UserService(user_repository=user_repository)

UserServiceDep = Annotated[UserService, Depends(get_user_service)]
