import logging
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from eletrica.clients.interfaces.repositories import AbstractClientRepository
from eletrica.clients.repositories import SQLAlchemyClientRepository
from eletrica.clients.service import ClientService
from eletrica.database import get_db_session

logger = logging.getLogger(__name__)


def get_client_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)]
) -> AbstractClientRepository:
    """Fournit une instance du repository de clients (implémentation SQLAlchemy)."""
    logger.debug("Fourniture de SQLAlchemyClientRepository")
    return SQLAlchemyClientRepository(session=session)

ClientRepositoryDep = Annotated[AbstractClientRepository, Depends(get_client_repository)]


def get_client_service(client_repo: ClientRepositoryDep) -> ClientService:
    logger.debug("Fourniture de ClientService")
    return ClientService(client_repo=client_repo)

ClientServiceDep = Annotated[ClientService, Depends(get_client_service)]
