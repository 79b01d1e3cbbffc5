import logging
from datetime import timedelta
from typing import Optional

from eletrica.clients.exceptions import (
    ClientHasDependentsException,
    ClientNotFoundException,
    DuplicateClientException,
)
from eletrica.clients.interfaces.repositories import AbstractClientRepository
from eletrica.clients.models import (
    Client,
    ClientCreate,
    ClientRead,
    ClientStats,
    ClientUpdate,
    PaginatedClientRead,
)
from eletrica.clients.utils import generate_access_code, generate_public_link
from eletrica.config import settings
from eletrica.utils import utcnow

logger = logging.getLogger(__name__)

RECENT_CLIENTS_DAYS = 30


class ClientService:
    """Service applicatif pour la gestion des clients d'un professionnel."""

    def __init__(self, client_repo: AbstractClientRepository):
        self.client_repo = client_repo

    def _map_client_to_read(self, client: Client) -> ClientRead:
        client_read = ClientRead.model_validate(client)
        client_read.public_url = f"{settings.FRONTEND_URL}/cliente/{client.public_link}"
        return client_read

    async def _get_owned_client(self, client_id: int, user_id: int) -> Client:
        client = await self.client_repo.get_by_id(client_id, user_id)
        if not client:
            logger.warning(f"[ClientService] Client ID {client_id} non trouvé pour user {user_id}.")
            raise ClientNotFoundException(client_id)
        return client

    async def _check_duplicates(self, user_id: int, values: dict, exclude_id: Optional[int] = None) -> None:
        for field in ("cpf_cnpj", "email"):
            value = values.get(field)
            if value and await self.client_repo.find_duplicate(user_id, field, value, exclude_id=exclude_id):
                logger.warning(f"[ClientService] Doublon {field}={value} pour user {user_id}.")
                raise DuplicateClientException(field, value)

    async def _generate_unique_link(self) -> str:
        public_link = generate_public_link()
        while await self.client_repo.public_link_exists(public_link):
            public_link = generate_public_link()
        return public_link

    async def _generate_unique_code(self) -> str:
        access_code = generate_access_code()
        while await self.client_repo.access_code_exists(access_code):
            access_code = generate_access_code()
        return access_code

    async def create_client(self, user_id: int, client_data: ClientCreate) -> ClientRead:
        """Crée un client avec un lien public et un code d'accès uniques."""
        logger.info(f"[ClientService] Création client pour user {user_id}")
        values = client_data.model_dump()
        await self._check_duplicates(user_id, values)

        client = Client(
            **values,
            user_id=user_id,
            public_link=await self._generate_unique_link(),
            access_code=await self._generate_unique_code(),
        )
        try:
            await self.client_repo.add(client)
            await self.client_repo.commit()
        except Exception as e:
            logger.error(f"[ClientService] Erreur création client pour user {user_id}: {e}", exc_info=True)
            await self.client_repo.rollback()
            raise
        logger.info(f"[ClientService] Client ID {client.id} créé pour user {user_id}.")
        return self._map_client_to_read(client)

    async def get_client(self, client_id: int, user_id: int) -> ClientRead:
        client = await self._get_owned_client(client_id, user_id)
        return self._map_client_to_read(client)

    async def list_clients(
        self,
        user_id: int,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> PaginatedClientRead:
        logger.debug(f"[ClientService] Listage clients user {user_id}, search={search}, is_active={is_active}")
        clients, total = await self.client_repo.list(
            user_id, search=search, is_active=is_active, offset=offset, limit=limit
        )
        return PaginatedClientRead(items=[self._map_client_to_read(c) for c in clients], total=total)

    async def update_client(self, client_id: int, user_id: int, client_data: ClientUpdate) -> ClientRead:
        client = await self._get_owned_client(client_id, user_id)
        values = client_data.model_dump(exclude_unset=True)
        await self._check_duplicates(user_id, values, exclude_id=client_id)

        for field, value in values.items():
            setattr(client, field, value)
        client.updated_at = utcnow()
        try:
            await self.client_repo.save(client)
            await self.client_repo.commit()
        except Exception as e:
            logger.error(f"[ClientService] Erreur MAJ client {client_id}: {e}", exc_info=True)
            await self.client_repo.rollback()
            raise
        return self._map_client_to_read(client)

    async def set_active(self, client_id: int, user_id: int, is_active: bool) -> ClientRead:
        """Active ou désactive un client."""
        client = await self._get_owned_client(client_id, user_id)
        client.is_active = is_active
        client.updated_at = utcnow()
        await self.client_repo.save(client)
        await self.client_repo.commit()
        logger.info(f"[ClientService] Client ID {client_id} {'activé' if is_active else 'désactivé'}.")
        return self._map_client_to_read(client)

    async def regenerate_public_link(self, client_id: int, user_id: int) -> ClientRead:
        """Remplace le lien public et le code d'accès du client."""
        client = await self._get_owned_client(client_id, user_id)
        client.public_link = await self._generate_unique_link()
        client.access_code = await self._generate_unique_code()
        client.updated_at = utcnow()
        await self.client_repo.save(client)
        await self.client_repo.commit()
        logger.info(f"[ClientService] Lien public régénéré pour client ID {client_id}.")
        return self._map_client_to_read(client)

    async def delete_client(self, client_id: int, user_id: int) -> None:
        """Supprime un client sans orçamentos ni listes de matériel liés."""
        client = await self._get_owned_client(client_id, user_id)
        budgets, material_lists = await self.client_repo.count_dependents(client_id)
        if budgets or material_lists:
            raise ClientHasDependentsException(client_id, budgets, material_lists)
        try:
            await self.client_repo.delete(client)
            await self.client_repo.commit()
        except Exception as e:
            logger.error(f"[ClientService] Erreur suppression client {client_id}: {e}", exc_info=True)
            await self.client_repo.rollback()
            raise
        logger.info(f"[ClientService] Client ID {client_id} supprimé.")

    async def get_stats(self, user_id: int) -> ClientStats:
        since = utcnow() - timedelta(days=RECENT_CLIENTS_DAYS)
        return await self.client_repo.get_stats(user_id, since)
