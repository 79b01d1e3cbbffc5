"""
Implémentation des repositories pour les clients.
"""
import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from eletrica.budgets.models import Budget
from eletrica.clients.interfaces.repositories import AbstractClientRepository
from eletrica.clients.models import Client, ClientStats
from eletrica.material_lists.models import MaterialList

logger = logging.getLogger(__name__)

# Colonnes sur lesquelles un doublon est interdit pour un même professionnel
DUPLICATE_CHECK_FIELDS = {"cpf_cnpj": Client.cpf_cnpj, "email": Client.email}


class SQLAlchemyClientRepository(AbstractClientRepository):
    """Implémentation SQLAlchemy du repository de clients."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, client_id: int, user_id: int) -> Optional[Client]:
        result = await self.session.execute(
            select(Client).where(Client.id == client_id, Client.user_id == user_id)
        )
        return result.scalars().first()

    async def get_active_by_link(self, link: str) -> Optional[Client]:
        result = await self.session.execute(
            select(Client).where(
                or_(Client.public_link == link, Client.access_code == link),
                Client.is_active == True,  # noqa: E712
            )
        )
        return result.scalars().first()

    async def list(
        self,
        user_id: int,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> Tuple[List[Client], int]:
        conditions = [Client.user_id == user_id]
        if is_active is not None:
            conditions.append(Client.is_active == is_active)
        if search:
            pattern = f"%{search}%"
            conditions.append(or_(
                Client.full_name.ilike(pattern),
                Client.email.ilike(pattern),
                Client.phone.ilike(pattern),
                Client.cpf_cnpj.ilike(pattern),
            ))

        count_query = select(func.count()).select_from(Client).where(*conditions)
        total = await self.session.scalar(count_query) or 0

        query = (
            select(Client)
            .where(*conditions)
            .order_by(Client.created_at.desc(), Client.id.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all()), total

    async def find_duplicate(self, user_id: int, field: str, value: str, exclude_id: Optional[int] = None) -> Optional[Client]:
        column = DUPLICATE_CHECK_FIELDS[field]
        query = select(Client).where(Client.user_id == user_id, column == value)
        if exclude_id is not None:
            query = query.where(Client.id != exclude_id)
        result = await self.session.execute(query)
        return result.scalars().first()

    async def public_link_exists(self, public_link: str) -> bool:
        count = await self.session.scalar(
            select(func.count()).select_from(Client).where(Client.public_link == public_link)
        )
        return bool(count)

    async def access_code_exists(self, access_code: str) -> bool:
        count = await self.session.scalar(
            select(func.count()).select_from(Client).where(Client.access_code == access_code)
        )
        return bool(count)

    async def add(self, client: Client) -> Client:
        self.session.add(client)
        await self.session.flush()
        return client

    async def save(self, client: Client) -> Client:
        self.session.add(client)
        await self.session.flush()
        return client

    async def delete(self, client: Client) -> None:
        await self.session.delete(client)
        await self.session.flush()

    async def count_dependents(self, client_id: int) -> Tuple[int, int]:
        budgets = await self.session.scalar(
            select(func.count()).select_from(Budget).where(Budget.client_id == client_id)
        )
        material_lists = await self.session.scalar(
            select(func.count()).select_from(MaterialList).where(MaterialList.client_id == client_id)
        )
        return budgets or 0, material_lists or 0

    async def get_stats(self, user_id: int, recent_since: datetime) -> ClientStats:
        base = select(func.count()).select_from(Client).where(Client.user_id == user_id)
        total = await self.session.scalar(base) or 0
        active = await self.session.scalar(base.where(Client.is_active == True)) or 0  # noqa: E712
        recent = await self.session.scalar(base.where(Client.created_at >= recent_since)) or 0
        return ClientStats(
            total_clients=total,
            active_clients=active,
            inactive_clients=total - active,
            recent_clients=recent,
        )

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()
