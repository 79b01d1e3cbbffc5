import logging
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from eletrica.clients.models import Client
from eletrica.material_lists.interfaces.repositories import AbstractMaterialListRepository
from eletrica.material_lists.models import MaterialList, MaterialListFilters, MaterialListItem
from eletrica.quotes.calculations import to_decimal
from eletrica.quotes.constants import QuoteStatus
from eletrica.utils import to_utc

logger = logging.getLogger(__name__)


class SQLAlchemyMaterialListRepository(AbstractMaterialListRepository):
    """Implémentation SQLAlchemy du repository des listes de matériel."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def get_by_id(self, material_list_id: int, user_id: int, *, for_update: bool = False) -> Optional[MaterialList]:
        statement = select(MaterialList).where(
            MaterialList.id == material_list_id, MaterialList.user_id == user_id
        )
        if for_update:
            # Lecture verrouillée: ligne et items relus depuis la base
            statement = statement.with_for_update().execution_options(populate_existing=True)
        result = await self.db.execute(statement)
        return result.scalars().first()

    async def get_unscoped(self, material_list_id: int, *, for_update: bool = False) -> Optional[MaterialList]:
        statement = select(MaterialList).where(MaterialList.id == material_list_id)
        if for_update:
            # Lecture verrouillée: ligne et items relus depuis la base
            statement = statement.with_for_update().execution_options(populate_existing=True)
        result = await self.db.execute(statement)
        return result.scalars().first()

    async def get_by_access_link(self, access_link: str) -> Optional[MaterialList]:
        result = await self.db.execute(select(MaterialList).where(MaterialList.access_link == access_link))
        return result.scalars().first()

    async def reload(self, material_list_id: int) -> Optional[MaterialList]:
        result = await self.db.execute(
            select(MaterialList)
            .where(MaterialList.id == material_list_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def list(
        self, user_id: int, filters: MaterialListFilters, offset: int = 0, limit: int = 10
    ) -> Tuple[List[MaterialList], int]:
        conditions = [MaterialList.user_id == user_id]
        if filters.client_id is not None:
            conditions.append(MaterialList.client_id == filters.client_id)
        if filters.budget_id is not None:
            conditions.append(MaterialList.budget_id == filters.budget_id)
        if filters.status is not None:
            conditions.append(MaterialList.status == filters.status)
        if filters.search:
            pattern = f"%{filters.search}%"
            conditions.append(or_(
                MaterialList.name.ilike(pattern),
                MaterialList.notes.ilike(pattern),
                Client.full_name.ilike(pattern),
            ))
        if filters.date_from is not None:
            conditions.append(MaterialList.created_at >= to_utc(filters.date_from))
        if filters.date_to is not None:
            conditions.append(MaterialList.created_at <= to_utc(filters.date_to))

        total = await self.db.scalar(
            select(func.count(MaterialList.id))
            .join(Client, Client.id == MaterialList.client_id)
            .where(*conditions)
        ) or 0
        result = await self.db.execute(
            select(MaterialList)
            .join(Client, Client.id == MaterialList.client_id)
            .where(*conditions)
            .order_by(MaterialList.created_at.desc(), MaterialList.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def list_for_client(self, client_id: int, statuses: List[QuoteStatus]) -> List[MaterialList]:
        result = await self.db.execute(
            select(MaterialList)
            .where(MaterialList.client_id == client_id, MaterialList.status.in_(statuses))
            .order_by(MaterialList.created_at.desc(), MaterialList.id.desc())
        )
        return list(result.scalars().all())

    async def add(self, material_list: MaterialList) -> MaterialList:
        self.db.add(material_list)
        await self.db.flush()
        return material_list

    async def save(self, material_list: MaterialList) -> MaterialList:
        self.db.add(material_list)
        await self.db.flush()
        return material_list

    async def delete(self, material_list: MaterialList) -> None:
        await self.db.delete(material_list)
        await self.db.flush()

    async def get_item(self, material_list_id: int, item_id: int) -> Optional[MaterialListItem]:
        result = await self.db.execute(
            select(MaterialListItem).where(
                MaterialListItem.id == item_id, MaterialListItem.material_list_id == material_list_id
            )
        )
        return result.scalars().first()

    async def add_item(self, item: MaterialListItem) -> MaterialListItem:
        self.db.add(item)
        await self.db.flush()
        return item

    async def save_item(self, item: MaterialListItem) -> MaterialListItem:
        self.db.add(item)
        await self.db.flush()
        return item

    async def delete_item(self, material_list: MaterialList, item: MaterialListItem) -> None:
        material_list.items.remove(item)
        await self.db.flush()

    async def list_item_totals(self, material_list_id: int) -> List[Decimal]:
        await self.db.flush()
        result = await self.db.execute(
            select(MaterialListItem.total_price).where(MaterialListItem.material_list_id == material_list_id)
        )
        return [to_decimal(total) for total in result.scalars().all()]

    async def count_by_status(self, user_id: int) -> Dict[str, int]:
        result = await self.db.execute(
            select(MaterialList.status, func.count(MaterialList.id))
            .where(MaterialList.user_id == user_id)
            .group_by(MaterialList.status)
        )
        return {getattr(s, "value", s): count for s, count in result.all()}

    async def sum_total_value(self, user_id: int, status: QuoteStatus) -> Decimal:
        total = await self.db.scalar(
            select(func.sum(MaterialList.total_value)).where(
                MaterialList.user_id == user_id, MaterialList.status == status
            )
        )
        return to_decimal(total)

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()
