import logging
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from eletrica.budgets.interfaces.repositories import AbstractBudgetRepository
from eletrica.budgets.models import Budget, BudgetFilters, BudgetItem
from eletrica.clients.models import Client
from eletrica.material_lists.models import MaterialList
from eletrica.quotes.calculations import to_decimal
from eletrica.quotes.constants import QuoteStatus
from eletrica.utils import to_utc

logger = logging.getLogger(__name__)


class SQLAlchemyBudgetRepository(AbstractBudgetRepository):
    """Implémentation SQLAlchemy du repository des orçamentos."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def get_by_id(self, budget_id: int, user_id: int, *, for_update: bool = False) -> Optional[Budget]:
        statement = select(Budget).where(Budget.id == budget_id, Budget.user_id == user_id)
        if for_update:
            # Lecture verrouillée: ligne et items relus depuis la base
            statement = statement.with_for_update().execution_options(populate_existing=True)
        result = await self.db.execute(statement)
        return result.scalars().first()

    async def get_unscoped(self, budget_id: int, *, for_update: bool = False) -> Optional[Budget]:
        statement = select(Budget).where(Budget.id == budget_id)
        if for_update:
            # Lecture verrouillée: ligne et items relus depuis la base
            statement = statement.with_for_update().execution_options(populate_existing=True)
        result = await self.db.execute(statement)
        return result.scalars().first()

    async def get_by_access_link(self, access_link: str) -> Optional[Budget]:
        result = await self.db.execute(select(Budget).where(Budget.access_link == access_link))
        return result.scalars().first()

    async def reload(self, budget_id: int) -> Optional[Budget]:
        statement = (
            select(Budget)
            .where(Budget.id == budget_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(statement)
        return result.scalars().first()

    def _filter_conditions(self, user_id: int, filters: BudgetFilters) -> list:
        conditions = [Budget.user_id == user_id]
        if filters.client_id is not None:
            conditions.append(Budget.client_id == filters.client_id)
        if filters.status is not None:
            conditions.append(Budget.status == filters.status)
        if filters.search:
            pattern = f"%{filters.search}%"
            conditions.append(or_(
                Budget.name.ilike(pattern),
                Budget.notes.ilike(pattern),
                Client.full_name.ilike(pattern),
            ))
        if filters.date_from is not None:
            conditions.append(Budget.created_at >= to_utc(filters.date_from))
        if filters.date_to is not None:
            conditions.append(Budget.created_at <= to_utc(filters.date_to))
        return conditions

    async def list(self, user_id: int, filters: BudgetFilters, offset: int = 0, limit: int = 10) -> Tuple[List[Budget], int]:
        conditions = self._filter_conditions(user_id, filters)

        count_query = (
            select(func.count(Budget.id))
            .join(Client, Client.id == Budget.client_id)
            .where(*conditions)
        )
        total = await self.db.scalar(count_query) or 0

        statement = (
            select(Budget)
            .join(Client, Client.id == Budget.client_id)
            .where(*conditions)
            .order_by(Budget.created_at.desc(), Budget.id.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.db.execute(statement)
        return list(result.scalars().all()), total

    async def list_for_client(self, client_id: int, statuses: List[QuoteStatus]) -> List[Budget]:
        result = await self.db.execute(
            select(Budget)
            .where(Budget.client_id == client_id, Budget.status.in_(statuses))
            .order_by(Budget.created_at.desc(), Budget.id.desc())
        )
        return list(result.scalars().all())

    async def add(self, budget: Budget) -> Budget:
        self.db.add(budget)
        await self.db.flush()
        return budget

    async def save(self, budget: Budget) -> Budget:
        self.db.add(budget)
        await self.db.flush()
        return budget

    async def delete(self, budget: Budget) -> None:
        await self.db.execute(
            update(MaterialList).where(MaterialList.budget_id == budget.id).values(budget_id=None)
        )
        await self.db.delete(budget)
        await self.db.flush()

    async def get_item(self, budget_id: int, item_id: int) -> Optional[BudgetItem]:
        result = await self.db.execute(
            select(BudgetItem).where(BudgetItem.id == item_id, BudgetItem.budget_id == budget_id)
        )
        return result.scalars().first()

    async def add_item(self, item: BudgetItem) -> BudgetItem:
        self.db.add(item)
        await self.db.flush()
        return item

    async def save_item(self, item: BudgetItem) -> BudgetItem:
        self.db.add(item)
        await self.db.flush()
        return item

    async def delete_item(self, budget: Budget, item: BudgetItem) -> None:
        budget.items.remove(item)
        await self.db.flush()

    async def list_item_totals(self, budget_id: int) -> List[Decimal]:
        await self.db.flush()
        result = await self.db.execute(
            select(BudgetItem.total_price).where(BudgetItem.budget_id == budget_id)
        )
        return [to_decimal(total) for total in result.scalars().all()]

    async def count_by_status(self, user_id: int) -> Dict[str, int]:
        result = await self.db.execute(
            select(Budget.status, func.count(Budget.id))
            .where(Budget.user_id == user_id)
            .group_by(Budget.status)
        )
        return {getattr(s, "value", s): count for s, count in result.all()}

    async def sum_total_value(self, user_id: int, status: QuoteStatus) -> Decimal:
        total = await self.db.scalar(
            select(func.sum(Budget.total_value)).where(Budget.user_id == user_id, Budget.status == status)
        )
        return to_decimal(total)

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()
