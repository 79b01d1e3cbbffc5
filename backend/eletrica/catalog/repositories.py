"""
Implémentation SQLAlchemy des repositories du catalogue.

Un même repository sert aux services et aux matériels: seul le modèle de table
et les colonnes d'items qui le référencent changent.
"""
import logging
from typing import List, Optional, Sequence, Tuple, Type

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from eletrica.catalog.interfaces.repositories import AbstractCatalogRepository, CatalogEntry

logger = logging.getLogger(__name__)


class SQLAlchemyCatalogRepository(AbstractCatalogRepository):
    """Implémentation SQLAlchemy du repository d'un catalogue."""

    def __init__(self, session: AsyncSession, model: Type[CatalogEntry], reference_columns: Sequence = ()):
        self.session = session
        self.model = model
        self.reference_columns = reference_columns

    async def get_by_id(self, entry_id: int, user_id: int) -> Optional[CatalogEntry]:
        result = await self.session.execute(
            select(self.model).where(self.model.id == entry_id, self.model.user_id == user_id)
        )
        return result.scalars().first()

    async def get_by_name(self, user_id: int, name: str) -> Optional[CatalogEntry]:
        result = await self.session.execute(
            select(self.model).where(
                self.model.user_id == user_id,
                func.lower(self.model.name) == name.strip().lower(),
            )
        )
        return result.scalars().first()

    async def list(
        self,
        user_id: int,
        search: Optional[str] = None,
        category: Optional[str] = None,
        is_active: Optional[bool] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> Tuple[List[CatalogEntry], int]:
        conditions = [self.model.user_id == user_id]
        if category:
            conditions.append(self.model.category == category)
        if is_active is not None:
            conditions.append(self.model.is_active == is_active)
        if search:
            pattern = f"%{search}%"
            conditions.append(or_(self.model.name.ilike(pattern), self.model.description.ilike(pattern)))

        total = await self.session.scalar(
            select(func.count()).select_from(self.model).where(*conditions)
        ) or 0
        result = await self.session.execute(
            select(self.model).where(*conditions).order_by(self.model.name).offset(offset).limit(limit)
        )
        return list(result.scalars().all()), total

    async def list_categories(self, user_id: int) -> List[str]:
        result = await self.session.execute(
            select(self.model.category)
            .where(self.model.user_id == user_id, self.model.category.is_not(None))
            .distinct()
            .order_by(self.model.category)
        )
        return list(result.scalars().all())

    async def count_references(self, entry_id: int) -> int:
        total = 0
        for column in self.reference_columns:
            count = await self.session.scalar(
                select(func.count()).select_from(column.class_).where(column == entry_id)
            )
            total += count or 0
        return total

    async def add(self, entry: CatalogEntry) -> CatalogEntry:
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def save(self, entry: CatalogEntry) -> CatalogEntry:
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def delete(self, entry: CatalogEntry) -> None:
        await self.session.delete(entry)
        await self.session.flush()

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()
