import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from eletrica.users.interfaces.repositories import AbstractUserRepository
from eletrica.users.models import User

logger = logging.getLogger(__name__)


class SQLAlchemyUserRepository(AbstractUserRepository):
    """Implémentation SQLAlchemy du repository utilisateur."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: int) -> Optional[User]:
        return await self.session.get(User, user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalars().first()

    async def create(self, user: User) -> User:
        try:
            self.session.add(user)
            await self.session.commit()
            await self.session.refresh(user)
            return user
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Erreur création utilisateur {user.email}: {e}", exc_info=True)
            raise

    async def update(self, user: User) -> User:
        try:
            self.session.add(user)
            await self.session.commit()
            await self.session.refresh(user)
            return user
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Erreur MAJ utilisateur {user.id}: {e}", exc_info=True)
            raise
