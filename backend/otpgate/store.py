"""User storage used by the enrollment flow."""

from typing import Any, Protocol

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from otpgate.models import User


class UserStore(Protocol):
    """Lookup and single-row update of users by ID."""

    async def get(self, user_id: str) -> User | None: ...

    async def update(self, user_id: str, **fields: Any) -> User | None: ...


class SqlUserStore:
    """UserStore backed by an async SQLAlchemy session.

    Each update is a single UPDATE statement committed on its own, so a
    state transition is never half-applied.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, user_id: str) -> User | None:
        result = await self.session.execute(select(User).where(User.id == user_id))
        return result.scalar()

    async def get_by_email(self, email: str) -> User | None:
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar()

    async def add(self, user: User) -> User:
        self.session.add(user)
        await self.session.commit()
        await self.session.refresh(user)
        return user

    async def update(self, user_id: str, **fields: Any) -> User | None:
        result = await self.session.execute(
            update(User).where(User.id == user_id).values(**fields)
        )
        if result.rowcount == 0:
            await self.session.rollback()
            return None
        await self.session.commit()
        return await self.session.get(User, user_id, populate_existing=True)
