"""Shared test fixtures."""

import os

# Must be set before otpgate.database builds its engine
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest  # noqa: E402
from fastapi import Depends  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from otpgate.auth.enrollment import TotpEnrollment  # noqa: E402
from otpgate.config import get_settings  # noqa: E402
from otpgate.database import Base, get_db  # noqa: E402
from otpgate.main import app  # noqa: E402
from otpgate.models import User  # noqa: E402
from otpgate.routers.auth import get_enrollment, get_user_store  # noqa: E402
from otpgate.store import SqlUserStore  # noqa: E402
from tests.helpers import FROZEN_NOW, InMemoryUserStore, make_user  # noqa: E402


@pytest.fixture
def user() -> User:
    """User "42" with no secret issued."""
    return make_user()


@pytest.fixture
def store(user) -> InMemoryUserStore:
    """In-memory store holding the default user."""
    return InMemoryUserStore(user)


@pytest.fixture
async def session_maker():
    """Session factory bound to a fresh in-memory SQLite database."""
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def client(session_maker):
    """HTTP client for the app, with the database and clock swapped for tests."""

    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    def override_get_enrollment(store: SqlUserStore = Depends(get_user_store)) -> TotpEnrollment:
        settings = get_settings()
        return TotpEnrollment(
            store,
            settings.totp_parameters(),
            enrollment_window=settings.totp_enrollment_window,
            login_window=settings.totp_login_window,
            clock=lambda: FROZEN_NOW,
        )

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_enrollment] = override_get_enrollment
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
