# This project was developed with assistance from AI tools.
"""Shared fixtures -- in-memory SQLite per test, real services, no mocks.

Each test gets a fresh ``sqlite+aiosqlite://`` database with the full schema
created from the models.  ``StaticPool`` keeps the single in-memory
connection alive for the lifetime of the engine.  Route tests talk to the
real app through ``httpx.ASGITransport`` with the DB session and current
user swapped in via ``dependency_overrides``.
"""

import os

# Must be set before the packages are imported: the module-level engine and
# settings read them at import time.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("AUTH_DISABLED", "false")

from datetime import UTC, datetime, timedelta  # noqa: E402
from decimal import Decimal  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from scholarship_db import Base, DatabaseService  # noqa: E402
from scholarship_db.database import create_engine_from_url, create_session_factory  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from scholarship_api.services import cycle as cycle_service  # noqa: E402
from scholarship_api.services import sponsor as sponsor_service  # noqa: E402


@pytest_asyncio.fixture
async def async_engine():
    engine = create_engine_from_url(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(async_engine):
    """Per-test session; services commit into the throwaway database."""
    factory = create_session_factory(async_engine)
    async with factory() as session:
        yield session


@pytest.fixture
def window():
    """An application window that is open right now."""
    now = datetime.now(UTC)
    return now - timedelta(days=1), now + timedelta(days=30)


@pytest_asyncio.fixture
async def sponsor(db_session):
    return await sponsor_service.create_sponsor(
        db_session, name="Fondation Lumière", contact_person="Ana Ruiz", email="ana@lumiere.org"
    )


@pytest.fixture
def make_cycle(db_session, sponsor, window):
    """Factory: create a cycle under the test sponsor with sensible defaults."""

    async def _make(**overrides):
        start, end = window
        fields = {
            "sponsor_id": sponsor.id,
            "name": "STEM Excellence",
            "description": "Tuition support for STEM majors",
            "amount": Decimal("5000.00"),
            "max_recipients": 5,
            "application_start_date": start,
            "application_end_date": end,
        }
        fields.update(overrides)
        return await cycle_service.create_cycle(db_session, **fields)

    return _make


@pytest_asyncio.fixture
async def open_cycle(make_cycle):
    return await make_cycle()


@pytest.fixture
def client_factory(db_session, async_engine):
    """Factory returning an async httpx client with dependency overrides."""
    from scholarship_db import get_db, get_db_service

    from scholarship_api.main import app
    from scholarship_api.middleware.auth import get_current_user

    async def _make(user):
        async def _get_db():
            yield db_session

        async def _get_current_user(request=None):
            return user

        async def _get_db_service():
            return DatabaseService(engine=async_engine)

        app.dependency_overrides[get_db] = _get_db
        app.dependency_overrides[get_current_user] = _get_current_user
        app.dependency_overrides[get_db_service] = _get_db_service
        transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
        return httpx.AsyncClient(transport=transport, base_url="http://test")

    yield _make

    app.dependency_overrides.clear()
