"""Service test fixtures — file-backed SQLite, controllable clock, store, and client.

Invariants:
    - Every test gets a fresh SQLite database file under tmp_path with the
      builds table and TTL triggers installed
    - The store and its snowflake generator share one FakeClock, so tests move
      time explicitly (retention, expiry, sliding TTL)
    - get_build_store is overridden; the app lifespan does not run under
      ASGITransport

Design Decisions:
    - File-backed rather than :memory: so concurrent operations get separate
      connections, as they would against PostgreSQL
"""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

from buildshare.api.routes.builds import get_build_store
from buildshare.config import Settings
from buildshare.db.base import Base
from buildshare.infrastructure.build_repository import SqlBuildRecordRepository
from buildshare.infrastructure.database import DatabaseSessionManager
from buildshare.infrastructure.ttl_policy import ensure_ttl_policy
from buildshare.main import app
from buildshare.services.build_store import BuildStore
import buildshare.models  # noqa: F401


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def settings():
    return Settings(
        base_url="https://mids.app", app_protocol="mrb",
        retention_days=30, insert_retry_limit=3, search_timeout_seconds=5.0,
    )


@pytest.fixture
async def bare_engine(tmp_path):
    """Engine over an empty database file (no tables, no triggers)."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path}/builds.db")
    yield engine
    await engine.dispose()


@pytest.fixture
async def test_engine(bare_engine):
    async with bare_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await ensure_ttl_policy(bare_engine)
    return bare_engine


@pytest.fixture
def db(test_engine):
    return DatabaseSessionManager.from_engine(test_engine)


@pytest.fixture
def repository(db):
    return SqlBuildRecordRepository(db)


@pytest.fixture
def store(settings, db, clock):
    return BuildStore.from_settings(settings, db, clock=clock)


@pytest.fixture
async def client(store):
    """FastAPI test client wired to the test store."""
    app.dependency_overrides[get_build_store] = lambda: store
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
    app.dependency_overrides.clear()
