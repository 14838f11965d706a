"""Readiness check — database reachability and TTL policy presence."""

import buildshare.infrastructure.database as db_module
from buildshare.db.base import Base
from buildshare.infrastructure.database import DatabaseSessionManager


async def test_ready_when_policy_installed(client, monkeypatch, test_engine):
    monkeypatch.setattr(
        db_module, "db_manager", DatabaseSessionManager.from_engine(test_engine),
    )
    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 200
    assert res.json()["checks"]["ttl_policy"] == "installed"


async def test_not_ready_without_database(client, monkeypatch):
    monkeypatch.setattr(db_module, "db_manager", None)
    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 503
    assert res.json()["reason"] == "database_unavailable"


async def test_not_ready_without_ttl_policy(client, monkeypatch, tmp_path):
    from sqlalchemy.ext.asyncio import create_async_engine

    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path}/bare.db")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    monkeypatch.setattr(
        db_module, "db_manager", DatabaseSessionManager.from_engine(engine),
    )
    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 503
    assert res.json()["reason"] == "ttl_policy_missing"
    await engine.dispose()
