"""TTL Expiry Policy — storage-engine-enforced deletion of expired build records.

Invariants:
    - ensure_ttl_policy() is idempotent (IF NOT EXISTS / OR REPLACE only)
    - The expires_at index always exists after a successful call
    - Deletion runs inside the database engine (triggers); no application loop
    - Any failure raises TtlPolicyError; startup must not continue past it

Design Decisions:
    - SQLite: row triggers after insert/update delete rows with
      expires_at <= NEW.updated_at, so the sweep follows the writer's clock
    - PostgreSQL: one statement-level trigger function deleting rows with
      expires_at <= now() (requires PostgreSQL 14+ for CREATE OR REPLACE TRIGGER)
"""

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from buildshare.core.errors import TtlPolicyError
from buildshare.db.collections import table_for

logger = logging.getLogger(__name__)

TABLE = table_for("BuildRecord")


def _sqlite_statements(table: str) -> list[str]:
    sweep = f"DELETE FROM {table} WHERE expires_at <= NEW.updated_at;"
    return [
        f"CREATE INDEX IF NOT EXISTS ix_{table}_expires_at ON {table} (expires_at)",
        f"CREATE TRIGGER IF NOT EXISTS {table}_ttl_after_insert "
        f"AFTER INSERT ON {table} BEGIN {sweep} END",
        f"CREATE TRIGGER IF NOT EXISTS {table}_ttl_after_update "
        f"AFTER UPDATE OF updated_at ON {table} BEGIN {sweep} END",
    ]


def _postgresql_statements(table: str) -> list[str]:
    return [
        f"CREATE INDEX IF NOT EXISTS ix_{table}_expires_at ON {table} (expires_at)",
        f"CREATE OR REPLACE FUNCTION {table}_ttl_sweep() RETURNS trigger "
        f"LANGUAGE plpgsql AS $$ BEGIN "
        f"DELETE FROM {table} WHERE expires_at <= now(); "
        f"RETURN NULL; END; $$",
        f"CREATE OR REPLACE TRIGGER {table}_ttl_sweep "
        f"AFTER INSERT OR UPDATE ON {table} "
        f"FOR EACH STATEMENT EXECUTE FUNCTION {table}_ttl_sweep()",
    ]


_STATEMENTS = {
    "sqlite": _sqlite_statements,
    "postgresql": _postgresql_statements,
}


async def ensure_ttl_policy(engine: AsyncEngine, table: str = TABLE) -> None:
    """Install (or confirm) the expiry rule for the build records table."""
    dialect = engine.dialect.name
    builder = _STATEMENTS.get(dialect)
    if builder is None:
        raise TtlPolicyError(f"No TTL policy available for dialect '{dialect}'")
    try:
        async with engine.begin() as conn:
            for statement in builder(table):
                await conn.execute(text(statement))
    except Exception as e:
        logger.error(
            f"Failed to ensure TTL policy on '{table}': {e}",
            extra={"operation": "ensure_ttl_policy"},
        )
        raise TtlPolicyError(f"Could not ensure TTL policy on '{table}': {e}") from e
    logger.info(
        f"TTL policy on 'expires_at' ensured on {table} table ({dialect})",
        extra={"operation": "ensure_ttl_policy"},
    )


async def ttl_policy_installed(engine: AsyncEngine, table: str = TABLE) -> bool:
    """Report whether the expiry triggers are present (readiness checks)."""
    dialect = engine.dialect.name
    if dialect == "sqlite":
        query = text(
            "SELECT count(*) FROM sqlite_master "
            "WHERE type = 'trigger' AND tbl_name = :table AND name LIKE :prefix"
        )
        expected = 2
    elif dialect == "postgresql":
        query = text(
            "SELECT count(*) FROM pg_trigger t JOIN pg_class c ON c.oid = t.tgrelid "
            "WHERE c.relname = :table AND t.tgname LIKE :prefix"
        )
        expected = 1
    else:
        return False
    async with engine.connect() as conn:
        result = await conn.execute(query, {"table": table, "prefix": f"{table}_ttl%"})
        return (result.scalar() or 0) >= expected
