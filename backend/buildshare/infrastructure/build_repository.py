"""Build Record Repository — SQLAlchemy implementation of BuildRecordRepository.

Invariants:
    - One short transaction per method; each write is a single statement
    - Reads and writes filter on expires_at > now (expired rows are invisible)
    - Returned ORM objects are detached and safe to read after the session closes
"""

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import delete, exists, insert, or_, select, update

from buildshare.infrastructure.database import DatabaseSessionManager
from buildshare.models.build_record import BuildRecord

logger = logging.getLogger(__name__)


def _live(now: datetime):
    return BuildRecord.expires_at > now


class SqlBuildRecordRepository:
    """Build record persistence over an async SQLAlchemy engine."""

    def __init__(self, db: DatabaseSessionManager):
        self._db = db

    async def insert(self, values: Mapping[str, Any]) -> None:
        async with self._db.session() as session:
            await session.execute(insert(BuildRecord).values(**values))
            await session.commit()

    async def identifier_exists(self, identifier: int) -> bool:
        async with self._db.session() as session:
            result = await session.execute(
                select(exists().where(BuildRecord.id == identifier)),
            )
            return bool(result.scalar())

    async def find_by_identifier(
        self, identifier: int, now: datetime,
    ) -> BuildRecord | None:
        async with self._db.session() as session:
            result = await session.execute(
                select(BuildRecord).where(
                    BuildRecord.id == identifier, _live(now),
                ),
            )
            return result.scalar_one_or_none()

    async def find_by_shortcode(
        self, shortcode: str, now: datetime,
    ) -> BuildRecord | None:
        async with self._db.session() as session:
            result = await session.execute(
                select(BuildRecord).where(
                    BuildRecord.shortcode == shortcode, _live(now),
                ),
            )
            return result.scalar_one_or_none()

    async def update_by_shortcode(
        self, shortcode: str, values: Mapping[str, Any], now: datetime,
    ) -> int:
        async with self._db.session() as session:
            result = await session.execute(
                update(BuildRecord)
                .where(BuildRecord.shortcode == shortcode, _live(now))
                .values(**values)
                .execution_options(synchronize_session=False),
            )
            await session.commit()
            return result.rowcount

    async def delete_by_shortcode(self, shortcode: str, now: datetime) -> int:
        async with self._db.session() as session:
            result = await session.execute(
                delete(BuildRecord)
                .where(BuildRecord.shortcode == shortcode, _live(now))
                .execution_options(synchronize_session=False),
            )
            await session.commit()
            return result.rowcount

    async def find_matching(
        self, values: Sequence[str], now: datetime,
    ) -> list[BuildRecord]:
        values = list(values)
        async with self._db.session() as session:
            result = await session.execute(
                select(BuildRecord)
                .where(
                    or_(
                        BuildRecord.archetype.in_(values),
                        BuildRecord.primary.in_(values),
                        BuildRecord.secondary.in_(values),
                    ),
                    _live(now),
                )
                .order_by(BuildRecord.id),
            )
            records = list(result.scalars().all())
        logger.debug(f"Search matched {len(records)} records for {values}")
        return records
