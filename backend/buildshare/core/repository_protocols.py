"""Boundary Protocols — contracts between the build store and persistence.

Invariants:
    - Every repository method is one atomic storage operation
    - "Live" means expires_at > now; expired rows are invisible to reads and writes
    - Duplicate identifier/shortcode on insert raises ConflictError
    - Storage faults raise InfrastructureError

Design Decisions:
    - Protocol over ABC: structural subtyping, the store never imports SQLAlchemy
"""

from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any, Protocol


class BuildRecordLike(Protocol):
    """Structural contract for persisted build records read by the store."""
    id: int
    shortcode: str
    name: str | None
    description: str | None
    archetype: str | None
    primary: str | None
    secondary: str | None
    build_data: str | None
    image_data: str | None
    page_data: str | None
    created_at: datetime | None
    updated_at: datetime | None
    expires_at: datetime


class BuildRecordRepository(Protocol):
    """Contract for build record persistence — implemented by infrastructure."""
    async def insert(self, values: Mapping[str, Any]) -> None: ...
    async def identifier_exists(self, identifier: int) -> bool: ...
    async def find_by_identifier(
        self, identifier: int, now: datetime,
    ) -> BuildRecordLike | None: ...
    async def find_by_shortcode(
        self, shortcode: str, now: datetime,
    ) -> BuildRecordLike | None: ...
    async def update_by_shortcode(
        self, shortcode: str, values: Mapping[str, Any], now: datetime,
    ) -> int: ...
    async def delete_by_shortcode(self, shortcode: str, now: datetime) -> int: ...
    async def find_matching(
        self, values: Sequence[str], now: datetime,
    ) -> list[BuildRecordLike]: ...
