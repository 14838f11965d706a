"""BuildRecord ORM — the single persisted entity behind every shortcode.

Invariants:
    - id is the snowflake identifier assigned before insert (no autoincrement)
    - shortcode is UNIQUE and derived from id; it never changes after insert
    - archetype/primary/secondary are NULL only on legacy rows (page_data shape)
    - expires_at is indexed; the TTL policy deletes rows once it has passed

Design Decisions:
    - Columns nullable where legacy rows need it; required-ness of new writes is
      enforced by CreateInput/UpdateInput and the store, not by the table
"""

from datetime import datetime

from sqlalchemy import BigInteger, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from buildshare.db.base import Base
from buildshare.db.collections import table_for
from buildshare.db.types import UTCDateTime


class BuildRecord(Base):
    """A shared character build and its compressed payloads."""
    __tablename__ = table_for("BuildRecord")

    id: Mapped[int] = mapped_column(
        BigInteger, primary_key=True, autoincrement=False,
    )
    shortcode: Mapped[str] = mapped_column(
        String(16), nullable=False, unique=True, index=True,
    )
    name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    archetype: Mapped[str | None] = mapped_column(
        String(100), nullable=True, index=True,
    )
    primary: Mapped[str | None] = mapped_column(
        String(100), nullable=True, index=True,
    )
    secondary: Mapped[str | None] = mapped_column(
        String(100), nullable=True, index=True,
    )
    build_data: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_data: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Legacy HTML preview payload; never written by current code
    page_data: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    expires_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, index=True,
    )

    @property
    def is_legacy(self) -> bool:
        return self.archetype is None and self.page_data is not None

    def __repr__(self) -> str:
        return (
            f"<BuildRecord(id={self.id}, shortcode='{self.shortcode}', "
            f"archetype='{self.archetype}', expires_at={self.expires_at})>"
        )
