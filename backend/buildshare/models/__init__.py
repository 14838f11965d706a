"""ORM Models — SQLAlchemy declarative models for all persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - All models imported here so Base.metadata is complete before create_all/migrations
"""

from buildshare.models.build_record import BuildRecord  # noqa: F401
