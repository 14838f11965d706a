"""Database Infrastructure — declarative Base, column types, and table mapping.

Invariants:
    - All sessions are async (AsyncSession)
    - Physical table names come from the static COLLECTIONS mapping
"""
