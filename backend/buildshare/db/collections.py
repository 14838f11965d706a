"""Collection Mapping — logical entity name to physical table name.

Invariants:
    - Resolved once at import; models read their __tablename__ from here
    - Renaming a table is a migration, never an edit of this mapping alone
"""

COLLECTIONS: dict[str, str] = {
    "BuildRecord": "builds",
}


def table_for(entity: str) -> str:
    try:
        return COLLECTIONS[entity]
    except KeyError:
        raise LookupError(f"No table mapped for entity {entity!r}") from None
