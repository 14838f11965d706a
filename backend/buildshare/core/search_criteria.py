"""Search Criteria — parsing and field-precedence checks for build searches.

Invariants:
    - Field precedence is fixed: archetype (0), primary (1), secondary (2)
    - Matching is disjunctive (ANY field equals ANY value); the repository
      applies it in SQL, so only precedence is checked here
    - A value's implied field index is the lowest index at which it occurs in the
      matched records; values occurring nowhere impose no ordering constraint
    - Implied indices must be non-decreasing across the supplied list;
      out-of-order queries are rejected, never reordered
    - Ordering is judged only against matched records: when nothing matches,
      no value has an implied index and the search reports not-found rather
      than a malformed query
"""

from collections.abc import Iterable, Sequence

from buildshare.core.errors import InputValidationError
from buildshare.core.repository_protocols import BuildRecordLike

FIELD_PRECEDENCE = ("archetype", "primary", "secondary")


def parse_criteria(criteria: str | None) -> list[str]:
    """Split a comma-separated criteria string into trimmed, non-empty values."""
    values = [part.strip() for part in (criteria or "").split(",")]
    values = [value for value in values if value]
    if not values:
        raise InputValidationError(
            "At least one search value is required.", field="value",
        )
    return values


def implied_field_index(
    value: str, records: Iterable[BuildRecordLike],
) -> int | None:
    """Lowest precedence index at which value occurs across records."""
    indices = [
        index
        for record in records
        for index, name in enumerate(FIELD_PRECEDENCE)
        if getattr(record, name) == value
    ]
    return min(indices) if indices else None


def check_precedence(
    values: Sequence[str], records: Sequence[BuildRecordLike],
) -> None:
    """Raise InputValidationError when values are listed out of field order."""
    if len(values) < 2:
        return
    highest: tuple[str, int] | None = None
    for value in values:
        index = implied_field_index(value, records)
        if index is None:
            continue
        if highest is not None and index < highest[1]:
            raise InputValidationError(
                "Parameters must be listed in order (archetype, primary, secondary) "
                f"when multiple parameters are provided: '{value}' "
                f"({FIELD_PRECEDENCE[index]}) follows '{highest[0]}' "
                f"({FIELD_PRECEDENCE[highest[1]]}).",
                field="value",
            )
        highest = (value, index)
