"""Sort and projection resolution for list queries."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import Any, NamedTuple


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"

    @property
    def mongo(self) -> int:
        """PyMongo direction constant (1 / -1)."""
        return -1 if self is SortDirection.DESC else 1


class SortKey(NamedTuple):
    field: str
    direction: SortDirection


def resolve_sort(raw: str) -> SortKey:
    """Parse ``field`` / ``-field`` into a :class:`SortKey`.

    A leading ``-`` means descending; anything else sorts ascending on the
    whole string.
    """
    stripped = raw.strip()
    if stripped.startswith("-"):
        return SortKey(stripped[1:].strip(), SortDirection.DESC)
    return SortKey(stripped, SortDirection.ASC)


def resolve_projection(raw: str | Iterable[str] | None) -> tuple[str, ...]:
    """Split a comma-separated field list; drop blanks, dedupe in order.

    An empty result means "all fields".
    """
    if not raw:
        return ()
    parts = raw.split(",") if isinstance(raw, str) else raw
    fields = (part.strip() for part in parts)
    return tuple(dict.fromkeys(f for f in fields if f))


def build_projection(fields: Iterable[str]) -> dict[str, int] | None:
    """Build a Mongo projection ``{field: 1, ...}``. None means no projection.

    The identity field is returned by Mongo unless explicitly excluded, so a
    restricted projection still carries it.
    """
    fields = tuple(fields)
    if not fields:
        return None
    return dict.fromkeys(fields, 1)


def build_sort(
    sort: SortKey,
    *,
    id_field: str = "_id",
    tie_break: bool = True,
) -> list[tuple[str, Any]]:
    """Build PyMongo sort tuples, optionally tie-broken on ``id_field``."""
    result: list[tuple[str, Any]] = [(sort.field, sort.direction.mongo)]
    if tie_break and sort.field != id_field:
        result.append((id_field, sort.direction.mongo))
    return result
