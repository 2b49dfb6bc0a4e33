"""Filter clauses: one variant per channel, folded into a single predicate.

Each query channel (equality, base filter, in-set, not-in-set, array element
in-set / not-in-set, free-text search, raw predicate) produces clauses that
carry their own :class:`Channel`. :func:`fold_clauses` merges them in channel
order:

* a later clause replaces an earlier one on the same key;
* the base filter is folded after the equality channel, so it wins there;
* search and raw clauses never replace a key owned by the base filter or by
  the search clause. They are conjoined under ``$and`` instead and can only
  narrow the result.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Union

SEARCH_KEY = "$or"
AND_KEY = "$and"


class Channel(IntEnum):
    """Filter channels in fold order (lowest first)."""

    EQUALITY = 1
    BASE = 2
    IN_SET = 3
    NOT_IN_SET = 4
    ELEMENT_IN_SET = 5
    ELEMENT_NOT_IN_SET = 6
    SEARCH = 7
    RAW = 8


_PROTECTED = frozenset({Channel.BASE, Channel.SEARCH})
_CONJOINING = frozenset({Channel.SEARCH, Channel.RAW})


@dataclass(frozen=True)
class EqualityClause:
    """``{field: value}``; several values from the query become ``$in``."""

    field: str
    value: Any
    channel: Channel = Channel.EQUALITY

    @property
    def key(self) -> str:
        return self.field

    def compile(self) -> Any:
        if self.channel is Channel.EQUALITY and isinstance(self.value, tuple):
            return {"$in": list(self.value)}
        return self.value


@dataclass(frozen=True)
class SetClause:
    """Field value is (or, negated, is not) one of ``values``."""

    field: str
    values: tuple[Any, ...]
    negate: bool = False

    @property
    def channel(self) -> Channel:
        return Channel.NOT_IN_SET if self.negate else Channel.IN_SET

    @property
    def key(self) -> str:
        return self.field

    def compile(self) -> Any:
        return {"$nin" if self.negate else "$in": list(self.values)}


@dataclass(frozen=True)
class ElementSetClause:
    """Some element of ``array_field`` has each sub-field in / not in its set.

    ``conditions`` pairs element sub-fields with their value sets; all pairs
    must hold for the same element.
    """

    array_field: str
    conditions: tuple[tuple[str, tuple[Any, ...]], ...]
    negate: bool = False

    @property
    def channel(self) -> Channel:
        return Channel.ELEMENT_NOT_IN_SET if self.negate else Channel.ELEMENT_IN_SET

    @property
    def key(self) -> str:
        return self.array_field

    def compile(self) -> Any:
        op = "$nin" if self.negate else "$in"
        return {
            "$elemMatch": {
                element: {op: list(values)} for element, values in self.conditions
            }
        }


@dataclass(frozen=True)
class SearchClause:
    """Case-insensitive substring match of ``term`` on any of ``fields``."""

    fields: tuple[str, ...]
    term: str
    channel: Channel = Channel.SEARCH

    @property
    def key(self) -> str:
        return SEARCH_KEY

    def compile(self) -> Any:
        pattern = re.escape(self.term)
        return [{f: {"$regex": pattern, "$options": "i"}} for f in self.fields]


@dataclass(frozen=True)
class RawClause:
    """One top-level entry of a caller-supplied store-native predicate."""

    key: str
    value: Any
    channel: Channel = Channel.RAW

    def compile(self) -> Any:
        return self.value


Clause = Union[EqualityClause, SetClause, ElementSetClause, SearchClause, RawClause]


def fold_clauses(clauses: Iterable[Clause]) -> dict[str, Any]:
    """Merge clauses into one predicate following channel precedence."""
    merged: dict[str, Any] = {}
    owners: dict[str, Channel] = {}
    conjuncts: list[dict[str, Any]] = []
    for clause in sorted(clauses, key=lambda c: c.channel):
        key = clause.key
        owner = owners.get(key)
        if clause.channel in _CONJOINING and owner in _PROTECTED:
            conjuncts.append({key: clause.compile()})
            continue
        merged[key] = clause.compile()
        owners[key] = clause.channel
    if conjuncts:
        merged[AND_KEY] = [*merged.get(AND_KEY, []), *conjuncts]
    return merged
