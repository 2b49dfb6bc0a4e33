"""Parameter normalizer: pagination, sort, search and projection params."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, NamedTuple

from .config import DEFAULT_CONFIG, ListQueryConfig
from .exceptions import FilterParseError, PaginationError
from .projection import resolve_projection, resolve_sort

PAGE = "page"
LIMIT = "limit"
SKIP = "skip"
SORT = "sort"
SEARCH = "q"
FIELDS = "fields"
IN_LIST = "inList"
NOT_IN_LIST = "notInList"
IN_LIST_ARR_OF_OBJ = "inListArrOfObj"
NOT_IN_LIST_ARR_OF_OBJ = "notInListArrOfObj"
MONGO_QUERY = "mongoQuery"

RESERVED_KEYS = frozenset(
    {
        PAGE,
        LIMIT,
        SKIP,
        SORT,
        SEARCH,
        FIELDS,
        IN_LIST,
        NOT_IN_LIST,
        IN_LIST_ARR_OF_OBJ,
        NOT_IN_LIST_ARR_OF_OBJ,
        MONGO_QUERY,
    }
)

_LEADING_INT_RE = re.compile(r"^\s*([+-]?)0*(\d+)")
# Largest value a BSON int64 can carry.
MAX_INT = 2**63 - 1
_MAX_DIGITS = len(str(MAX_INT))


class NormalizedParams(NamedTuple):
    """Parsed pagination, sort, search and projection."""

    page: int
    limit: int
    skip: int
    sort: str
    q: str
    fields: tuple[str, ...]


def check_field_name(name: Any, *, param: str) -> str:
    """Reject field names that are empty or would smuggle in an operator."""
    if not isinstance(name, str) or not name:
        raise FilterParseError("Field names must be non-empty", param=param)
    if name.startswith("$") or "\x00" in name:
        raise FilterParseError(f"Invalid field name {name!r}", param=param)
    return name


def first_value(value: Any) -> Any:
    """Return the first occurrence of a repeated scalar parameter."""
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def parse_int(value: Any) -> int | None:
    """Read the leading integer of ``value`` (``"10abc"`` -> 10), else None.

    Raises:
        ValueError: The number has more digits than an int64 can hold.
    """
    value = first_value(value)
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        return None
    match = _LEADING_INT_RE.match(value)
    if match is None:
        return None
    sign, digits = match.groups()
    if len(digits) > _MAX_DIGITS:
        raise ValueError(f"{value[:32]!r}... does not fit in an int64")
    return int(sign + digits)


def _str_param(value: Any) -> str:
    value = first_value(value)
    return value if isinstance(value, str) else ""


def _fields_param(value: Any) -> tuple[str, ...]:
    if isinstance(value, (list, tuple)):
        value = ",".join(v for v in value if isinstance(v, str))
    return resolve_projection(value if isinstance(value, str) else None)


def _int_param(raw: Mapping[str, Any], key: str) -> int | None:
    try:
        value = parse_int(raw.get(key))
    except ValueError as e:
        raise PaginationError(f"{key} is out of range", param=key) from e
    if value is not None and abs(value) > MAX_INT:
        raise PaginationError(f"{key} is out of range", param=key)
    return value


def normalize(
    raw: Mapping[str, Any], config: ListQueryConfig = DEFAULT_CONFIG
) -> NormalizedParams:
    """Extract and coerce the non-filter parameters from ``raw``.

    Missing or non-numeric values fall back to ``config`` defaults, and so
    does a ``page`` below 1. An explicit ``skip`` always wins over
    ``(page - 1) * limit``.

    Raises:
        PaginationError: ``limit <= 0``, ``skip < 0``, or a number (or the
            computed skip) outside the int64 range.
        FilterParseError: The sort or a projected field is not a field name.
    """
    page = _int_param(raw, PAGE)
    if page is None or page < 1:
        page = config.default_page

    limit = _int_param(raw, LIMIT)
    if limit is None:
        limit = config.default_limit
    elif limit <= 0:
        raise PaginationError("limit must be > 0", param=LIMIT)
    if config.max_limit is not None:
        limit = min(config.max_limit, limit)

    skip = _int_param(raw, SKIP)
    if skip is None:
        skip = (page - 1) * limit
        if skip > MAX_INT:
            raise PaginationError("page is out of range", param=PAGE)
    elif skip < 0:
        raise PaginationError("skip must be >= 0", param=SKIP)

    sort = _str_param(raw.get(SORT)).strip()
    if sort in ("", "-"):
        sort = config.default_sort
    check_field_name(resolve_sort(sort).field, param=SORT)

    fields = _fields_param(raw.get(FIELDS))
    for field in fields:
        check_field_name(field, param=FIELDS)

    return NormalizedParams(
        page=page,
        limit=limit,
        skip=skip,
        sort=sort,
        q=_str_param(raw.get(SEARCH)).strip(),
        fields=fields,
    )
