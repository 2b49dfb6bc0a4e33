"""PredicateBuilder: query params + base filter -> one Mongo filter document."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from .clauses import (
    Channel,
    Clause,
    ElementSetClause,
    EqualityClause,
    RawClause,
    SearchClause,
    SetClause,
    fold_clauses,
)
from .config import DEFAULT_CONFIG, ListQueryConfig
from .exceptions import FilterParseError
from .params import (
    IN_LIST,
    IN_LIST_ARR_OF_OBJ,
    MONGO_QUERY,
    NOT_IN_LIST,
    NOT_IN_LIST_ARR_OF_OBJ,
    RESERVED_KEYS,
    SEARCH,
    check_field_name,
    first_value,
)

logger = logging.getLogger("mongo_list_query.predicate")

# Server-side JavaScript is never accepted from callers.
_FORBIDDEN_OPERATORS = frozenset({"$where", "$function", "$accumulator"})
_LOGICAL_OPERATORS = frozenset({"$and", "$or", "$nor"})
_TOP_LEVEL_OPERATORS = _LOGICAL_OPERATORS | {"$expr", "$text", "$comment"}


def coerce_value(s: Any) -> Any:
    """Parse a query string scalar to bool, None, int, float or str."""
    if not isinstance(s, str):
        return s
    lowered = s.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if lowered == "null":
        return None
    try:
        return int(s)
    except ValueError:
        pass
    try:
        return float(s)
    except ValueError:
        pass
    return s


def validate_raw_predicate(predicate: Mapping[str, Any]) -> None:
    """Structural checks for a caller-supplied Mongo predicate.

    The predicate is accepted as a store-native filter document. Top-level
    ``$`` keys must be logical (``$and``, ``$or``, ``$nor``) or one of
    ``$expr``, ``$text``, ``$comment``; logical operators must hold a
    non-empty list of objects; ``$where``, ``$function`` and ``$accumulator``
    are rejected at any depth.

    Raises:
        FilterParseError: The predicate fails any of the checks.
    """
    _reject_forbidden(predicate)
    _validate_predicate(predicate)


def _reject_forbidden(value: Any) -> None:
    if isinstance(value, Mapping):
        for key, item in value.items():
            if key in _FORBIDDEN_OPERATORS:
                raise FilterParseError(
                    f"Operator {key!r} is not allowed in mongoQuery",
                    param=MONGO_QUERY,
                )
            _reject_forbidden(item)
    elif isinstance(value, list):
        for item in value:
            _reject_forbidden(item)


def _validate_predicate(predicate: Mapping[str, Any]) -> None:
    for key, value in predicate.items():
        if not isinstance(key, str) or not key:
            raise FilterParseError(
                "mongoQuery keys must be non-empty strings", param=MONGO_QUERY
            )
        if key.startswith("$") and key not in _TOP_LEVEL_OPERATORS:
            raise FilterParseError(
                f"Unsupported top-level operator {key!r} in mongoQuery",
                param=MONGO_QUERY,
            )
        if key in _LOGICAL_OPERATORS:
            if not (
                isinstance(value, list)
                and value
                and all(isinstance(item, Mapping) for item in value)
            ):
                raise FilterParseError(
                    f"{key} in mongoQuery must hold a non-empty list of objects",
                    param=MONGO_QUERY,
                )
            for item in value:
                _validate_predicate(item)


class PredicateBuilder:
    """Build the merged Mongo predicate for a list query.

    Channels and their precedence are described in :mod:`.clauses`.
    """

    def __init__(self, config: ListQueryConfig = DEFAULT_CONFIG) -> None:
        self._config = config

    def build(
        self,
        base_filter: Mapping[str, Any] | None,
        raw: Mapping[str, Any],
        search_fields: Iterable[str] = (),
    ) -> dict[str, Any]:
        """Return the merged predicate. Raises FilterParseError on bad input."""
        predicate = fold_clauses(self.clauses(base_filter, raw, search_fields))
        logger.debug("Built list predicate %s", predicate)
        return predicate

    def clauses(
        self,
        base_filter: Mapping[str, Any] | None,
        raw: Mapping[str, Any],
        search_fields: Iterable[str] = (),
    ) -> list[Clause]:
        """Collect the clauses of every channel, unordered."""
        clauses: list[Clause] = []
        clauses.extend(self._equality_clauses(raw))
        clauses.extend(
            EqualityClause(key, value, Channel.BASE)
            for key, value in (base_filter or {}).items()
        )
        clauses.extend(self._set_clauses(raw, IN_LIST, negate=False))
        clauses.extend(self._set_clauses(raw, NOT_IN_LIST, negate=True))
        clauses.extend(self._element_clauses(raw, IN_LIST_ARR_OF_OBJ, negate=False))
        clauses.extend(
            self._element_clauses(raw, NOT_IN_LIST_ARR_OF_OBJ, negate=True)
        )
        search = self._search_clause(raw, search_fields)
        if search is not None:
            clauses.append(search)
        clauses.extend(self._raw_clauses(raw))
        return clauses

    def _coerce(self, value: Any) -> Any:
        return coerce_value(value) if self._config.coerce_values else value

    def _equality_clauses(self, raw: Mapping[str, Any]) -> list[Clause]:
        out: list[Clause] = []
        for key, value in raw.items():
            if key in RESERVED_KEYS or key == "":
                continue
            check_field_name(key, param=key)
            if isinstance(value, (list, tuple)):
                if any(isinstance(v, Mapping) for v in value):
                    raise FilterParseError(
                        f"Nested values are not allowed for filter field {key!r}",
                        param=key,
                    )
                values = tuple(self._coerce(v) for v in dict.fromkeys(value))
                if values:
                    out.append(
                        EqualityClause(key, values if len(values) > 1 else values[0])
                    )
            elif isinstance(value, Mapping):
                raise FilterParseError(
                    f"Nested values are not allowed for filter field {key!r}",
                    param=key,
                )
            else:
                out.append(EqualityClause(key, self._coerce(value)))
        return out

    def _csv_values(self, value: Any, param: str) -> tuple[Any, ...]:
        parts = value if isinstance(value, (list, tuple)) else [value]
        items: list[str] = []
        for part in parts:
            if not isinstance(part, str):
                raise FilterParseError(
                    f"{param} values must be comma-separated strings", param=param
                )
            items.extend(item for item in part.split(",") if item)
        return tuple(self._coerce(item) for item in dict.fromkeys(items))

    def _channel_mapping(
        self, raw: Mapping[str, Any], param: str
    ) -> Mapping[str, Any]:
        mapping = raw.get(param)
        if mapping is None:
            return {}
        if not isinstance(mapping, Mapping):
            raise FilterParseError(
                f"{param} expects {param}[field]=a,b parameters", param=param
            )
        return mapping

    def _set_clauses(
        self, raw: Mapping[str, Any], param: str, *, negate: bool
    ) -> list[Clause]:
        return [
            SetClause(
                check_field_name(field, param=param),
                self._csv_values(value, param),
                negate,
            )
            for field, value in self._channel_mapping(raw, param).items()
        ]

    def _element_clauses(
        self, raw: Mapping[str, Any], param: str, *, negate: bool
    ) -> list[Clause]:
        grouped: dict[str, list[tuple[str, tuple[Any, ...]]]] = {}
        for key, value in self._channel_mapping(raw, param).items():
            array_field, sep, element_field = str(key).partition(".")
            if not sep or not array_field or not element_field:
                raise FilterParseError(
                    f"{param} key {key!r} must look like arrayField.elementField",
                    param=param,
                )
            check_field_name(array_field, param=param)
            check_field_name(element_field, param=param)
            grouped.setdefault(array_field, []).append(
                (element_field, self._csv_values(value, param))
            )
        return [
            ElementSetClause(array_field, tuple(conditions), negate)
            for array_field, conditions in grouped.items()
        ]

    def _search_clause(
        self, raw: Mapping[str, Any], search_fields: Iterable[str]
    ) -> SearchClause | None:
        term = first_value(raw.get(SEARCH))
        term = term.strip() if isinstance(term, str) else ""
        fields = tuple(
            dict.fromkeys(check_field_name(f, param=SEARCH) for f in search_fields)
        )
        if not term or not fields:
            return None
        return SearchClause(fields, term)

    def _raw_clauses(self, raw: Mapping[str, Any]) -> list[Clause]:
        value = first_value(raw.get(MONGO_QUERY))
        if value is None or value == "":
            return []
        try:
            if isinstance(value, str):
                value = json.loads(value)
            if not isinstance(value, Mapping):
                raise FilterParseError(
                    "mongoQuery must be a JSON object", param=MONGO_QUERY
                )
            validate_raw_predicate(value)
        except json.JSONDecodeError as e:
            raise FilterParseError(
                f"mongoQuery is not valid JSON: {e.msg}", param=MONGO_QUERY
            ) from e
        except RecursionError as e:
            raise FilterParseError(
                "mongoQuery is nested too deeply", param=MONGO_QUERY
            ) from e
        return [RawClause(key, item) for key, item in value.items()]


def build_predicate(
    base_filter: Mapping[str, Any] | None,
    raw: Mapping[str, Any],
    search_fields: Iterable[str] = (),
    config: ListQueryConfig = DEFAULT_CONFIG,
) -> dict[str, Any]:
    """Shortcut for :meth:`PredicateBuilder.build`."""
    return PredicateBuilder(config).build(base_filter, raw, search_fields)
