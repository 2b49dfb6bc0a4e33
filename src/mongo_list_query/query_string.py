"""QueryStringParser: query string / pairs -> nested parameter mapping."""

from __future__ import annotations

import copy
import re
from collections.abc import Iterable, Iterator, Mapping
from typing import Any
from urllib.parse import parse_qsl

from .exceptions import FilterParseError

QuerySource = str | Mapping[str, Any] | Iterable[tuple[str, Any]]

_KEY_RE = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])*)$")
_SEGMENT_RE = re.compile(r"\[([^\[\]]*)\]")
_MISSING = object()


class QueryStringParser:
    """Fold bracket-notation parameters into nested mappings.

    ``inList[email]=a,b`` becomes ``{"inList": {"email": "a,b"}}``,
    ``a[b][c]=1`` nests deeper, and ``tag[]=x&tag[]=y`` collects a list.
    A key repeated without brackets also collects a list, in arrival order.
    """

    def parse(self, source: QuerySource) -> dict[str, Any]:
        """Return the nested parameter mapping for ``source``.

        Args:
            source: Raw query string (a leading ``?`` is ignored), an iterable
                of ``(key, value)`` pairs such as Starlette's
                ``query_params.multi_items()``, or a mapping whose values may
                already be lists or nested mappings.

        Raises:
            FilterParseError: A key is used both as a plain value and as the
                parent of bracketed keys.
        """
        result: dict[str, Any] = {}
        for key, value in self._pairs(source):
            self._assign(result, self._split_key(key), value, key)
        return result

    def _pairs(self, source: QuerySource) -> Iterator[tuple[str, Any]]:
        if isinstance(source, str):
            yield from parse_qsl(source.lstrip("?"), keep_blank_values=True)
        elif isinstance(source, Mapping):
            for key, value in source.items():
                if isinstance(value, (list, tuple)):
                    for item in value:
                        yield str(key), item
                else:
                    yield str(key), value
        else:
            for key, value in source:
                yield str(key), value

    def _split_key(self, key: str) -> list[str]:
        match = _KEY_RE.match(key)
        if match is None:
            return [key]
        return [match.group(1), *_SEGMENT_RE.findall(match.group(2))]

    def _assign(
        self, target: dict[str, Any], path: list[str], value: Any, raw_key: str
    ) -> None:
        force_list = len(path) > 1 and path[-1] == ""
        if force_list:
            path = path[:-1]
        *parents, leaf = path
        node = target
        for segment in parents:
            if segment == "":
                raise FilterParseError(
                    f"Unsupported list nesting in parameter {raw_key!r}",
                    param=path[0],
                )
            child = node.setdefault(segment, {})
            if not isinstance(child, dict):
                raise FilterParseError(
                    f"Parameter {path[0]!r} mixes a plain value with nested keys",
                    param=path[0],
                )
            node = child
        existing = node.get(leaf, _MISSING)
        if isinstance(value, Mapping):
            value = copy.deepcopy(dict(value))
        if existing is _MISSING:
            node[leaf] = [value] if force_list else value
        elif isinstance(existing, dict):
            raise FilterParseError(
                f"Parameter {path[0]!r} mixes a plain value with nested keys",
                param=path[0],
            )
        elif isinstance(existing, list):
            existing.append(value)
        else:
            node[leaf] = [existing, value]


def parse_query(source: QuerySource) -> dict[str, Any]:
    """Shortcut for :meth:`QueryStringParser.parse`."""
    return QueryStringParser().parse(source)
