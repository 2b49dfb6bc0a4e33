"""ListQueryConfig: defaults applied when list-query parameters are absent."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ListQueryConfig:
    """Per-endpoint list-query settings.

    Args:
        default_page: Page used when ``page`` is absent or not numeric.
        default_limit: Page size used when ``limit`` is absent or not numeric.
        max_limit: Upper bound for ``limit``; larger values are clamped.
            ``None`` leaves ``limit`` unbounded.
        default_sort: Sort used when ``sort`` is absent or blank.
        id_field: Identity field of stored documents.
        coerce_values: Convert ``true``/``false``/``null`` and numerals in
            equality and set filters to native values.
        tie_break_on_id: Append ``id_field`` as a secondary sort key so that
            documents sharing the primary key come back in a stable order.
    """

    default_page: int = 1
    default_limit: int = 20
    max_limit: int | None = None
    default_sort: str = "-createdAt"
    id_field: str = "_id"
    coerce_values: bool = False
    tie_break_on_id: bool = True

    def __post_init__(self) -> None:
        if self.default_page < 1:
            raise ValueError("default_page must be >= 1")
        if self.default_limit < 1:
            raise ValueError("default_limit must be >= 1")
        if self.max_limit is not None and self.max_limit < self.default_limit:
            raise ValueError("max_limit must be >= default_limit")


DEFAULT_CONFIG = ListQueryConfig()
