"""Pagination metadata for list responses."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .exceptions import PaginationError


class PageInfo(BaseModel):
    """Page metadata serialised with camelCase keys (``currentPage`` ...)."""

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    current_page: int = Field(ge=1)
    per_page: int = Field(gt=0)
    page_count: int = Field(ge=0)
    skip_count: int = Field(ge=0)
    item_count: int = Field(ge=0)
    has_next_page: bool
    has_previous_page: bool


def paginate(page: int, limit: int, skip: int, total: int) -> PageInfo:
    """Compute :class:`PageInfo` from the request and the matched count.

    ``page`` is reported as given, even when an explicit ``skip`` points
    elsewhere. With no matches there are no pages and neither boundary flag
    is set.

    Raises:
        PaginationError: ``limit`` is not positive, ``page`` is below 1 or
            ``skip`` is negative.
    """
    if limit <= 0:
        raise PaginationError("limit must be > 0", param="limit")
    if page < 1:
        raise PaginationError("page must be >= 1", param="page")
    if skip < 0:
        raise PaginationError("skip must be >= 0", param="skip")
    page_count = (total + limit - 1) // limit
    return PageInfo(
        current_page=page,
        per_page=limit,
        page_count=page_count,
        skip_count=skip,
        item_count=total,
        has_next_page=page < page_count,
        has_previous_page=total > 0 and page > 1,
    )
