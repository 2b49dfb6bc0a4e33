"""List-query exceptions."""

from __future__ import annotations


class ListQueryError(Exception):
    """Root exception for the list-query engine."""


class ValidationError(ListQueryError):
    """Raised when caller-supplied query parameters are rejected.

    Carries structured errors: ``{param: [messages]}``.
    """

    def __init__(self, message: str, *, param: str | None = None) -> None:
        self.message = message
        self.param = param
        self.errors: dict[str, list[str]] = {param or "__root__": [message]}
        super().__init__(message)


class FilterParseError(ValidationError):
    """Raised when a filter parameter or query string is malformed."""


class PaginationError(ValidationError):
    """Raised when page, limit or skip is out of range."""


class StoreError(ListQueryError):
    """Raised when the document store fails to count or fetch."""


class StoreConnectionError(StoreError):
    """Raised when the store client cannot be created or is not connected."""
