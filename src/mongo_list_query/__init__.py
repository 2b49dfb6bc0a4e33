"""Map HTTP list-query parameters to MongoDB filter, sort, page and projection."""

from __future__ import annotations

from .clauses import (
    Channel,
    ElementSetClause,
    EqualityClause,
    RawClause,
    SearchClause,
    SetClause,
    fold_clauses,
)
from .config import ListQueryConfig
from .connection import MongoConnectionManager
from .exceptions import (
    FilterParseError,
    ListQueryError,
    PaginationError,
    StoreConnectionError,
    StoreError,
    ValidationError,
)
from .executor import ListQueryExecutor
from .pagination import PageInfo, paginate
from .params import RESERVED_KEYS, NormalizedParams, normalize
from .predicate import PredicateBuilder, build_predicate
from .projection import (
    SortDirection,
    SortKey,
    build_projection,
    build_sort,
    resolve_projection,
    resolve_sort,
)
from .query_string import QueryStringParser, parse_query
from .service import ListResponse, ListResult, get_all_documents, list_documents
from .store import IDocumentStore, MongoDocumentStore

__all__ = [
    # Entry points
    "get_all_documents",
    "list_documents",
    "ListResponse",
    "ListResult",
    "ListQueryConfig",
    # Stages
    "QueryStringParser",
    "parse_query",
    "NormalizedParams",
    "RESERVED_KEYS",
    "normalize",
    "PredicateBuilder",
    "build_predicate",
    "Channel",
    "EqualityClause",
    "SetClause",
    "ElementSetClause",
    "SearchClause",
    "RawClause",
    "fold_clauses",
    "SortDirection",
    "SortKey",
    "resolve_sort",
    "resolve_projection",
    "build_projection",
    "build_sort",
    "PageInfo",
    "paginate",
    # Store
    "IDocumentStore",
    "MongoDocumentStore",
    "MongoConnectionManager",
    "ListQueryExecutor",
    # Exceptions
    "ListQueryError",
    "ValidationError",
    "FilterParseError",
    "PaginationError",
    "StoreError",
    "StoreConnectionError",
]
