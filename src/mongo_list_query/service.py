"""List-query entry points: query params in, paginated envelope out.

Usage::

    connection = MongoConnectionManager(settings.mongo_url, database="app")
    await connection.connect()
    users = MongoDocumentStore(connection, "users")

    response = await get_all_documents(
        users,
        "page=2&limit=10&sort=-createdAt&q=john&inList[role]=admin,editor",
        base_filter={"active": True},
        search_fields=["name", "email"],
    )
    response.status_code  # 200
    response.body         # {"status": "success", "data": [...], "pageInfo": {...}}
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any, NamedTuple

from .config import DEFAULT_CONFIG, ListQueryConfig
from .exceptions import StoreError, ValidationError
from .executor import ListQueryExecutor
from .pagination import PageInfo, paginate
from .params import normalize
from .predicate import PredicateBuilder
from .projection import build_projection, build_sort, resolve_sort
from .query_string import QuerySource, parse_query
from .serialization import documents_to_jsonable

if TYPE_CHECKING:
    from .store import IDocumentStore

logger = logging.getLogger("mongo_list_query.service")

LogSink = Callable[[int, str], None]


class ListResult(NamedTuple):
    data: list[dict[str, Any]]
    page_info: PageInfo


class ListResponse(NamedTuple):
    """HTTP status code and JSON-ready body."""

    status_code: int
    body: dict[str, Any]


async def list_documents(
    store: IDocumentStore,
    query: QuerySource,
    *,
    base_filter: Mapping[str, Any] | None = None,
    search_fields: Iterable[str] = (),
    config: ListQueryConfig = DEFAULT_CONFIG,
) -> ListResult:
    """Run a list query and return the page with its metadata.

    Every parameter is validated before the store is touched.

    Args:
        store: Store handle, typically a :class:`MongoDocumentStore`.
        query: Query string, ``(key, value)`` pairs or a parameter mapping.
        base_filter: Caller's own predicate (e.g. ``{"active": True}``);
            it outranks plain ``key=value`` parameters on the same field.
        search_fields: Fields matched by the ``q`` parameter.
        config: Defaults for page, limit, sort and value handling.

    Raises:
        ValidationError: A parameter was rejected.
        StoreError: The count or the fetch failed.
    """
    raw = parse_query(query)
    params = normalize(raw, config)
    predicate = PredicateBuilder(config).build(base_filter, raw, search_fields)
    sort = build_sort(
        resolve_sort(params.sort),
        id_field=config.id_field,
        tie_break=config.tie_break_on_id,
    )
    projection = build_projection(params.fields)

    documents, total = await ListQueryExecutor(store).execute(
        predicate, sort, projection, params.skip, params.limit
    )
    page_info = paginate(params.page, params.limit, params.skip, total)
    return ListResult(data=documents, page_info=page_info)


def success_envelope(result: ListResult) -> dict[str, Any]:
    return {
        "status": "success",
        "data": documents_to_jsonable(result.data),
        "pageInfo": result.page_info.model_dump(by_alias=True),
    }


async def get_all_documents(
    store: IDocumentStore,
    query: QuerySource,
    *,
    base_filter: Mapping[str, Any] | None = None,
    search_fields: Iterable[str] = (),
    config: ListQueryConfig = DEFAULT_CONFIG,
    log: LogSink | None = None,
) -> ListResponse:
    """Run a list query and wrap the outcome in a response envelope.

    * success: ``200 {"status": "success", "data": [...], "pageInfo": {...}}``
    * rejected parameters: ``400 {"status": "error", "message": ...}``
    * store failure: ``500 {"error": ...}``, logged once through ``log``

    ``log`` receives ``(level, message)``; it defaults to this module's
    logger.
    """
    sink = log or logger.log
    try:
        result = await list_documents(
            store,
            query,
            base_filter=base_filter,
            search_fields=search_fields,
            config=config,
        )
    except ValidationError as e:
        sink(logging.WARNING, f"List query rejected: {e.message}")
        return ListResponse(400, {"status": "error", "message": e.message})
    except StoreError as e:
        sink(logging.ERROR, str(e))
        return ListResponse(500, {"error": str(e)})
    return ListResponse(200, success_envelope(result))
