"""Starlette / FastAPI helper for list endpoints.

Example:
    ```python
    from fastapi import FastAPI, Request
    from mongo_list_query.contrib.starlette import list_documents_response

    app = FastAPI()

    @app.get("/users")
    async def list_users(request: Request):
        return await list_documents_response(
            request,
            app.state.users_store,
            base_filter={"active": True},
            search_fields=["name", "email"],
        )
    ```
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from starlette.responses import JSONResponse

from ..config import DEFAULT_CONFIG, ListQueryConfig
from ..service import LogSink, get_all_documents

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from starlette.requests import Request

    from ..store import IDocumentStore


async def list_documents_response(
    request: Request,
    store: IDocumentStore,
    *,
    base_filter: Mapping[str, Any] | None = None,
    search_fields: Iterable[str] = (),
    config: ListQueryConfig = DEFAULT_CONFIG,
    log: LogSink | None = None,
) -> JSONResponse:
    """Run the list query described by ``request``'s query string."""
    response = await get_all_documents(
        store,
        request.query_params.multi_items(),
        base_filter=base_filter,
        search_fields=search_fields,
        config=config,
        log=log,
    )
    return JSONResponse(response.body, status_code=response.status_code)
