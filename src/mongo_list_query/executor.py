"""ListQueryExecutor: one count and one fetch per list query."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from .exceptions import StoreError

if TYPE_CHECKING:
    from .store import IDocumentStore

logger = logging.getLogger("mongo_list_query.executor")


class ListQueryExecutor:
    """Run the count and the page fetch for a merged predicate.

    Both operations receive the same predicate and run concurrently. The
    result is only returned once both finish; if either fails, or the caller
    is cancelled, the other is cancelled as well.
    """

    def __init__(self, store: IDocumentStore) -> None:
        self._store = store

    async def execute(
        self,
        predicate: Mapping[str, Any],
        sort: Sequence[tuple[str, Any]],
        projection: Mapping[str, Any] | None,
        skip: int,
        limit: int,
    ) -> tuple[list[dict[str, Any]], int]:
        """Return ``(documents, total_count)``.

        Raises:
            StoreError: Count or fetch failed. Any other exception raised by
                the store is wrapped in a StoreError.
        """
        start = time.perf_counter()
        count_task = asyncio.ensure_future(self._store.count(predicate))
        find_task = asyncio.ensure_future(
            self._store.find(
                predicate,
                projection=projection,
                sort=sort,
                skip=skip,
                limit=limit,
            )
        )
        tasks = (count_task, find_task)
        try:
            total, documents = await asyncio.gather(*tasks)
        except StoreError:
            await _cancel(tasks)
            raise
        except asyncio.CancelledError:
            await _cancel(tasks)
            raise
        except Exception as e:
            await _cancel(tasks)
            raise StoreError(str(e)) from e

        documents = list(documents)[:limit]
        total = int(total)
        if total < len(documents):
            logger.debug(
                "Count %d below fetched page size %d; using page size",
                total,
                len(documents),
            )
            total = len(documents)
        elapsed = (time.perf_counter() - start) * 1000
        logger.debug(
            "List query fetched %d of %d documents in %.2fms",
            len(documents),
            total,
            elapsed,
        )
        return documents, total


async def _cancel(tasks: Sequence[asyncio.Future[Any]]) -> None:
    pending = [t for t in tasks if not t.done()]
    for task in pending:
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)
    # Mark sibling failures as retrieved.
    for task in tasks:
        if task.done() and not task.cancelled():
            task.exception()
