"""Document store port and its Motor implementation."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from pymongo.errors import PyMongoError

from .exceptions import StoreError

if TYPE_CHECKING:
    from .connection import MongoConnectionManager


@runtime_checkable
class IDocumentStore(Protocol):
    """Read capabilities the list-query executor needs from a store."""

    async def count(self, predicate: Mapping[str, Any]) -> int:
        """Return the number of documents matching ``predicate``."""
        ...

    async def find(
        self,
        predicate: Mapping[str, Any],
        *,
        projection: Mapping[str, Any] | None,
        sort: Sequence[tuple[str, Any]],
        skip: int,
        limit: int,
    ) -> list[dict[str, Any]]:
        """Return one sorted, projected page of matching documents."""
        ...


class MongoDocumentStore:
    """:class:`IDocumentStore` over one Mongo collection."""

    def __init__(self, connection: MongoConnectionManager, collection: str) -> None:
        self._connection = connection
        self._collection_name = collection

    @property
    def collection_name(self) -> str:
        return self._collection_name

    def _collection(self) -> Any:
        return self._connection.collection(self._collection_name)

    async def count(self, predicate: Mapping[str, Any]) -> int:
        try:
            return int(await self._collection().count_documents(dict(predicate)))
        except PyMongoError as e:
            raise StoreError(str(e)) from e

    async def find(
        self,
        predicate: Mapping[str, Any],
        *,
        projection: Mapping[str, Any] | None,
        sort: Sequence[tuple[str, Any]],
        skip: int,
        limit: int,
    ) -> list[dict[str, Any]]:
        try:
            cursor = self._collection().find(
                dict(predicate),
                dict(projection) if projection else None,
                sort=list(sort) or None,
                skip=skip,
                limit=limit,
            )
            return [doc async for doc in cursor]
        except PyMongoError as e:
            raise StoreError(str(e)) from e
