"""MongoConnectionManager: Motor client lifecycle, pooling, health check."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pymongo.errors import PyMongoError

from .exceptions import StoreConnectionError

if TYPE_CHECKING:
    from motor.motor_asyncio import (
        AsyncIOMotorClient,
        AsyncIOMotorCollection,
        AsyncIOMotorDatabase,
    )

logger = logging.getLogger("mongo_list_query.connection")


class MongoConnectionManager:
    """Own one Motor client for the process; hand out collections.

    Create it once at startup, ``await connect()``, and pass it to every
    :class:`~mongo_list_query.store.MongoDocumentStore`. The client's
    connection pool is shared by all stores built on this manager.
    """

    def __init__(
        self,
        url: str = "mongodb://localhost:27017",
        *,
        database: str | None = None,
        server_selection_timeout_ms: int = 5000,
        connect_timeout_ms: int = 10000,
        socket_timeout_ms: int | None = None,
        **kwargs: Any,
    ) -> None:
        self._url = url
        self._database = database
        self._server_selection_timeout_ms = server_selection_timeout_ms
        self._connect_timeout_ms = connect_timeout_ms
        self._socket_timeout_ms = socket_timeout_ms
        self._kwargs = kwargs
        self._client: AsyncIOMotorClient[Any] | None = None

    async def connect(self) -> AsyncIOMotorClient[Any]:
        """Create and cache the Motor client. Idempotent."""
        if self._client is not None:
            return self._client
        from motor.motor_asyncio import AsyncIOMotorClient

        options: dict[str, Any] = {
            "serverSelectionTimeoutMS": self._server_selection_timeout_ms,
            "connectTimeoutMS": self._connect_timeout_ms,
            **self._kwargs,
        }
        if self._socket_timeout_ms is not None:
            options["socketTimeoutMS"] = self._socket_timeout_ms
        try:
            self._client = AsyncIOMotorClient(self._url, **options)
        except (PyMongoError, ValueError, TypeError) as e:
            raise StoreConnectionError(str(e)) from e
        logger.info("Mongo client created for %s", self._database or "<default db>")
        return self._client

    @property
    def client(self) -> AsyncIOMotorClient[Any]:
        """Return the Motor client; raises if not connected."""
        if self._client is None:
            raise StoreConnectionError("Not connected; call connect() first")
        return self._client

    def database(self) -> AsyncIOMotorDatabase[Any]:
        """Configured database, or the one named in the connection URL."""
        return self.client.get_database(self._database)

    def collection(self, name: str) -> AsyncIOMotorCollection[Any]:
        return self.database().get_collection(name)

    def close(self) -> None:
        """Close the client (synchronous; Motor client.close() is sync)."""
        if self._client is not None:
            self._client.close()
            self._client = None
            logger.info("Mongo client closed")

    async def health_check(self) -> bool:
        """Ping the server; return True if reachable."""
        if self._client is None:
            return False
        try:
            await self._client.admin.command("ping")
        except PyMongoError:
            logger.warning("Mongo ping failed", exc_info=True)
            return False
        return True

    async def __aenter__(self) -> MongoConnectionManager:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()
