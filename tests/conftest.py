"""Shared fixtures: an in-memory Mongo store seeded with users."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

import pytest

from mongo_list_query import MongoConnectionManager, MongoDocumentStore

pytest_plugins = ["pytest_asyncio"]

_EPOCH = datetime(2024, 1, 1)


def _user(i: int, **overrides: Any) -> dict[str, Any]:
    doc: dict[str, Any] = {
        "name": f"User {i}",
        "email": f"user{i}@example.com",
        "role": "admin" if i % 3 == 0 else "user",
        "active": i % 2 == 0,
        "createdAt": _EPOCH + timedelta(days=i),
        "addresses": [{"city": "Athens" if i % 2 else "Berlin", "zip": f"{i:05d}"}],
    }
    doc.update(overrides)
    return doc


@pytest.fixture
def mock_connection():
    """Connection manager backed by mongomock-motor instead of a server."""
    from mongomock_motor import AsyncMongoMockClient

    connection = MongoConnectionManager(database="test_db")
    connection._client = AsyncMongoMockClient(default_database_name="test_db")
    return connection


@pytest.fixture
async def users_store(mock_connection):
    """Store over a ``users`` collection holding 25 users (User 0 .. User 24)."""
    store = MongoDocumentStore(mock_connection, "users")
    await mock_connection.collection("users").insert_many(
        [_user(i) for i in range(25)]
    )
    return store


class RecordingStore:
    """IDocumentStore double that records calls and can fail on demand."""

    def __init__(
        self,
        documents: list[dict[str, Any]] | None = None,
        total: int | None = None,
        *,
        count_error: Exception | None = None,
        find_error: Exception | None = None,
    ) -> None:
        self.documents = documents or []
        self.total = len(self.documents) if total is None else total
        self.count_error = count_error
        self.find_error = find_error
        self.calls: list[tuple[str, Any]] = []

    async def count(self, predicate):
        self.calls.append(("count", predicate))
        if self.count_error is not None:
            raise self.count_error
        return self.total

    async def find(self, predicate, *, projection, sort, skip, limit):
        self.calls.append(
            (
                "find",
                {
                    "predicate": predicate,
                    "projection": projection,
                    "sort": sort,
                    "skip": skip,
                    "limit": limit,
                },
            )
        )
        if self.find_error is not None:
            raise self.find_error
        return list(self.documents)


@pytest.fixture
def recording_store():
    return RecordingStore
