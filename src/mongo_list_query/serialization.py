"""BSON documents -> JSON-ready values for response envelopes."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from bson import Decimal128, ObjectId


def to_jsonable(value: Any) -> Any:
    """Convert BSON and Python types that ``json`` cannot encode.

    ``ObjectId``, ``UUID``, ``Decimal`` and ``Decimal128`` become strings;
    dates become ISO 8601 strings. Mappings and sequences are walked.
    """
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, Decimal128):
        return str(value.to_decimal())
    if isinstance(value, (Decimal, UUID)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def documents_to_jsonable(documents: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [to_jsonable(doc) for doc in documents]
