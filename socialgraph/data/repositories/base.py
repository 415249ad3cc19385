"""Shared PocketBase helpers for the repositories.

The PocketBase SDK is synchronous; every call goes through ``call_pb`` so it
runs in a worker thread and storage failures surface as social graph errors."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any, TypeVar

from pocketbase.client import ClientResponseError  # type: ignore[attr-defined]

from ...errors import TransientStorageFailure
from ...logging_config import TRACE

logger = logging.getLogger(__name__)

T = TypeVar("T")

BATCH_PATH = "/api/batch"


async def call_pb(fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run a blocking PocketBase SDK call off the event loop.

    Lost connections (status 0), server errors and rate limiting are raised
    as TransientStorageFailure. Every other ClientResponseError propagates so
    the repository can interpret it.
    """
    try:
        return await asyncio.to_thread(fn, *args, **kwargs)
    except ClientResponseError as e:
        if is_transient(e):
            logger.error(f"PocketBase unavailable ({e.status}): {e}")
            raise TransientStorageFailure(f"Document store unavailable: {e}") from e
        raise


def is_transient(error: ClientResponseError) -> bool:
    return error.status == 0 or error.status == 429 or error.status >= 500


def is_not_found(error: ClientResponseError) -> bool:
    return error.status == 404


def is_unique_violation(error: ClientResponseError) -> bool:
    """Detect a unique index violation in a PocketBase validation error."""
    if error.status != 400:
        return False
    try:
        payload = json.dumps(error.data)
    except (TypeError, ValueError):
        payload = str(error.data)
    return "validation_not_unique" in payload


def quote(value: str) -> str:
    """Quote a value for use inside a PocketBase filter expression."""
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def any_of(field: str, values: list[str]) -> str:
    """Build an OR filter matching any of the values."""
    return " || ".join(f"{field} = {quote(v)}" for v in values)


def relation_ids(value: Any) -> set[str]:
    """Normalize a relation field value (id, list of ids or empty) to a set."""
    if not value:
        return set()
    if isinstance(value, str):
        return {value}
    return {str(v) for v in value if v}


def record_datetime(record: Any, field: str = "created") -> datetime | None:
    value = getattr(record, field, None)
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def collection_url(collection: str) -> str:
    return f"/api/collections/{collection}/records"


def record_url(collection: str, record_id: str) -> str:
    return f"/api/collections/{collection}/records/{record_id}"


async def run_batch(pb: Any, requests: list[dict[str, Any]]) -> Any:
    """Send sub-requests through the PocketBase batch endpoint.

    The server applies all sub-requests in a single transaction: either every
    write commits or none does.
    """
    logger.debug(f"Sending batch of {len(requests)} writes")
    logger.log(TRACE, f"Batch payload: {requests}")
    return await call_pb(pb.send, BATCH_PATH, {"method": "POST", "body": {"requests": requests}})
