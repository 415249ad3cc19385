"""Notification repository for data access."""

from __future__ import annotations

import logging
from typing import Any

from pocketbase import PocketBase
from pocketbase.client import ClientResponseError  # type: ignore[attr-defined]

from ...models import EntityLink, Notification
from .base import call_pb, is_not_found, quote, record_datetime

logger = logging.getLogger(__name__)

NOTIFICATIONS = "notifications"


class NotificationRepository:
    """Repository for Notification data access"""

    def __init__(self, pb_client: PocketBase) -> None:
        self.pb = pb_client

    async def create(self, notification: Notification) -> Notification:
        record = await call_pb(
            self.pb.collection(NOTIFICATIONS).create,
            {
                "user": notification.user_id,
                "links": [link.to_dict() for link in notification.links],
                "content": notification.content,
                "viewed": notification.viewed,
            },
        )
        return self._map_from_db(record)

    async def list_for_user(self, user_id: str) -> list[Notification]:
        records = await call_pb(
            self.pb.collection(NOTIFICATIONS).get_full_list,
            query_params={"filter": f"user = {quote(user_id)}", "sort": "-created"},
        )
        return [self._map_from_db(record) for record in records]

    async def count_unviewed(self, user_id: str) -> int:
        result = await call_pb(
            self.pb.collection(NOTIFICATIONS).get_list,
            1,
            1,
            {"filter": f"user = {quote(user_id)} && viewed = false", "fields": "id"},
        )
        return int(result.total_items)

    async def mark_all_viewed(self, user_id: str) -> int:
        return await self._for_each(
            f"user = {quote(user_id)} && viewed = false",
            lambda collection, record_id: collection.update(record_id, {"viewed": True}),
        )

    async def delete_for_user(self, user_id: str) -> int:
        deleted = await self._for_each(
            f"user = {quote(user_id)}",
            lambda collection, record_id: collection.delete(record_id),
        )
        logger.info(f"Deleted {deleted} notifications addressed to {user_id}")
        return deleted

    async def _for_each(self, filter_str: str, action: Any) -> int:
        collection = self.pb.collection(NOTIFICATIONS)
        records = await call_pb(collection.get_full_list, query_params={"filter": filter_str, "fields": "id"})
        touched = 0
        for record in records:
            try:
                await call_pb(action, collection, record.id)
                touched += 1
            except ClientResponseError as e:
                if not is_not_found(e):
                    raise
        return touched

    def _map_from_db(self, record: Any) -> Notification:
        raw_links = getattr(record, "links", None) or []
        links = []
        for raw in raw_links:
            if isinstance(raw, dict):
                links.append(EntityLink.from_dict(raw))
        return Notification(
            id=record.id,
            user_id=str(getattr(record, "user", "")),
            links=links,
            content=str(getattr(record, "content", "") or ""),
            viewed=bool(getattr(record, "viewed", False)),
            created=record_datetime(record),
        )
