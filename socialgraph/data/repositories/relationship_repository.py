"""Relationship repository for data access.

Friend lists live on ``users`` records as a multi-relation ``friends`` field.
Pending requests live in ``friend_requests``, one record per
(sender, receiver) pair; a unique index on that pair is the write-time
precondition that rejects duplicate sends. Writes that must keep both friend
lists symmetric go through the PocketBase batch endpoint as one transaction."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from pocketbase import PocketBase
from pocketbase.client import ClientResponseError  # type: ignore[attr-defined]

from ...errors import DuplicateRequest, TargetNotFound, TransientStorageFailure
from ...models import PendingRequest
from .base import (
    any_of,
    call_pb,
    is_not_found,
    is_unique_violation,
    quote,
    record_datetime,
    record_url,
    relation_ids,
    run_batch,
)

logger = logging.getLogger(__name__)

USERS = "users"
FRIEND_REQUESTS = "friend_requests"

# Unviewed first, newest first within each group
PENDING_SORT = "viewed,-created"


class RelationshipRepository:
    """Repository for friend lists and pending friend requests"""

    BATCH_SIZE = 100

    def __init__(self, pb_client: PocketBase) -> None:
        self.pb = pb_client

    # ========================================
    # Friend lists
    # ========================================

    async def get_friend_ids(self, account_id: str) -> set[str]:
        try:
            record = await call_pb(
                self.pb.collection(USERS).get_one,
                account_id,
                {"fields": "id,friends"},
            )
        except ClientResponseError as e:
            if is_not_found(e):
                return set()
            raise
        return relation_ids(getattr(record, "friends", None))

    async def get_friend_sets(self, account_ids: Iterable[str]) -> dict[str, set[str]]:
        ids = sorted(set(account_ids))
        friend_sets: dict[str, set[str]] = {}
        for i in range(0, len(ids), self.BATCH_SIZE):
            batch_ids = ids[i : i + self.BATCH_SIZE]
            records = await call_pb(
                self.pb.collection(USERS).get_full_list,
                query_params={"filter": any_of("id", batch_ids), "fields": "id,friends"},
            )
            for record in records:
                friend_sets[record.id] = relation_ids(getattr(record, "friends", None))
        return friend_sets

    async def are_friends(self, account_id: str, other_id: str) -> bool:
        result = await call_pb(
            self.pb.collection(USERS).get_list,
            1,
            1,
            {"filter": f"id = {quote(account_id)} && friends ~ {quote(other_id)}", "fields": "id"},
        )
        return bool(result.total_items)

    async def remove_friendship(self, account_id: str, other_id: str) -> None:
        try:
            await run_batch(
                self.pb,
                [
                    {"method": "PATCH", "url": record_url(USERS, account_id), "body": {"friends-": other_id}},
                    {"method": "PATCH", "url": record_url(USERS, other_id), "body": {"friends-": account_id}},
                ],
            )
        except ClientResponseError as e:
            if e.status in (400, 404):
                raise TargetNotFound() from e
            raise
        logger.info(f"Removed friendship {account_id} <-> {other_id}")

    async def purge_from_friend_lists(self, account_id: str) -> int:
        records = await call_pb(
            self.pb.collection(USERS).get_full_list,
            query_params={"filter": f"friends ~ {quote(account_id)}", "fields": "id"},
        )
        purged = 0
        for record in records:
            if record.id == account_id:
                continue
            try:
                await call_pb(self.pb.collection(USERS).update, record.id, {"friends-": account_id})
                purged += 1
            except ClientResponseError as e:
                if not is_not_found(e):
                    raise
        logger.info(f"Pulled {account_id} from {purged} friend lists")
        return purged

    # ========================================
    # Pending requests
    # ========================================

    async def _find_pending(self, sender_id: str, receiver_id: str) -> Any | None:
        result = await call_pb(
            self.pb.collection(FRIEND_REQUESTS).get_list,
            1,
            1,
            {"filter": f"sender = {quote(sender_id)} && receiver = {quote(receiver_id)}"},
        )
        return result.items[0] if result.items else None

    async def has_pending(self, sender_id: str, receiver_id: str) -> bool:
        return await self._find_pending(sender_id, receiver_id) is not None

    async def list_pending(self, receiver_id: str) -> list[PendingRequest]:
        records = await call_pb(
            self.pb.collection(FRIEND_REQUESTS).get_full_list,
            query_params={"filter": f"receiver = {quote(receiver_id)}", "sort": PENDING_SORT},
        )
        return [self._map_from_db(record) for record in records]

    async def count_unviewed_pending(self, receiver_id: str) -> int:
        result = await call_pb(
            self.pb.collection(FRIEND_REQUESTS).get_list,
            1,
            1,
            {"filter": f"receiver = {quote(receiver_id)} && viewed = false", "fields": "id"},
        )
        return int(result.total_items)

    async def add_pending(self, sender_id: str, receiver_id: str) -> PendingRequest:
        try:
            record = await call_pb(
                self.pb.collection(FRIEND_REQUESTS).create,
                {"sender": sender_id, "receiver": receiver_id, "viewed": False},
            )
        except ClientResponseError as e:
            if is_unique_violation(e):
                raise DuplicateRequest() from e
            if e.status == 400:
                # Relation validation fails when the receiver vanished after the existence check
                raise TargetNotFound() from e
            raise
        logger.info(f"Friend request stored: {sender_id} -> {receiver_id}")
        return self._map_from_db(record)

    async def remove_pending(self, sender_id: str, receiver_id: str) -> bool:
        record = await self._find_pending(sender_id, receiver_id)
        if record is None:
            return False
        try:
            await call_pb(self.pb.collection(FRIEND_REQUESTS).delete, record.id)
        except ClientResponseError as e:
            if is_not_found(e):
                return False
            raise
        return True

    async def mark_pending_viewed(self, receiver_id: str) -> int:
        records = await call_pb(
            self.pb.collection(FRIEND_REQUESTS).get_full_list,
            query_params={"filter": f"receiver = {quote(receiver_id)} && viewed = false", "fields": "id"},
        )
        marked = 0
        for record in records:
            try:
                await call_pb(self.pb.collection(FRIEND_REQUESTS).update, record.id, {"viewed": True})
                marked += 1
            except ClientResponseError as e:
                if not is_not_found(e):
                    raise
        return marked

    async def accept_pending(self, sender_id: str, receiver_id: str) -> bool:
        record = await self._find_pending(sender_id, receiver_id)
        if record is None:
            return False
        requests = [
            {"method": "DELETE", "url": record_url(FRIEND_REQUESTS, record.id)},
            {"method": "PATCH", "url": record_url(USERS, receiver_id), "body": {"friends+": sender_id}},
            {"method": "PATCH", "url": record_url(USERS, sender_id), "body": {"friends+": receiver_id}},
        ]
        # A crossed request in the other direction must not outlive the friendship
        reverse = await self._find_pending(receiver_id, sender_id)
        if reverse is not None:
            requests.append({"method": "DELETE", "url": record_url(FRIEND_REQUESTS, reverse.id)})
        try:
            await run_batch(self.pb, requests)
        except ClientResponseError as e:
            # The whole batch rolled back; a vanished request means another
            # accept, reject or cancel won the race.
            if e.status in (400, 404) and not await self.has_pending(sender_id, receiver_id):
                logger.info(f"Friend request {sender_id} -> {receiver_id} disappeared during accept")
                return False
            raise TransientStorageFailure(f"Accept transaction failed: {e}") from e
        return True

    async def purge_pending_for(self, account_id: str) -> int:
        records = await call_pb(
            self.pb.collection(FRIEND_REQUESTS).get_full_list,
            query_params={
                "filter": f"sender = {quote(account_id)} || receiver = {quote(account_id)}",
                "fields": "id",
            },
        )
        purged = 0
        for record in records:
            try:
                await call_pb(self.pb.collection(FRIEND_REQUESTS).delete, record.id)
                purged += 1
            except ClientResponseError as e:
                if not is_not_found(e):
                    raise
        logger.info(f"Deleted {purged} pending requests involving {account_id}")
        return purged

    def _map_from_db(self, record: Any) -> PendingRequest:
        return PendingRequest(
            id=record.id,
            sender_id=str(getattr(record, "sender", "")),
            receiver_id=str(getattr(record, "receiver", "")),
            viewed=bool(getattr(record, "viewed", False)),
            created=record_datetime(record),
        )
