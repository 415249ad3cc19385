"""Account repository for data access.

Handles lookups and deletion of ``users`` records."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from pocketbase import PocketBase
from pocketbase.client import ClientResponseError  # type: ignore[attr-defined]

from ...models import Account
from .base import any_of, call_pb, is_not_found, quote, relation_ids

logger = logging.getLogger(__name__)

USERS = "users"


class AccountRepository:
    """Repository for Account data access"""

    # Batch size for id queries to avoid overly long filter strings
    BATCH_SIZE = 100

    def __init__(self, pb_client: PocketBase) -> None:
        self.pb = pb_client

    async def exists(self, account_id: str) -> bool:
        result = await call_pb(
            self.pb.collection(USERS).get_list,
            1,
            1,
            {"filter": f"id = {quote(account_id)}", "fields": "id"},
        )
        return bool(result.total_items)

    async def get_account(self, account_id: str) -> Account | None:
        try:
            record = await call_pb(self.pb.collection(USERS).get_one, account_id)
        except ClientResponseError as e:
            if is_not_found(e):
                return None
            raise
        return self._map_from_db(record)

    async def get_accounts(self, account_ids: Iterable[str]) -> dict[str, Account]:
        ids = sorted(set(account_ids))
        accounts: dict[str, Account] = {}
        for i in range(0, len(ids), self.BATCH_SIZE):
            batch_ids = ids[i : i + self.BATCH_SIZE]
            records = await call_pb(
                self.pb.collection(USERS).get_full_list,
                query_params={"filter": any_of("id", batch_ids)},
            )
            for record in records:
                account = self._map_from_db(record)
                accounts[account.id] = account
        return accounts

    async def delete_account(self, account_id: str) -> bool:
        try:
            await call_pb(self.pb.collection(USERS).delete, account_id)
        except ClientResponseError as e:
            if is_not_found(e):
                logger.info(f"Account {account_id} already deleted")
                return False
            raise
        logger.info(f"Deleted account record {account_id}")
        return True

    def _map_from_db(self, record: Any) -> Account:
        return Account(
            id=record.id,
            first_name=str(getattr(record, "first_name", "") or ""),
            last_name=str(getattr(record, "last_name", "") or ""),
            email=str(getattr(record, "email", "") or ""),
            is_admin=bool(getattr(record, "is_admin", False)),
            friends=relation_ids(getattr(record, "friends", None)),
        )
