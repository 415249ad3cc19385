"""Account deletion cascade.

Deleting an account runs four sweeps that keep every other document free of
references to it:

1. content: posts and comments authored by the account (and comments on
   its posts)
2. friend_lists: the account pulled from every other friend list
3. pending_requests: pending entries the account sent or received
4. likes: the account pulled from the likes of every post and comment

The sweeps touch disjoint fields and run concurrently. The deletion only
succeeds when all four complete; otherwise CascadeIncompleteFailure is
raised and the account record is kept so the deletion can be retried.
Sweeps that finished before a failure stay committed.

Notifications addressed to the deleted account are removed with it. When a
fan-out is given, producers already in flight are drained first so none of
them can address the account after the cleanup. Notifications of other
accounts that link to it are kept as history.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable

from .data.interfaces import AccountDirectory, ContentStore, NotificationStore, RelationshipStore
from .errors import CascadeIncompleteFailure, TargetNotFound
from .models import AuthorizationContext
from .notifications import NotificationFanout
from .workflow import require_authorized

logger = logging.getLogger(__name__)


class AccountDeletionCascade:
    """Orchestrates account deletion over narrow store interfaces."""

    def __init__(
        self,
        accounts: AccountDirectory,
        relationships: RelationshipStore,
        content: ContentStore,
        notifications: NotificationStore,
        fanout: NotificationFanout | None = None,
    ) -> None:
        self.accounts = accounts
        self.relationships = relationships
        self.content = content
        self.notifications = notifications
        self.fanout = fanout

    async def run_sweeps(self, account_id: str) -> dict[str, int]:
        """Run the four reference sweeps for account_id.

        Returns the number of documents each sweep touched.

        Raises:
            CascadeIncompleteFailure: one or more sweeps failed
        """
        sweeps: dict[str, Awaitable[int]] = {
            "content": self.content.delete_by_author(account_id),
            "friend_lists": self.relationships.purge_from_friend_lists(account_id),
            "pending_requests": self.relationships.purge_pending_for(account_id),
            "likes": self.content.pull_likes_by_user(account_id),
        }
        results = await asyncio.gather(*sweeps.values(), return_exceptions=True)

        counts: dict[str, int] = {}
        failed: list[str] = []
        for name, result in zip(sweeps, results, strict=True):
            if isinstance(result, BaseException):
                logger.error(f"Deletion sweep '{name}' failed for {account_id}: {type(result).__name__}: {result}")
                failed.append(name)
            else:
                counts[name] = result

        if failed:
            raise CascadeIncompleteFailure(failed)
        return counts

    async def delete_account(self, account_id: str, auth: AuthorizationContext) -> dict[str, int]:
        """Delete an account after removing every reference to it."""
        require_authorized(auth)
        if not await self.accounts.exists(account_id):
            raise TargetNotFound()

        logger.info(f"Deleting account {account_id}")
        counts = await self.run_sweeps(account_id)

        if self.fanout is not None:
            await self.fanout.drain()
        try:
            counts["notifications"] = await self.notifications.delete_for_user(account_id)
        except Exception as e:
            logger.error(f"Notification cleanup failed for {account_id}: {e}")
            raise CascadeIncompleteFailure(["notifications"]) from e

        await self.accounts.delete_account(account_id)
        logger.info(f"Account {account_id} deleted: {counts}")
        return counts
