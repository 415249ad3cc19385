"""Storage protocols consumed by the social graph core.

The workflow, resolver, recommendation, fan-out and cascade modules only
depend on these contracts. PocketBase repositories implement them for
production and an in-memory backend implements them for tests."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from ..models import Account, Comment, Notification, PendingRequest, Post


class AccountDirectory(Protocol):
    """Account existence and profile lookups"""

    async def exists(self, account_id: str) -> bool:
        """Return True if the account record exists"""
        ...

    async def get_account(self, account_id: str) -> Account | None:
        """Fetch one account, None when missing"""
        ...

    async def get_accounts(self, account_ids: Iterable[str]) -> dict[str, Account]:
        """Fetch several accounts keyed by id; missing ids are omitted"""
        ...

    async def delete_account(self, account_id: str) -> bool:
        """Delete the account record; False when it was already gone"""
        ...


class RelationshipStore(Protocol):
    """Friend lists and pending friend requests"""

    async def get_friend_ids(self, account_id: str) -> set[str]:
        """Return the account's friend list"""
        ...

    async def get_friend_sets(self, account_ids: Iterable[str]) -> dict[str, set[str]]:
        """Return the friend lists of several accounts keyed by id"""
        ...

    async def are_friends(self, account_id: str, other_id: str) -> bool:
        """Return True if other_id is in account_id's friend list"""
        ...

    async def has_pending(self, sender_id: str, receiver_id: str) -> bool:
        """Return True if receiver has a pending entry from sender"""
        ...

    async def list_pending(self, receiver_id: str) -> list[PendingRequest]:
        """Return the receiver's pending requests, unviewed first"""
        ...

    async def add_pending(self, sender_id: str, receiver_id: str) -> PendingRequest:
        """Append a pending entry conditionally.

        Raises DuplicateRequest when an entry from sender already exists at
        write time.
        """
        ...

    async def remove_pending(self, sender_id: str, receiver_id: str) -> bool:
        """Remove the matching pending entry; False when nothing matched"""
        ...

    async def mark_pending_viewed(self, receiver_id: str) -> int:
        """Mark every unviewed entry of the receiver as viewed"""
        ...

    async def accept_pending(self, sender_id: str, receiver_id: str) -> bool:
        """Remove the pending entry and friend both accounts as one atomic unit.

        Returns False, writing nothing, when no pending entry matched.
        """
        ...

    async def remove_friendship(self, account_id: str, other_id: str) -> None:
        """Remove each account from the other's friend list as one atomic unit"""
        ...

    async def purge_from_friend_lists(self, account_id: str) -> int:
        """Pull account_id from every other account's friend list"""
        ...

    async def purge_pending_for(self, account_id: str) -> int:
        """Delete every pending entry sent by or addressed to account_id"""
        ...

    async def count_unviewed_pending(self, receiver_id: str) -> int:
        """Count unviewed pending entries of the receiver"""
        ...


class ContentStore(Protocol):
    """Posts and comments, reduced to authorship and likes"""

    async def get_post(self, post_id: str) -> Post | None:
        ...

    async def get_comment(self, comment_id: str) -> Comment | None:
        ...

    async def add_post_like(self, post_id: str, user_id: str) -> bool:
        """Add user to the post's likes; False when already present"""
        ...

    async def add_comment_like(self, comment_id: str, user_id: str) -> bool:
        """Add user to the comment's likes; False when already present"""
        ...

    async def create_comment(self, post_id: str, author_id: str, content: str) -> Comment:
        ...

    async def delete_by_author(self, author_id: str) -> int:
        """Delete every post and comment authored by author_id"""
        ...

    async def pull_likes_by_user(self, user_id: str) -> int:
        """Remove user_id from the likes of every post and comment"""
        ...


class NotificationStore(Protocol):
    """Notification records addressed to accounts"""

    async def create(self, notification: Notification) -> Notification:
        ...

    async def list_for_user(self, user_id: str) -> list[Notification]:
        """Return the user's notifications, newest first"""
        ...

    async def mark_all_viewed(self, user_id: str) -> int:
        ...

    async def count_unviewed(self, user_id: str) -> int:
        ...

    async def delete_for_user(self, user_id: str) -> int:
        """Delete every notification addressed to user_id"""
        ...
