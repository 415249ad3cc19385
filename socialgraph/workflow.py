"""Friend request workflow.

Legal transitions per (sender, receiver) pair:

    NONE --send--> PENDING --accept--> FRIENDS --unfriend--> NONE
                   PENDING --reject/cancel--> NONE

Repeating an operation yields an error result, never corrupted state:
duplicate sends are rejected by the store's conditional write, and accept,
reject and cancel report RequestNotFound once the entry is gone.

Privileged operations take an explicit AuthorizationContext and refuse to
run before touching the store when it does not allow the caller.
"""

from __future__ import annotations

import asyncio
import logging

from .data.interfaces import AccountDirectory, RelationshipStore
from .errors import AlreadyFriend, AuthorizationDenied, RequestNotFound, SelfTarget, TargetNotFound
from .models import AuthorizationContext, PendingRequest
from .notifications import NotificationFanout

logger = logging.getLogger(__name__)


def require_authorized(auth: AuthorizationContext) -> None:
    if not auth.allowed:
        raise AuthorizationDenied()


class FriendRequestWorkflow:
    """Send, accept, reject, cancel and unfriend operations."""

    def __init__(
        self,
        relationships: RelationshipStore,
        accounts: AccountDirectory,
        notifier: NotificationFanout | None = None,
    ) -> None:
        self.relationships = relationships
        self.accounts = accounts
        self.notifier = notifier

    async def send(self, sender_id: str, receiver_id: str) -> PendingRequest:
        """Send a friend request from sender to receiver.

        Raises:
            SelfTarget: sender and receiver are the same account
            AlreadyFriend: receiver is already in the sender's friend list
            TargetNotFound: the receiver account does not exist
            DuplicateRequest: a pending request from sender already exists
        """
        if sender_id == receiver_id:
            raise SelfTarget()

        already_friend, receiver_exists = await asyncio.gather(
            self.relationships.are_friends(sender_id, receiver_id),
            self.accounts.exists(receiver_id),
        )
        if already_friend:
            raise AlreadyFriend()
        if not receiver_exists:
            raise TargetNotFound()

        # Conditional write; the store raises DuplicateRequest if an entry landed first
        request = await self.relationships.add_pending(sender_id, receiver_id)
        logger.info(f"Friend request sent: {sender_id} -> {receiver_id}")
        return request

    async def accept(self, receiver_id: str, sender_id: str, auth: AuthorizationContext) -> None:
        """Accept the pending request from sender on the receiver's behalf.

        The pending entry removal and both friend list appends commit as one
        unit. The sender is notified in the background.
        """
        require_authorized(auth)
        accepted = await self.relationships.accept_pending(sender_id, receiver_id)
        if not accepted:
            raise RequestNotFound()
        logger.info(f"Friend request accepted: {sender_id} -> {receiver_id}")
        if self.notifier is not None:
            self.notifier.dispatch(self.notifier.friend_request_accepted, receiver_id, sender_id)

    async def reject_received(self, receiver_id: str, sender_id: str, auth: AuthorizationContext) -> None:
        """Delete a request the receiver got from sender."""
        require_authorized(auth)
        if not await self.relationships.remove_pending(sender_id, receiver_id):
            raise RequestNotFound()
        logger.info(f"Friend request rejected: {sender_id} -> {receiver_id}")

    async def cancel_sent(self, sender_id: str, receiver_id: str, auth: AuthorizationContext) -> None:
        """Withdraw a request the sender sent to receiver."""
        require_authorized(auth)
        if not await self.relationships.remove_pending(sender_id, receiver_id):
            raise RequestNotFound()
        logger.info(f"Friend request cancelled: {sender_id} -> {receiver_id}")

    async def unfriend(self, account_id: str, friend_id: str, auth: AuthorizationContext) -> None:
        """Remove the friendship in both directions as one unit."""
        require_authorized(auth)
        await self.relationships.remove_friendship(account_id, friend_id)
        logger.info(f"Unfriended: {account_id} <-> {friend_id}")

    async def list_pending(self, receiver_id: str, auth: AuthorizationContext) -> list[PendingRequest]:
        require_authorized(auth)
        return await self.relationships.list_pending(receiver_id)

    async def mark_viewed(self, receiver_id: str, auth: AuthorizationContext) -> int:
        require_authorized(auth)
        marked = await self.relationships.mark_pending_viewed(receiver_id)
        logger.debug(f"Marked {marked} friend requests viewed for {receiver_id}")
        return marked
