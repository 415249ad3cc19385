"""Notification fan-out.

Each social event (post liked, comment liked, post commented on, friend
request accepted) produces at most one notification addressed to the
affected account. Producers are best-effort: any failure is logged and
swallowed so the triggering action never fails or rolls back because of it.

Producers never notify an actor about their own action; the check compares
the resolved recipient id with the actor id.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from .data.interfaces import AccountDirectory, ContentStore, NotificationStore
from .errors import NotificationDeliveryFailure
from .models import EntityLink, LinkKind, Notification

logger = logging.getLogger(__name__)


class NotificationFanout:
    """Composes and records notifications for social events."""

    def __init__(
        self,
        notifications: NotificationStore,
        accounts: AccountDirectory,
        content: ContentStore,
    ) -> None:
        self.notifications = notifications
        self.accounts = accounts
        self.content = content
        self._pending: set[asyncio.Task[Notification | None]] = set()

    # ========================================
    # Scheduling
    # ========================================

    def dispatch(
        self, producer: Callable[..., Awaitable[Notification | None]], *args: Any
    ) -> asyncio.Task[Notification | None]:
        """Run a producer in the background without blocking the caller.

        Must be called from a running event loop. The task is tracked until
        it finishes so it cannot be garbage collected mid-flight.
        """
        task = asyncio.ensure_future(producer(*args))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for every dispatched producer to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    # ========================================
    # Producers
    # ========================================

    async def post_liked(self, actor_id: str, post_id: str) -> Notification | None:
        async def compose() -> Notification | None:
            actor, post = await asyncio.gather(self.accounts.get_account(actor_id), self.content.get_post(post_id))
            if actor is None or post is None:
                raise NotificationDeliveryFailure(f"actor {actor_id} or post {post_id} not found")
            return self._build(
                recipient_id=post.author_id,
                actor_id=actor_id,
                links=[EntityLink(post_id, LinkKind.POST), EntityLink(actor_id, LinkKind.USER)],
                content=f"{actor.full_name} liked your post",
            )

        return await self._deliver("post_liked", compose)

    async def comment_liked(self, actor_id: str, post_id: str, comment_id: str) -> Notification | None:
        async def compose() -> Notification | None:
            actor, comment, post = await asyncio.gather(
                self.accounts.get_account(actor_id),
                self.content.get_comment(comment_id),
                self.content.get_post(post_id),
            )
            if actor is None or comment is None or post is None:
                raise NotificationDeliveryFailure(
                    f"actor {actor_id}, comment {comment_id} or post {post_id} not found"
                )
            post_author = await self.accounts.get_account(post.author_id)
            post_author_name = post_author.full_name if post_author else "someone"
            return self._build(
                recipient_id=comment.author_id,
                actor_id=actor_id,
                links=[
                    EntityLink(comment_id, LinkKind.COMMENT),
                    EntityLink(post_id, LinkKind.POST),
                    EntityLink(actor_id, LinkKind.USER),
                ],
                content=f"{actor.full_name} liked your comment on {post_author_name}'s post",
            )

        return await self._deliver("comment_liked", compose)

    async def post_commented_on(self, commenter_id: str, post_id: str, comment_id: str) -> Notification | None:
        async def compose() -> Notification | None:
            commenter, post = await asyncio.gather(
                self.accounts.get_account(commenter_id), self.content.get_post(post_id)
            )
            if commenter is None or post is None:
                raise NotificationDeliveryFailure(f"commenter {commenter_id} or post {post_id} not found")
            return self._build(
                recipient_id=post.author_id,
                actor_id=commenter_id,
                links=[
                    EntityLink(comment_id, LinkKind.COMMENT),
                    EntityLink(post_id, LinkKind.POST),
                    EntityLink(commenter_id, LinkKind.USER),
                ],
                content=f"{commenter.full_name} commented on your post",
            )

        return await self._deliver("post_commented_on", compose)

    async def friend_request_accepted(self, receiver_id: str, sender_id: str) -> Notification | None:
        """Tell the original sender that the receiver accepted their request."""

        async def compose() -> Notification | None:
            receiver = await self.accounts.get_account(receiver_id)
            if receiver is None:
                raise NotificationDeliveryFailure(f"receiver {receiver_id} not found")
            return self._build(
                recipient_id=sender_id,
                actor_id=receiver_id,
                links=[EntityLink(receiver_id, LinkKind.USER)],
                content=f"{receiver.full_name} accepted your friend request",
            )

        return await self._deliver("friend_request_accepted", compose)

    # ========================================
    # Helpers
    # ========================================

    def _build(
        self, recipient_id: str, actor_id: str, links: list[EntityLink], content: str
    ) -> Notification | None:
        if recipient_id == actor_id:
            return None
        return Notification(user_id=recipient_id, links=links, content=content)

    async def _deliver(self, event: str, compose: Callable[[], Awaitable[Notification | None]]) -> Notification | None:
        try:
            notification = await compose()
            if notification is None:
                logger.debug(f"Suppressed {event} notification for self-action")
                return None
            stored = await self.notifications.create(notification)
            logger.debug(f"Recorded {event} notification for {notification.user_id}")
            return stored
        except Exception as e:
            logger.error(f"Failed to deliver {event} notification: {type(e).__name__}: {e}", exc_info=True)
            return None
