"""Social actions on content that feed the notification fan-out.

Only the parts of likes and comments that produce notifications live here;
editing and deleting content belongs to the content service."""

from __future__ import annotations

import logging

from .data.interfaces import ContentStore
from .errors import AlreadyLiked, CommentNotFound, PostNotFound
from .models import Comment
from .notifications import NotificationFanout

logger = logging.getLogger(__name__)


class ContentActions:
    """Like and comment operations with background notifications."""

    def __init__(self, content: ContentStore, notifier: NotificationFanout) -> None:
        self.content = content
        self.notifier = notifier

    async def like_post(self, user_id: str, post_id: str) -> None:
        if not await self.content.add_post_like(post_id, user_id):
            raise AlreadyLiked("Post already liked")
        self.notifier.dispatch(self.notifier.post_liked, user_id, post_id)

    async def like_comment(self, user_id: str, comment_id: str) -> None:
        comment = await self.content.get_comment(comment_id)
        if comment is None:
            raise CommentNotFound()
        if not await self.content.add_comment_like(comment_id, user_id):
            raise AlreadyLiked("Comment already liked")
        self.notifier.dispatch(self.notifier.comment_liked, user_id, comment.post_id, comment_id)

    async def comment_on_post(self, user_id: str, post_id: str, text: str) -> Comment:
        if await self.content.get_post(post_id) is None:
            raise PostNotFound()
        comment = await self.content.create_comment(post_id, user_id, text)
        logger.debug(f"Comment {comment.id} created on post {post_id} by {user_id}")
        self.notifier.dispatch(self.notifier.post_commented_on, user_id, post_id, comment.id)
        return comment
