"""Content repository for data access.

Posts and comments are only touched here for authorship, likes and the
account deletion sweeps. Each like is also recorded in a ledger collection
(``post_likes``, ``comment_likes``) with a unique (user, target) index; the
ledger create and the ``likes+`` append go through one batch transaction."""

from __future__ import annotations

import logging
from typing import Any

from pocketbase import PocketBase
from pocketbase.client import ClientResponseError  # type: ignore[attr-defined]

from ...errors import CommentNotFound, NotFoundError, PostNotFound
from ...models import Comment, Post
from .base import (
    call_pb,
    collection_url,
    is_not_found,
    is_unique_violation,
    quote,
    record_url,
    relation_ids,
    run_batch,
)

logger = logging.getLogger(__name__)

POSTS = "posts"
COMMENTS = "comments"
POST_LIKES = "post_likes"
COMMENT_LIKES = "comment_likes"


class ContentRepository:
    """Repository for Post and Comment data access"""

    def __init__(self, pb_client: PocketBase) -> None:
        self.pb = pb_client

    async def _get_record(self, collection: str, record_id: str) -> Any | None:
        try:
            return await call_pb(self.pb.collection(collection).get_one, record_id)
        except ClientResponseError as e:
            if is_not_found(e):
                return None
            raise

    async def get_post(self, post_id: str) -> Post | None:
        record = await self._get_record(POSTS, post_id)
        return self._map_post(record) if record is not None else None

    async def get_comment(self, comment_id: str) -> Comment | None:
        record = await self._get_record(COMMENTS, comment_id)
        return self._map_comment(record) if record is not None else None

    async def _add_like(
        self,
        collection: str,
        ledger: str,
        field: str,
        record_id: str,
        user_id: str,
        missing: type[NotFoundError],
    ) -> bool:
        """Record a like in the ledger and on the target in one transaction.

        The ledger's unique (user, target) index is the write-time check: of
        two concurrent first likes only one batch commits, the other rolls
        back with a unique violation.
        """
        try:
            await run_batch(
                self.pb,
                [
                    {"method": "POST", "url": collection_url(ledger), "body": {"user": user_id, field: record_id}},
                    {"method": "PATCH", "url": record_url(collection, record_id), "body": {"likes+": user_id}},
                ],
            )
        except ClientResponseError as e:
            if is_unique_violation(e):
                logger.debug(f"{user_id} already liked {field} {record_id}")
                return False
            if e.status in (400, 404):
                # Relation validation fails when the target vanished after the lookup
                raise missing() from e
            raise
        return True

    async def add_post_like(self, post_id: str, user_id: str) -> bool:
        if await self.get_post(post_id) is None:
            raise PostNotFound()
        return await self._add_like(POSTS, POST_LIKES, "post", post_id, user_id, PostNotFound)

    async def add_comment_like(self, comment_id: str, user_id: str) -> bool:
        if await self.get_comment(comment_id) is None:
            raise CommentNotFound()
        return await self._add_like(COMMENTS, COMMENT_LIKES, "comment", comment_id, user_id, CommentNotFound)

    async def create_comment(self, post_id: str, author_id: str, content: str) -> Comment:
        try:
            record = await call_pb(
                self.pb.collection(COMMENTS).create,
                {"post": post_id, "author": author_id, "content": content, "likes": []},
            )
        except ClientResponseError as e:
            if e.status in (400, 404):
                raise PostNotFound() from e
            raise
        return self._map_comment(record)

    async def delete_by_author(self, author_id: str) -> int:
        """Delete the author's comments, comments on the author's posts, then the posts."""
        author = quote(author_id)
        comments = await call_pb(
            self.pb.collection(COMMENTS).get_full_list,
            query_params={"filter": f"author = {author} || post.author = {author}", "fields": "id"},
        )
        posts = await call_pb(
            self.pb.collection(POSTS).get_full_list,
            query_params={"filter": f"author = {author}", "fields": "id"},
        )
        deleted = 0
        for collection, records in ((COMMENTS, comments), (POSTS, posts)):
            for record in records:
                try:
                    await call_pb(self.pb.collection(collection).delete, record.id)
                    deleted += 1
                except ClientResponseError as e:
                    if not is_not_found(e):
                        raise
        logger.info(f"Deleted {len(posts)} posts and {len(comments)} comments for author {author_id}")
        return deleted

    async def pull_likes_by_user(self, user_id: str) -> int:
        pulled = 0
        for collection in (POSTS, COMMENTS):
            records = await call_pb(
                self.pb.collection(collection).get_full_list,
                query_params={"filter": f"likes ~ {quote(user_id)}", "fields": "id"},
            )
            for record in records:
                try:
                    await call_pb(self.pb.collection(collection).update, record.id, {"likes-": user_id})
                    pulled += 1
                except ClientResponseError as e:
                    # Deleted by the content sweep running alongside
                    if not is_not_found(e):
                        raise
        await self._purge_like_ledgers(user_id)
        logger.info(f"Pulled likes of {user_id} from {pulled} posts and comments")
        return pulled

    async def _purge_like_ledgers(self, user_id: str) -> None:
        for ledger in (POST_LIKES, COMMENT_LIKES):
            records = await call_pb(
                self.pb.collection(ledger).get_full_list,
                query_params={"filter": f"user = {quote(user_id)}", "fields": "id"},
            )
            for record in records:
                try:
                    await call_pb(self.pb.collection(ledger).delete, record.id)
                except ClientResponseError as e:
                    # Cascade-deleted with its post or comment
                    if not is_not_found(e):
                        raise

    def _map_post(self, record: Any) -> Post:
        return Post(
            id=record.id,
            author_id=str(getattr(record, "author", "")),
            likes=relation_ids(getattr(record, "likes", None)),
            content=str(getattr(record, "content", "") or ""),
        )

    def _map_comment(self, record: Any) -> Comment:
        return Comment(
            id=record.id,
            author_id=str(getattr(record, "author", "")),
            post_id=str(getattr(record, "post", "")),
            likes=relation_ids(getattr(record, "likes", None)),
            content=str(getattr(record, "content", "") or ""),
        )
