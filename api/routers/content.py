"""
Content Router - likes and comments that notify content owners.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from socialgraph.auth_middleware import AuthUser, get_current_user
from socialgraph.content import ContentActions

from ..dependencies import get_content_actions
from ..schemas import CommentCreate, CommentResponse, MessageResponse
from ..settings import get_settings

router = APIRouter(prefix="/api", tags=["content"])


@router.post("/posts/{post_id}/likes", response_model=MessageResponse)
async def like_post(
    post_id: str,
    user: AuthUser = Depends(get_current_user),
    actions: ContentActions = Depends(get_content_actions),
) -> MessageResponse:
    await actions.like_post(user.id, post_id)
    return MessageResponse(message="Post liked")


@router.post("/comments/{comment_id}/likes", response_model=MessageResponse)
async def like_comment(
    comment_id: str,
    user: AuthUser = Depends(get_current_user),
    actions: ContentActions = Depends(get_content_actions),
) -> MessageResponse:
    await actions.like_comment(user.id, comment_id)
    return MessageResponse(message="Comment liked")


@router.post("/posts/{post_id}/comments", response_model=CommentResponse)
async def comment_on_post(
    post_id: str,
    body: CommentCreate,
    user: AuthUser = Depends(get_current_user),
    actions: ContentActions = Depends(get_content_actions),
) -> CommentResponse:
    max_length = get_settings().comment_max_length
    if len(body.content) > max_length:
        raise HTTPException(status_code=400, detail=f"Comment exceeds {max_length} characters")
    comment = await actions.comment_on_post(user.id, post_id, body.content)
    return CommentResponse(
        id=comment.id,
        post_id=comment.post_id,
        author_id=comment.author_id,
        content=comment.content,
    )
