"""
Pydantic schemas for likes and comments.
"""

from __future__ import annotations

from pydantic import BaseModel, field_validator


class CommentCreate(BaseModel):
    """Request body for commenting on a post"""

    content: str

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Comment content must not be empty")
        return v


class CommentResponse(BaseModel):
    id: str
    post_id: str
    author_id: str
    content: str
