"""
Pydantic schemas for the social graph API.

Re-exports all schemas for convenient importing.
"""

from __future__ import annotations

from .accounts import (
    AccountDeletionResponse,
    AccountResponse,
    AccountSummary,
    AccountWithState,
    FriendStateResponse,
    HomeSummaryResponse,
    MarkViewedResponse,
    MessageResponse,
    PendingRequestResponse,
    RecommendationResponse,
)
from .content import CommentCreate, CommentResponse
from .notifications import NotificationLinkResponse, NotificationResponse

__all__ = [
    "AccountDeletionResponse",
    "AccountResponse",
    "AccountSummary",
    "AccountWithState",
    "CommentCreate",
    "CommentResponse",
    "FriendStateResponse",
    "HomeSummaryResponse",
    "MarkViewedResponse",
    "MessageResponse",
    "NotificationLinkResponse",
    "NotificationResponse",
    "PendingRequestResponse",
    "RecommendationResponse",
]
