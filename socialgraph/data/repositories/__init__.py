"""PocketBase repositories implementing the storage protocols."""

from __future__ import annotations

from .account_repository import AccountRepository
from .content_repository import ContentRepository
from .notification_repository import NotificationRepository
from .relationship_repository import RelationshipRepository

__all__ = [
    "AccountRepository",
    "ContentRepository",
    "NotificationRepository",
    "RelationshipRepository",
]
