"""Data access layer: storage protocols and PocketBase repositories."""

from __future__ import annotations

from .interfaces import AccountDirectory, ContentStore, NotificationStore, RelationshipStore

__all__ = ["AccountDirectory", "ContentStore", "NotificationStore", "RelationshipStore"]
