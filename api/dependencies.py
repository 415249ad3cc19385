"""
Shared dependencies for the social graph API.

This module provides:
- PocketBase client management (global instance authenticated as superuser)
- Repository and service providers (overridable in tests)
- The notification fan-out shared by all requests
- Per-request authorization context
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import Depends
from pocketbase import PocketBase

from socialgraph.auth_middleware import AuthUser, get_current_user
from socialgraph.cascade import AccountDeletionCascade
from socialgraph.content import ContentActions
from socialgraph.data.interfaces import AccountDirectory, ContentStore, NotificationStore, RelationshipStore
from socialgraph.data.repositories import (
    AccountRepository,
    ContentRepository,
    NotificationRepository,
    RelationshipRepository,
)
from socialgraph.models import AuthorizationContext
from socialgraph.notifications import NotificationFanout
from socialgraph.recommendation import RecommendationEngine
from socialgraph.workflow import FriendRequestWorkflow

from .settings import get_settings

logger = logging.getLogger(__name__)

# ========================================
# PocketBase Client
# ========================================

# The API only authenticates as superuser, so one shared client serves every
# request; caller identity travels in AuthorizationContext instead.
_settings = get_settings()
pb_url = _settings.pocketbase_url
pb = PocketBase(pb_url)


async def authenticate_pb() -> None:
    """Authenticate with PocketBase as superuser."""
    settings = get_settings()
    try:
        await asyncio.to_thread(
            pb.collection("_superusers").auth_with_password,
            settings.pocketbase_admin_email,
            settings.pocketbase_admin_password,
        )
        logger.info("Successfully authenticated with PocketBase")
    except Exception as e:
        logger.error(f"Failed to authenticate with PocketBase: {e}")
        raise


# ========================================
# Repositories
# ========================================

accounts = AccountRepository(pb)
relationships = RelationshipRepository(pb)
content = ContentRepository(pb)
notifications = NotificationRepository(pb)

# Background producers are tracked here and drained on shutdown
fanout = NotificationFanout(notifications, accounts, content)


def get_account_directory() -> AccountDirectory:
    return accounts


def get_relationship_store() -> RelationshipStore:
    return relationships


def get_content_store() -> ContentStore:
    return content


def get_notification_store() -> NotificationStore:
    return notifications


def get_notification_fanout() -> NotificationFanout:
    return fanout


# ========================================
# Services
# ========================================


def get_workflow(
    relationship_store: RelationshipStore = Depends(get_relationship_store),
    account_directory: AccountDirectory = Depends(get_account_directory),
    notifier: NotificationFanout = Depends(get_notification_fanout),
) -> FriendRequestWorkflow:
    return FriendRequestWorkflow(relationship_store, account_directory, notifier)


def get_recommendation_engine(
    relationship_store: RelationshipStore = Depends(get_relationship_store),
) -> RecommendationEngine:
    return RecommendationEngine(relationship_store)


def get_cascade(
    account_directory: AccountDirectory = Depends(get_account_directory),
    relationship_store: RelationshipStore = Depends(get_relationship_store),
    content_store: ContentStore = Depends(get_content_store),
    notification_store: NotificationStore = Depends(get_notification_store),
    notifier: NotificationFanout = Depends(get_notification_fanout),
) -> AccountDeletionCascade:
    return AccountDeletionCascade(account_directory, relationship_store, content_store, notification_store, notifier)


def get_content_actions(
    content_store: ContentStore = Depends(get_content_store),
    notifier: NotificationFanout = Depends(get_notification_fanout),
) -> ContentActions:
    return ContentActions(content_store, notifier)


# ========================================
# Authorization
# ========================================


def get_authorization(user_id: str, user: AuthUser = Depends(get_current_user)) -> AuthorizationContext:
    """Authorization flags for the caller acting on the account in the path."""
    return user.authorization_for(user_id)


__all__ = [
    "pb",
    "pb_url",
    "authenticate_pb",
    "fanout",
    "get_account_directory",
    "get_relationship_store",
    "get_content_store",
    "get_notification_store",
    "get_notification_fanout",
    "get_workflow",
    "get_recommendation_engine",
    "get_cascade",
    "get_content_actions",
    "get_authorization",
]
