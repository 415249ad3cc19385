"""
Users Router - account summaries and account deletion.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends

from socialgraph.auth_middleware import AuthUser, get_current_user
from socialgraph.cascade import AccountDeletionCascade
from socialgraph.data.interfaces import AccountDirectory, NotificationStore, RelationshipStore
from socialgraph.errors import TargetNotFound
from socialgraph.models import AuthorizationContext
from socialgraph.state import resolve_state
from socialgraph.workflow import require_authorized

from ..dependencies import (
    get_account_directory,
    get_authorization,
    get_cascade,
    get_notification_store,
    get_relationship_store,
)
from ..schemas import AccountDeletionResponse, AccountResponse, AccountSummary, HomeSummaryResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/{user_id}", response_model=AccountResponse)
async def get_user(
    user_id: str,
    user: AuthUser = Depends(get_current_user),
    accounts: AccountDirectory = Depends(get_account_directory),
    relationships: RelationshipStore = Depends(get_relationship_store),
) -> AccountResponse:
    """Account summary with the caller's relationship state towards it."""
    account = await accounts.get_account(user_id)
    if account is None:
        raise TargetNotFound()
    state = await resolve_state(relationships, user.id, user_id)
    return AccountResponse(
        **AccountSummary.from_account(account).model_dump(),
        state=state,
        friend_count=len(account.friends),
    )


@router.get("/{user_id}/home", response_model=HomeSummaryResponse)
async def get_home_summary(
    user_id: str,
    auth: AuthorizationContext = Depends(get_authorization),
    accounts: AccountDirectory = Depends(get_account_directory),
    relationships: RelationshipStore = Depends(get_relationship_store),
    notifications: NotificationStore = Depends(get_notification_store),
) -> HomeSummaryResponse:
    """Unviewed friend request and notification counts for the account."""
    require_authorized(auth)
    account, pending, unviewed = await asyncio.gather(
        accounts.get_account(user_id),
        relationships.count_unviewed_pending(user_id),
        notifications.count_unviewed(user_id),
    )
    if account is None:
        raise TargetNotFound()
    return HomeSummaryResponse(
        user=AccountSummary.from_account(account),
        unviewed_friend_requests=pending,
        unviewed_notifications=unviewed,
    )


@router.delete("/{user_id}", response_model=AccountDeletionResponse)
async def delete_user(
    user_id: str,
    auth: AuthorizationContext = Depends(get_authorization),
    cascade: AccountDeletionCascade = Depends(get_cascade),
) -> AccountDeletionResponse:
    """Delete the account and every reference other documents hold to it."""
    counts = await cascade.delete_account(user_id, auth)
    return AccountDeletionResponse(message="Account deleted", counts=counts)
