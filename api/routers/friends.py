"""
Friends Router - friend request workflow, friend lists, state and recommendations.

Every path is scoped to the account in ``/api/users/{user_id}``. Operations
that act on that account's own lists receive an AuthorizationContext built
from the caller and the path account.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, Query

from socialgraph.auth_middleware import AuthUser, get_current_user
from socialgraph.data.interfaces import AccountDirectory, RelationshipStore
from socialgraph.errors import TargetNotFound
from socialgraph.models import AuthorizationContext
from socialgraph.recommendation import RecommendationEngine
from socialgraph.state import resolve_state, resolve_states
from socialgraph.workflow import FriendRequestWorkflow, require_authorized

from ..dependencies import (
    get_account_directory,
    get_authorization,
    get_recommendation_engine,
    get_relationship_store,
    get_workflow,
)
from ..schemas import (
    AccountSummary,
    AccountWithState,
    FriendStateResponse,
    MarkViewedResponse,
    MessageResponse,
    PendingRequestResponse,
    RecommendationResponse,
)
from ..settings import get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["friends"])


# ========================================
# Friend requests
# ========================================


@router.post("/{user_id}/friend_requests", response_model=MessageResponse)
async def send_friend_request(
    user_id: str,
    user: AuthUser = Depends(get_current_user),
    workflow: FriendRequestWorkflow = Depends(get_workflow),
) -> MessageResponse:
    """Send a friend request from the caller to the account in the path."""
    await workflow.send(user.id, user_id)
    return MessageResponse(message="Friend request sent")


@router.get("/{user_id}/friend_requests", response_model=list[PendingRequestResponse])
async def list_friend_requests(
    user_id: str,
    auth: AuthorizationContext = Depends(get_authorization),
    workflow: FriendRequestWorkflow = Depends(get_workflow),
    accounts: AccountDirectory = Depends(get_account_directory),
) -> list[PendingRequestResponse]:
    """List pending requests received by the account, unviewed first."""
    pending = await workflow.list_pending(user_id, auth)
    senders = await accounts.get_accounts(request.sender_id for request in pending)
    # Senders deleted since sending are skipped
    return [
        PendingRequestResponse(
            sender=AccountSummary.from_account(senders[request.sender_id]),
            viewed=request.viewed,
            created=request.created,
        )
        for request in pending
        if request.sender_id in senders
    ]


@router.patch("/{user_id}/friend_requests", response_model=MarkViewedResponse)
async def mark_friend_requests_viewed(
    user_id: str,
    auth: AuthorizationContext = Depends(get_authorization),
    workflow: FriendRequestWorkflow = Depends(get_workflow),
) -> MarkViewedResponse:
    marked = await workflow.mark_viewed(user_id, auth)
    return MarkViewedResponse(marked=marked)


@router.delete("/{user_id}/friend_requests/{sender_id}", response_model=MessageResponse)
async def reject_friend_request(
    user_id: str,
    sender_id: str,
    auth: AuthorizationContext = Depends(get_authorization),
    workflow: FriendRequestWorkflow = Depends(get_workflow),
) -> MessageResponse:
    """Reject the request the account received from sender_id."""
    await workflow.reject_received(user_id, sender_id, auth)
    return MessageResponse(message="Friend request rejected")


@router.delete("/{user_id}/sent_friend_requests/{receiver_id}", response_model=MessageResponse)
async def cancel_friend_request(
    user_id: str,
    receiver_id: str,
    auth: AuthorizationContext = Depends(get_authorization),
    workflow: FriendRequestWorkflow = Depends(get_workflow),
) -> MessageResponse:
    """Withdraw a request the account sent to receiver_id."""
    await workflow.cancel_sent(user_id, receiver_id, auth)
    return MessageResponse(message="Friend request cancelled")


# ========================================
# Friends
# ========================================


@router.post("/{user_id}/friends/{friend_id}", response_model=MessageResponse)
async def accept_friend_request(
    user_id: str,
    friend_id: str,
    auth: AuthorizationContext = Depends(get_authorization),
    workflow: FriendRequestWorkflow = Depends(get_workflow),
) -> MessageResponse:
    """Accept the request the account received from friend_id."""
    await workflow.accept(user_id, friend_id, auth)
    return MessageResponse(message="Friend request accepted")


@router.delete("/{user_id}/friends/{friend_id}", response_model=MessageResponse)
async def unfriend(
    user_id: str,
    friend_id: str,
    auth: AuthorizationContext = Depends(get_authorization),
    workflow: FriendRequestWorkflow = Depends(get_workflow),
) -> MessageResponse:
    await workflow.unfriend(user_id, friend_id, auth)
    return MessageResponse(message="Friend removed")


@router.get("/{user_id}/friends", response_model=list[AccountWithState])
async def list_friends(
    user_id: str,
    user: AuthUser = Depends(get_current_user),
    relationships: RelationshipStore = Depends(get_relationship_store),
    accounts: AccountDirectory = Depends(get_account_directory),
) -> list[AccountWithState]:
    """List the account's friends, each with the caller's relationship state."""
    if not await accounts.exists(user_id):
        raise TargetNotFound()
    friend_ids = await relationships.get_friend_ids(user_id)
    friends, states = await asyncio.gather(
        accounts.get_accounts(friend_ids),
        resolve_states(relationships, user.id, friend_ids),
    )
    return [
        AccountWithState(**AccountSummary.from_account(friends[friend_id]).model_dump(), state=states[friend_id])
        for friend_id in sorted(friend_ids)
        if friend_id in friends
    ]


@router.get("/{user_id}/friend_state/{friend_id}", response_model=FriendStateResponse)
async def get_friend_state(
    user_id: str,
    friend_id: str,
    user: AuthUser = Depends(get_current_user),
    relationships: RelationshipStore = Depends(get_relationship_store),
) -> FriendStateResponse:
    """Relationship state of friend_id as seen by the account in the path."""
    state = await resolve_state(relationships, user_id, friend_id)
    return FriendStateResponse(user_id=user_id, friend_id=friend_id, state=state)


# ========================================
# Recommendations
# ========================================


@router.get("/{user_id}/friend_recommendation", response_model=list[RecommendationResponse])
async def get_friend_recommendations(
    user_id: str,
    skip: int = Query(default=0, ge=0),
    limit: int | None = Query(default=None, ge=0),
    auth: AuthorizationContext = Depends(get_authorization),
    engine: RecommendationEngine = Depends(get_recommendation_engine),
    relationships: RelationshipStore = Depends(get_relationship_store),
    accounts: AccountDirectory = Depends(get_account_directory),
) -> list[RecommendationResponse]:
    """Friends of friends ranked by mutual friend count."""
    require_authorized(auth)
    page_size = get_settings().clamp_recommendation_limit(limit)
    recommendations = await engine.recommend(user_id, offset=skip, limit=page_size)

    candidate_ids = [r.account_id for r in recommendations]
    profiles, states = await asyncio.gather(
        accounts.get_accounts(candidate_ids),
        resolve_states(relationships, user_id, candidate_ids),
    )
    return [
        RecommendationResponse(
            account=AccountSummary.from_account(profiles[r.account_id]),
            mutual_friends=r.mutual_friends,
            state=states[r.account_id],
        )
        for r in recommendations
        if r.account_id in profiles
    ]
