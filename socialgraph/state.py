"""Relationship state resolution.

The state between two accounts is never stored. It is derived from three
independent existence checks with a fixed precedence:

    FRIEND > FRIEND_REQUEST_RECEIVED > FRIEND_REQUEST_SENT > NOT_FRIEND

A stale pending entry left behind next to an accepted friendship therefore
never hides the FRIEND state.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

from .data.interfaces import RelationshipStore
from .models import FriendState


def classify(is_friend: bool, request_received: bool, request_sent: bool) -> FriendState:
    """Apply the state precedence to the three existence checks."""
    if is_friend:
        return FriendState.FRIEND
    if request_received:
        return FriendState.FRIEND_REQUEST_RECEIVED
    if request_sent:
        return FriendState.FRIEND_REQUEST_SENT
    return FriendState.NOT_FRIEND


async def resolve_state(store: RelationshipStore, viewer_id: str, subject_id: str) -> FriendState:
    """Compute the relationship state of subject as seen by viewer.

    Neither account is checked for existence; callers validate ids. Read-only
    and safe to call concurrently.
    """
    is_friend, request_received, request_sent = await asyncio.gather(
        store.are_friends(viewer_id, subject_id),
        store.has_pending(subject_id, viewer_id),
        store.has_pending(viewer_id, subject_id),
    )
    return classify(is_friend, request_received, request_sent)


async def resolve_states(
    store: RelationshipStore, viewer_id: str, subject_ids: Iterable[str]
) -> dict[str, FriendState]:
    """Resolve the viewer's state towards several subjects concurrently."""
    ids = list(dict.fromkeys(subject_ids))
    states = await asyncio.gather(*(resolve_state(store, viewer_id, subject_id) for subject_id in ids))
    return dict(zip(ids, states, strict=True))
