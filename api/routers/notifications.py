"""
Notifications Router - the caller's own notifications.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from socialgraph.auth_middleware import AuthUser, get_current_user
from socialgraph.data.interfaces import NotificationStore

from ..dependencies import get_notification_store
from ..schemas import MarkViewedResponse, NotificationResponse

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationResponse])
async def list_notifications(
    user: AuthUser = Depends(get_current_user),
    notifications: NotificationStore = Depends(get_notification_store),
) -> list[NotificationResponse]:
    """List the caller's notifications, newest first."""
    records = await notifications.list_for_user(user.id)
    return [NotificationResponse.from_notification(n) for n in records]


@router.patch("", response_model=MarkViewedResponse)
async def mark_notifications_viewed(
    user: AuthUser = Depends(get_current_user),
    notifications: NotificationStore = Depends(get_notification_store),
) -> MarkViewedResponse:
    marked = await notifications.mark_all_viewed(user.id)
    return MarkViewedResponse(marked=marked)
