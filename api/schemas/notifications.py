"""
Pydantic schemas for notification endpoints.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from socialgraph.models import LinkKind, Notification


class NotificationLinkResponse(BaseModel):
    id: str
    kind: LinkKind


class NotificationResponse(BaseModel):
    """Notification addressed to the caller"""

    id: str | None = None
    links: list[NotificationLinkResponse]
    content: str
    viewed: bool
    created: datetime | None = None

    @classmethod
    def from_notification(cls, notification: Notification) -> NotificationResponse:
        return cls(
            id=notification.id,
            links=[NotificationLinkResponse(id=link.id, kind=link.kind) for link in notification.links],
            content=notification.content,
            viewed=notification.viewed,
            created=notification.created,
        )
