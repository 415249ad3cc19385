"""
Pydantic schemas for account and friend endpoints.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from socialgraph.models import Account, FriendState


class AccountSummary(BaseModel):
    """Public view of an account"""

    id: str
    first_name: str = ""
    last_name: str = ""
    full_name: str = ""

    @classmethod
    def from_account(cls, account: Account) -> AccountSummary:
        return cls(
            id=account.id,
            first_name=account.first_name,
            last_name=account.last_name,
            full_name=account.full_name,
        )


class AccountWithState(AccountSummary):
    """Account annotated with the viewer's relationship state"""

    state: FriendState


class AccountResponse(AccountWithState):
    friend_count: int = 0


class PendingRequestResponse(BaseModel):
    """Entry of an account's pending friend request list"""

    sender: AccountSummary
    viewed: bool
    created: datetime | None = None


class RecommendationResponse(BaseModel):
    account: AccountSummary
    mutual_friends: int
    state: FriendState


class FriendStateResponse(BaseModel):
    user_id: str
    friend_id: str
    state: FriendState


class HomeSummaryResponse(BaseModel):
    """Unviewed counts shown on an account's home page"""

    user: AccountSummary
    unviewed_friend_requests: int
    unviewed_notifications: int


class MessageResponse(BaseModel):
    message: str


class MarkViewedResponse(BaseModel):
    marked: int


class AccountDeletionResponse(BaseModel):
    """Documents touched by each deletion sweep"""

    message: str
    counts: dict[str, int]
