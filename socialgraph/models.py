"""Core domain models for the social graph.

These models represent accounts, pending friend requests, content and
notifications independently of PocketBase record objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class FriendState(Enum):
    """Relationship state between a viewer and a subject account.

    Derived on every query from both friend lists and both pending request
    lists; never persisted.
    """

    FRIEND = "FRIEND"
    FRIEND_REQUEST_RECEIVED = "FRIEND_REQUEST_RECEIVED"
    FRIEND_REQUEST_SENT = "FRIEND_REQUEST_SENT"
    NOT_FRIEND = "NOT_FRIEND"


class LinkKind(Enum):
    """Kinds of entity a notification can link to"""

    USER = "User"
    POST = "Post"
    COMMENT = "Comment"


@dataclass(frozen=True)
class EntityLink:
    """Reference from a notification to a user, post or comment"""

    id: str
    kind: LinkKind

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "kind": self.kind.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EntityLink:
        return cls(id=str(data.get("id", "")), kind=LinkKind(data.get("kind", LinkKind.USER.value)))


@dataclass
class Account:
    """A registered user identity and its friend list"""

    id: str
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    is_admin: bool = False
    friends: set[str] = field(default_factory=set)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass
class PendingRequest:
    """An unconfirmed friend request from sender to receiver.

    The entry belongs to the receiver's pending list.
    """

    sender_id: str
    receiver_id: str
    viewed: bool = False
    id: str | None = None
    created: datetime | None = None


@dataclass
class Post:
    """Post as seen by the social graph (authorship and likes only)"""

    id: str
    author_id: str
    likes: set[str] = field(default_factory=set)
    content: str = ""


@dataclass
class Comment:
    """Comment as seen by the social graph (authorship and likes only)"""

    id: str
    author_id: str
    post_id: str
    likes: set[str] = field(default_factory=set)
    content: str = ""


@dataclass
class Notification:
    """A human-readable event record addressed to one account"""

    user_id: str
    links: list[EntityLink]
    content: str
    viewed: bool = False
    id: str | None = None
    created: datetime | None = None


@dataclass(frozen=True)
class Recommendation:
    """A friend-of-friend suggestion with its mutual friend count"""

    account_id: str
    mutual_friends: int


@dataclass(frozen=True)
class AuthorizationContext:
    """Per-request authorization flags supplied by the HTTP layer.

    Attributes:
        is_owner: The caller is the account that owns the resource
        is_admin: The caller is an administrator
    """

    is_owner: bool = False
    is_admin: bool = False

    @property
    def allowed(self) -> bool:
        return self.is_owner or self.is_admin

    @classmethod
    def for_caller(cls, caller_id: str, caller_is_admin: bool, owner_id: str) -> AuthorizationContext:
        """Build the context for a caller acting on an account-owned resource."""
        return cls(is_owner=caller_id == owner_id, is_admin=caller_is_admin)
