"""Social graph error classes.

Every failure the core reports to its callers is a SocialGraphError
subclass with a stable ``code`` and the HTTP status the API maps it to.
"""

from __future__ import annotations


class SocialGraphError(Exception):
    """Base exception for social graph operations."""

    code = "social_graph_error"
    status_code = 500

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message())

    @classmethod
    def default_message(cls) -> str:
        return cls.code.replace("_", " ")

    @property
    def message(self) -> str:
        return str(self)


# ========================================
# Domain rule violations (400)
# ========================================


class DomainRuleViolation(SocialGraphError):
    """Raised when an operation breaks a relationship rule."""

    code = "domain_rule_violation"
    status_code = 400


class SelfTarget(DomainRuleViolation):
    """Raised when an account targets itself with a friend request."""

    code = "self_target"

    @classmethod
    def default_message(cls) -> str:
        return "You are sending a friend request to yourself"


class AlreadyFriend(DomainRuleViolation):
    """Raised when the target is already in the sender's friend list."""

    code = "already_friend"

    @classmethod
    def default_message(cls) -> str:
        return "User is already a friend"


class DuplicateRequest(DomainRuleViolation):
    """Raised when a pending request from the same sender already exists."""

    code = "duplicate_request"

    @classmethod
    def default_message(cls) -> str:
        return "Already sent a friend request"


class AlreadyLiked(DomainRuleViolation):
    """Raised when an account likes the same post or comment twice."""

    code = "already_liked"


# ========================================
# Not found (404)
# ========================================


class NotFoundError(SocialGraphError):
    """Base class for missing entities."""

    code = "not_found"
    status_code = 404


class TargetNotFound(NotFoundError):
    """Raised when the target account does not exist."""

    code = "target_not_found"

    @classmethod
    def default_message(cls) -> str:
        return "The requested user is not found"


class RequestNotFound(NotFoundError):
    """Raised when no matching pending friend request exists."""

    code = "request_not_found"

    @classmethod
    def default_message(cls) -> str:
        return "Friend request not found"


class PostNotFound(NotFoundError):
    """Raised when a post does not exist."""

    code = "post_not_found"


class CommentNotFound(NotFoundError):
    """Raised when a comment does not exist."""

    code = "comment_not_found"


# ========================================
# Authorization, storage and cascade failures
# ========================================


class AuthorizationDenied(SocialGraphError):
    """Raised before any mutation when the caller is neither owner nor admin."""

    code = "authorization_denied"
    status_code = 403

    @classmethod
    def default_message(cls) -> str:
        return "Not allowed to act on this account"


class TransientStorageFailure(SocialGraphError):
    """Raised when the document store is unreachable or a transaction conflicts."""

    code = "storage_unavailable"
    status_code = 503


class CascadeIncompleteFailure(SocialGraphError):
    """Raised when any account deletion sweep fails.

    Sweeps that completed before the failure stay committed.
    """

    code = "cascade_incomplete"
    status_code = 500

    def __init__(self, failed_sweeps: list[str], message: str | None = None) -> None:
        self.failed_sweeps = failed_sweeps
        super().__init__(message or f"Account deletion incomplete, failed sweeps: {', '.join(failed_sweeps)}")


class NotificationDeliveryFailure(SocialGraphError):
    """Raised inside notification producers; always logged and swallowed."""

    code = "notification_delivery_failure"
