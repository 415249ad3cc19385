"""
Authentication middleware - bypass mode for development, PocketBase tokens in production.

Authentication only establishes who the caller is. Whether the caller may act
on a given account is decided per route through an AuthorizationContext.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import Depends, HTTPException, Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse, Response

from .environment import is_docker_environment
from .models import AuthorizationContext
from .pocketbase_auth import PocketBaseTokenValidator, extract_bearer_token

logger = logging.getLogger(__name__)

PUBLIC_PATHS = frozenset({"/health", "/api/health", "/api/config"})
BYPASS_USER_HEADER = "X-User-Id"


class AuthUser:
    """Represents an authenticated account."""

    def __init__(self, id: str, email: str, display_name: str, is_admin: bool):
        self.id = id
        self.email = email
        self.display_name = display_name
        self.is_admin = is_admin

    def authorization_for(self, owner_id: str) -> AuthorizationContext:
        """Authorization flags for acting on resources owned by owner_id."""
        return AuthorizationContext.for_caller(self.id, self.is_admin, owner_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "display_name": self.display_name,
            "is_admin": self.is_admin,
        }


class AuthMiddleware(BaseHTTPMiddleware):
    """
    Middleware for handling authentication.

    Supports two modes:
    - bypass: act as the account named in the X-User-Id header, or as a
      development admin when the header is absent (development only)
    - production: validate PocketBase account tokens
    """

    def __init__(self, app: Any, auth_mode: str, pocketbase_url: str = "http://127.0.0.1:8090"):
        super().__init__(app)
        self.auth_mode = auth_mode.lower()

        if self.auth_mode not in ["bypass", "production"]:
            raise ValueError(f"Invalid AUTH_MODE: {auth_mode}. Must be bypass or production")

        if self.auth_mode == "bypass" and is_docker_environment():
            raise ValueError(
                "SECURITY ERROR: AUTH_MODE=bypass is not allowed in Docker containers. "
                "Docker deployments must use AUTH_MODE=production."
            )

        self.token_validator: PocketBaseTokenValidator | None = None
        if self.auth_mode == "production":
            self.token_validator = PocketBaseTokenValidator(pocketbase_url)

        logger.info(f"Authentication middleware initialized in {self.auth_mode} mode")

    def _bypass_user(self, request: Request) -> AuthUser:
        account_id = request.headers.get(BYPASS_USER_HEADER)
        if account_id:
            return AuthUser(id=account_id, email="", display_name=account_id, is_admin=False)
        return AuthUser(id="dev_admin", email="dev_admin@example.com", display_name="Dev Admin", is_admin=True)

    async def _extract_user_from_token(self, request: Request) -> AuthUser | None:
        token = extract_bearer_token(request.headers.get("Authorization"))
        if not token or self.token_validator is None:
            logger.debug("No bearer token found in Authorization header")
            return None

        claims = await asyncio.to_thread(self.token_validator.validate_token, token)
        if not claims or not claims.get("sub"):
            return None

        return AuthUser(
            id=claims["sub"],
            email=claims.get("email", ""),
            display_name=claims.get("name", ""),
            is_admin=bool(claims.get("is_admin", False)),
        )

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Process the request and add authentication context."""
        if request.url.path in PUBLIC_PATHS:
            return await call_next(request)

        if self.auth_mode == "bypass":
            user: AuthUser | None = self._bypass_user(request)
        else:
            user = await self._extract_user_from_token(request)

        if not user:
            if request.method == "OPTIONS":
                return await call_next(request)
            logger.warning(f"Unauthenticated request to {request.url.path} in {self.auth_mode} mode")
            # BaseHTTPMiddleware turns raised HTTPExceptions into 500s
            return JSONResponse(status_code=401, content={"detail": "Authentication required"})

        request.state.user = user
        logger.debug(f"Authenticated request from {user.id} to {request.url.path}")
        return await call_next(request)


def get_current_user(request: Request) -> AuthUser:
    """
    Dependency to get the current authenticated user.

    Usage:
        @router.get("/protected")
        async def protected_route(user: AuthUser = Depends(get_current_user)):
            return {"message": f"Hello {user.display_name}"}
    """
    if not hasattr(request.state, "user") or not request.state.user:
        raise HTTPException(status_code=401, detail="Not authenticated")

    user: AuthUser = request.state.user
    return user


def require_admin(user: AuthUser = Depends(get_current_user)) -> AuthUser:
    """Dependency to require admin access."""
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")

    return user


def create_auth_middleware(app: Any, auth_mode: str, pocketbase_url: str) -> AuthMiddleware:
    return AuthMiddleware(app, auth_mode, pocketbase_url)
