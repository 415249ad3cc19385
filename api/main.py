#!/usr/bin/env python3
"""
Social Graph API - HTTP layer for accounts, friendships and notifications.

This is the FastAPI application in front of the social graph core. It wires:
- Friend request workflow and friend lists
- Friend-of-friend recommendations
- Notifications fed by likes, comments and accepted requests
- Account deletion with reference cleanup
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from socialgraph.auth_middleware import AuthUser, create_auth_middleware, get_current_user
from socialgraph.errors import SocialGraphError
from socialgraph.logging_config import configure_logging, get_logger

from .dependencies import authenticate_pb, fanout
from .settings import get_settings

# Format: 2026-01-06T14:05:52Z [api] LEVEL message
configure_logging(source="api")
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle - startup and shutdown."""
    settings = get_settings()

    if not settings.skip_pb_auth:
        await authenticate_pb()
    else:
        logger.warning("Skipping PocketBase authentication (SKIP_PB_AUTH=true)")

    yield

    if fanout.pending_count:
        logger.info(f"Waiting for {fanout.pending_count} notification tasks to finish")
    await fanout.drain()


async def social_graph_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Map core errors to their HTTP status with a stable error code."""
    if not isinstance(exc, SocialGraphError):
        raise exc
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code}: {exc}")
    else:
        logger.debug(f"{request.method} {request.url.path} rejected: {exc.code}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "code": exc.code})


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(title="Social Graph API", description="Friends, recommendations and notifications", lifespan=lifespan)

    app.add_exception_handler(SocialGraphError, social_graph_error_handler)

    @app.exception_handler(401)
    async def unauthorized_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=401, content={"detail": str(exc.detail) if hasattr(exc, "detail") else "Unauthorized"}
        )

    @app.exception_handler(403)
    async def forbidden_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=403, content={"detail": str(exc.detail) if hasattr(exc, "detail") else "Forbidden"}
        )

    settings = get_settings()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    auth_mode = settings.get_effective_auth_mode()
    pocketbase_url = settings.pocketbase_url

    # Added after CORS so it runs inside it
    app.add_middleware(lambda a: create_auth_middleware(a, auth_mode, pocketbase_url))

    from .routers import content, friends, notifications, users

    app.include_router(friends.router)
    app.include_router(users.router)
    app.include_router(notifications.router)
    app.include_router(content.router)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "service": "socialgraph-api"}

    @app.get("/api/config")
    async def get_auth_config() -> dict[str, Any]:
        """Get authentication configuration for frontend."""
        current_auth_mode = settings.get_effective_auth_mode()

        if current_auth_mode == "bypass":
            return {"auth_mode": "bypass"}

        return {
            "auth_mode": "production",
            "pocketbase_url": settings.pocketbase_url,
            "users_collection": "users",
            "admin_group": settings.admin_group_name,
        }

    @app.get("/api/user/me")
    async def get_current_user_info(user: AuthUser = Depends(get_current_user)) -> dict[str, Any]:
        """Get current user information."""
        return user.to_dict()

    return app


# Create app instance for uvicorn
app = create_app()
