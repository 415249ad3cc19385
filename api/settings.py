"""
Application settings using pydantic-settings for type-safe configuration.

All environment variables are centralized here with proper typing, validation,
and sensible defaults. Settings are loaded once at startup and cached.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from socialgraph.environment import is_docker_environment, is_github_actions

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Defaults suit local development; production values come from the
    environment or a .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # === Authentication ===
    auth_mode: str = Field(
        default="production",
        description="Authentication mode: 'production' (PocketBase tokens) or 'bypass' (dev only)",
    )
    admin_group_name: str = Field(
        default="admin",
        description="Name of the administrator role shown to the frontend",
    )
    skip_pb_auth: bool = Field(
        default=False,
        description="Skip PocketBase authentication on startup (for testing)",
    )

    # === PocketBase Configuration ===
    pocketbase_url: str = Field(
        default="http://127.0.0.1:8090",
        description="PocketBase server URL",
    )
    pocketbase_admin_email: str = Field(
        default="admin@socialgraph.local",
        description="PocketBase superuser email used by the API",
    )
    pocketbase_admin_password: str = Field(
        default="",
        description="PocketBase superuser password (required - no default for security)",
    )

    @field_validator("pocketbase_admin_password", mode="after")
    @classmethod
    def validate_admin_password(cls, v: str) -> str:
        """Warn when the superuser password is unset or a well-known default."""
        insecure_defaults = {"password", "admin", "123456", ""}
        if v in insecure_defaults:
            logger.warning(
                "SECURITY WARNING: POCKETBASE_ADMIN_PASSWORD is not set or uses an insecure default. "
                "Set a strong password in your .env file for production use."
            )
        return v

    # === CORS Configuration ===
    allowed_origins_str: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        alias="ALLOWED_ORIGINS",
        description="Allowed CORS origins (comma-separated)",
    )

    # === Docker Detection ===
    is_docker: bool = Field(
        default=False,
        description="Whether running in Docker container",
    )

    # === Social Graph ===
    recommendation_default_limit: int = Field(
        default=10,
        ge=1,
        description="Page size for friend recommendations when no limit is given",
    )
    recommendation_max_limit: int = Field(
        default=50,
        ge=1,
        description="Largest page of friend recommendations a caller may request",
    )
    comment_max_length: int = Field(
        default=280,
        ge=1,
        description="Maximum length of a comment body created through the API",
    )

    @property
    def allowed_origins(self) -> list[str]:
        """Parse comma-separated origins string into list."""
        return [origin.strip() for origin in self.allowed_origins_str.split(",") if origin.strip()]

    @field_validator("is_docker", mode="before")
    @classmethod
    def parse_is_docker(cls, v: str | bool) -> bool:
        """Parse IS_DOCKER env var which can be 'true', '1', 'yes', etc."""
        if isinstance(v, bool):
            return v
        if isinstance(v, str):
            return v.lower() in ("true", "1", "yes")
        return False

    @field_validator("auth_mode", mode="after")
    @classmethod
    def validate_auth_mode(cls, v: str) -> str:
        """Validate and normalize auth_mode."""
        v = v.lower()
        if v not in ("bypass", "production"):
            raise ValueError(f"Invalid AUTH_MODE: {v}. Must be 'bypass' or 'production'")
        return v

    def is_docker_environment(self) -> bool:
        return self.is_docker or is_docker_environment()

    def get_effective_auth_mode(self) -> str:
        """Get effective auth mode, forcing production in Docker (except CI)."""
        if self.is_docker_environment() and not is_github_actions():
            return "production"
        return self.auth_mode

    def clamp_recommendation_limit(self, limit: int | None) -> int:
        if limit is None:
            return self.recommendation_default_limit
        return max(0, min(limit, self.recommendation_max_limit))


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are loaded once and cached for the lifetime of the application.
    """
    return Settings()
