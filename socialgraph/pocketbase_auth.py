"""
PocketBase user token validation.

Accounts are PocketBase auth records, so an account's bearer token is
validated by asking PocketBase to refresh it.
"""

from __future__ import annotations

import base64
import hashlib
import json
import logging
import time
from typing import Any, cast

import httpx

logger = logging.getLogger(__name__)

SUPERUSERS_COLLECTION = "_superusers"


def _decode_jwt_claims_unsafe(token: str) -> dict[str, Any]:
    """Decode JWT claims WITHOUT verification. For inspection only."""
    try:
        parts = token.split(".")
        if len(parts) != 3:
            return {}
        payload = parts[1]
        payload += "=" * (-len(payload) % 4)
        return cast(dict[str, Any], json.loads(base64.urlsafe_b64decode(payload)))
    except Exception:
        return {}


class PocketBaseTokenValidator:
    """Validates account tokens through the PocketBase auth-refresh endpoint."""

    def __init__(self, pocketbase_url: str, users_collection: str = "users", cache_ttl: float = 60):
        self.pocketbase_url = pocketbase_url.rstrip("/")
        self.users_collection = users_collection
        self._validation_cache: dict[str, tuple[dict[str, Any], float]] = {}
        self._cache_ttl = cache_ttl

    def validate_token(self, token: str) -> dict[str, Any] | None:
        """
        Validate a PocketBase token.

        Returns claims (sub, email, name, is_admin) if valid, None otherwise.
        """
        unverified_claims = _decode_jwt_claims_unsafe(token)
        if SUPERUSERS_COLLECTION in (unverified_claims.get("collectionName"), unverified_claims.get("collectionId")):
            logger.warning("SECURITY: Rejecting _superusers token. Admin tokens cannot be used for API access.")
            return None

        cache_key = hashlib.sha256(token.encode()).hexdigest()[:32]
        cached = self._validation_cache.get(cache_key)
        if cached is not None:
            claims, expiry = cached
            if time.time() < expiry:
                logger.debug("Using cached PocketBase token validation")
                return claims
            del self._validation_cache[cache_key]

        try:
            response = httpx.post(
                f"{self.pocketbase_url}/api/collections/{self.users_collection}/auth-refresh",
                headers={"Authorization": f"Bearer {token}"},
                timeout=5.0,
            )
        except httpx.TimeoutException:
            logger.warning("PocketBase token validation timed out")
            return None
        except httpx.HTTPError as e:
            logger.error(f"Error validating PocketBase token: {type(e).__name__}: {e}")
            return None

        if response.status_code != 200:
            logger.debug(f"PocketBase auth-refresh returned status {response.status_code}")
            return None

        record = response.json().get("record", {})
        first_name = record.get("first_name", "")
        last_name = record.get("last_name", "")
        claims = {
            "sub": record.get("id", ""),
            "email": record.get("email", ""),
            "name": f"{first_name} {last_name}".strip(),
            "is_admin": bool(record.get("is_admin", False)),
        }
        self._validation_cache[cache_key] = (claims, time.time() + self._cache_ttl)
        logger.info(f"PocketBase token validated for account {claims['sub']}")
        return claims


def extract_bearer_token(authorization_header: str | None) -> str | None:
    """Extract bearer token from Authorization header."""
    if not authorization_header:
        return None

    parts = authorization_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None

    return parts[1]
