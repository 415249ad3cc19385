"""Tests for app-level endpoints and error mapping."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from socialgraph.errors import AuthorizationDenied, DuplicateRequest, SocialGraphError


class TestCoreEndpoints:
    def test_health(self, client):
        response = client.get("/health")

        assert response.json() == {"status": "healthy", "service": "socialgraph-api"}

    def test_config_in_bypass_mode(self, client):
        assert client.get("/api/config").json() == {"auth_mode": "bypass"}

    def test_me(self, client):
        response = client.get("/api/user/me", headers={"X-User-Id": "u3"})

        assert response.json()["id"] == "u3"


class TestErrorHandler:
    @pytest.fixture
    def app(self) -> FastAPI:
        from api.main import social_graph_error_handler

        app = FastAPI()
        app.add_exception_handler(SocialGraphError, social_graph_error_handler)

        @app.get("/duplicate")
        async def duplicate() -> None:
            raise DuplicateRequest()

        @app.get("/denied")
        async def denied() -> None:
            raise AuthorizationDenied()

        return app

    def test_maps_status_and_code(self, app):
        response = TestClient(app).get("/duplicate")

        assert response.status_code == 400
        assert response.json() == {"detail": "Already sent a friend request", "code": "duplicate_request"}

    def test_authorization_denied(self, app):
        response = TestClient(app).get("/denied")

        assert response.status_code == 403
        assert response.json()["code"] == "authorization_denied"


class TestLifespan:
    def test_shutdown_drains_fanout(self):
        from api import dependencies
        from api.main import create_app

        with (
            patch("api.settings.Settings.get_effective_auth_mode", return_value="bypass"),
            patch("socialgraph.auth_middleware.is_docker_environment", return_value=False),
            patch.object(dependencies.fanout, "drain", new=AsyncMock()) as drain,
        ):
            with TestClient(create_app()) as client:
                client.get("/health")

        drain.assert_awaited_once()
