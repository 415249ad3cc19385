"""Fixtures for router tests.

The app runs in bypass auth mode; requests pick the caller with the
X-User-Id header. Stores are replaced by the in-memory backend and the
notification fan-out by a mock so dispatches can be asserted directly.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from tests.fixtures.memory_store import MemoryStore


@pytest.fixture
def fanout() -> MagicMock:
    mock = MagicMock()
    mock.drain = AsyncMock()
    return mock


@pytest.fixture
def client(store: MemoryStore, fanout: MagicMock):
    from api import dependencies
    from api.main import create_app

    with (
        patch("api.settings.Settings.get_effective_auth_mode", return_value="bypass"),
        patch("socialgraph.auth_middleware.is_docker_environment", return_value=False),
    ):
        app = create_app()
        app.dependency_overrides[dependencies.get_account_directory] = lambda: store
        app.dependency_overrides[dependencies.get_relationship_store] = lambda: store
        app.dependency_overrides[dependencies.get_content_store] = lambda: store
        app.dependency_overrides[dependencies.get_notification_store] = lambda: store
        app.dependency_overrides[dependencies.get_notification_fanout] = lambda: fanout
        yield TestClient(app)
