"""
Root test configuration and fixtures for the social graph project.

This conftest.py provides common fixtures for all tests:
- unit/: Fast, isolated tests of the core against the in-memory store
- unit/api/: Router tests through FastAPI's TestClient

Note: sys.path manipulation is handled here to ensure imports work correctly.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

# Add project root to path to allow imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Settings are read at import time by api.dependencies
os.environ.setdefault("AUTH_MODE", "bypass")
os.environ.setdefault("SKIP_PB_AUTH", "true")

from tests.fixtures.memory_store import MemoryStore  # noqa: E402


def create_mock_pocketbase():
    """Create a comprehensive mock PocketBase instance."""
    mock_pb = Mock()

    mock_collection = Mock()
    mock_collection.auth_with_password = Mock(return_value=True)

    mock_list_response = Mock()
    mock_list_response.items = []
    mock_list_response.total_items = 0
    mock_list_response.total_pages = 1
    mock_list_response.page = 1
    mock_list_response.per_page = 30

    mock_collection.get_full_list = Mock(return_value=[])
    mock_collection.get_list = Mock(return_value=mock_list_response)
    mock_collection.get_one = Mock()
    mock_collection.create = Mock(return_value=Mock(id="mock-id"))
    mock_collection.update = Mock()
    mock_collection.delete = Mock()

    mock_pb.collection = Mock(return_value=mock_collection)
    mock_pb.send = Mock(return_value=[])

    mock_pb.auth_store = Mock()
    mock_pb.auth_store.base_token = "mock-token"
    mock_pb.auth_store.base_model = Mock()

    return mock_pb


@pytest.fixture
def mock_pocketbase():
    """Create a mock PocketBase instance for tests that need it."""
    return create_mock_pocketbase()


@pytest.fixture(autouse=True)
def mock_all_external_services():
    """Automatically mock PocketBase to prevent real connections."""
    if os.environ.get("SKIP_MOCKING") == "true":
        yield {}
        return

    mock_pb = create_mock_pocketbase()

    with patch("pocketbase.PocketBase") as mock_pb_class, patch("pocketbase.Client") as mock_client_class:
        mock_pb_class.return_value = mock_pb
        mock_client_class.return_value = mock_pb
        yield {"pocketbase": mock_pb}


@pytest.fixture
def store() -> MemoryStore:
    """In-memory backend seeded with five accounts, U1 to U5."""
    memory = MemoryStore()
    for i in range(1, 6):
        memory.add_account(f"u{i}", first_name=f"User{i}", last_name="Test")
    return memory
