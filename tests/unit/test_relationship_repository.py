"""Tests for RelationshipRepository against a mocked PocketBase client."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import Mock

import pytest
from pocketbase.client import ClientResponseError  # type: ignore[attr-defined]

from socialgraph.data.repositories.relationship_repository import RelationshipRepository
from socialgraph.errors import DuplicateRequest, TargetNotFound, TransientStorageFailure


def list_result(*items):
    return SimpleNamespace(items=list(items), total_items=len(items))


class TestRelationshipRepository:
    @pytest.fixture
    def mock_pb_client(self) -> tuple[Mock, Mock]:
        mock_client = Mock()
        mock_collection = Mock()
        mock_client.collection.return_value = mock_collection
        return mock_client, mock_collection

    @pytest.fixture
    def repository(self, mock_pb_client):
        mock_client, _ = mock_pb_client
        return RelationshipRepository(mock_client)

    # ---- friend lists ----

    @pytest.mark.asyncio
    async def test_get_friend_ids(self, repository, mock_pb_client):
        _, collection = mock_pb_client
        collection.get_one.return_value = SimpleNamespace(id="u1", friends=["u2", "u3"])

        assert await repository.get_friend_ids("u1") == {"u2", "u3"}

    @pytest.mark.asyncio
    async def test_get_friend_ids_missing_account(self, repository, mock_pb_client):
        _, collection = mock_pb_client
        collection.get_one.side_effect = ClientResponseError("not found", status=404)

        assert await repository.get_friend_ids("ghost") == set()

    @pytest.mark.asyncio
    async def test_are_friends_filters_on_relation(self, repository, mock_pb_client):
        client, collection = mock_pb_client
        collection.get_list.return_value = list_result(SimpleNamespace(id="u1"))

        assert await repository.are_friends("u1", "u2") is True
        client.collection.assert_called_with("users")
        params = collection.get_list.call_args[0][2]
        assert params["filter"] == 'id = "u1" && friends ~ "u2"'

    @pytest.mark.asyncio
    async def test_get_friend_sets_batches_ids(self, repository, mock_pb_client):
        _, collection = mock_pb_client
        collection.get_full_list.return_value = [
            SimpleNamespace(id="a", friends=["b"]),
            SimpleNamespace(id="b", friends=[]),
        ]

        result = await repository.get_friend_sets(["a", "b"])

        assert result == {"a": {"b"}, "b": set()}
        params = collection.get_full_list.call_args.kwargs["query_params"]
        assert params["filter"] == 'id = "a" || id = "b"'

    @pytest.mark.asyncio
    async def test_remove_friendship_is_one_batch(self, repository, mock_pb_client):
        client, _ = mock_pb_client

        await repository.remove_friendship("u1", "u2")

        client.send.assert_called_once()
        path, options = client.send.call_args[0]
        assert path == "/api/batch"
        assert options["body"]["requests"] == [
            {"method": "PATCH", "url": "/api/collections/users/records/u1", "body": {"friends-": "u2"}},
            {"method": "PATCH", "url": "/api/collections/users/records/u2", "body": {"friends-": "u1"}},
        ]

    @pytest.mark.asyncio
    async def test_remove_friendship_missing_account(self, repository, mock_pb_client):
        client, _ = mock_pb_client
        client.send.side_effect = ClientResponseError("batch failed", status=400)

        with pytest.raises(TargetNotFound):
            await repository.remove_friendship("u1", "ghost")

    @pytest.mark.asyncio
    async def test_purge_from_friend_lists(self, repository, mock_pb_client):
        _, collection = mock_pb_client
        collection.get_full_list.return_value = [SimpleNamespace(id="u2"), SimpleNamespace(id="u3")]
        collection.update.side_effect = [Mock(), ClientResponseError("gone", status=404)]

        assert await repository.purge_from_friend_lists("u1") == 1
        collection.update.assert_any_call("u2", {"friends-": "u1"})

    # ---- pending requests ----

    @pytest.mark.asyncio
    async def test_add_pending_creates_record(self, repository, mock_pb_client):
        client, collection = mock_pb_client
        collection.create.return_value = SimpleNamespace(
            id="r1", sender="u1", receiver="u2", viewed=False, created="2026-01-06 14:05:52.000Z"
        )

        request = await repository.add_pending("u1", "u2")

        client.collection.assert_called_with("friend_requests")
        collection.create.assert_called_once_with({"sender": "u1", "receiver": "u2", "viewed": False})
        assert request.id == "r1"
        assert request.sender_id == "u1"
        assert request.viewed is False
        assert request.created is not None

    @pytest.mark.asyncio
    async def test_add_pending_unique_violation_is_duplicate(self, repository, mock_pb_client):
        _, collection = mock_pb_client
        collection.create.side_effect = ClientResponseError(
            "bad", status=400, data={"data": {"sender": {"code": "validation_not_unique"}}}
        )

        with pytest.raises(DuplicateRequest):
            await repository.add_pending("u1", "u2")

    @pytest.mark.asyncio
    async def test_add_pending_bad_relation_is_target_not_found(self, repository, mock_pb_client):
        _, collection = mock_pb_client
        collection.create.side_effect = ClientResponseError(
            "bad", status=400, data={"data": {"receiver": {"code": "validation_missing_rel_records"}}}
        )

        with pytest.raises(TargetNotFound):
            await repository.add_pending("u1", "ghost")

    @pytest.mark.asyncio
    async def test_list_pending_sorted_unviewed_first(self, repository, mock_pb_client):
        _, collection = mock_pb_client
        collection.get_full_list.return_value = [
            SimpleNamespace(id="r1", sender="u3", receiver="u1", viewed=False, created=""),
        ]

        pending = await repository.list_pending("u1")

        assert [p.sender_id for p in pending] == ["u3"]
        params = collection.get_full_list.call_args.kwargs["query_params"]
        assert params["sort"] == "viewed,-created"
        assert params["filter"] == 'receiver = "u1"'

    @pytest.mark.asyncio
    async def test_remove_pending_reports_no_match(self, repository, mock_pb_client):
        _, collection = mock_pb_client
        collection.get_list.return_value = list_result()

        assert await repository.remove_pending("u1", "u2") is False
        collection.delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_remove_pending_lost_race(self, repository, mock_pb_client):
        _, collection = mock_pb_client
        collection.get_list.return_value = list_result(SimpleNamespace(id="r1"))
        collection.delete.side_effect = ClientResponseError("gone", status=404)

        assert await repository.remove_pending("u1", "u2") is False

    @pytest.mark.asyncio
    async def test_mark_pending_viewed(self, repository, mock_pb_client):
        _, collection = mock_pb_client
        collection.get_full_list.return_value = [SimpleNamespace(id="r1"), SimpleNamespace(id="r2")]

        assert await repository.mark_pending_viewed("u1") == 2
        collection.update.assert_any_call("r2", {"viewed": True})

    @pytest.mark.asyncio
    async def test_accept_pending_batches_delete_and_both_appends(self, repository, mock_pb_client):
        client, collection = mock_pb_client
        collection.get_list.side_effect = [list_result(SimpleNamespace(id="r9")), list_result()]

        assert await repository.accept_pending("u2", "u1") is True

        requests = client.send.call_args[0][1]["body"]["requests"]
        assert requests == [
            {"method": "DELETE", "url": "/api/collections/friend_requests/records/r9"},
            {"method": "PATCH", "url": "/api/collections/users/records/u1", "body": {"friends+": "u2"}},
            {"method": "PATCH", "url": "/api/collections/users/records/u2", "body": {"friends+": "u1"}},
        ]

    @pytest.mark.asyncio
    async def test_accept_pending_deletes_crossed_request_in_same_batch(self, repository, mock_pb_client):
        client, collection = mock_pb_client
        collection.get_list.side_effect = [
            list_result(SimpleNamespace(id="r9")),
            list_result(SimpleNamespace(id="r10")),
        ]

        assert await repository.accept_pending("u2", "u1") is True

        reverse_filter = collection.get_list.call_args_list[1].args[2]["filter"]
        assert reverse_filter == 'sender = "u1" && receiver = "u2"'
        requests = client.send.call_args[0][1]["body"]["requests"]
        assert client.send.call_count == 1
        assert requests[-1] == {"method": "DELETE", "url": "/api/collections/friend_requests/records/r10"}
        assert len(requests) == 4

    @pytest.mark.asyncio
    async def test_accept_pending_without_request(self, repository, mock_pb_client):
        client, collection = mock_pb_client
        collection.get_list.return_value = list_result()

        assert await repository.accept_pending("u2", "u1") is False
        client.send.assert_not_called()

    @pytest.mark.asyncio
    async def test_accept_pending_request_vanished_during_batch(self, repository, mock_pb_client):
        """Another accept or reject removed the request between lookup and batch."""
        client, collection = mock_pb_client
        collection.get_list.side_effect = [list_result(SimpleNamespace(id="r9")), list_result(), list_result()]
        client.send.side_effect = ClientResponseError("batch failed", status=400)

        assert await repository.accept_pending("u2", "u1") is False

    @pytest.mark.asyncio
    async def test_accept_pending_batch_conflict(self, repository, mock_pb_client):
        client, collection = mock_pb_client
        collection.get_list.return_value = list_result(SimpleNamespace(id="r9"))
        client.send.side_effect = ClientResponseError("batch failed", status=400)

        with pytest.raises(TransientStorageFailure):
            await repository.accept_pending("u2", "u1")

    @pytest.mark.asyncio
    async def test_purge_pending_for_matches_both_sides(self, repository, mock_pb_client):
        _, collection = mock_pb_client
        collection.get_full_list.return_value = [SimpleNamespace(id="r1")]

        assert await repository.purge_pending_for("u1") == 1
        params = collection.get_full_list.call_args.kwargs["query_params"]
        assert params["filter"] == 'sender = "u1" || receiver = "u1"'

    @pytest.mark.asyncio
    async def test_count_unviewed_pending(self, repository, mock_pb_client):
        _, collection = mock_pb_client
        collection.get_list.return_value = SimpleNamespace(items=[], total_items=4)

        assert await repository.count_unviewed_pending("u1") == 4
