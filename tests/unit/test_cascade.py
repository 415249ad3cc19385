"""Tests for the account deletion cascade."""

from __future__ import annotations

import asyncio

import pytest

from socialgraph.cascade import AccountDeletionCascade
from socialgraph.errors import AuthorizationDenied, CascadeIncompleteFailure, TargetNotFound, TransientStorageFailure
from socialgraph.models import AuthorizationContext, EntityLink, LinkKind, Notification
from socialgraph.notifications import NotificationFanout

OWNER = AuthorizationContext(is_owner=True)


@pytest.fixture
def populated(store):
    """u1 is the account being deleted; u2 and u3 hold references to it."""
    store.befriend("u1", "u2")
    store.befriend("u1", "u3")
    store.befriend("u2", "u3")
    store.add_post("p_u1", "u1")
    store.add_post("p_u2", "u2")
    store.add_comment("c_u1_on_u2", "u1", "p_u2")
    store.add_comment("c_u2_on_u1", "u2", "p_u1")
    store.add_comment("c_u3_on_u2", "u3", "p_u2")
    store.posts["p_u2"].likes.update({"u1", "u3"})
    store.comments["c_u3_on_u2"].likes.add("u1")
    return store


@pytest.fixture
def cascade(populated):
    return AccountDeletionCascade(populated, populated, populated, populated)


class TestDeleteAccount:
    @pytest.mark.asyncio
    async def test_removes_every_reference(self, cascade, populated):
        await populated.add_pending("u1", "u4")
        await populated.add_pending("u5", "u1")

        await cascade.delete_account("u1", OWNER)

        assert "u1" not in populated.accounts
        for account in populated.accounts.values():
            assert "u1" not in account.friends
        assert all("u1" not in (p.sender_id, p.receiver_id) for p in populated.pending)
        assert all(post.author_id != "u1" for post in populated.posts.values())
        assert all(comment.author_id != "u1" for comment in populated.comments.values())
        assert all("u1" not in item.likes for item in [*populated.posts.values(), *populated.comments.values()])

    @pytest.mark.asyncio
    async def test_liked_post_count_excludes_deleted_account(self, cascade, populated):
        """D liked post P authored by E; after deleting D the like is gone."""
        assert len(populated.posts["p_u2"].likes) == 2

        await cascade.delete_account("u1", OWNER)

        assert populated.posts["p_u2"].likes == {"u3"}

    @pytest.mark.asyncio
    async def test_comments_on_deleted_accounts_posts_go_too(self, cascade, populated):
        await cascade.delete_account("u1", OWNER)

        assert "c_u2_on_u1" not in populated.comments
        assert "c_u3_on_u2" in populated.comments

    @pytest.mark.asyncio
    async def test_other_friendships_untouched(self, cascade, populated):
        await cascade.delete_account("u1", OWNER)

        assert populated.accounts["u2"].friends == {"u3"}
        assert populated.accounts["u3"].friends == {"u2"}

    @pytest.mark.asyncio
    async def test_returns_sweep_counts(self, cascade, populated):
        counts = await cascade.delete_account("u1", OWNER)

        assert counts["friend_lists"] == 2
        assert counts["likes"] == 2
        assert counts["content"] == 3
        assert counts["pending_requests"] == 0

    @pytest.mark.asyncio
    async def test_notifications_addressed_to_account_removed(self, cascade, populated):
        populated.notifications.append(
            Notification(user_id="u1", links=[EntityLink("u2", LinkKind.USER)], content="to u1")
        )
        populated.notifications.append(
            Notification(user_id="u2", links=[EntityLink("u1", LinkKind.USER)], content="about u1")
        )

        await cascade.delete_account("u1", OWNER)

        assert [n.content for n in populated.notifications] == ["about u1"]

    @pytest.mark.asyncio
    async def test_missing_account(self, cascade):
        with pytest.raises(TargetNotFound):
            await cascade.delete_account("ghost", OWNER)

    @pytest.mark.asyncio
    async def test_requires_authorization_before_any_sweep(self, cascade, populated):
        with pytest.raises(AuthorizationDenied):
            await cascade.delete_account("u1", AuthorizationContext())

        assert populated.calls == []
        assert "u1" in populated.accounts


class TestIncompleteCascade:
    @pytest.mark.asyncio
    async def test_failed_sweep_reports_failure_and_keeps_account(self, cascade, populated):
        populated.fail("pull_likes_by_user", TransientStorageFailure("timeout"))

        with pytest.raises(CascadeIncompleteFailure) as exc_info:
            await cascade.delete_account("u1", OWNER)

        assert exc_info.value.failed_sweeps == ["likes"]
        assert "u1" in populated.accounts

    @pytest.mark.asyncio
    async def test_completed_sweeps_stay_committed(self, cascade, populated):
        populated.fail("delete_by_author", TransientStorageFailure("timeout"))

        with pytest.raises(CascadeIncompleteFailure):
            await cascade.delete_account("u1", OWNER)

        assert "u1" not in populated.accounts["u2"].friends
        assert "p_u1" in populated.posts

    @pytest.mark.asyncio
    async def test_every_failed_sweep_is_named(self, cascade, populated):
        populated.fail("purge_from_friend_lists", RuntimeError("boom"))
        populated.fail("purge_pending_for", RuntimeError("boom"))

        with pytest.raises(CascadeIncompleteFailure) as exc_info:
            await cascade.delete_account("u1", OWNER)

        assert exc_info.value.failed_sweeps == ["friend_lists", "pending_requests"]

    @pytest.mark.asyncio
    async def test_notification_cleanup_failure(self, cascade, populated):
        populated.fail("delete_for_user", RuntimeError("boom"))

        with pytest.raises(CascadeIncompleteFailure) as exc_info:
            await cascade.delete_account("u1", OWNER)

        assert exc_info.value.failed_sweeps == ["notifications"]
        assert "u1" in populated.accounts

    @pytest.mark.asyncio
    async def test_retry_after_failure_completes(self, cascade, populated):
        populated.fail("pull_likes_by_user", TransientStorageFailure("timeout"))
        with pytest.raises(CascadeIncompleteFailure):
            await cascade.delete_account("u1", OWNER)

        del populated.failures["pull_likes_by_user"]
        await cascade.delete_account("u1", OWNER)

        assert "u1" not in populated.accounts
        assert populated.posts["p_u2"].likes == {"u3"}


class TestInFlightNotifications:
    @pytest.mark.asyncio
    async def test_in_flight_notification_to_deleted_account_is_cleaned_up(self, populated):
        fanout = NotificationFanout(populated, populated, populated)
        cascade = AccountDeletionCascade(populated, populated, populated, populated, fanout)

        async def slow_producer() -> Notification:
            await asyncio.sleep(0.05)
            return await populated.create(
                Notification(user_id="u1", links=[EntityLink("u3", LinkKind.USER)], content="late")
            )

        fanout.dispatch(slow_producer)
        await cascade.delete_account("u1", OWNER)

        assert fanout.pending_count == 0
        assert all(n.user_id != "u1" for n in populated.notifications)

    @pytest.mark.asyncio
    async def test_without_fanout_cleanup_runs_immediately(self, cascade, populated):
        await cascade.delete_account("u1", OWNER)

        assert "delete_for_user" in populated.calls
