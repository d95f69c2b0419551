"""Tests for the notification store: optimistic read toggles and confirmed deletes."""

import asyncio

import pytest
import pytest_asyncio
from unittest.mock import AsyncMock

from resumeai.api.client import APIError
from resumeai.api.notifications import NotificationAPI
from resumeai.stores import NotificationPreferencesStore, NotificationStore, StoreStatus


def raw_notification(notification_id, is_read=False):
    raw = {"_id": notification_id, "title": f"Title {notification_id}", "message": "m", "isRead": is_read}
    if is_read:
        raw["readAt"] = "2024-05-01T10:00:00Z"
    return raw


def list_payload(*records, unread=None):
    if unread is None:
        unread = sum(1 for r in records if not r["isRead"])
    return {"notifications": list(records), "unreadCount": unread, "pagination": {"page": 1}}


@pytest.fixture
def api():
    mock_api = AsyncMock(spec=NotificationAPI)
    mock_api.list.return_value = list_payload(
        raw_notification("n1"), raw_notification("n2"), raw_notification("n3", is_read=True)
    )
    mock_api.stats.return_value = {"stats": {"total": 3, "unread": 2}}
    return mock_api


@pytest_asyncio.fixture
async def store(api):
    notification_store = NotificationStore(api, page_size=10)
    await notification_store.fetch()
    return notification_store


class TestFetch:

    @pytest.mark.asyncio
    async def test_fetch_populates(self, api):
        store = NotificationStore(api, page_size=10)
        assert store.status is StoreStatus.IDLE

        data = await store.fetch()

        assert data["unreadCount"] == 2
        assert [n.id for n in store.notifications] == ["n1", "n2", "n3"]
        assert store.unread_count == 2
        assert store.pagination == {"page": 1}
        assert store.status is StoreStatus.POPULATED
        api.list.assert_awaited_once_with(limit=10)

    @pytest.mark.asyncio
    async def test_failed_fetch_keeps_cached_list(self, store, api):
        api.list.side_effect = APIError("Server down", 500)

        assert await store.fetch() is None

        assert store.error == "Server down"
        assert store.status is StoreStatus.FAILED
        assert len(store.notifications) == 3

    @pytest.mark.asyncio
    async def test_only_latest_fetch_applies(self, api):
        store = NotificationStore(api)
        slow_started = asyncio.Event()
        release_slow = asyncio.Event()

        async def slow_then_fast(**params):
            if not slow_started.is_set():
                slow_started.set()
                await release_slow.wait()
                return list_payload(raw_notification("old"))
            return list_payload(raw_notification("new"))

        api.list.side_effect = slow_then_fast

        slow = asyncio.create_task(store.fetch())
        await slow_started.wait()
        await store.fetch()
        release_slow.set()
        assert await slow is None

        assert [n.id for n in store.notifications] == ["new"]

    @pytest.mark.asyncio
    async def test_closed_store_drops_results(self, api):
        store = NotificationStore(api)
        release = asyncio.Event()

        async def delayed(**params):
            await release.wait()
            return list_payload(raw_notification("n1"))

        api.list.side_effect = delayed

        pending = asyncio.create_task(store.fetch())
        await asyncio.sleep(0)
        store.close()
        release.set()
        await pending

        assert store.notifications == []
        assert store.alive is False


class TestReadToggles:

    @pytest.mark.asyncio
    async def test_mark_read_is_applied_and_reconciled(self, store, api):
        api.stats.return_value = {"stats": {"unread": 1}}

        await store.mark_read("n1")

        assert store.find("n1").is_read is True
        assert store.find("n1").read_at is not None
        assert store.unread_count == 1
        api.mark_read.assert_awaited_once_with("n1")
        api.stats.assert_awaited()

    @pytest.mark.asyncio
    async def test_mark_read_is_applied_before_the_server_answers(self, store, api):
        seen = {}

        async def capture(notification_id):
            seen["is_read"] = store.find(notification_id).is_read
            seen["unread"] = store.unread_count
            return {}

        api.mark_read.side_effect = capture
        api.stats.return_value = {"stats": {"unread": 1}}

        await store.mark_read("n1")

        assert seen == {"is_read": True, "unread": 1}

    @pytest.mark.asyncio
    async def test_mark_read_twice_decrements_once(self, store, api):
        api.stats.side_effect = APIError("stats offline")

        await store.mark_read("n1")
        await store.mark_read("n1")

        assert store.unread_count == 1
        assert store.errors[NotificationStore.UNREAD_COUNT] == "stats offline"

    @pytest.mark.asyncio
    async def test_mark_read_failure_reverts(self, store, api):
        api.mark_read.side_effect = APIError("Forbidden", 403)
        api.stats.return_value = {"stats": {"unread": 2}}

        with pytest.raises(APIError):
            await store.mark_read("n1")

        assert store.find("n1").is_read is False
        assert store.unread_count == 2
        assert store.errors["mark_read:n1"] == "Forbidden"
        assert store.status is StoreStatus.POPULATED

    @pytest.mark.asyncio
    async def test_mark_unread(self, store, api):
        api.stats.return_value = {"stats": {"unread": 3}}

        await store.mark_unread("n3")

        assert store.find("n3").is_read is False
        assert store.find("n3").read_at is None
        assert store.unread_count == 3

    @pytest.mark.asyncio
    async def test_mark_all_read(self, store, api):
        await store.mark_all_read()

        assert all(n.is_read for n in store.notifications)
        assert store.unread_count == 0


class TestDeletes:

    @pytest.mark.asyncio
    async def test_delete_is_confirmed(self, store, api):
        await store.delete("n1")

        assert store.find("n1") is None
        assert store.unread_count == 1

    @pytest.mark.asyncio
    async def test_delete_waits_for_the_server(self, store, api):
        seen = {}

        async def capture(notification_id):
            seen["present"] = store.find(notification_id) is not None
            seen["status"] = store.status
            return {}

        api.delete.side_effect = capture

        await store.delete("n2")

        assert seen == {"present": True, "status": StoreStatus.MUTATING}
        assert store.find("n2") is None

    @pytest.mark.asyncio
    async def test_failed_delete_leaves_list_unchanged(self, store, api):
        api.delete.side_effect = APIError("Not found", 404)

        with pytest.raises(APIError):
            await store.delete("n1")

        assert [n.id for n in store.notifications] == ["n1", "n2", "n3"]
        assert store.unread_count == 2
        assert store.errors["delete:n1"] == "Not found"

    @pytest.mark.asyncio
    async def test_errors_are_kept_per_operation(self, store, api):
        api.delete.side_effect = APIError("delete failed")
        api.mark_read.side_effect = APIError("read failed")

        results = await asyncio.gather(store.delete("n1"), store.mark_read("n2"), return_exceptions=True)

        assert all(isinstance(r, APIError) for r in results)
        assert store.errors["delete:n1"] == "delete failed"
        assert store.errors["mark_read:n2"] == "read failed"

    @pytest.mark.asyncio
    async def test_concurrent_deletes_both_land(self, store, api):
        await asyncio.gather(store.delete("n1"), store.delete("n3"))

        assert [n.id for n in store.notifications] == ["n2"]

    @pytest.mark.asyncio
    async def test_delete_all_read(self, store, api):
        await store.delete_all_read()

        assert [n.id for n in store.notifications] == ["n1", "n2"]

    @pytest.mark.asyncio
    async def test_delete_all_uses_collection_endpoint(self, store, api):
        await store.delete_all()

        api.delete_all.assert_awaited_once()
        api.delete.assert_not_awaited()
        assert store.notifications == []
        assert store.unread_count == 0

    @pytest.mark.asyncio
    async def test_delete_all_falls_back_to_individual_deletes(self, store, api):
        api.delete_all.side_effect = APIError("Not found", 404)

        await store.delete_all()

        assert sorted(c.args[0] for c in api.delete.await_args_list) == ["n1", "n2", "n3"]
        assert store.notifications == []
        assert store.unread_count == 0

    @pytest.mark.asyncio
    async def test_partial_fallback_failure_keeps_survivors(self, store, api):
        api.delete_all.side_effect = APIError("Method not allowed", 405)

        async def delete(notification_id):
            if notification_id == "n2":
                raise APIError("locked")
            return {}

        api.delete.side_effect = delete

        with pytest.raises(APIError) as exc_info:
            await store.delete_all()

        assert exc_info.value.message == "Failed to delete 1 of 3 notifications"
        assert [n.id for n in store.notifications] == ["n2"]
        assert store.unread_count == 1
        assert store.errors["delete_all"] == "Failed to delete 1 of 3 notifications"

    @pytest.mark.asyncio
    async def test_delete_all_falls_back_when_bulk_route_is_read_as_an_id(self, store, api):
        api.delete_all.side_effect = APIError("Failed to delete notification", 500)

        await store.delete_all()

        assert sorted(c.args[0] for c in api.delete.await_args_list) == ["n1", "n2", "n3"]
        assert store.notifications == []
        assert store.bulk_delete_supported is False
        assert "delete_all" not in store.errors

    @pytest.mark.asyncio
    async def test_unsupported_bulk_delete_is_not_retried(self, store, api):
        api.delete_all.side_effect = APIError("Failed to delete notification", 500)
        await store.delete_all()

        api.list.return_value = list_payload(raw_notification("n4"))
        await store.fetch()
        await store.delete_all()

        api.delete_all.assert_awaited_once()
        assert api.delete.await_args_list[-1].args == ("n4",)
        assert store.notifications == []

    @pytest.mark.asyncio
    async def test_delete_all_transport_errors_propagate(self, store, api):
        api.delete_all.side_effect = APIError("Request failed: Connection refused")

        with pytest.raises(APIError):
            await store.delete_all()

        api.delete.assert_not_awaited()
        assert len(store.notifications) == 3
        assert store.bulk_delete_supported is True


class TestUnreadCount:

    @pytest.mark.asyncio
    async def test_refresh(self, store, api):
        api.stats.return_value = {"stats": {"unread": 7}}

        assert await store.refresh_unread_count() == 7
        assert store.unread_count == 7

    @pytest.mark.asyncio
    async def test_refresh_failure_is_captured(self, store, api):
        api.stats.side_effect = APIError("offline")

        assert await store.refresh_unread_count() is None
        assert store.unread_count == 2
        assert store.errors[NotificationStore.UNREAD_COUNT] == "offline"

    @pytest.mark.asyncio
    async def test_get_stats_records_and_raises(self, store, api):
        api.stats.side_effect = APIError("offline")

        with pytest.raises(APIError):
            await store.get_stats()
        assert store.errors["stats"] == "offline"


class TestPreferences:

    @pytest.mark.asyncio
    async def test_fetch_and_update(self):
        api = AsyncMock(spec=NotificationAPI)
        api.get_preferences.return_value = {"preferences": {"email": True}}
        api.update_preferences.return_value = {"preferences": {"email": False}}
        store = NotificationPreferencesStore(api)

        assert await store.fetch() == {"email": True}
        assert await store.update({"email": False}) == {"email": False}
        assert store.preferences == {"email": False}
        assert store.status is StoreStatus.POPULATED
