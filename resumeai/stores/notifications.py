"""
Notification list and unread counter.

Read-state toggles are applied locally before the server answers and the
unread counter is then reconciled from the server. Deletions only reach the
local list after the server confirms them.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set

from loguru import logger

from ..api.client import APIError
from ..api.notifications import NotificationAPI
from ..config import get_settings
from ..models.notification import Notification
from .base import BaseStore, CollectionStore

def _now() -> datetime:
    return datetime.now(timezone.utc)


class NotificationStore(CollectionStore[Notification]):
    """In-memory mirror of the user's notifications."""

    UNREAD_COUNT = "unread_count"

    def __init__(self, api: NotificationAPI, page_size: Optional[int] = None):
        super().__init__()
        self.api = api
        self.page_size = page_size or get_settings().default_page_size
        self.unread_count = 0
        self._count_generation = 0
        # Flipped off once the server answers the bulk delete with an error
        self.bulk_delete_supported = True

    @property
    def notifications(self) -> List[Notification]:
        return self.items

    def _set_unread_count(self, value: int) -> None:
        if self._alive:
            self.unread_count = max(0, value)

    async def fetch(self, **params: Any) -> Optional[Dict[str, Any]]:
        """
        Replace the mirror with the server's current page.

        The unread counter is taken from the same payload. Failures are
        stored in ``error`` and leave the cached list untouched.

        Returns:
            Optional[Dict[str, Any]]: The page payload, or None on failure
        """
        params.setdefault("limit", self.page_size)

        async def load():
            data = await self.api.list(**params)
            records = [Notification.model_validate(raw) for raw in data.get("notifications") or []]
            return data, records

        def apply(result) -> None:
            data, records = result
            self._items = records
            self.pagination = data.get("pagination") or {}
            # supersedes any counter refresh still in flight
            self._count_generation += 1
            self.unread_count = max(0, int(data.get("unreadCount") or 0))

        result = await self._run_fetch(load, apply)
        if result is None:
            return None
        logger.debug(f"Fetched {len(result[1])} notifications, {self.unread_count} unread")
        return result[0]

    async def refresh_unread_count(self) -> Optional[int]:
        """Reconcile the unread counter from the server's statistics."""
        self._count_generation += 1
        ticket = self._count_generation

        data = await self._capture(self.UNREAD_COUNT, self.api.stats)
        if data is None or not self._alive or ticket != self._count_generation:
            return None

        stats = data.get("stats") or {}
        self._set_unread_count(int(stats.get("unread") or 0))
        return self.unread_count

    async def mark_read(self, notification_id: str) -> None:
        """
        Mark one notification read.

        Applied locally right away; the counter only drops if the record was
        unread. On failure the record is restored and the error re-raised.
        """
        async with self._mutation("mark_read", notification_id):
            previous = self.find(notification_id)
            was_unread = previous is not None and not previous.is_read
            if was_unread:
                self._replace(notification_id, lambda n: n.as_read(_now()))
                self._set_unread_count(self.unread_count - 1)
            try:
                await self.api.mark_read(notification_id)
            except APIError:
                if was_unread:
                    self._replace(notification_id, lambda n: n.as_unread())
                    self._set_unread_count(self.unread_count + 1)
                raise
            finally:
                await self.refresh_unread_count()

    async def mark_unread(self, notification_id: str) -> None:
        """Mark one notification unread; mirror of ``mark_read``."""
        async with self._mutation("mark_unread", notification_id):
            previous = self.find(notification_id)
            was_read = previous is not None and previous.is_read
            if was_read:
                self._replace(notification_id, lambda n: n.as_unread())
                self._set_unread_count(self.unread_count + 1)
            try:
                await self.api.mark_unread(notification_id)
            except APIError:
                if was_read:
                    read_at = previous.read_at or _now()
                    self._replace(notification_id, lambda n: n.as_read(read_at))
                    self._set_unread_count(self.unread_count - 1)
                raise
            finally:
                await self.refresh_unread_count()

    async def mark_all_read(self) -> None:
        async with self._mutation("mark_all_read"):
            await self.api.mark_all_read()
            now = _now()
            self._update_items(lambda items: [n.as_read(now) for n in items])
            self._set_unread_count(0)

    def _forget(self, ids: Set[str]) -> List[Notification]:
        removed = self._remove_where(lambda n: n.id in ids)
        unread_removed = sum(1 for n in removed if not n.is_read)
        self._set_unread_count(self.unread_count - unread_removed)
        return removed

    async def delete(self, notification_id: str) -> None:
        """Delete one notification; the mirror changes only after the server confirms."""
        async with self._mutation("delete", notification_id):
            await self.api.delete(notification_id)
            self._forget({notification_id})

    async def delete_all_read(self) -> None:
        async with self._mutation("delete_all_read"):
            await self.api.delete_all_read()
            self._remove_where(lambda n: n.is_read)

    async def delete_all(self) -> None:
        """
        Delete every notification.

        Tries the collection endpoint first. Backends without that route
        resolve it as a record id and answer 404, 405 or even 500, so any
        HTTP error answer switches to deleting the mirrored notifications
        one by one in parallel, for this and later calls. Transport errors
        propagate. The mirror is updated once every call has settled.
        """
        async with self._mutation("delete_all"):
            if not self.bulk_delete_supported:
                await self._delete_each()
                return
            try:
                await self.api.delete_all()
            except APIError as e:
                if e.status_code is None:
                    raise
                logger.info(f"Bulk delete answered {e.status_code}, deleting individually")
                self.bulk_delete_supported = False
                await self._delete_each()
                return

            self._update_items(lambda items: [])
            self._set_unread_count(0)

    async def _delete_each(self) -> None:
        ids = [n.id for n in self._items]
        results = await asyncio.gather(
            *(self.api.delete(notification_id) for notification_id in ids),
            return_exceptions=True,
        )

        deleted = {i for i, result in zip(ids, results) if not isinstance(result, BaseException)}
        self._forget(deleted)

        failures = [result for result in results if isinstance(result, BaseException)]
        for failure in failures:
            if not isinstance(failure, APIError):
                raise failure
        if failures:
            raise APIError(
                f"Failed to delete {len(failures)} of {len(ids)} notifications",
                payload=[failure.message for failure in failures],
            )

    async def get_stats(self) -> Dict[str, Any]:
        """Fetch notification statistics; failures are recorded and re-raised."""
        async with self._recording("stats"):
            return await self.api.stats()


class NotificationPreferencesStore(BaseStore):
    """The user's notification preferences."""

    def __init__(self, api: NotificationAPI):
        super().__init__()
        self.api = api
        self.preferences: Optional[Dict[str, Any]] = None

    async def fetch(self) -> Optional[Dict[str, Any]]:
        def apply(data: Dict[str, Any]) -> None:
            self.preferences = data.get("preferences")

        data = await self._run_fetch(self.api.get_preferences, apply)
        return None if data is None else self.preferences

    async def update(self, preferences: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        async with self._mutation("update"):
            data = await self.api.update_preferences(preferences)
            if self._alive:
                self.preferences = data.get("preferences", preferences)
        return self.preferences

