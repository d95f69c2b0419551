"""Notification endpoints."""

from typing import Any, Dict, Optional

from . import endpoints
from .client import APIClient, unwrap


class NotificationAPI:
    """Thin wrapper over ``/notifications``; every call needs a token."""

    def __init__(self, client: APIClient):
        self.client = client

    async def list(
        self,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        type: Optional[str] = None,
        category: Optional[str] = None,
        is_read: Optional[bool] = None,
        priority: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Fetch one page of the user's notifications.

        Returns:
            Dict[str, Any]: ``notifications``, ``unreadCount`` and ``pagination``
        """
        params = {
            "page": page,
            "limit": limit,
            "type": type,
            "category": category,
            "isRead": None if is_read is None else str(is_read).lower(),
            "priority": priority,
        }
        return unwrap(await self.client.get(endpoints.NOTIFICATIONS, params=params)) or {}

    async def get(self, notification_id: str) -> Dict[str, Any]:
        path = endpoints.build_path(endpoints.NOTIFICATION_BY_ID, notification_id)
        return unwrap(await self.client.get(path)) or {}

    async def mark_read(self, notification_id: str) -> Dict[str, Any]:
        path = endpoints.build_path(endpoints.NOTIFICATION_MARK_READ, notification_id)
        return unwrap(await self.client.patch(path)) or {}

    async def mark_unread(self, notification_id: str) -> Dict[str, Any]:
        path = endpoints.build_path(endpoints.NOTIFICATION_MARK_UNREAD, notification_id)
        return unwrap(await self.client.patch(path)) or {}

    async def mark_all_read(self) -> Dict[str, Any]:
        return unwrap(await self.client.patch(endpoints.NOTIFICATION_MARK_ALL_READ)) or {}

    async def delete(self, notification_id: str) -> Dict[str, Any]:
        path = endpoints.build_path(endpoints.NOTIFICATION_BY_ID, notification_id)
        return unwrap(await self.client.delete(path)) or {}

    async def delete_all_read(self) -> Dict[str, Any]:
        return unwrap(await self.client.delete(endpoints.NOTIFICATION_DELETE_READ)) or {}

    async def delete_all(self) -> Dict[str, Any]:
        return unwrap(await self.client.delete(endpoints.NOTIFICATION_DELETE_ALL)) or {}

    async def stats(self) -> Dict[str, Any]:
        """
        Fetch notification statistics.

        Returns:
            Dict[str, Any]: ``stats`` with at least ``total`` and ``unread``
        """
        return unwrap(await self.client.get(endpoints.NOTIFICATION_STATS)) or {}

    async def create(self, notification: Dict[str, Any]) -> Dict[str, Any]:
        return unwrap(await self.client.post(endpoints.NOTIFICATIONS, json_data=notification)) or {}

    async def get_preferences(self) -> Dict[str, Any]:
        return unwrap(await self.client.get(endpoints.NOTIFICATION_PREFERENCES)) or {}

    async def update_preferences(self, preferences: Dict[str, Any]) -> Dict[str, Any]:
        envelope = await self.client.put(
            endpoints.NOTIFICATION_PREFERENCES, json_data={"preferences": preferences}
        )
        return unwrap(envelope) or {}
