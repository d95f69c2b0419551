"""Periodic unread-counter refresh."""

import asyncio
from typing import Optional

from loguru import logger

from ..api.client import APIClient
from ..config import get_settings
from .notifications import NotificationStore


class UnreadCountPoller:
    """
    Keeps a NotificationStore's unread counter fresh while signed in.

    The loop only runs while the client holds a token. Clearing the token
    stops it right away instead of at the next tick.
    """

    def __init__(
        self,
        store: NotificationStore,
        client: APIClient,
        interval: Optional[float] = None,
    ):
        self.store = store
        self.client = client
        self.interval = interval or get_settings().notification_poll_interval
        self._task: Optional[asyncio.Task] = None
        client.add_token_listener(self._on_token_change)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def _on_token_change(self, token: Optional[str]) -> None:
        if token is None:
            logger.info("Signed out, stopping unread count polling")
            self.stop()

    def start(self) -> bool:
        """Start polling; returns False while unauthenticated."""
        if not self.client.is_authenticated:
            return False
        if not self.running:
            self._task = asyncio.create_task(self._run())
        return True

    async def _run(self) -> None:
        while self.client.is_authenticated and self.store.alive:
            try:
                await self.store.refresh_unread_count()
            except Exception:
                logger.exception("Unread count refresh failed, will retry")
            await asyncio.sleep(self.interval)

    def stop(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def close(self) -> None:
        self.stop()
        self.client.remove_token_listener(self._on_token_change)
