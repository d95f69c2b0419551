"""Feedback endpoints."""

import platform
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .. import __version__
from ..models.feedback import FeedbackStatus, VoteDirection
from . import endpoints
from .client import APIClient, unwrap


def client_info() -> Dict[str, str]:
    """Describe the submitting client, in place of the web app's browser info."""
    return {
        "userAgent": f"resumeai-client/{__version__} Python/{platform.python_version()}",
        "browser": "resumeai-client",
        "version": __version__,
        "os": platform.system() or "Unknown",
        "submittedAt": datetime.now(timezone.utc).isoformat(),
    }


class FeedbackAPI:
    """Wrapper over ``/feedback``. Admin-only calls are marked as such."""

    def __init__(self, client: APIClient):
        self.client = client

    async def submit(self, feedback: Dict[str, Any]) -> Dict[str, Any]:
        payload = {**feedback, "clientInfo": client_info()}
        return unwrap(await self.client.post(endpoints.FEEDBACK, json_data=payload)) or {}

    async def submit_anonymous(self, feedback: Dict[str, Any]) -> Dict[str, Any]:
        """Submit without the bearer token."""
        payload = {**feedback, "clientInfo": client_info(), "isAnonymous": True}
        envelope = await self.client.post(
            endpoints.FEEDBACK_ANONYMOUS, json_data=payload, authenticated=False
        )
        return unwrap(envelope) or {}

    async def list_mine(self, page: Optional[int] = None, limit: Optional[int] = None, **filters: Any) -> Dict[str, Any]:
        params = {"page": page, "limit": limit, **filters}
        return unwrap(await self.client.get(endpoints.FEEDBACK_USER, params=params)) or {}

    async def list_all(self, page: Optional[int] = None, limit: Optional[int] = None, **filters: Any) -> Dict[str, Any]:
        """Admin only."""
        params = {"page": page, "limit": limit, **filters}
        return unwrap(await self.client.get(endpoints.FEEDBACK, params=params)) or {}

    async def get(self, feedback_id: str) -> Dict[str, Any]:
        path = endpoints.build_path(endpoints.FEEDBACK_BY_ID, feedback_id)
        return unwrap(await self.client.get(path)) or {}

    async def vote(self, feedback_id: str, direction: VoteDirection) -> Dict[str, Any]:
        """
        Cast or move the caller's vote.

        Returns:
            Dict[str, Any]: Updated ``upvotes``/``downvotes`` counts
        """
        path = endpoints.build_path(endpoints.FEEDBACK_VOTE, feedback_id)
        envelope = await self.client.post(path, json_data={"voteType": VoteDirection(direction).value})
        return unwrap(envelope) or {}

    async def remove_vote(self, feedback_id: str) -> Dict[str, Any]:
        path = endpoints.build_path(endpoints.FEEDBACK_VOTE, feedback_id)
        return unwrap(await self.client.delete(path)) or {}

    async def update_status(self, feedback_id: str, status: FeedbackStatus) -> Dict[str, Any]:
        """Admin only."""
        path = endpoints.build_path(endpoints.FEEDBACK_STATUS, feedback_id)
        envelope = await self.client.patch(path, json_data={"status": FeedbackStatus(status).value})
        return unwrap(envelope) or {}

    async def add_note(self, feedback_id: str, note: str) -> Dict[str, Any]:
        """Admin only."""
        path = endpoints.build_path(endpoints.FEEDBACK_NOTES, feedback_id)
        return unwrap(await self.client.post(path, json_data={"note": note})) or {}

    async def resolve(self, feedback_id: str, resolution_note: str) -> Dict[str, Any]:
        """Admin only."""
        path = endpoints.build_path(endpoints.FEEDBACK_RESOLVE, feedback_id)
        envelope = await self.client.patch(path, json_data={"resolutionNote": resolution_note})
        return unwrap(envelope) or {}

    async def stats(self) -> Dict[str, Any]:
        """Admin only."""
        return unwrap(await self.client.get(endpoints.FEEDBACK_STATS)) or {}

    async def delete(self, feedback_id: str) -> Dict[str, Any]:
        path = endpoints.build_path(endpoints.FEEDBACK_BY_ID, feedback_id)
        return unwrap(await self.client.delete(path)) or {}
