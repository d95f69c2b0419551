"""Feedback lists for users and administrators."""

from typing import Any, Dict, List, Optional

from ..api.feedback import FeedbackAPI
from ..config import get_settings
from ..models.feedback import (
    Feedback,
    FeedbackStatus,
    UserVote,
    VoteDirection,
    apply_vote,
    remove_vote,
    vote_counts,
)
from .base import CollectionStore


def _record(data: Dict[str, Any], user_id: Optional[str] = None) -> Optional[Feedback]:
    raw = data.get("feedback") if isinstance(data, dict) else None
    if not isinstance(raw, dict):
        return None
    return Feedback.model_validate(raw).for_user(user_id)


class FeedbackStore(CollectionStore[Feedback]):
    """
    The signed-in user's own feedback submissions.

    With ``user_id`` set, each record's ``user_vote`` is read from the
    backend's ``votedUsers`` ledger whenever the payload carries no
    ``userVote``; without it the caller's vote starts out as ``none``.
    """

    def __init__(self, api: FeedbackAPI, page_size: Optional[int] = None, user_id: Optional[str] = None):
        super().__init__()
        self.api = api
        self.page_size = page_size or get_settings().default_page_size
        self.user_id = user_id
        self.submitting = False

    @property
    def feedback(self) -> List[Feedback]:
        return self.items

    async def _list_page(self, **params: Any) -> Dict[str, Any]:
        return await self.api.list_mine(**params)

    async def fetch(self, **params: Any) -> Optional[Dict[str, Any]]:
        """Replace the mirror with the server's current page; failures go to ``error``."""
        params.setdefault("limit", self.page_size)

        async def load():
            data = await self._list_page(**params)
            return data, [
                Feedback.model_validate(raw).for_user(self.user_id) for raw in data.get("feedback") or []
            ]

        def apply(result) -> None:
            data, records = result
            self._items = records
            self.pagination = data.get("pagination") or {}

        result = await self._run_fetch(load, apply)
        return None if result is None else result[0]

    async def submit(self, feedback: Dict[str, Any]) -> Optional[Feedback]:
        """Submit feedback; the created record is prepended once the server returns it."""
        self.submitting = True
        try:
            async with self._mutation("submit"):
                created = _record(await self.api.submit(feedback), self.user_id)
                if created is not None:
                    self._update_items(lambda items: [created, *items])
                return created
        finally:
            self.submitting = False

    async def submit_anonymous(self, feedback: Dict[str, Any]) -> Optional[Feedback]:
        """Submit without identifying the user; the record is not mirrored."""
        self.submitting = True
        try:
            async with self._recording("submit_anonymous"):
                return _record(await self.api.submit_anonymous(feedback))
        finally:
            self.submitting = False

    async def get(self, feedback_id: str) -> Optional[Feedback]:
        async with self._recording(f"get:{feedback_id}"):
            return _record(await self.api.get(feedback_id), self.user_id)

    async def vote(self, feedback_id: str, direction: VoteDirection) -> Optional[Feedback]:
        """
        Toggle the caller's vote.

        Voting the direction already cast withdraws the vote; voting the
        other direction moves it. Counts reported by the server win over the
        locally computed ones.

        Returns:
            Optional[Feedback]: The updated record, if it is mirrored
        """
        direction = VoteDirection(direction)
        async with self._mutation("vote", feedback_id):
            current = self.find(feedback_id)
            withdrawing = current is not None and current.user_vote is direction.user_vote

            if withdrawing:
                data = await self.api.remove_vote(feedback_id)
            else:
                data = await self.api.vote(feedback_id, direction)

            new_vote = UserVote.NONE if withdrawing else direction.user_vote
            counts = vote_counts(data)

            def transform(item: Feedback) -> Feedback:
                updated = remove_vote(item) if withdrawing else apply_vote(item, direction)
                changes: Dict[str, Any] = {"user_vote": new_vote}
                if counts:
                    changes.update(counts)
                return updated.model_copy(update=changes)

            self._replace(feedback_id, transform)
        return self.find(feedback_id)

    async def remove_vote(self, feedback_id: str) -> Optional[Feedback]:
        async with self._mutation("remove_vote", feedback_id):
            counts = vote_counts(await self.api.remove_vote(feedback_id))

            def transform(item: Feedback) -> Feedback:
                updated = remove_vote(item)
                return updated.model_copy(update=counts) if counts else updated

            self._replace(feedback_id, transform)
        return self.find(feedback_id)

    async def delete(self, feedback_id: str) -> None:
        """Delete a submission; the mirror changes only after the server confirms."""
        async with self._mutation("delete", feedback_id):
            await self.api.delete(feedback_id)
            self._remove_where(lambda item: item.id == feedback_id)


class AdminFeedbackStore(FeedbackStore):
    """All feedback, with the administrative operations."""

    STATS = "stats"

    def __init__(self, api: FeedbackAPI, page_size: Optional[int] = None, user_id: Optional[str] = None):
        super().__init__(api, page_size, user_id)
        self.stats: Optional[Dict[str, Any]] = None

    async def _list_page(self, **params: Any) -> Dict[str, Any]:
        return await self.api.list_all(**params)

    def _store_returned(self, feedback_id: str, returned: Optional[Feedback], **fallback: Any) -> None:
        if returned is not None:
            self._replace(feedback_id, lambda item: returned)
        else:
            self._replace(feedback_id, lambda item: item.model_copy(update=fallback))

    async def update_status(self, feedback_id: str, status: FeedbackStatus) -> Optional[Feedback]:
        status = FeedbackStatus(status)
        async with self._mutation("update_status", feedback_id):
            await self.api.update_status(feedback_id, status)
            self._replace(feedback_id, lambda item: item.model_copy(update={"status": status}))
        return self.find(feedback_id)

    async def add_note(self, feedback_id: str, note: str) -> Optional[Feedback]:
        async with self._mutation("add_note", feedback_id):
            returned = _record(await self.api.add_note(feedback_id, note), self.user_id)
            if returned is not None:
                self._replace(feedback_id, lambda item: returned)
        return self.find(feedback_id)

    async def resolve(self, feedback_id: str, resolution_note: str) -> Optional[Feedback]:
        async with self._mutation("resolve", feedback_id):
            returned = _record(await self.api.resolve(feedback_id, resolution_note), self.user_id)
            self._store_returned(
                feedback_id,
                returned,
                status=FeedbackStatus.RESOLVED,
                admin_response=resolution_note,
            )
        return self.find(feedback_id)

    async def fetch_stats(self) -> Optional[Dict[str, Any]]:
        data = await self._capture(self.STATS, self.api.stats)
        if data is not None and self._alive:
            self.stats = data
        return data

