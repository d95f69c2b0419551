"""Feedback records and the vote toggle rules."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FeedbackType(str, Enum):
    BUG_REPORT = "bug_report"
    FEATURE_REQUEST = "feature_request"
    GENERAL = "general"
    UI_UX = "ui_ux"
    PERFORMANCE = "performance"
    OTHER = "other"


class FeedbackPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class FeedbackStatus(str, Enum):
    PENDING = "pending"
    IN_REVIEW = "in_review"
    RESOLVED = "resolved"
    REJECTED = "rejected"
    # Lifecycle values the backend itself emits
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    CLOSED = "closed"
    DUPLICATE = "duplicate"


class UserVote(str, Enum):
    NONE = "none"
    UPVOTE = "upvote"
    DOWNVOTE = "downvote"


class VoteDirection(str, Enum):
    """Vote direction as the backend expects it in ``voteType``."""
    UP = "up"
    DOWN = "down"

    @property
    def user_vote(self) -> UserVote:
        return UserVote.UPVOTE if self is VoteDirection.UP else UserVote.DOWNVOTE


class AdminNote(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    note: str
    added_by: Optional[str] = Field(default=None, alias="addedBy")
    added_at: Optional[datetime] = Field(default=None, alias="addedAt")


class VotedUser(BaseModel):
    """One entry of the backend's per-record vote ledger."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    user_id: Optional[str] = Field(default=None, alias="userId")
    vote_type: VoteDirection = Field(alias="voteType")
    voted_at: Optional[datetime] = Field(default=None, alias="votedAt")

    @field_validator("user_id", mode="before")
    @classmethod
    def _unwrap_populated_user(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return value.get("_id")
        return value


class Feedback(BaseModel):
    """A feedback submission as returned by the backend."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="_id")
    type: FeedbackType
    category: str
    title: str
    description: str
    priority: FeedbackPriority = FeedbackPriority.MEDIUM
    status: FeedbackStatus = FeedbackStatus.PENDING
    upvotes: int = Field(default=0, ge=0)
    downvotes: int = Field(default=0, ge=0)
    user_vote: UserVote = Field(default=UserVote.NONE, alias="userVote")
    voted_users: List[VotedUser] = Field(default_factory=list, alias="votedUsers")
    admin_response: Optional[str] = Field(default=None, alias="adminResponse")
    admin_notes: List[AdminNote] = Field(default_factory=list, alias="adminNotes")
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")

    @property
    def net_votes(self) -> int:
        return self.upvotes - self.downvotes

    def vote_of(self, user_id: str) -> UserVote:
        """The vote ``user_id`` holds according to ``votedUsers``."""
        for entry in self.voted_users:
            if entry.user_id == user_id:
                return entry.vote_type.user_vote
        return UserVote.NONE

    def for_user(self, user_id: Optional[str]) -> "Feedback":
        """
        Return a copy whose ``user_vote`` is read from the vote ledger.

        The backend reports who voted in ``votedUsers`` rather than sending
        ``userVote``; an explicit ``userVote`` in the payload is kept as is.
        """
        if not user_id or "user_vote" in self.model_fields_set:
            return self
        return self.model_copy(update={"user_vote": self.vote_of(user_id)})


def apply_vote(feedback: Feedback, direction: VoteDirection) -> Feedback:
    """
    Return a copy of ``feedback`` with the caller's vote applied.

    Voting the direction already cast removes the vote; voting the other
    direction moves it. Counts are clamped at zero.
    """
    target = direction.user_vote
    upvotes, downvotes = feedback.upvotes, feedback.downvotes

    if feedback.user_vote is UserVote.UPVOTE:
        upvotes = max(0, upvotes - 1)
    elif feedback.user_vote is UserVote.DOWNVOTE:
        downvotes = max(0, downvotes - 1)

    if feedback.user_vote is target:
        new_vote = UserVote.NONE
    else:
        new_vote = target
        if target is UserVote.UPVOTE:
            upvotes += 1
        else:
            downvotes += 1

    return feedback.model_copy(
        update={"upvotes": upvotes, "downvotes": downvotes, "user_vote": new_vote}
    )


def remove_vote(feedback: Feedback) -> Feedback:
    """Return a copy of ``feedback`` with the caller's vote withdrawn."""
    if feedback.user_vote is UserVote.NONE:
        return feedback
    return apply_vote(
        feedback,
        VoteDirection.UP if feedback.user_vote is UserVote.UPVOTE else VoteDirection.DOWN,
    )


def vote_counts(payload: Dict[str, Any]) -> Optional[Dict[str, int]]:
    """Extract ``upvotes``/``downvotes`` from a vote response, if it has them."""
    if not isinstance(payload, dict):
        return None
    if "upvotes" not in payload or "downvotes" not in payload:
        return None
    return {"upvotes": int(payload["upvotes"]), "downvotes": int(payload["downvotes"])}
