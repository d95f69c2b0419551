"""Data models for the ResumeAI client."""

from .feedback import (
    AdminNote,
    Feedback,
    FeedbackPriority,
    FeedbackStatus,
    FeedbackType,
    UserVote,
    VoteDirection,
    VotedUser,
    apply_vote,
    remove_vote,
    vote_counts,
)
from .notification import Notification, NotificationType
from .upload import ResourceKind, UploadRequest, UploadResult
from .user import UserProfile

__all__ = [
    "AdminNote",
    "Feedback",
    "FeedbackPriority",
    "FeedbackStatus",
    "FeedbackType",
    "Notification",
    "NotificationType",
    "ResourceKind",
    "UploadRequest",
    "UploadResult",
    "UserProfile",
    "UserVote",
    "VoteDirection",
    "VotedUser",
    "apply_vote",
    "remove_vote",
    "vote_counts",
]
