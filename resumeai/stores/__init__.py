"""In-memory mirrors of server-held collections."""

from .base import BaseStore, CollectionStore, StoreStatus
from .feedback import AdminFeedbackStore, FeedbackStore
from .notifications import NotificationPreferencesStore, NotificationStore
from .poller import UnreadCountPoller
from .user import UserStore

__all__ = [
    "AdminFeedbackStore",
    "BaseStore",
    "CollectionStore",
    "FeedbackStore",
    "NotificationPreferencesStore",
    "NotificationStore",
    "StoreStatus",
    "UnreadCountPoller",
    "UserStore",
]
