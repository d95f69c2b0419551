"""Notification records mirrored from the backend."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class NotificationType(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    REMINDER = "reminder"
    SYSTEM = "system"


class Notification(BaseModel):
    """
    A server-owned notification.

    The backend is the source of truth; the client only flips the read state
    and deletes records. An unread notification never carries a ``read_at``.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="_id")
    title: str
    message: str
    type: NotificationType = NotificationType.INFO
    category: Optional[str] = None
    priority: Optional[str] = None
    is_read: bool = Field(default=False, alias="isRead")
    read_at: Optional[datetime] = Field(default=None, alias="readAt")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    action_url: Optional[str] = Field(default=None, alias="actionUrl")
    action_text: Optional[str] = Field(default=None, alias="actionText")

    @model_validator(mode="after")
    def _unread_has_no_read_at(self) -> "Notification":
        if not self.is_read and self.read_at is not None:
            self.read_at = None
        return self

    def as_read(self, when: datetime) -> "Notification":
        if self.is_read:
            return self
        return self.model_copy(update={"is_read": True, "read_at": when})

    def as_unread(self) -> "Notification":
        if not self.is_read:
            return self
        return self.model_copy(update={"is_read": False, "read_at": None})
