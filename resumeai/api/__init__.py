"""Backend API client and per-resource services."""

from .ai_tools import AITool, AIToolsAPI
from .auth import AuthAPI
from .client import APIClient, APIError
from .feedback import FeedbackAPI
from .notifications import NotificationAPI
from .users import UserAPI

__all__ = [
    "AITool",
    "AIToolsAPI",
    "APIClient",
    "APIError",
    "AuthAPI",
    "FeedbackAPI",
    "NotificationAPI",
    "UserAPI",
]
