"""The signed-in user's profile."""

import base64
import mimetypes
from typing import Any, Dict, Optional

from loguru import logger

from ..api.users import UserAPI
from ..models.user import UserProfile
from ..upload.cloudinary import CloudinaryUploader
from .base import BaseStore

PROFILE_PICTURE = "profile_picture"


def _data_uri(data: bytes, content_type: str) -> str:
    return f"data:{content_type};base64,{base64.b64encode(data).decode('ascii')}"


class UserStore(BaseStore):
    """
    Mirror of the user profile.

    Profile edits are confirmed: the local record changes only once the server
    returns the updated profile. Picture changes show a local preview while
    the upload runs and fall back to the stored picture if it fails.
    """

    ANALYTICS = "analytics"

    def __init__(self, api: UserAPI, uploader: Optional[CloudinaryUploader] = None):
        super().__init__()
        self.api = api
        self.uploader = uploader or CloudinaryUploader()
        self.user: Optional[UserProfile] = None
        self.analytics: Optional[Dict[str, Any]] = None
        self.preview_url: Optional[str] = None

    @property
    def display_picture(self) -> Optional[str]:
        """Preview while an upload is pending, otherwise the stored picture."""
        if self.preview_url:
            return self.preview_url
        return self.user.profile_picture if self.user else None

    @staticmethod
    def _profile(data: Dict[str, Any]) -> Optional[UserProfile]:
        raw = data.get("user") if isinstance(data, dict) else None
        return UserProfile.model_validate(raw) if isinstance(raw, dict) else None

    async def fetch(self) -> Optional[UserProfile]:
        async def load():
            return self._profile(await self.api.get_profile())

        def apply(profile: Optional[UserProfile]) -> None:
            self.user = profile

        await self._run_fetch(load, apply)
        return self.user

    async def update(self, changes: Dict[str, Any]) -> Optional[UserProfile]:
        """Send profile changes; failures are recorded under ``update`` and re-raised."""
        async with self._mutation("update"):
            profile = self._profile(await self.api.update_profile(changes))
            if profile is not None and self._alive:
                self.user = profile
        return self.user

    async def fetch_analytics(self) -> Optional[Dict[str, Any]]:
        data = await self._capture(self.ANALYTICS, self.api.get_analytics)
        if data is not None and self._alive:
            self.analytics = data.get("analytics", data)
        return self.analytics

    async def update_profile_picture(
        self,
        data: bytes,
        filename: str,
        content_type: Optional[str] = None,
    ) -> Optional[str]:
        """
        Replace the profile picture.

        A local preview is shown first. If the upload fails the preview is
        withdrawn and the failure stored under ``errors["profile_picture"]``
        without raising. If saving the uploaded URL to the profile fails, the
        preview is withdrawn and the error re-raised.

        Returns:
            Optional[str]: The new picture URL, or None if the upload failed
        """
        content_type = content_type or mimetypes.guess_type(filename)[0] or "application/octet-stream"
        self.errors.pop(PROFILE_PICTURE, None)
        self.preview_url = _data_uri(data, content_type)

        result = await self.uploader.upload_profile_picture(data, filename, content_type)
        if not result.success or not result.secure_url:
            if self._alive:
                self.preview_url = None
                self.errors[PROFILE_PICTURE] = result.error_message or "Upload failed"
            logger.warning(f"Profile picture upload failed: {result.error_message}")
            return None

        try:
            await self.update({"profilePicture": result.secure_url})
        finally:
            if self._alive:
                self.preview_url = None
        return result.secure_url
