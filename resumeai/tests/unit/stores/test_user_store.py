"""Tests for the user profile store."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from resumeai.api.client import APIError
from resumeai.api.users import UserAPI
from resumeai.models import UploadResult
from resumeai.stores import UserStore
from resumeai.upload import CloudinaryUploader

PROFILE = {"_id": "u1", "email": "jane@example.com", "firstName": "Jane", "profilePicture": "https://old/pic.jpg"}
NEW_URL = "https://res.cloudinary.com/demo/image/upload/c_fill,w_400,h_400,q_auto,f_auto,g_face/me"


@pytest.fixture
def api():
    mock_api = AsyncMock(spec=UserAPI)
    mock_api.get_profile.return_value = {"user": PROFILE}
    mock_api.update_profile.return_value = {"user": dict(PROFILE, profilePicture=NEW_URL)}
    return mock_api


@pytest.fixture
def uploader():
    mock_uploader = MagicMock(spec=CloudinaryUploader)
    mock_uploader.upload_profile_picture = AsyncMock(
        return_value=UploadResult(success=True, secure_url=NEW_URL, public_id="me")
    )
    return mock_uploader


@pytest.mark.asyncio
async def test_fetch_profile(api, uploader):
    store = UserStore(api, uploader)

    user = await store.fetch()

    assert user.first_name == "Jane"
    assert store.display_picture == "https://old/pic.jpg"


@pytest.mark.asyncio
async def test_update_is_confirmed(api, uploader):
    store = UserStore(api, uploader)
    await store.fetch()
    api.update_profile.side_effect = APIError("Validation failed", 422)

    with pytest.raises(APIError):
        await store.update({"firstName": "J"})

    assert store.user.first_name == "Jane"
    assert store.errors["update"] == "Validation failed"


@pytest.mark.asyncio
async def test_picture_preview_then_persisted(api, uploader):
    store = UserStore(api, uploader)
    await store.fetch()
    seen = {}

    async def upload(data, filename, content_type):
        seen["preview"] = store.display_picture
        return UploadResult(success=True, secure_url=NEW_URL, public_id="me")

    uploader.upload_profile_picture.side_effect = upload

    url = await store.update_profile_picture(b"\x89PNG", "me.png")

    assert seen["preview"].startswith("data:image/png;base64,")
    assert url == NEW_URL
    api.update_profile.assert_awaited_once_with({"profilePicture": NEW_URL})
    assert store.preview_url is None
    assert store.display_picture == NEW_URL


@pytest.mark.asyncio
async def test_failed_upload_reverts_preview(api, uploader):
    store = UserStore(api, uploader)
    await store.fetch()
    uploader.upload_profile_picture.return_value = UploadResult.failure("bad preset")

    url = await store.update_profile_picture(b"\x89PNG", "me.png")

    assert url is None
    assert store.display_picture == "https://old/pic.jpg"
    assert store.errors["profile_picture"] == "bad preset"
    api.update_profile.assert_not_awaited()


@pytest.mark.asyncio
async def test_failed_save_reverts_preview_and_raises(api, uploader):
    store = UserStore(api, uploader)
    await store.fetch()
    api.update_profile.side_effect = APIError("Server error", 500)

    with pytest.raises(APIError):
        await store.update_profile_picture(b"\x89PNG", "me.png")

    assert store.display_picture == "https://old/pic.jpg"


@pytest.mark.asyncio
async def test_analytics_failure_is_captured(api, uploader):
    store = UserStore(api, uploader)
    api.get_analytics.side_effect = APIError("offline")

    assert await store.fetch_analytics() is None
    assert store.errors[UserStore.ANALYTICS] == "offline"
