import os

import httpx
import pytest
from dotenv import load_dotenv

from resumeai.config import get_settings

# Optional overrides for running the suite against a local backend
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))
dotenv_path = os.path.join(project_root, '.env.test')
if os.path.exists(dotenv_path):
    load_dotenv(dotenv_path=dotenv_path)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Fresh settings per test, never reading a developer's Cloudinary account or session."""
    for name in ("CLOUDINARY_CLOUD_NAME", "CLOUDINARY_UPLOAD_PRESET", "CLOUDINARY_BASE_URL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SESSION_FILE", str(tmp_path / "session.json"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler):
        self.requests = []

        def record(request: httpx.Request) -> httpx.Response:
            request.read()
            self.requests.append(request)
            return handler(request)

        super().__init__(record)


@pytest.fixture
def recording_transport():
    return RecordingTransport
