"""Tests for the CLI module."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from resumeai.api.client import APIError
from resumeai.cli import app
from resumeai.models import Feedback, Notification, UploadResult
from resumeai.session import SessionStore


@pytest.fixture(autouse=True)
def no_log_setup():
    with patch("resumeai.cli.setup_logging"):
        yield


@pytest.fixture
def runner():
    return CliRunner()


def test_login_stores_token(runner, tmp_path):
    session_path = tmp_path / "session.json"

    with patch("resumeai.cli.AuthAPI") as mock_auth:
        mock_auth.return_value.login = AsyncMock(return_value="jwt-1")
        result = runner.invoke(app, ["login", "jane@example.com", "--password", "pw"])

    assert result.exit_code == 0, result.output
    assert "Logged in as jane@example.com" in result.output
    mock_auth.return_value.login.assert_awaited_once_with("jane@example.com", "pw")
    assert SessionStore(session_path).token == "jwt-1"


def test_login_failure_exits_with_error(runner):
    with patch("resumeai.cli.AuthAPI") as mock_auth:
        mock_auth.return_value.login = AsyncMock(side_effect=APIError("Invalid credentials", 401))
        result = runner.invoke(app, ["login", "jane@example.com", "--password", "bad"])

    assert result.exit_code == 1
    assert "Invalid credentials" in result.output


def test_logout_clears_token(runner, tmp_path):
    session = SessionStore(tmp_path / "session.json")
    session.token = "jwt-1"

    result = runner.invoke(app, ["logout"])

    assert result.exit_code == 0
    assert SessionStore(tmp_path / "session.json").token is None


def test_upload_prints_url(runner, tmp_path):
    pdf = tmp_path / "resume.pdf"
    pdf.write_bytes(b"%PDF-1.4")

    with patch("resumeai.cli.CloudinaryUploader") as mock_uploader:
        mock_uploader.return_value.upload_file = AsyncMock(
            return_value=UploadResult(success=True, secure_url="https://cdn/resume.pdf")
        )
        result = runner.invoke(app, ["upload", str(pdf), "--folder", "resumeai/pdfs"])

    assert result.exit_code == 0, result.output
    assert "https://cdn/resume.pdf" in result.output
    mock_uploader.return_value.upload_file.assert_awaited_once_with(
        b"%PDF-1.4", "resume.pdf", "application/pdf", "resumeai/pdfs"
    )


def test_failed_upload_exits_with_error(runner, tmp_path):
    image = tmp_path / "me.png"
    image.write_bytes(b"\x89PNG")

    with patch("resumeai.cli.CloudinaryUploader") as mock_uploader:
        mock_uploader.return_value.upload_image = AsyncMock(return_value=UploadResult.failure("bad preset"))
        result = runner.invoke(app, ["upload", str(image), "--image"])

    assert result.exit_code == 1
    assert "bad preset" in result.output


def test_notifications_list(runner):
    store = MagicMock()
    store.error = None
    store.unread_count = 1
    store.notifications = [
        Notification(id="n1", title="Welcome", message="Hello"),
        Notification(id="n2", title="Tip", message="Try AI", is_read=True),
    ]

    with patch("resumeai.cli._list_notifications", new=AsyncMock(return_value=store)):
        result = runner.invoke(app, ["notifications", "list", "--unread"])

    assert result.exit_code == 0, result.output
    assert "* n1  [info] Welcome: Hello" in result.output
    assert "  n2  [info] Tip: Try AI" in result.output
    assert "1 unread" in result.output


def test_notifications_read(runner):
    with patch("resumeai.cli.NotificationAPI") as mock_api:
        mock_api.return_value.mark_read = AsyncMock(return_value={})
        result = runner.invoke(app, ["notifications", "read", "n1"])

    assert result.exit_code == 0, result.output
    mock_api.return_value.mark_read.assert_awaited_once_with("n1")


def test_feedback_submit(runner):
    created = Feedback(
        id="f9", type="general", category="ui", title="Nice", description="Great app",
    )

    with patch("resumeai.cli.FeedbackStore") as mock_store:
        mock_store.return_value.submit = AsyncMock(return_value=created)
        result = runner.invoke(app, [
            "feedback", "submit",
            "--type", "general",
            "--category", "ui",
            "--title", "Nice",
            "--description", "Great app",
        ])

    assert result.exit_code == 0, result.output
    assert "Submitted feedback f9" in result.output
    payload = mock_store.return_value.submit.await_args.args[0]
    assert payload == {
        "type": "general", "category": "ui", "title": "Nice", "description": "Great app", "priority": "medium",
    }


def test_feedback_vote(runner):
    with patch("resumeai.cli.FeedbackAPI") as mock_api:
        mock_api.return_value.vote = AsyncMock(return_value={"upvotes": 3, "downvotes": 1})
        result = runner.invoke(app, ["feedback", "vote", "f1", "up"])

    assert result.exit_code == 0, result.output
    assert "+3 / -1" in result.output


def test_ai_tool(runner):
    with patch("resumeai.cli.AIToolsAPI") as mock_api:
        mock_api.return_value.generate = AsyncMock(return_value={"data": "A seasoned engineer."})
        result = runner.invoke(app, ["ai", "summary", "ten years of Python"])

    assert result.exit_code == 0, result.output
    assert "A seasoned engineer." in result.output


def test_ai_rejects_unknown_tool(runner):
    result = runner.invoke(app, ["ai", "poem", "x"])
    assert result.exit_code != 0
