"""Command-line interface for the ResumeAI backend."""

import asyncio
import json
import mimetypes
from pathlib import Path
from typing import Any, Optional

import typer
from loguru import logger
from typing_extensions import Annotated

from resumeai.api import AITool, AIToolsAPI, APIClient, APIError, AuthAPI, FeedbackAPI, NotificationAPI
from resumeai.models import FeedbackPriority, FeedbackType, Notification, UploadResult, VoteDirection
from resumeai.session import SessionStore
from resumeai.stores import FeedbackStore, NotificationStore
from resumeai.upload import CloudinaryUploader
from resumeai.utils import setup_logging

app = typer.Typer(help="ResumeAI - account, notifications, feedback and uploads from the terminal")

notifications_app = typer.Typer(help="Read and manage notifications")
app.add_typer(notifications_app, name="notifications")

feedback_app = typer.Typer(help="Submit and vote on feedback")
app.add_typer(feedback_app, name="feedback")


@app.callback()
def main(
    loglevel: Annotated[Optional[str], typer.Option("--loglevel", "-l", help="Logging level")] = None,
) -> None:
    setup_logging(loglevel)


def _fail(message: str) -> None:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(code=1)


def _client(session: SessionStore) -> APIClient:
    return APIClient(token=session.token)


def _run(coro) -> Any:
    """Run a coroutine, turning API errors into exit code 1."""
    try:
        return asyncio.run(coro)
    except APIError as e:
        _fail(e.message)


def _format_notification(notification: Notification) -> str:
    marker = " " if notification.is_read else "*"
    return f"{marker} {notification.id}  [{notification.type.value}] {notification.title}: {notification.message}"


async def _login(session: SessionStore, email: str, password: str) -> str:
    async with _client(session) as client:
        token = await AuthAPI(client).login(email, password)
    session.token = token
    return token


@app.command()
def login(
    email: Annotated[str, typer.Argument(help="Account email")],
    password: Annotated[str, typer.Option("--password", "-p", prompt=True, hide_input=True, help="Account password")],
) -> None:
    """Log in and remember the session token."""
    _run(_login(SessionStore(), email, password))
    typer.echo(f"Logged in as {email}")


@app.command()
def logout() -> None:
    """Forget the stored session token."""
    SessionStore().clear_token()
    typer.echo("Logged out")


@app.command()
def upload(
    path: Annotated[Path, typer.Argument(exists=True, dir_okay=False, readable=True, help="File to upload")],
    folder: Annotated[Optional[str], typer.Option("--folder", "-f", help="Target folder")] = None,
    image: Annotated[bool, typer.Option("--image", help="Upload as an image (type and size checked)")] = False,
) -> None:
    """Upload a file to the asset host and print its URL."""
    uploader = CloudinaryUploader()
    data = path.read_bytes()
    content_type = mimetypes.guess_type(path.name)[0]

    if image:
        result: UploadResult = asyncio.run(uploader.upload_image(data, path.name, content_type, folder))
    else:
        result = asyncio.run(uploader.upload_file(data, path.name, content_type, folder))

    if not result.success:
        _fail(result.error_message or "Upload failed")
    typer.echo(result.secure_url)


async def _list_notifications(session: SessionStore, limit: int, unread: bool) -> NotificationStore:
    async with _client(session) as client:
        store = NotificationStore(NotificationAPI(client), page_size=limit)
        params = {"is_read": False} if unread else {}
        await store.fetch(**params)
    return store


@notifications_app.command("list")
def list_notifications(
    limit: Annotated[int, typer.Option("--limit", "-n", help="Page size")] = 20,
    unread: Annotated[bool, typer.Option("--unread", help="Only unread notifications")] = False,
) -> None:
    """List notifications, unread ones marked with *."""
    store = _run(_list_notifications(SessionStore(), limit, unread))
    if store.error:
        _fail(store.error)

    for notification in store.notifications:
        typer.echo(_format_notification(notification))
    typer.echo(f"{store.unread_count} unread")


async def _mark_read(session: SessionStore, notification_id: Optional[str]) -> None:
    async with _client(session) as client:
        api = NotificationAPI(client)
        if notification_id is None:
            await api.mark_all_read()
        else:
            await api.mark_read(notification_id)


@notifications_app.command("read")
def read_notification(
    notification_id: Annotated[str, typer.Argument(help="Notification id")],
) -> None:
    """Mark one notification read."""
    _run(_mark_read(SessionStore(), notification_id))
    typer.echo(f"Marked {notification_id} as read")


@notifications_app.command("read-all")
def read_all_notifications() -> None:
    """Mark every notification read."""
    _run(_mark_read(SessionStore(), None))
    typer.echo("Marked all notifications as read")


async def _watch(session: SessionStore, interval: float, count: int) -> None:
    async with _client(session) as client:
        store = NotificationStore(NotificationAPI(client))
        for tick in range(count):
            unread = await store.refresh_unread_count()
            if unread is None:
                raise APIError(store.errors.get(NotificationStore.UNREAD_COUNT, "Failed to fetch unread count"))
            typer.echo(f"{unread} unread")
            if tick + 1 < count:
                await asyncio.sleep(interval)


@notifications_app.command("watch")
def watch_notifications(
    interval: Annotated[float, typer.Option("--interval", "-i", help="Seconds between checks")] = 30.0,
    count: Annotated[int, typer.Option("--count", "-c", help="Number of checks")] = 10,
) -> None:
    """Print the unread count periodically."""
    _run(_watch(SessionStore(), interval, count))


async def _submit_feedback(session: SessionStore, payload: dict, anonymous: bool):
    async with _client(session) as client:
        store = FeedbackStore(FeedbackAPI(client))
        if anonymous:
            return await store.submit_anonymous(payload)
        return await store.submit(payload)


@feedback_app.command("submit")
def submit_feedback(
    type: Annotated[FeedbackType, typer.Option("--type", "-t", help="Feedback type")],
    category: Annotated[str, typer.Option("--category", "-c", help="Category")],
    title: Annotated[str, typer.Option("--title", help="Short title")],
    description: Annotated[str, typer.Option("--description", "-d", help="Details")],
    priority: Annotated[FeedbackPriority, typer.Option("--priority", "-p", help="Priority")] = FeedbackPriority.MEDIUM,
    anonymous: Annotated[bool, typer.Option("--anonymous", help="Submit without signing in")] = False,
) -> None:
    """Send feedback to the ResumeAI team."""
    payload = {
        "type": type.value,
        "category": category,
        "title": title,
        "description": description,
        "priority": priority.value,
    }
    created = _run(_submit_feedback(SessionStore(), payload, anonymous))
    typer.echo(f"Submitted feedback {created.id}" if created else "Feedback submitted")


async def _vote(session: SessionStore, feedback_id: str, direction: VoteDirection) -> dict:
    async with _client(session) as client:
        return await FeedbackAPI(client).vote(feedback_id, direction)


@feedback_app.command("vote")
def vote_feedback(
    feedback_id: Annotated[str, typer.Argument(help="Feedback id")],
    direction: Annotated[VoteDirection, typer.Argument(help="up or down")],
) -> None:
    """Vote on a feedback item."""
    counts = _run(_vote(SessionStore(), feedback_id, direction))
    typer.echo(f"+{counts.get('upvotes', 0)} / -{counts.get('downvotes', 0)}")


async def _generate(session: SessionStore, tool: AITool, text: str) -> dict:
    async with _client(session) as client:
        return await AIToolsAPI(client).generate(tool, text)


@app.command()
def ai(
    tool: Annotated[AITool, typer.Argument(help="Which AI tool to run")],
    text: Annotated[str, typer.Argument(help="Input text")],
) -> None:
    """Run one of the backend's AI writing tools and print its response."""
    envelope = _run(_generate(SessionStore(), tool, text))
    data = envelope.get("data", envelope)
    if isinstance(data, str):
        typer.echo(data)
    else:
        typer.echo(json.dumps(data, indent=2))
    logger.debug(f"AI tool {tool.value} finished")


if __name__ == "__main__":
    app()
