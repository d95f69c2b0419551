"""
Unsigned uploads to Cloudinary.

Uploads are authorized by a pre-shared upload preset instead of a signature,
so only the cloud name and preset are needed. Every call returns an
UploadResult; expected failures (missing configuration, transport errors,
rejected uploads, malformed responses) never raise.
"""

import json
import mimetypes
from typing import Any, Optional
from urllib.parse import urlparse

import httpx
from loguru import logger
from pydantic import ValidationError

from ..config import get_settings
from ..models.upload import ResourceKind, UploadRequest, UploadResult
from .multipart import FormPart, encode_multipart

PDF_FOLDER = "resumeai/pdfs"
PROFILE_PICTURE_FOLDER = "resumeai/profile-pictures"
DELIVERY_BASE_URL = "https://res.cloudinary.com"

_MAX_BODY_IN_MESSAGE = 500


class CloudinaryUploader:
    """
    Client for the Cloudinary unsigned upload endpoint.

    Holds configuration only; each upload opens its own HTTP client, so one
    uploader may serve any number of concurrent uploads.
    """

    def __init__(
        self,
        cloud_name: Optional[str] = None,
        upload_preset: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_image_bytes: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the uploader.

        Args:
            cloud_name: Cloudinary account name
            upload_preset: Unsigned upload preset name
            base_url: Upload API base URL (http:// is accepted for local endpoints)
            timeout: Request timeout in seconds
            max_image_bytes: Size limit enforced by upload_image
            transport: Optional httpx transport, used by tests
        """
        settings = get_settings()
        self.cloud_name = cloud_name or settings.cloudinary_cloud_name
        self.upload_preset = upload_preset or settings.cloudinary_upload_preset
        self.base_url = (base_url or settings.cloudinary_base_url).rstrip("/")
        self.timeout = timeout or settings.upload_timeout
        self.max_image_bytes = max_image_bytes or settings.max_image_bytes
        self._transport = transport

    def is_configured(self) -> bool:
        return bool(self.cloud_name and self.upload_preset)

    def upload_url(self, resource_kind: ResourceKind = ResourceKind.AUTO) -> str:
        return f"{self.base_url}/{self.cloud_name}/{ResourceKind(resource_kind).value}/upload"

    def _configuration_error(self) -> Optional[str]:
        if not self.is_configured():
            return (
                "Cloudinary configuration missing. "
                "Set CLOUDINARY_CLOUD_NAME and CLOUDINARY_UPLOAD_PRESET"
            )
        scheme = urlparse(self.base_url).scheme
        if scheme not in ("http", "https"):
            return f"Unsupported upload URL scheme: {scheme or '(none)'}"
        return None

    async def upload(self, request: UploadRequest) -> UploadResult:
        """
        Upload one file.

        Args:
            request: File content, name, target folder and resource kind

        Returns:
            UploadResult: success=True with the hosted asset's details, or
            success=False with a diagnostic message
        """
        config_error = self._configuration_error()
        if config_error:
            logger.error(f"Cloudinary upload skipped: {config_error}")
            return UploadResult.failure(config_error)

        parts = [
            FormPart(
                name="file",
                content=request.payload,
                filename=request.filename,
                content_type=request.content_type or "application/octet-stream",
            ),
            FormPart.field("upload_preset", self.upload_preset),
        ]
        if request.folder:
            parts.append(FormPart.field("folder", request.folder))
        parts.append(FormPart.field("resource_type", request.resource_kind.value))

        try:
            form = encode_multipart(parts)
        except ValueError as e:
            logger.error(f"Cloudinary upload rejected before sending: {e}")
            return UploadResult.failure(str(e))

        url = self.upload_url(request.resource_kind)
        logger.debug(f"Uploading {request.filename} ({form.content_length} bytes) to {url}")

        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            ) as client:
                response = await client.post(url, content=form.body, headers=form.headers())
        except httpx.HTTPError as e:
            message = str(e) or e.__class__.__name__
            logger.error(f"Cloudinary upload transport error: {message}")
            return UploadResult.failure(message)

        return self._parse_response(response)

    def _parse_response(self, response: httpx.Response) -> UploadResult:
        body = response.text
        ok = 200 <= response.status_code < 300

        try:
            data: Any = json.loads(response.content)
        except ValueError:
            if ok:
                message = f"Failed to parse response: {body[:_MAX_BODY_IN_MESSAGE]}"
            else:
                message = f"HTTP {response.status_code}: {body[:_MAX_BODY_IN_MESSAGE]}"
            logger.error(f"Cloudinary upload failed: {message}")
            return UploadResult.failure(message)

        if ok and isinstance(data, dict):
            try:
                result = UploadResult.from_response(data)
            except ValidationError as e:
                message = f"Failed to parse response: {e}"
                logger.error(f"Cloudinary upload failed: {message}")
                return UploadResult.failure(message)
            logger.info(f"Uploaded asset {result.public_id} ({result.byte_size} bytes)")
            return result

        if ok:
            message = f"Failed to parse response: {body[:_MAX_BODY_IN_MESSAGE]}"
        else:
            message = _error_message(data) or f"HTTP {response.status_code}: {body[:_MAX_BODY_IN_MESSAGE]}"
        logger.error(f"Cloudinary upload failed: {message}")
        return UploadResult.failure(message)

    async def upload_pdf(
        self,
        pdf_bytes: bytes,
        filename: str = "resume",
        folder: str = PDF_FOLDER,
    ) -> UploadResult:
        """Upload a rendered PDF under ``<filename>.pdf``."""
        return await self.upload(UploadRequest(
            payload=pdf_bytes,
            filename=f"{filename}.pdf",
            folder=folder,
            resource_kind=ResourceKind.AUTO,
            content_type="application/pdf",
        ))

    async def upload_image(
        self,
        data: bytes,
        filename: str,
        content_type: Optional[str] = None,
        folder: Optional[str] = None,
    ) -> UploadResult:
        """
        Upload an image after checking its type and size.

        Args:
            data: Image bytes
            filename: Original file name, used to guess the type when needed
            content_type: MIME type; guessed from ``filename`` when omitted
            folder: Target folder

        Returns:
            UploadResult: success=False without contacting the host when the
            file is not an image or exceeds the size limit
        """
        if not data:
            return UploadResult.failure("No file provided")

        content_type = content_type or mimetypes.guess_type(filename)[0] or ""
        if not content_type.startswith("image/"):
            return UploadResult.failure("File must be an image")

        if len(data) > self.max_image_bytes:
            limit_mb = self.max_image_bytes / (1024 * 1024)
            return UploadResult.failure(f"File size must be less than {limit_mb:g}MB")

        return await self.upload(UploadRequest(
            payload=data,
            filename=filename,
            folder=folder or "",
            resource_kind=ResourceKind.IMAGE,
            content_type=content_type,
        ))

    async def upload_file(
        self,
        data: bytes,
        filename: str,
        content_type: Optional[str] = None,
        folder: Optional[str] = None,
    ) -> UploadResult:
        """Upload any file (PDF, doc, ...) through the auto endpoint."""
        if not data:
            return UploadResult.failure("No file provided")

        return await self.upload(UploadRequest(
            payload=data,
            filename=filename,
            folder=folder or "",
            resource_kind=ResourceKind.AUTO,
            content_type=content_type or mimetypes.guess_type(filename)[0],
        ))

    async def upload_profile_picture(
        self,
        data: bytes,
        filename: str,
        content_type: Optional[str] = None,
    ) -> UploadResult:
        """Upload a profile picture and point ``secure_url`` at a face-cropped rendition."""
        result = await self.upload_image(data, filename, content_type, folder=PROFILE_PICTURE_FOLDER)
        if not result.success or not result.public_id:
            return result

        optimized = self.optimized_url(result.public_id)
        return result.model_copy(update={"secure_url": optimized, "url": optimized})

    def optimized_url(
        self,
        public_id: str,
        width: int = 400,
        height: int = 400,
        crop: str = "fill",
        quality: str = "auto",
        format: str = "auto",
        gravity: str = "face",
    ) -> str:
        """Build a delivery URL applying the given transformations."""
        transformation = f"c_{crop},w_{width},h_{height},q_{quality},f_{format},g_{gravity}"
        return f"{DELIVERY_BASE_URL}/{self.cloud_name}/image/upload/{transformation}/{public_id}"


def _error_message(data: Any) -> Optional[str]:
    if not isinstance(data, dict):
        return None
    error = data.get("error")
    if isinstance(error, dict):
        return error.get("message")
    if isinstance(error, str):
        return error
    return None
