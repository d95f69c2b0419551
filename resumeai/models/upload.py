"""Request/result models for unsigned asset uploads."""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict


class ResourceKind(str, Enum):
    """Cloudinary resource type segment of the upload URL."""
    AUTO = "auto"
    IMAGE = "image"


class UploadRequest(BaseModel):
    """A single upload; lives for one request/response cycle."""
    payload: bytes
    filename: str
    folder: str = ""
    resource_kind: ResourceKind = ResourceKind.AUTO
    content_type: Optional[str] = None


class UploadResult(BaseModel):
    """Outcome of an upload. ``success`` discriminates the two shapes."""
    model_config = ConfigDict(frozen=True)

    success: bool
    secure_url: Optional[str] = None
    url: Optional[str] = None
    public_id: Optional[str] = None
    format: Optional[str] = None
    byte_size: Optional[int] = None
    created_at: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    original_filename: Optional[str] = None
    error_message: Optional[str] = None

    @classmethod
    def failure(cls, message: str) -> "UploadResult":
        return cls(success=False, error_message=message)

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "UploadResult":
        """Build a successful result from the host's JSON response."""
        secure_url = data.get("secure_url") or data.get("url")
        return cls(
            success=True,
            secure_url=secure_url,
            url=data.get("url") or secure_url,
            public_id=data.get("public_id"),
            format=data.get("format"),
            byte_size=data.get("bytes"),
            created_at=data.get("created_at"),
            width=data.get("width"),
            height=data.get("height"),
            original_filename=data.get("original_filename"),
        )
