"""
multipart/form-data encoding.

Builds the complete request body in memory so its exact length is known
before the request is sent. Upload hosts validate ``Content-Length`` up
front, so the body is never streamed in chunks.
"""

import secrets
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

CRLF = b"\r\n"
BOUNDARY_PREFIX = "----ResumeAIFormBoundary"


@dataclass(frozen=True)
class FormPart:
    """One part of a multipart body."""
    name: str
    content: bytes
    filename: Optional[str] = None
    content_type: Optional[str] = None

    @classmethod
    def field(cls, name: str, value: str) -> "FormPart":
        return cls(name=name, content=value.encode("utf-8"))


@dataclass(frozen=True)
class EncodedForm:
    body: bytes
    boundary: str

    @property
    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self.boundary}"

    @property
    def content_length(self) -> int:
        return len(self.body)

    def headers(self) -> Dict[str, str]:
        return {
            "Content-Type": self.content_type,
            "Content-Length": str(self.content_length),
        }


def generate_boundary() -> str:
    """Return a fresh boundary token drawn from random bytes."""
    return BOUNDARY_PREFIX + secrets.token_hex(16)


def _quote(value: str) -> str:
    if "\r" in value or "\n" in value:
        raise ValueError(f"Header value may not contain line breaks: {value!r}")
    return value.replace('"', "%22")


def _part_header(part: FormPart, boundary: str) -> bytes:
    disposition = f'Content-Disposition: form-data; name="{_quote(part.name)}"'
    if part.filename is not None:
        disposition += f'; filename="{_quote(part.filename)}"'

    lines = [f"--{boundary}", disposition]
    if part.content_type:
        lines.append(f"Content-Type: {_quote(part.content_type)}")
    return ("\r\n".join(lines) + "\r\n\r\n").encode("utf-8")


def _collides(boundary: str, parts: List[FormPart]) -> bool:
    marker = boundary.encode("ascii")
    return any(marker in part.content for part in parts)


def encode_multipart(parts: Iterable[FormPart], boundary: Optional[str] = None) -> EncodedForm:
    """
    Encode ``parts`` into a single multipart/form-data body.

    Args:
        parts: Parts in the order they should appear
        boundary: Explicit boundary token; generated when omitted

    Returns:
        EncodedForm: Body bytes and the boundary used

    Raises:
        ValueError: If an explicit boundary occurs inside a part, or a
            header value contains a line break
    """
    parts = list(parts)

    if boundary is None:
        boundary = generate_boundary()
        while _collides(boundary, parts):
            boundary = generate_boundary()
    elif _collides(boundary, parts):
        raise ValueError("Boundary occurs inside part content")

    chunks: List[bytes] = []
    for part in parts:
        chunks.append(_part_header(part, boundary))
        chunks.append(part.content)
        chunks.append(CRLF)
    chunks.append(f"--{boundary}--".encode("ascii") + CRLF)

    return EncodedForm(body=b"".join(chunks), boundary=boundary)
