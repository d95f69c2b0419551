"""Multipart encoding and unsigned asset uploads."""

from .cloudinary import CloudinaryUploader
from .multipart import EncodedForm, FormPart, encode_multipart, generate_boundary

__all__ = [
    "CloudinaryUploader",
    "EncodedForm",
    "FormPart",
    "encode_multipart",
    "generate_boundary",
]
