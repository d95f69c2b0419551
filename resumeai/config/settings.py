"""
Configuration settings for the ResumeAI client.

This module handles environment variable loading and configuration management
using Pydantic for validation and type safety.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    ResumeAI client configuration settings.

    All settings can be overridden via environment variables.
    """

    # Backend API Configuration
    api_base_url: str = Field(
        default="http://localhost:5003/api",
        description="Base URL for the ResumeAI backend API"
    )
    api_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds for API requests"
    )
    api_read_retries: int = Field(
        default=2,
        ge=0,
        description="Retry attempts for GET requests on transport errors"
    )

    # Cloudinary Configuration
    cloudinary_cloud_name: Optional[str] = Field(
        default=None,
        description="Cloudinary cloud (account) name"
    )
    cloudinary_upload_preset: Optional[str] = Field(
        default=None,
        description="Unsigned upload preset name"
    )
    cloudinary_base_url: str = Field(
        default="https://api.cloudinary.com/v1_1",
        description="Base URL of the Cloudinary upload API"
    )
    upload_timeout: float = Field(
        default=60.0,
        description="Timeout in seconds for upload requests"
    )
    max_image_bytes: int = Field(
        default=5 * 1024 * 1024,
        description="Maximum accepted image size in bytes"
    )

    # Store Configuration
    notification_poll_interval: float = Field(
        default=30.0,
        gt=0,
        description="Unread counter polling interval in seconds"
    )
    default_page_size: int = Field(
        default=20,
        description="Default page size for collection fetches"
    )

    # Session persistence (CLI)
    session_file: Path = Field(
        default=Path.home() / ".resumeai" / "session.json",
        description="Path of the file holding the bearer token and UI flags"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    log_format: str = Field(
        default="text",
        description="Logging format (json or text)"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("cloudinary_cloud_name", "cloudinary_upload_preset", mode="before")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return v.upper()


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Configured settings instance
    """
    return Settings()
