"""Utility helpers for the ResumeAI client."""

from .logging import setup_logging

__all__ = ["setup_logging"]
