"""
Session persistence for the command-line client.

Holds the bearer token and small UI preference flags in a JSON file, the
way the web client kept them in browser storage. Library code never reads
this file; callers hand the token to ``APIClient`` explicitly.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger

from .config import get_settings

TOKEN_KEY = "token"
FLAGS_KEY = "flags"


class SessionStore:
    """A small JSON document on disk."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path or get_settings().session_file)
        self._data: Dict[str, Any] = {}
        self.load()

    def load(self) -> Dict[str, Any]:
        """Read the file; a missing or unreadable file yields an empty session."""
        if not self.path.exists():
            self._data = {}
            return self._data
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable session file {self.path}: {e}")
            data = {}
        self._data = data if isinstance(data, dict) else {}
        return self._data

    def save(self) -> None:
        """Write the session; the file is readable by its owner only."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(self._data, f, indent=2)
        try:
            self.path.chmod(0o600)
        except OSError:
            logger.debug(f"Could not restrict permissions on {self.path}")

    @property
    def token(self) -> Optional[str]:
        return self._data.get(TOKEN_KEY) or None

    @token.setter
    def token(self, value: Optional[str]) -> None:
        if value:
            self._data[TOKEN_KEY] = value
        else:
            self._data.pop(TOKEN_KEY, None)
        self.save()

    def clear_token(self) -> None:
        self.token = None

    def get_flag(self, name: str, default: Any = None) -> Any:
        return self._data.get(FLAGS_KEY, {}).get(name, default)

    def set_flag(self, name: str, value: Any) -> None:
        self._data.setdefault(FLAGS_KEY, {})[name] = value
        self.save()
