"""
Authware SDK Token Storage

One plaintext token file per application id, so a returning user can be
re-authenticated without a password round trip.
"""

import os
import threading
from pathlib import Path
from typing import Optional, Union


TOKEN_FILENAME = "authtoken.bin"


def token_cache_path(base_directory: Union[str, Path], application_id: str) -> Path:
    """Derive the token file location for an application."""
    return Path(base_directory) / application_id / TOKEN_FILENAME


class TokenFileStorage:
    """File-based token slot (persistent across restarts)."""

    def __init__(self, base_directory: Union[str, Path], application_id: str) -> None:
        """
        Initialize the slot for one application.

        Args:
            base_directory: Directory holding one sub-directory per application
            application_id: Application the cached token belongs to
        """
        self._file_path = token_cache_path(base_directory, application_id)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._file_path

    def ensure_directory(self) -> None:
        """Ensure the storage directory exists."""
        self._file_path.parent.mkdir(parents=True, exist_ok=True)

    def exists(self) -> bool:
        return self._file_path.is_file()

    def load(self) -> Optional[str]:
        """Read the cached token, or None when there is none."""
        with self._lock:
            try:
                token = self._file_path.read_text(encoding="utf-8").strip()
            except FileNotFoundError:
                return None
            return token or None

    def save(self, token: str) -> None:
        """Write the token, readable by the owner only."""
        with self._lock:
            self.ensure_directory()
            self._file_path.write_text(token, encoding="utf-8")
            # Set restrictive permissions (owner read/write only)
            os.chmod(self._file_path, 0o600)

    def clear(self) -> None:
        """Delete the cached token if present."""
        with self._lock:
            try:
                self._file_path.unlink()
            except FileNotFoundError:
                pass
