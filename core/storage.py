"""Legajos - Media Storage
Local filesystem storage for case photos and documents.

Stored paths are relative to the upload root and always use '/' so they can
be served under /uploads and persisted portably.
"""

import os
from pathlib import Path
from uuid import UUID

from loguru import logger

from core.config import storage_settings
from core.security import generate_storage_name, safe_join


class MediaStorage:
    """Writes, reads and removes files below the upload root."""

    def __init__(self, root: str | None = None):
        self.root = os.path.abspath(root or storage_settings.root)

    def absolute(self, relative_path: str) -> str:
        return safe_join(self.root, relative_path)

    def save(
        self,
        case_id: UUID,
        folder: str,
        content: bytes,
        original_name: str | None,
        mime_type: str | None = None,
    ) -> str:
        """Write content to cases/<case_id>/<folder>/ and return the relative path."""
        relative_path = "/".join(
            ["cases", str(case_id), folder, generate_storage_name(original_name, mime_type)]
        )
        abs_path = self.absolute(relative_path)
        Path(abs_path).parent.mkdir(parents=True, exist_ok=True)
        with open(abs_path, "wb") as f:
            f.write(content)
        logger.debug(f"Stored {len(content)} bytes at {relative_path}")
        return relative_path

    def read(self, relative_path: str) -> bytes | None:
        """File contents, or None when the file is missing."""
        try:
            with open(self.absolute(relative_path), "rb") as f:
                return f.read()
        except FileNotFoundError:
            logger.warning(f"Stored file not found: {relative_path}")
            return None

    def remove(self, relative_path: str) -> bool:
        """Delete a stored file. A file that is already gone is not an error."""
        try:
            os.remove(self.absolute(relative_path))
            logger.debug(f"Removed stored file {relative_path}")
            return True
        except FileNotFoundError:
            return False
        except (OSError, ValueError) as e:
            logger.warning(f"Could not remove stored file {relative_path}: {e}")
            return False

    def health_check(self) -> bool:
        """Verify the upload root is writable."""
        try:
            Path(self.root).mkdir(parents=True, exist_ok=True)
            probe = Path(self.root) / ".write_test"
            probe.write_text("ok")
            probe.unlink()
            return True
        except OSError as e:
            logger.error(f"Upload root not writable: {e}")
            return False


def media_url(relative_path: str) -> str:
    return f"/uploads/{relative_path}"


_storage: MediaStorage | None = None


def get_storage() -> MediaStorage:
    """Process-wide storage rooted at UPLOAD_ROOT."""
    global _storage
    if _storage is None:
        _storage = MediaStorage()
    return _storage


def set_storage(storage: MediaStorage | None) -> None:
    global _storage
    _storage = storage
