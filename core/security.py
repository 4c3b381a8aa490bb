"""Legajos - Upload Security
File validation for case media and safe naming for stored and archived files.
"""

import mimetypes
import os
import re
import secrets
import time
import unicodedata
from pathlib import Path

from core.config import storage_settings


# Non-image types accepted as case documents
DOCUMENT_MIME_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "text/plain",
    "application/rtf",
    "application/vnd.oasis.opendocument.text",
    "application/vnd.oasis.opendocument.spreadsheet",
}

# Extension fallback when an original name carries none
MIME_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/bmp": ".bmp",
    "image/tiff": ".tiff",
    "image/heic": ".heic",
    "application/pdf": ".pdf",
    "application/msword": ".doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": ".docx",
    "application/vnd.ms-excel": ".xls",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": ".xlsx",
    "text/plain": ".txt",
    "application/rtf": ".rtf",
    "application/vnd.oasis.opendocument.text": ".odt",
    "application/vnd.oasis.opendocument.spreadsheet": ".ods",
}

SIZE_EXCEEDED_MESSAGE = "El archivo supera el tamaño permitido"
INVALID_TYPE_MESSAGE = "El tipo de archivo no es válido"


class FileValidator:
    """Validates uploaded files against a MIME policy and size limit."""

    def __init__(
        self,
        max_size: int,
        allowed_types: set[str] | None = None,
        allow_images: bool = True,
    ):
        self.max_size = max_size
        self.allowed_types = allowed_types or set()
        self.allow_images = allow_images

    def is_allowed_type(self, content_type: str | None) -> bool:
        if not content_type:
            return False
        content_type = content_type.split(";")[0].strip().lower()
        if self.allow_images and content_type.startswith("image/"):
            return True
        return content_type in self.allowed_types

    def validate(
        self,
        filename: str | None,
        content_type: str | None,
        file_size: int,
    ) -> tuple[bool, str | None]:
        """Validate a file upload.

        Returns:
            (is_valid, error_message)
        """
        if not self.is_allowed_type(content_type):
            return False, INVALID_TYPE_MESSAGE
        if file_size > self.max_size:
            return False, SIZE_EXCEEDED_MESSAGE
        return True, None


photo_validator = FileValidator(max_size=storage_settings.photo_max_bytes)
document_validator = FileValidator(
    max_size=storage_settings.document_max_bytes,
    allowed_types=DOCUMENT_MIME_TYPES,
)


def strip_diacritics(value: str) -> str:
    normalized = unicodedata.normalize("NFD", value)
    return "".join(ch for ch in normalized if unicodedata.category(ch) != "Mn")


def guess_extension(original_name: str | None, mime_type: str | None) -> str:
    """Extension from the original name, else from the MIME type, else '.bin'."""
    if original_name:
        ext = Path(original_name).suffix.lower()
        if ext and re.fullmatch(r"\.[a-z0-9]{1,10}", ext):
            return ext
    if mime_type:
        ext = MIME_EXTENSIONS.get(mime_type) or mimetypes.guess_extension(mime_type)
        if ext:
            return ext
    return ".bin"


def generate_storage_name(original_name: str | None, mime_type: str | None = None) -> str:
    """Unique stored file name: '<millis>-<random><ext>'."""
    ext = guess_extension(original_name, mime_type)
    return f"{int(time.time() * 1000)}-{secrets.token_hex(6)}{ext}"


def sanitize_archive_name(name: str, max_length: int = 150) -> str:
    """Make a file name safe as an archive entry.

    Diacritics are removed, anything outside [A-Za-z0-9._-] becomes '_',
    runs of '_' collapse and leading/trailing '_' are stripped.
    """
    name = os.path.basename(name.replace("\\", "/"))
    name = strip_diacritics(name)
    name = re.sub(r"[^A-Za-z0-9._-]", "_", name)
    name = re.sub(r"_+", "_", name).strip("_")
    if len(name) > max_length:
        ext = Path(name).suffix
        name = Path(name).stem[: max_length - len(ext)] + ext
    return name


def safe_join(base_dir: str, relative_path: str) -> str:
    """Resolve relative_path under base_dir, refusing anything outside it."""
    abs_base = os.path.abspath(base_dir)
    abs_path = os.path.abspath(os.path.join(abs_base, relative_path))
    if abs_path != abs_base and not abs_path.startswith(abs_base + os.sep):
        raise ValueError("Path traversal detected")
    return abs_path
