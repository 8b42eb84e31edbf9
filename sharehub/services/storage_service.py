"""
Storage Service

Local-disk object store for slide decks and event photos, plus upload
validation and time-limited signed download links.
"""

import logging
import re
from datetime import datetime, timedelta
from pathlib import Path

from fastapi import UploadFile
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from sharehub.config import settings
from sharehub.exceptions import (
    ConflictError,
    FileTooLargeError,
    InvalidFileTypeError,
    NotFoundError,
    StorageError,
    ValidationFailedError,
)
from sharehub.utils.timeutils import utcnow

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024

# Allowed file types
ALLOWED_SLIDE_TYPES = {
    "application/pdf": [".pdf"],
    "application/vnd.ms-powerpoint": [".ppt"],
    "application/vnd.openxmlformats-officedocument.presentationml.presentation": [".pptx"],
    "application/x-iwork-keynote-sffkey": [".key"],
    "application/vnd.apple.keynote": [".key"],
    "application/vnd.oasis.opendocument.presentation": [".odp"],
}

ALLOWED_PHOTO_TYPES = {
    "image/jpeg": [".jpg", ".jpeg"],
    "image/png": [".png"],
    "image/webp": [".webp"],
}

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def sanitize_filename(filename: str) -> str:
    """Keep [A-Za-z0-9._-], replace everything else with '_', drop leading dots."""
    name = Path(filename.replace("\\", "/")).name
    name = _UNSAFE_CHARS.sub("_", name).lstrip(".")
    return name or "file"


def build_slide_path(tenant_id: int, event_id: int, speech_id: int, filename: str) -> str:
    return f"slides/{tenant_id}/{event_id}/{speech_id}/{sanitize_filename(filename)}"


def build_photo_path(tenant_id: int, event_id: int, filename: str) -> str:
    return f"photos/{tenant_id}/{event_id}/{sanitize_filename(filename)}"


def validate_upload_type(mime_type: str | None, allowed: dict[str, list[str]]) -> str:
    """
    Check a MIME type against an allow-list.

    Raises:
        InvalidFileTypeError: If the type is missing or not allowed
    """
    if not mime_type or mime_type not in allowed:
        raise InvalidFileTypeError(mime_type, sorted(allowed))
    return mime_type


def validate_upload_size(size: int, max_size: int) -> None:
    if size > max_size:
        raise FileTooLargeError(size, max_size)


async def read_upload(file: UploadFile, allowed: dict[str, list[str]], max_size: int) -> tuple[bytes, str]:
    """
    Validate and read an uploaded file into memory.

    Returns:
        Tuple of (content, mime_type)

    Raises:
        ValidationFailedError: If no file was provided
        InvalidFileTypeError: If the MIME type is not allowed
        FileTooLargeError: If the file exceeds max_size
    """
    if not file or not file.filename:
        raise ValidationFailedError("No file uploaded", field="file")

    mime_type = validate_upload_type(file.content_type, allowed)

    chunks = []
    size = 0
    while chunk := await file.read(CHUNK_SIZE):
        size += len(chunk)
        validate_upload_size(size, max_size)
        chunks.append(chunk)

    if size == 0:
        raise ValidationFailedError("Uploaded file is empty", field="file")

    return b"".join(chunks), mime_type


class LocalObjectStorage:
    """Object store rooted at a directory; keys are '/'-separated relative paths."""

    def __init__(self, root: str | Path, secret_key: str, url_ttl_seconds: int = 3600):
        self.root = Path(root)
        self.url_ttl_seconds = url_ttl_seconds
        self.serializer = URLSafeTimedSerializer(secret_key, salt="sharehub-download")

    def _resolve(self, key: str) -> Path:
        root = self.root.resolve()
        path = (root / key).resolve()
        if root not in path.parents:
            raise StorageError(f"Invalid storage key: {key}")
        return path

    def put(self, key: str, data: bytes) -> str:
        path = self._resolve(key)
        if path.exists():
            raise ConflictError(
                f"A file named '{path.name}' already exists here", details={"storage_path": key}
            )
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise StorageError(f"Failed to store file: {e}") from e
        return key

    def read(self, key: str) -> bytes:
        path = self._resolve(key)
        if not path.is_file():
            raise NotFoundError("File", key)
        return path.read_bytes()

    def exists(self, key: str) -> bool:
        return self._resolve(key).is_file()

    def delete(self, key: str) -> None:
        path = self._resolve(key)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.info("Storage object already gone: %s", key)

    def delete_quietly(self, key: str) -> bool:
        """
        Remove an object, logging instead of raising on failure.

        Database rows are deleted even when this returns False; the
        leftover object is an orphan.
        """
        try:
            self.delete(key)
            return True
        except Exception as e:
            logger.warning("Storage delete failed, orphaned object %s: %s", key, e)
            return False

    def create_signed_url(self, key: str, filename: str) -> tuple[str, datetime]:
        signed = self.serializer.dumps({"key": key, "filename": filename})
        expires_at = utcnow() + timedelta(seconds=self.url_ttl_seconds)
        return f"/files/{signed}", expires_at

    def verify_signed(self, signed: str) -> tuple[str, str]:
        try:
            payload = self.serializer.loads(signed, max_age=self.url_ttl_seconds)
        except SignatureExpired as e:
            raise NotFoundError("Download link") from e
        except BadSignature as e:
            raise NotFoundError("Download link") from e
        return payload["key"], payload["filename"]


storage = LocalObjectStorage(settings.storage_dir, settings.secret_key, settings.signed_url_ttl_seconds)
