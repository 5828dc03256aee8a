"""File uploads.

Backends:
- local: writes into UPLOAD_DIR, served by the app under /uploads
- remote: HTTP PUT to an object store with a bearer token
"""

import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import httpx
from fastapi import UploadFile
from loguru import logger

import models.schemas as schemas
from helpers.time_utils import utc_now
from models.config import settings
from models.exceptions import ExternalServiceException, ValidationException

# Extension -> MIME type accepted for it
ALLOWED_TYPES = {
    ".jpeg": "image/jpeg",
    ".jpg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}
ALLOWED_MIME_TYPES = set(ALLOWED_TYPES.values())

INVALID_TYPE_MESSAGE = (
    "Invalid file type. Only images (JPEG, PNG, GIF), PDF, and Word documents "
    "are allowed."
)
TOO_LARGE_MESSAGE = "File too large. Maximum size is 5MB."
PUBLIC_PREFIX = "/uploads"


class StorageBackend(ABC):
    """Abstract base class for upload storage."""

    @abstractmethod
    def save(self, filename: str, content: bytes, mime_type: str) -> str:
        """Store the bytes and return the URL they are served from."""
        pass


class LocalStorage(StorageBackend):
    """Files on local disk."""

    def __init__(self, upload_dir: str) -> None:
        self.upload_dir = Path(upload_dir)

    def save(self, filename: str, content: bytes, mime_type: str) -> str:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        with open(self.upload_dir / filename, "wb") as buffer:
            buffer.write(content)
        return f"{PUBLIC_PREFIX}/{filename}"


class RemoteStorage(StorageBackend):
    """Object store reachable with ``PUT <base>/<name>``."""

    def __init__(
        self,
        base_url: str,
        token: str = "",
        public_url: str = "",
        timeout: float = 30.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.public_url = (public_url or base_url).rstrip("/")
        self.timeout = timeout

    def save(self, filename: str, content: bytes, mime_type: str) -> str:
        headers = {"Content-Type": mime_type}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.put(
                    f"{self.base_url}/{filename}", content=content, headers=headers
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Object storage upload of {filename} failed: {e}")
            raise ExternalServiceException("File storage request failed")
        return f"{self.public_url}/{filename}"


def get_storage_backend() -> StorageBackend:
    """Backend selected by UPLOAD_BACKEND."""
    if settings.UPLOAD_BACKEND == "remote":
        return RemoteStorage(
            base_url=settings.OBJECT_STORAGE_URL,
            token=settings.OBJECT_STORAGE_TOKEN,
            public_url=settings.OBJECT_STORAGE_PUBLIC_URL,
        )
    return LocalStorage(settings.UPLOAD_DIR)


def validate_file_type(filename: str, mime_type: Optional[str]) -> str:
    """
    Check extension and declared MIME type against the whitelist.

    Returns:
        The lowercased extension

    Raises:
        ValidationException: If either check fails
    """
    extension = Path(filename).suffix.lower()
    if extension not in ALLOWED_TYPES or mime_type not in ALLOWED_MIME_TYPES:
        raise ValidationException(INVALID_TYPE_MESSAGE)
    return extension


class UploadService:
    """Service for validated file uploads."""

    @staticmethod
    def upload(
        file: Optional[UploadFile],
        storage: StorageBackend,
        max_bytes: Optional[int] = None,
    ) -> schemas.UploadedFile:
        """
        Validate and store one uploaded file.

        Raises:
            ValidationException: On a missing file, a disallowed type or size
            ExternalServiceException: If the remote store rejects the file
        """
        if file is None or not file.filename:
            raise ValidationException("No file was uploaded.")

        extension = validate_file_type(file.filename, file.content_type)
        max_bytes = max_bytes or settings.UPLOAD_MAX_BYTES

        # Read one byte past the ceiling to detect oversize files
        content = file.file.read(max_bytes + 1)
        if len(content) > max_bytes:
            raise ValidationException(TOO_LARGE_MESSAGE)

        filename = f"file-{uuid.uuid4().hex}{extension}"
        url = storage.save(filename, content, str(file.content_type))
        logger.info(f"Stored upload {filename} ({len(content)} bytes)")

        return schemas.UploadedFile(
            filename=filename,
            original_name=file.filename,
            file_path=url,
            file_size=len(content),
            mime_type=str(file.content_type),
            uploaded_at=utc_now(),
        )
