"""Progress photo storage service."""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Protocol
from urllib.parse import urlparse
from uuid import uuid4

from cutboard.domain.photos import PhotoInfo, StoredObject

LEGACY_BLOB_HOST = "blob.vercel-storage.com"
DEFAULT_EXTENSION = "jpg"

_logger = logging.getLogger(__name__)


class PhotoError(ValueError):
    """Base error for rejected photo requests."""


class InvalidPhotoUrlError(PhotoError):
    """Raised when a URL does not point at photo storage."""


class InvalidPhotoDateError(PhotoError):
    """Raised when an upload date is not an ISO date."""


class PhotoOwnershipError(PhotoError):
    """Raised when a photo key belongs to another user."""


class ObjectStorage(Protocol):
    """Interface for a flat key/value object store."""

    def list_objects(self, prefix: str) -> list[StoredObject]:
        """Return objects stored directly under a prefix."""

    def upload(self, key: str, content: bytes, content_type: str) -> None:
        """Store bytes under a key."""

    def download(self, key: str) -> bytes:
        """Return the bytes stored under a key."""

    def delete(self, key: str) -> None:
        """Delete the object stored under a key."""


@dataclass
class PhotoService:
    """Service for listing, uploading and deleting progress photos."""

    storage: ObjectStorage
    public_base_url: str

    def list_photos(self, user_id: str) -> list[PhotoInfo]:
        """Return the user's photos, newest date first."""
        photos = []
        for stored in self.storage.list_objects(_photo_prefix(user_id)):
            filename = stored.key.rsplit("/", 1)[-1]
            photos.append(
                PhotoInfo(
                    url=self.public_url(stored.key),
                    key=stored.key,
                    date=filename.split("_", 1)[0],
                    uploaded_at=stored.updated_at.isoformat()
                    if stored.updated_at
                    else "",
                )
            )
        return sorted(photos, key=lambda photo: photo.date, reverse=True)

    def upload_photo(
        self,
        user_id: str,
        content: bytes,
        filename: str,
        content_type: str,
        photo_date: str | None = None,
    ) -> PhotoInfo:
        """Store a photo as ``users/{id}/photos/{date}_{uuid}.{ext}``."""
        day = photo_date or date.today().isoformat()
        try:
            date.fromisoformat(day)
        except ValueError as exc:
            raise InvalidPhotoDateError(f"Invalid photo date: {day}") from exc
        extension = filename.rsplit(".", 1)[-1] if "." in filename else ""
        extension = extension or DEFAULT_EXTENSION
        key = f"{_photo_prefix(user_id)}/{day}_{uuid4()}.{extension}"
        self.storage.upload(key, content, content_type)
        _logger.info("Uploaded photo %s", key)
        return PhotoInfo(url=self.public_url(key), key=key, date=day, uploaded_at="")

    def delete_photo(self, user_id: str, url: str) -> str:
        """Delete a photo by its public URL after checking ownership."""
        key = self.key_from_url(url)
        if not key.startswith(f"users/{user_id}/"):
            raise PhotoOwnershipError("Photo belongs to another user")
        self.storage.delete(key)
        _logger.info("Deleted photo %s", key)
        return key

    def public_url(self, key: str) -> str:
        """Return the public URL for a stored key."""
        return f"{self.public_base_url.rstrip('/')}/{key}"

    def key_from_url(self, url: str) -> str:
        """Extract a storage key from a current or legacy photo URL."""
        if not url:
            raise InvalidPhotoUrlError("No URL provided")
        if LEGACY_BLOB_HOST in url:
            return urlparse(url).path.lstrip("/")
        base = self.public_base_url.rstrip("/") + "/"
        if url.startswith(base):
            return url.removeprefix(base)
        raise InvalidPhotoUrlError("Invalid URL")


def _photo_prefix(user_id: str) -> str:
    return f"users/{user_id}/photos"
