"""Server-side storage of the per-user document."""

import json
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Literal, Protocol

from cutboard.domain.document import AppData, default_document, utc_timestamp
from cutboard.services.migrations import DocumentError, migrate_document
from cutboard.services.photos import ObjectStorage

LEGACY_DOCUMENT_NAME = "data.json"

_logger = logging.getLogger(__name__)


class UserDataRepository(Protocol):
    """Persistence interface for one serialized document per user."""

    def get_user_data(self, user_id: str) -> str | None:
        """Return the stored JSON string for a user."""

    def save_user_data(self, user_id: str, data: str) -> None:
        """Insert or overwrite the stored JSON string for a user."""


@dataclass(frozen=True)
class LegacyImportResult:
    """Outcome of importing a legacy object-storage document."""

    source: Literal["database", "blob", "none"]
    message: str
    last_sync: str | None = None


@dataclass
class SyncService:
    """Service for reading and overwriting user documents."""

    repository: UserDataRepository
    storage: ObjectStorage

    def get_document(self, user_id: str) -> dict[str, Any] | None:
        """Return the stored raw document, or None when nothing is stored."""
        data = self.repository.get_user_data(user_id)
        if not data:
            return None
        try:
            document = json.loads(data)
        except json.JSONDecodeError as exc:
            raise DocumentError(f"Stored document for {user_id} is not JSON") from exc
        if not isinstance(document, dict):
            raise DocumentError(f"Stored document for {user_id} is not an object")
        return document

    def save_document(self, user_id: str, document: dict[str, Any]) -> str:
        """Stamp and overwrite the user's document; return the new lastSync."""
        last_sync = utc_timestamp()
        stamped = {**document, "lastSync": last_sync, "userId": user_id}
        self.repository.save_user_data(user_id, json.dumps(stamped))
        _logger.info("Saved document for user %s", user_id)
        return last_sync

    def load_document(self, user_id: str, today: date | None = None) -> AppData:
        """Return the migrated stored document, or defaults."""
        raw = self.get_document(user_id)
        if raw is None:
            return default_document(today)
        return migrate_document(raw, today=today)

    def import_legacy_document(self, user_id: str) -> LegacyImportResult:
        """Copy ``users/{id}/data.json`` from object storage when none is stored."""
        if self.repository.get_user_data(user_id):
            return LegacyImportResult(
                source="database",
                message="Data already exists in database, skipping migration",
            )

        prefix = f"users/{user_id}"
        names = {
            stored.key.rsplit("/", 1)[-1]
            for stored in self.storage.list_objects(prefix)
        }
        if LEGACY_DOCUMENT_NAME not in names:
            return LegacyImportResult(
                source="none", message="No data found in storage to migrate"
            )

        content = self.storage.download(f"{prefix}/{LEGACY_DOCUMENT_NAME}")
        try:
            document = json.loads(content)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise DocumentError("Legacy document is not valid JSON") from exc
        if not isinstance(document, dict):
            raise DocumentError("Legacy document is not an object")

        self.repository.save_user_data(user_id, json.dumps(document))
        _logger.info("Imported legacy document for user %s", user_id)
        last_sync = document.get("lastSync")
        return LegacyImportResult(
            source="blob",
            message="Data migrated from storage to database successfully",
            last_sync=last_sync if isinstance(last_sync, str) else None,
        )
