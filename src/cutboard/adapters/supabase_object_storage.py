"""Supabase Storage implementation of the object store."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from cutboard.domain.photos import StoredObject
from cutboard.services.photos import ObjectStorage

LIST_LIMIT = 1000


@dataclass
class SupabaseObjectStorage(ObjectStorage):
    """Stores photos and legacy documents in a Supabase Storage bucket."""

    client: Client
    bucket: str

    def list_objects(self, prefix: str) -> list[StoredObject]:
        """Return files stored directly under a folder prefix."""
        entries = self.client.storage.from_(self.bucket).list(
            prefix, {"limit": LIST_LIMIT}
        )
        objects = []
        for entry in entries or []:
            if entry.get("id") is None:
                continue
            updated = entry.get("updated_at") or entry.get("created_at")
            objects.append(
                StoredObject(
                    key=f"{prefix}/{entry['name']}",
                    updated_at=datetime.fromisoformat(updated)
                    if isinstance(updated, str) and updated
                    else None,
                )
            )
        return objects

    def upload(self, key: str, content: bytes, content_type: str) -> None:
        """Upload bytes under a key."""
        self.client.storage.from_(self.bucket).upload(
            key, content, {"content-type": content_type}
        )

    def download(self, key: str) -> bytes:
        """Download the bytes stored under a key."""
        return self.client.storage.from_(self.bucket).download(key)

    def delete(self, key: str) -> None:
        """Delete a stored object."""
        self.client.storage.from_(self.bucket).remove([key])

    def default_public_url(self, supabase_url: str) -> str:
        """Return the bucket's public object URL prefix."""
        return f"{supabase_url.rstrip('/')}/storage/v1/object/public/{self.bucket}"
