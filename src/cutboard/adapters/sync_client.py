"""HTTP client for the document sync endpoint."""

from dataclasses import dataclass
from typing import Any, Protocol

import httpx


class SyncError(RuntimeError):
    """Raised when the remote document cannot be fetched or saved."""


class SyncClient(Protocol):
    """Interface for reading and overwriting the remote document."""

    async def fetch(self) -> dict[str, Any] | None:
        """Return the remote document, or None when nothing is stored."""

    async def push(self, document: dict[str, Any]) -> str:
        """Overwrite the remote document and return the server lastSync."""

    async def close(self) -> None:
        """Release network resources."""


@dataclass
class HttpxSyncClient(SyncClient):
    """HTTPX-backed sync client authenticated with a bearer token."""

    base_url: str
    token: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, base_url: str, token: str) -> "HttpxSyncClient":
        """Create a sync client with a managed httpx session."""
        return cls(base_url=base_url, token=token, http_client=httpx.AsyncClient())

    async def fetch(self) -> dict[str, Any] | None:
        """GET the stored document."""
        try:
            response = await self.http_client.get(
                f"{self.base_url}/api/sync",
                headers=self._headers(),
                timeout=15,
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise SyncError(f"Fetch failed: {exc}") from exc
        try:
            payload = response.json()
        except ValueError as exc:
            raise SyncError("Server returned invalid JSON") from exc
        if payload is not None and not isinstance(payload, dict):
            raise SyncError("Server returned a non-object document")
        return payload

    async def push(self, document: dict[str, Any]) -> str:
        """POST the whole document."""
        try:
            response = await self.http_client.post(
                f"{self.base_url}/api/sync",
                headers=self._headers(),
                json=document,
                timeout=15,
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise SyncError(f"Sync failed: {exc}") from exc
        try:
            last_sync = response.json().get("lastSync")
        except (ValueError, AttributeError) as exc:
            raise SyncError("Server returned an invalid sync response") from exc
        if not isinstance(last_sync, str):
            raise SyncError("Server response is missing lastSync")
        return last_sync

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}
