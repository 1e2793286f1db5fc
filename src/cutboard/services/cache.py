"""Local document cache abstractions."""

import copy
from dataclasses import dataclass
from typing import Any, Protocol


class LocalCache(Protocol):
    """Device-local storage for the last known document."""

    def read(self) -> dict[str, Any] | None:
        """Return the cached raw document, if any."""

    def write(self, document: dict[str, Any]) -> None:
        """Replace the cached raw document."""


@dataclass
class InMemoryLocalCache(LocalCache):
    """Process-local cache, used when no file cache is configured."""

    document: dict[str, Any] | None = None

    def read(self) -> dict[str, Any] | None:
        """Return a copy of the cached document."""
        return copy.deepcopy(self.document)

    def write(self, document: dict[str, Any]) -> None:
        """Store a copy of the document."""
        self.document = copy.deepcopy(document)
