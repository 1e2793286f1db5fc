"""JSON file implementation of the local document cache."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from cutboard.services.cache import LocalCache

_logger = logging.getLogger(__name__)


@dataclass
class JsonFileCache(LocalCache):
    """Keeps the last known document in a JSON file."""

    path: Path

    def read(self) -> dict[str, Any] | None:
        """Return the cached document, or None when missing or unreadable."""
        if not self.path.exists():
            return None
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            _logger.exception("Failed to load cached document from %s", self.path)
            return None
        return payload if isinstance(payload, dict) else None

    def write(self, document: dict[str, Any]) -> None:
        """Write the document atomically via a temporary file."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(document), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError:
            _logger.exception("Failed to save cached document to %s", self.path)
