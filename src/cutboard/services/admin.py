"""Admin service for diagnostics."""

import logging
from dataclasses import dataclass
from typing import Protocol

_logger = logging.getLogger(__name__)


class AdminRepository(Protocol):
    """Persistence interface for admin data."""

    def count_user_documents(self) -> int:
        """Return how many users have a stored document."""

    def list_user_documents(self, limit: int) -> list[dict[str, object]]:
        """Return stored document metadata, most recently updated first."""


@dataclass
class AdminService:
    """Service for admin dashboards."""

    admin_repository: AdminRepository
    config_flags: dict[str, bool]

    def diagnostics(self) -> dict[str, object]:
        """Report configuration presence and database connectivity."""
        checks: dict[str, object] = {"env": dict(self.config_flags)}
        try:
            checks["user_count"] = self.admin_repository.count_user_documents()
        except Exception as exc:
            _logger.exception("Database diagnostics failed")
            checks["database"] = f"Error: {exc}"
        else:
            checks["database"] = "Connected OK"
        return checks

    def list_users(self, limit: int = 50) -> list[dict[str, object]]:
        """Return users with stored documents."""
        return self.admin_repository.list_user_documents(limit)
