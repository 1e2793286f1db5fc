"""Supabase Auth implementation of session verification."""

import logging
from dataclasses import dataclass

from supabase import Client

from cutboard.services.auth import SessionVerifier

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseSessionVerifier(SessionVerifier):
    """Resolves access tokens through Supabase Auth."""

    client: Client

    def verify(self, token: str) -> str | None:
        """Return the user id for a valid access token."""
        try:
            response = self.client.auth.get_user(token)
        except Exception:
            _logger.warning("Rejected access token", exc_info=True)
            return None
        user = getattr(response, "user", None)
        if user is None:
            return None
        return str(user.id)
