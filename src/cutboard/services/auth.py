"""Bearer token authentication."""

from dataclasses import dataclass
from typing import Protocol

BEARER_PREFIX = "bearer "


class SessionVerifier(Protocol):
    """Interface for resolving an access token to a user id."""

    def verify(self, token: str) -> str | None:
        """Return the user id for a valid token, otherwise None."""


def parse_bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer`` header value."""
    if not authorization or not authorization.lower().startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX) :].strip()
    return token or None


@dataclass
class AuthService:
    """Service that authenticates API requests."""

    verifier: SessionVerifier

    def authenticate(self, authorization: str | None) -> str | None:
        """Return the user id for an Authorization header, if valid."""
        token = parse_bearer_token(authorization)
        if token is None:
            return None
        return self.verifier.verify(token)
