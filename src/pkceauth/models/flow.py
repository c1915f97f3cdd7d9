"""Authorization flow models.

Contains models for the authorization request, the redirect callback and the
lifecycle of a single authorization attempt.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlencode


class FlowState(str, Enum):
    """Where a session is in its current authorization attempt."""

    IDLE = "idle"
    AWAITING_CALLBACK = "awaiting_callback"
    EXCHANGING = "exchanging"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class AuthorizationRequest:
    """Authorization request parameters for the browser-delivered GET."""

    authorization_endpoint: str
    client_id: str
    redirect_uri: str
    code_challenge: str
    state: str
    code_challenge_method: str = "S256"
    scope: str = "openid"

    def build_authorization_url(self) -> str:
        """Build the complete authorization URL."""
        params = {
            "client_id": self.client_id,
            "response_type": "code",
            "scope": self.scope,
            "redirect_uri": self.redirect_uri,
            "state": self.state,
            "code_challenge_method": self.code_challenge_method,
            "code_challenge": self.code_challenge,
        }

        return f"{self.authorization_endpoint}?{urlencode(params)}"


@dataclass(frozen=True)
class AuthorizationResponse:
    code: str | None = None
    state: str | None = None
    error: str | None = None
    error_description: str | None = None

    def is_success(self) -> bool:
        return self.code is not None and self.state is not None

    def is_error(self) -> bool:
        return self.error is not None
