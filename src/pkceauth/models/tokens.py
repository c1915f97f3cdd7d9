"""Token exchange and credential models.

Contains the token request sent to the token endpoint, the response schema
it must satisfy, and the immutable credential the session keeps.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class TokenRequest:
    """Authorization code exchange parameters (RFC 6749 Section 4.1.3).

    Includes the PKCE code_verifier (RFC 7636 Section 4.5).
    """

    token_endpoint: str
    client_id: str
    redirect_uri: str
    code: str
    code_verifier: str
    grant_type: str = "authorization_code"

    def to_form_data(self) -> dict[str, str]:
        """Convert to form data for application/x-www-form-urlencoded request.

        Returns:
            Dictionary suitable for httpx data parameter
        """
        return {
            "grant_type": self.grant_type,
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "code": self.code,
            "code_verifier": self.code_verifier,
        }


class TokenResponse(BaseModel):
    """Successful token endpoint response.

    Every field is required. A body missing any of them is a decode failure.
    """

    access_token: str
    token_type: str
    scope: str
    id_token: str
    expires_in: float = Field(allow_inf_nan=False)  # Seconds until expiry


class TokenErrorResponse(BaseModel):
    """OAuth error document (RFC 6749 Section 5.2)."""

    error: str
    error_description: str | None = None
    error_uri: str | None = None


@dataclass(frozen=True)
class Credential:
    """Tokens issued by one successful exchange.

    Never mutated. A later exchange replaces the whole credential.
    """

    access_token: str
    token_type: str
    scope: str
    id_token: str
    expires_in: float
    issued_at: float  # Unix timestamp of the exchange
    user_id: str | None = None

    @classmethod
    def from_token_response(
        cls,
        token_response: TokenResponse,
        issued_at: float,
        user_id: str | None = None,
    ) -> Credential:
        return cls(
            access_token=token_response.access_token,
            token_type=token_response.token_type,
            scope=token_response.scope,
            id_token=token_response.id_token,
            expires_in=token_response.expires_in,
            issued_at=issued_at,
            user_id=user_id,
        )

    @property
    def expires_at(self) -> float:
        """Absolute expiry as a Unix timestamp."""
        return self.issued_at + self.expires_in

    @property
    def authorization_header(self) -> str:
        """Value for an Authorization header on protected requests."""
        return f"{self.token_type} {self.access_token}"

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at
