"""Exception hierarchy for the PKCE authorization code flow.

Provides specific exception types for different failure modes so callers can
tell a misconfigured session from a forged callback, an unreachable server
from one that returned garbage, and a missing credential from an expired one.
"""

from __future__ import annotations


class OAuth2Error(Exception):
    """Base exception for all authorization flow errors."""

    pass


class NotConfiguredError(OAuth2Error):
    """Raised when a session is used before it has been configured.

    This is a programming error in the integrating application. The library
    never catches it.
    """

    pass


class PKCEError(OAuth2Error):
    """Raised when a PKCE code challenge cannot be computed."""

    pass


class AuthorizationCallbackError(OAuth2Error):
    """Raised when the redirect callback cannot be accepted.

    Terminal for the current attempt. The flow can be restarted with a new
    authorization request.
    """

    pass


class MalformedCallbackError(AuthorizationCallbackError):
    """Raised when the callback is missing the code or state parameter."""

    pass


class StateMismatchError(AuthorizationCallbackError):
    """Raised when the callback state does not match the issued state.

    This could indicate a CSRF attack or a stale callback from an abandoned
    attempt.
    """

    pass


class TokenExchangeError(OAuth2Error):
    """Raised when exchanging the authorization code for tokens fails."""

    pass


class ServerError(TokenExchangeError):
    """Raised when the token request could not be sent or answered."""

    pass


class NoDataError(TokenExchangeError):
    """Raised when the token endpoint returned an empty body."""

    pass


class NoDecodeError(TokenExchangeError):
    """Raised when the token response is not the expected JSON document."""

    pass


class TokenEndpointError(NoDecodeError):
    """Raised when the token endpoint answered with an OAuth error document."""

    def __init__(
        self, error: str, error_description: str | None = None, status_code: int = 0
    ):
        self.error = error
        self.error_description = error_description
        self.status_code = status_code
        message = f"Token endpoint returned {error}"
        if error_description:
            message += f": {error_description}"
        super().__init__(message)


class JWTDecodeError(OAuth2Error):
    """Raised when an identity token payload cannot be decoded."""

    pass


class CredentialError(OAuth2Error):
    """Base exception for credential lookups."""

    pass


class NoCredentialsError(CredentialError):
    """Raised when no token exchange has succeeded yet."""

    pass


class ExpiredCredentialsError(CredentialError):
    """Raised when the stored credential is past its expiry."""

    pass
