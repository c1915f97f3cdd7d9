"""Token endpoint exchange service.

Implements the RFC 6749 authorization code exchange with the PKCE
code_verifier (RFC 7636) over an asynchronous HTTP client.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from pkceauth.models.errors import (
    NoDataError,
    NoDecodeError,
    ServerError,
    TokenEndpointError,
)
from pkceauth.models.tokens import TokenErrorResponse, TokenRequest, TokenResponse

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class OAuth2TokenManager:
    """Exchanges authorization codes for tokens.

    Uses application/x-www-form-urlencoded encoding as required by RFC 6749.
    Performs exactly one request per exchange and never retries.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize token manager.

        Args:
            timeout: HTTP request timeout in seconds for the owned client
            http_client: Optional client to use instead of creating one. The
                caller keeps ownership and the manager never closes it.
        """
        self.timeout = timeout
        self._owns_http_client = http_client is None
        if http_client is None:
            http_client = httpx.AsyncClient(timeout=timeout)
        self._http_client = http_client

    async def exchange_code_for_token(
        self, token_request: TokenRequest
    ) -> TokenResponse:
        """Exchange authorization code for tokens.

        Args:
            token_request: Token exchange request parameters

        Returns:
            TokenResponse: Validated token response

        Raises:
            ServerError: If the request could not be completed
            NoDataError: If the response body is empty
            NoDecodeError: If the response body is not a token response
        """
        logger.debug(f"Exchanging authorization code at {token_request.token_endpoint}")

        headers = {
            "Accept": "application/json",
            "Cache-Control": "no-cache",
            "Content-Type": "application/x-www-form-urlencoded",
        }

        form_data = token_request.to_form_data()

        # Log request details (without sensitive data)
        logger.debug(
            f"Token request: grant_type={form_data['grant_type']}, "
            f"client_id={form_data['client_id']}"
        )

        try:
            response = await self._http_client.post(
                token_request.token_endpoint,
                data=form_data,
                headers=headers,
            )
        except httpx.HTTPError as e:
            logger.error(f"Error getting access token: {e}")
            raise ServerError(f"HTTP error during token exchange: {e}") from e

        return self._parse_token_response(response)

    def _parse_token_response(self, response: httpx.Response) -> TokenResponse:
        """Parse token endpoint response into TokenResponse.

        Raises:
            NoDataError: If the body is empty
            TokenEndpointError: If the body is an OAuth error document
            NoDecodeError: If the body is not a valid token response
        """
        if not response.content:
            logger.error("No data returned from access token request")
            raise NoDataError(
                f"Token endpoint returned an empty body ({response.status_code})"
            )

        try:
            response_data = response.json()
        except ValueError as e:
            raise NoDecodeError(f"Token response is not valid JSON: {e}") from e

        if isinstance(response_data, dict) and "error" in response_data:
            try:
                error_response = TokenErrorResponse.model_validate(response_data)
            except ValidationError as e:
                raise NoDecodeError(f"Invalid token error response: {e}") from e

            logger.warning(
                f"Token exchange failed with {response.status_code}: "
                f"{error_response.error} - {error_response.error_description}"
            )
            raise TokenEndpointError(
                error_response.error,
                error_response.error_description,
                status_code=response.status_code,
            )

        try:
            token_response = TokenResponse.model_validate(response_data)
        except ValidationError as e:
            raise NoDecodeError(f"Invalid token response format: {e}") from e

        logger.info("Token exchange successful")
        return token_response

    async def close(self) -> None:
        """Close the HTTP client if this manager created it."""
        if self._owns_http_client:
            await self._http_client.aclose()
