"""Authorization request and callback handling service.

Builds the URL handed to the system browser and turns the provider's redirect
back into a validated authorization code.
"""

from __future__ import annotations

import logging
from urllib.parse import parse_qs, urlparse

from pkceauth.models.configuration import SessionConfiguration
from pkceauth.models.errors import MalformedCallbackError
from pkceauth.models.flow import AuthorizationRequest, AuthorizationResponse
from pkceauth.models.security import PKCEParameters
from pkceauth.services.security import validate_state

logger = logging.getLogger(__name__)


class OAuth2FlowManager:
    """Handles the browser-facing half of the authorization code flow.

    - Authorization URL construction
    - Callback URL parsing
    - State parameter security (CSRF protection)
    """

    def start_authorization_flow(
        self,
        configuration: SessionConfiguration,
        pkce_params: PKCEParameters,
    ) -> str:
        """Build an authorization URL for a new attempt.

        Args:
            configuration: Provider and client settings
            pkce_params: State and challenge for this attempt

        Returns:
            Authorization URL for the user to visit
        """
        auth_request = AuthorizationRequest(
            authorization_endpoint=configuration.authorization_endpoint,
            client_id=configuration.client_id,
            redirect_uri=configuration.redirect_uri,
            code_challenge=pkce_params.code_challenge,
            code_challenge_method=pkce_params.code_challenge_method,
            state=pkce_params.state,
        )

        authorization_url = auth_request.build_authorization_url()

        logger.info(
            f"Generated authorization URL for client {configuration.client_id}"
        )

        return authorization_url

    def handle_authorization_callback(
        self,
        callback_url: str,
        expected_state: str | None,
    ) -> AuthorizationResponse:
        """Parse and validate the provider's redirect callback.

        Args:
            callback_url: Full callback URL received from the provider
            expected_state: State sent in the pending authorization request

        Returns:
            AuthorizationResponse: Response carrying both code and state

        Raises:
            MalformedCallbackError: If code or state is missing
            StateMismatchError: If the state does not match
        """
        auth_response = self._parse_callback_url(callback_url)

        if not auth_response.is_success():
            if auth_response.is_error():
                logger.warning(
                    f"Authorization callback contained error: {auth_response.error} - "
                    f"{auth_response.error_description}"
                )
                raise MalformedCallbackError(
                    f"Authorization failed: {auth_response.error} "
                    f"({auth_response.error_description or ''})"
                )
            logger.warning("Code and/or state were not returned in the callback")
            raise MalformedCallbackError(
                "Callback is missing the code and/or state parameter"
            )

        validate_state(expected_state, auth_response.state)

        logger.info("Authorization callback successful - received authorization code")
        return auth_response

    def _parse_callback_url(self, callback_url: str) -> AuthorizationResponse:
        """Parse callback URL into AuthorizationResponse.

        Raises:
            MalformedCallbackError: If URL cannot be parsed
        """
        try:
            parsed = urlparse(callback_url)
        except ValueError as e:
            raise MalformedCallbackError(f"Failed to parse callback URL: {e}") from e

        query_params = parse_qs(parsed.query)

        # Extract single values from query parameter lists
        def get_single_param(key: str) -> str | None:
            values = query_params.get(key, [])
            return values[0] if values else None

        return AuthorizationResponse(
            code=get_single_param("code"),
            state=get_single_param("state"),
            error=get_single_param("error"),
            error_description=get_single_param("error_description"),
        )
