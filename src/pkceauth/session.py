"""Authorization session for native applications.

Coordinates PKCE, the authorization request, callback validation and the
token exchange, and owns the resulting credential.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

import httpx

from pkceauth.models.configuration import SessionConfiguration
from pkceauth.models.errors import (
    ExpiredCredentialsError,
    JWTDecodeError,
    NoCredentialsError,
    NotConfiguredError,
    PKCEError,
)
from pkceauth.models.flow import FlowState
from pkceauth.models.security import PKCEParameters
from pkceauth.models.tokens import Credential, TokenRequest
from pkceauth.primitives.jwt import extract_user_id
from pkceauth.primitives.pkce import PKCEManager
from pkceauth.services.flow import OAuth2FlowManager
from pkceauth.services.tokens import DEFAULT_TIMEOUT, OAuth2TokenManager
from pkceauth.storage.base import KeyValueStore
from pkceauth.storage.configuration import DEFAULT_NAMESPACE, ConfigurationStore

logger = logging.getLogger(__name__)


class AuthSession:
    """One authorization code flow with PKCE and the credential it produces.

    The PKCE verifier is generated once when the session is created and is
    reused for every authorization attempt made through this instance.

    A session holds at most one attempt in flight. Calling
    ``begin_authorization`` again discards the previous state and challenge.
    The session does no locking: callers must not run ``begin_authorization``
    and ``complete_authorization`` on the same instance concurrently.

    When a ``store`` is given, the configuration is restored from it on
    construction and written back on every ``set_up_configuration``.
    """

    def __init__(
        self,
        configuration: SessionConfiguration | None = None,
        *,
        store: KeyValueStore | None = None,
        namespace: str = DEFAULT_NAMESPACE,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize an authorization session.

        Args:
            configuration: Provider and client settings, if already known
            store: Optional durable store used to persist the configuration
            namespace: Key the configuration is saved under in ``store``
            http_client: Optional client for the token request (not closed)
            timeout: Token request timeout in seconds for the owned client
            clock: Source of Unix timestamps for issue and expiry checks
        """
        self._clock = clock
        self._pkce_manager = PKCEManager()
        self.flow_manager = OAuth2FlowManager()
        self.token_manager = OAuth2TokenManager(
            timeout=timeout, http_client=http_client
        )
        self._configuration_store = (
            ConfigurationStore(store, namespace) if store is not None else None
        )

        self.verifier = self._pkce_manager.generate_verifier()
        self._pending: PKCEParameters | None = None
        self.flow_state = FlowState.IDLE

        self._configuration: SessionConfiguration | None = None
        self._credential: Credential | None = None

        if configuration is not None:
            self._apply_configuration(configuration)
        elif self._configuration_store is not None:
            self._configuration = self._configuration_store.load()

    # Configuration

    @property
    def has_been_set_up(self) -> bool:
        return self._configuration is not None

    @property
    def configuration(self) -> SessionConfiguration:
        return self._require_configuration()

    @property
    def authorization_endpoint(self) -> str:
        return self._require_configuration().authorization_endpoint

    @property
    def token_endpoint(self) -> str:
        return self._require_configuration().token_endpoint

    def set_up_configuration(
        self, base_url: str, client_id: str, redirect_uri: str
    ) -> SessionConfiguration:
        """Store the provider settings and mark the session ready.

        Persists the configuration when the session has a store.

        Raises:
            pydantic.ValidationError: If any value is empty
        """
        configuration = SessionConfiguration(
            base_url=base_url, client_id=client_id, redirect_uri=redirect_uri
        )
        self._apply_configuration(configuration)
        return configuration

    def _apply_configuration(self, configuration: SessionConfiguration) -> None:
        if self._configuration_store is not None:
            self._configuration_store.save(configuration)
        self._configuration = configuration
        logger.info(f"Session configured for client {configuration.client_id}")

    def _require_configuration(self) -> SessionConfiguration:
        if self._configuration is None:
            raise NotConfiguredError(
                "Session must be configured with set_up_configuration() before use"
            )
        return self._configuration

    # Authorization flow

    @property
    def current_state(self) -> str | None:
        """State of the attempt awaiting its callback, if any."""
        return self._pending.state if self._pending is not None else None

    @property
    def current_code_challenge(self) -> str | None:
        return self._pending.code_challenge if self._pending is not None else None

    def begin_authorization(self) -> str | None:
        """Start a new attempt and return the URL to open in the browser.

        Issues a fresh state, derives the code challenge from the session
        verifier and moves the session to ``AWAITING_CALLBACK``.

        Returns:
            The authorization URL, or None if the challenge cannot be computed

        Raises:
            NotConfiguredError: If the session has not been configured
        """
        configuration = self._require_configuration()

        try:
            pkce_params = self._pkce_manager.generate_parameters(self.verifier)
        except PKCEError as e:
            logger.error(f"Could not create code challenge: {e}")
            return None

        authorization_url = self.flow_manager.start_authorization_flow(
            configuration, pkce_params
        )

        self._pending = pkce_params
        self.flow_state = FlowState.AWAITING_CALLBACK

        return authorization_url

    async def complete_authorization(self, callback_url: str) -> None:
        """Validate the redirect callback and exchange its code for tokens.

        Callbacks without a code or state, or with a state other than the one
        last issued, are rejected before any request is made and leave the
        session untouched. Once the state matches it is consumed, so the same
        callback cannot be exchanged twice.

        Args:
            callback_url: Redirect URI invoked by the provider

        Raises:
            NotConfiguredError: If the session has not been configured
            MalformedCallbackError: If code or state is missing
            StateMismatchError: If the state does not match
            ServerError: If the token request fails in transport
            NoDataError: If the token endpoint returns an empty body
            NoDecodeError: If the token response cannot be decoded
        """
        configuration = self._require_configuration()

        auth_response = self.flow_manager.handle_authorization_callback(
            callback_url, self.current_state
        )

        # State matched, so an attempt is pending; consume it
        pkce_params, self._pending = self._pending, None
        self.flow_state = FlowState.EXCHANGING

        token_request = TokenRequest(
            token_endpoint=configuration.token_endpoint,
            client_id=configuration.client_id,
            redirect_uri=configuration.redirect_uri,
            code=auth_response.code,
            code_verifier=pkce_params.code_verifier,
        )

        try:
            token_response = await self.token_manager.exchange_code_for_token(
                token_request
            )
            user_id = self._extract_user_id(token_response.id_token)
            credential = Credential.from_token_response(
                token_response, issued_at=self._clock(), user_id=user_id
            )
        except BaseException:
            self.flow_state = FlowState.FAILED
            raise

        self._credential = credential
        self.flow_state = FlowState.COMPLETED

        logger.info(f"Authorization complete for client {configuration.client_id}")

    def _extract_user_id(self, id_token: str) -> str | None:
        try:
            return extract_user_id(id_token)
        except JWTDecodeError as e:
            logger.warning(f"Could not read user ID from identity token: {e}")
            return None

    # Credential access

    def current_credential(self) -> Credential:
        """Return the live credential.

        Raises:
            NoCredentialsError: If no exchange has succeeded
            ExpiredCredentialsError: If the credential is past its expiry
        """
        if self._credential is None:
            raise NoCredentialsError("No credentials have been obtained")

        if self._credential.is_expired(self._clock()):
            raise ExpiredCredentialsError(
                f"Credentials expired at {self._credential.expires_at}"
            )

        return self._credential

    async def close(self) -> None:
        """Release the HTTP client owned by this session."""
        await self.token_manager.close()

    async def __aenter__(self) -> AuthSession:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
