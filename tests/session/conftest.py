import base64
import json
from typing import Any
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from pkceauth.session import AuthSession

BASE_URL = "https://example.okta.com"
CLIENT_ID = "0oacfa90iqbWwsV0R4x6"
REDIRECT_URI = "myapp://auth/callback"


def encode_segment(payload: dict[str, Any]) -> str:
    raw = json.dumps(payload).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def make_id_token(claims: dict[str, Any]) -> str:
    return f"{encode_segment({'alg': 'RS256'})}.{encode_segment(claims)}.signature"


def token_body(**overrides: Any) -> dict[str, Any]:
    body = {
        "access_token": "a",
        "token_type": "Bearer",
        "scope": "openid",
        "id_token": make_id_token({"uid": "u1"}),
        "expires_in": 3600,
    }
    body.update(overrides)
    return body


def callback_for(auth_url: str, code: str = "auth-code-123") -> str:
    state = parse_qs(urlparse(auth_url).query)["state"][0]
    return f"{REDIRECT_URI}?code={code}&state={state}"


class FakeClock:
    """Manually advanced Unix clock."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class TokenEndpoint:
    """Synthetic token endpoint served through httpx.MockTransport."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.response = httpx.Response(200, json=token_body())
        self.error: Exception | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.response

    def form(self, index: int = -1) -> dict[str, list[str]]:
        return parse_qs(self.requests[index].content.decode("ascii"))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def token_endpoint() -> TokenEndpoint:
    return TokenEndpoint()


@pytest.fixture
def http_client(token_endpoint) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(token_endpoint))


@pytest.fixture
def session(http_client, clock) -> AuthSession:
    session = AuthSession(http_client=http_client, clock=clock)
    session.set_up_configuration(BASE_URL, CLIENT_ID, REDIRECT_URI)
    return session


@pytest.fixture
def make_callback():
    return callback_for


@pytest.fixture
def make_token_body():
    return token_body


@pytest.fixture
def make_token():
    return make_id_token
