"""Security-related models for the authorization code flow.

Contains the state and PKCE binding for one authorization attempt.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

UNRESERVED = re.compile(r"^[A-Za-z0-9\-._~]+$")
S256_CHALLENGE_LENGTH = 43


@dataclass(frozen=True)
class PKCEParameters:
    """The (verifier, challenge, state) triple of one in-flight attempt.

    The challenge and state travel in the authorization request. The verifier
    taken from the same instance is sent to the token endpoint, so the code
    can only be redeemed with the secret its challenge was derived from.
    """

    code_verifier: str
    code_challenge: str
    state: str
    code_challenge_method: str = "S256"

    def __post_init__(self) -> None:
        if not (43 <= len(self.code_verifier) <= 128):
            raise ValueError("code_verifier must be 43-128 characters")
        if not UNRESERVED.match(self.code_verifier):
            raise ValueError("code_verifier must use unreserved characters only")
        if len(self.code_challenge) != S256_CHALLENGE_LENGTH:
            raise ValueError("code_challenge is not an unpadded SHA-256 digest")
        if not self.state:
            raise ValueError("state must not be empty")
        if self.code_challenge_method != "S256":
            raise ValueError("Only S256 code challenge method is supported")
