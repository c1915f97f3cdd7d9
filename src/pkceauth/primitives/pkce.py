"""PKCE (Proof Key for Code Exchange) primitives.

Implements RFC 7636 verifier generation and the S256 challenge transform to
prevent authorization code interception attacks.
"""

from __future__ import annotations

import base64
import hashlib
import secrets

from pkceauth.models.errors import PKCEError
from pkceauth.models.security import PKCEParameters

VERIFIER_BYTES = 32
STATE_BYTES = 24


def base64url_encode(data: bytes) -> str:
    """Base64url-encode ``data`` with the ``=`` padding stripped."""
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


class PKCEManager:
    """Generates PKCE verifiers and derives their S256 challenges.

    This implementation follows RFC 7636 requirements:
    - Uses S256 code challenge method (SHA256 + base64url)
    - Draws verifiers from a cryptographically secure generator
    """

    def generate_verifier(self) -> str:
        """Generate a cryptographically secure code verifier.

        32 random bytes encoded as base64url without padding, giving a
        43-character string from the unreserved alphabet of RFC 7636 Section 4.1.

        Returns:
            A 43-character code verifier
        """
        return base64url_encode(secrets.token_bytes(VERIFIER_BYTES))

    def compute_challenge(self, code_verifier: str) -> str:
        """Derive the code challenge from a code verifier using S256.

        RFC 7636 Section 4.2: BASE64URL-ENCODE(SHA256(code_verifier))

        Args:
            code_verifier: The code verifier to hash

        Returns:
            Base64url-encoded SHA256 hash of the code verifier

        Raises:
            PKCEError: If the verifier cannot be encoded as UTF-8
        """
        try:
            verifier_bytes = code_verifier.encode("utf-8")
        except UnicodeEncodeError as e:
            raise PKCEError(f"Code verifier is not encodable: {e}") from e

        return base64url_encode(hashlib.sha256(verifier_bytes).digest())

    def generate_state(self) -> str:
        """Generate an unguessable state token (192 bits, URL-safe)."""
        return secrets.token_urlsafe(STATE_BYTES)

    def generate_parameters(self, code_verifier: str) -> PKCEParameters:
        """Bind a verifier to its challenge and a fresh state for one attempt.

        The verifier may be reused across attempts. The state never is.

        Raises:
            PKCEError: If the challenge cannot be computed or the triple is invalid
        """
        code_challenge = self.compute_challenge(code_verifier)
        try:
            return PKCEParameters(
                code_verifier=code_verifier,
                code_challenge=code_challenge,
                state=self.generate_state(),
            )
        except ValueError as e:
            raise PKCEError(f"Invalid PKCE parameters: {e}") from e
