"""Identity token payload decoding.

Reads claims out of a compact JWT without verifying its signature, issuer or
audience. Only used to pick the subject identifier for convenience.
"""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any

from pkceauth.models.errors import JWTDecodeError

USER_ID_CLAIM = "uid"


def base64url_decode(value: str) -> bytes:
    """Decode base64url, restoring the ``=`` padding JWTs leave off."""
    padded = value + "=" * (-len(value) % 4)
    try:
        return base64.urlsafe_b64decode(padded.encode("ascii"))
    except (binascii.Error, UnicodeEncodeError) as e:
        raise JWTDecodeError(f"Invalid base64url segment: {e}") from e


def decode_jwt_payload(token: str) -> dict[str, Any]:
    """Decode the payload segment of a JWT.

    Args:
        token: Compact JWT (header.payload.signature)

    Returns:
        The payload as a dictionary

    Raises:
        JWTDecodeError: If the token has fewer than two segments or the payload
            is not a base64url-encoded JSON object
    """
    segments = token.split(".")
    if len(segments) < 2:
        raise JWTDecodeError(
            f"Malformed JWT: expected at least 2 segments, got {len(segments)}"
        )

    payload_bytes = base64url_decode(segments[1])

    try:
        payload = json.loads(payload_bytes)
    except (UnicodeDecodeError, ValueError, RecursionError) as e:
        raise JWTDecodeError(f"JWT payload is not valid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise JWTDecodeError("JWT payload is not a JSON object")

    return payload


def extract_user_id(id_token: str) -> str | None:
    """Return the ``uid`` claim when it is present and a string.

    Raises:
        JWTDecodeError: If the payload cannot be decoded
    """
    user_id = decode_jwt_payload(id_token).get(USER_ID_CLAIM)
    return user_id if isinstance(user_id, str) else None
