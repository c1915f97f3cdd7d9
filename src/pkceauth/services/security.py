"""Callback security checks.

Provides the exact-match state check that defends the redirect callback
against CSRF.
"""

from __future__ import annotations

import secrets

from pkceauth.models.errors import StateMismatchError


def validate_state(expected: str | None, actual: str) -> None:
    """Validate state parameter matches expected value exactly.

    Args:
        expected: State issued with the pending authorization request, if any
        actual: State parameter from callback URL

    Raises:
        StateMismatchError: If no request is pending or the values differ
    """
    if expected is None:
        raise StateMismatchError("No authorization request is awaiting a callback")
    if not secrets.compare_digest(expected.encode("utf-8"), actual.encode("utf-8")):
        raise StateMismatchError("State parameter mismatch - possible CSRF attack")
