"""Key-value storage capability used to persist session configuration."""

from __future__ import annotations

from typing import Protocol


class KeyValueStore(Protocol):
    """Protocol for a durable string-keyed store of flat string records.

    Implementations may be backed by a file, a platform preference store or
    anything else that survives the process being suspended.
    """

    def get(self, key: str) -> dict[str, str] | None:
        """Return the record saved under ``key``, or None if there is none."""
        ...

    def set(self, key: str, value: dict[str, str]) -> None:
        """Insert or replace the record saved under ``key``."""
        ...
