"""Process-local key-value store."""

from __future__ import annotations


class InMemoryKeyValueStore:
    """Process-local store. Records live as long as the instance."""

    def __init__(self):
        self._records: dict[str, dict[str, str]] = {}

    def get(self, key: str) -> dict[str, str] | None:
        record = self._records.get(key)
        return dict(record) if record is not None else None

    def set(self, key: str, value: dict[str, str]) -> None:
        self._records[key] = dict(value)
