"""JSON file backed key-value store."""

from __future__ import annotations

import json
import logging
import os
import platform
from pathlib import Path

logger = logging.getLogger(__name__)


class StoreCorruptedError(Exception):
    """Raised instead of overwriting a store file that cannot be parsed."""

    pass


class JsonFileKeyValueStore:
    """Keeps every record in one JSON document on disk.

    The parent directory is created on first write. On POSIX systems the file
    is readable by the owner only. Contents are not encrypted.

    Reads treat an unreadable file as empty. Writes refuse to replace it, so
    records under other keys are never lost.
    """

    def __init__(self, path: str | os.PathLike[str]):
        self.path = Path(path)

    def get(self, key: str) -> dict[str, str] | None:
        try:
            records = self._read_all()
        except StoreCorruptedError as e:
            logger.warning(f"Ignoring unreadable store: {e}")
            return None

        record = records.get(key)
        if not isinstance(record, dict):
            return None
        return {k: v for k, v in record.items() if isinstance(v, str)}

    def set(self, key: str, value: dict[str, str]) -> None:
        """Insert or replace one record, keeping the others.

        Raises:
            StoreCorruptedError: If the existing file cannot be parsed
        """
        records = self._read_all()
        records[key] = dict(value)
        self._write_all(records)

    def _read_all(self) -> dict[str, dict[str, str]]:
        if not self.path.exists():
            return {}

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (ValueError, OSError) as e:
            raise StoreCorruptedError(f"{self.path}: {e}") from e

        if not isinstance(data, dict):
            raise StoreCorruptedError(f"{self.path}: not a JSON object")
        return data

    def _write_all(self, records: dict[str, dict[str, str]]) -> None:
        parent_dir = self.path.parent
        if not parent_dir.exists():
            parent_dir.mkdir(parents=True, exist_ok=True)
            if platform.system() != "Windows":
                os.chmod(parent_dir, 0o700)

        self.path.write_text(json.dumps(records, indent=2), encoding="utf-8")

        if platform.system() != "Windows":
            os.chmod(self.path, 0o600)
