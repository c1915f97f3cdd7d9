"""Persistence of session configuration across process restarts.

A native application may be suspended while the user signs in through the
system browser. Saving the configuration lets a fresh process pick the flow
back up without the caller running setup again.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from pkceauth.models.configuration import SessionConfiguration
from pkceauth.storage.base import KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "pkceauth.configuration"


class ConfigurationStore:
    """Saves and restores a SessionConfiguration under a fixed namespace key."""

    def __init__(self, store: KeyValueStore, namespace: str = DEFAULT_NAMESPACE):
        self.store = store
        self.namespace = namespace

    def save(self, configuration: SessionConfiguration) -> None:
        """Insert or replace the persisted configuration."""
        self.store.set(self.namespace, configuration.to_record())
        logger.debug(f"Saved configuration for client {configuration.client_id}")

    def load(self) -> SessionConfiguration | None:
        """Return the persisted configuration, or None if nothing was saved.

        A record that no longer validates is logged and treated as absent.
        """
        record = self.store.get(self.namespace)
        if record is None:
            return None

        try:
            configuration = SessionConfiguration.from_record(record)
        except ValidationError as e:
            logger.warning(
                f"Ignoring invalid configuration under {self.namespace}: {e}"
            )
            return None

        logger.debug(f"Restored configuration for client {configuration.client_id}")
        return configuration
