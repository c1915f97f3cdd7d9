import json
import os
import platform

import pytest

from pkceauth.models.configuration import SessionConfiguration
from pkceauth.storage.configuration import DEFAULT_NAMESPACE, ConfigurationStore
from pkceauth.storage.file import JsonFileKeyValueStore, StoreCorruptedError
from pkceauth.storage.memory import InMemoryKeyValueStore


@pytest.fixture
def configuration() -> SessionConfiguration:
    return SessionConfiguration(
        base_url="https://example.okta.com/",
        client_id="0oacfa90iqbWwsV0R4x6",
        redirect_uri="myapp://auth/callback",
    )


class TestConfigurationStore:
    def test_round_trip_in_memory(self, configuration):
        # Arrange
        store = ConfigurationStore(InMemoryKeyValueStore())

        # Act
        store.save(configuration)

        # Assert
        assert store.load() == configuration

    def test_round_trip_through_file(self, configuration, tmp_path):
        # Arrange
        path = tmp_path / "nested" / "settings.json"

        # Act
        ConfigurationStore(JsonFileKeyValueStore(path)).save(configuration)
        loaded = ConfigurationStore(JsonFileKeyValueStore(path)).load()

        # Assert - values survive exactly, trailing slash included
        assert loaded == configuration
        assert loaded.base_url == "https://example.okta.com/"

    def test_record_uses_fixed_keys(self, configuration):
        # Arrange
        backend = InMemoryKeyValueStore()

        # Act
        ConfigurationStore(backend).save(configuration)

        # Assert
        assert backend.get(DEFAULT_NAMESPACE) == {
            "baseURL": "https://example.okta.com/",
            "clientID": "0oacfa90iqbWwsV0R4x6",
            "redirectURI": "myapp://auth/callback",
        }

    def test_load_without_save_returns_none(self):
        assert ConfigurationStore(InMemoryKeyValueStore()).load() is None

    def test_save_overwrites_previous_record(self, configuration):
        # Arrange
        store = ConfigurationStore(InMemoryKeyValueStore())
        store.save(configuration)
        updated = configuration.model_copy(update={"client_id": "other-client"})

        # Act
        store.save(updated)

        # Assert
        assert store.load().client_id == "other-client"

    def test_invalid_record_is_treated_as_absent(self):
        # Arrange
        backend = InMemoryKeyValueStore()
        backend.set(DEFAULT_NAMESPACE, {"baseURL": "https://example.okta.com"})

        # Act & Assert
        assert ConfigurationStore(backend).load() is None

    def test_namespaces_are_independent(self, configuration):
        # Arrange
        backend = InMemoryKeyValueStore()

        # Act
        ConfigurationStore(backend, namespace="first").save(configuration)

        # Assert
        assert ConfigurationStore(backend, namespace="second").load() is None


class TestJsonFileKeyValueStore:
    def test_missing_file_returns_none(self, tmp_path):
        assert JsonFileKeyValueStore(tmp_path / "absent.json").get("key") is None

    def test_corrupt_file_returns_none(self, tmp_path):
        # Arrange
        path = tmp_path / "store.json"
        path.write_text("{not json")

        # Act & Assert
        assert JsonFileKeyValueStore(path).get("key") is None

    def test_corrupt_file_is_not_overwritten(self, tmp_path):
        # Arrange
        path = tmp_path / "store.json"
        path.write_text('{"other": {"x": "1"}, truncated')

        # Act & Assert
        with pytest.raises(StoreCorruptedError):
            JsonFileKeyValueStore(path).set("key", {"y": "2"})

        assert path.read_text() == '{"other": {"x": "1"}, truncated'

    def test_non_string_values_are_dropped(self, tmp_path):
        # Arrange
        path = tmp_path / "store.json"
        path.write_text(json.dumps({"key": {"a": "1", "b": None, "c": 2}}))

        # Act & Assert
        assert JsonFileKeyValueStore(path).get("key") == {"a": "1"}

    def test_null_configuration_value_is_treated_as_absent(self, tmp_path):
        # Arrange
        path = tmp_path / "store.json"
        record = {
            "baseURL": None,
            "clientID": "0oacfa90iqbWwsV0R4x6",
            "redirectURI": "myapp://auth/callback",
        }
        path.write_text(json.dumps({DEFAULT_NAMESPACE: record}))

        # Act & Assert
        assert ConfigurationStore(JsonFileKeyValueStore(path)).load() is None

    def test_keeps_other_records(self, tmp_path):
        # Arrange
        path = tmp_path / "store.json"
        store = JsonFileKeyValueStore(path)

        # Act
        store.set("a", {"x": "1"})
        store.set("b", {"y": "2"})

        # Assert
        assert json.loads(path.read_text()) == {"a": {"x": "1"}, "b": {"y": "2"}}

    @pytest.mark.skipif(platform.system() == "Windows", reason="POSIX permissions")
    def test_file_is_owner_only(self, tmp_path):
        # Arrange
        path = tmp_path / "store.json"

        # Act
        JsonFileKeyValueStore(path).set("a", {"x": "1"})

        # Assert
        assert os.stat(path).st_mode & 0o777 == 0o600


class TestSessionConfiguration:
    def test_endpoints_use_fixed_paths(self):
        # Arrange
        configuration = SessionConfiguration(
            base_url="https://example.okta.com",
            client_id="client",
            redirect_uri="myapp://callback",
        )

        # Assert
        assert configuration.authorization_endpoint == (
            "https://example.okta.com/oauth2/default/v1/authorize"
        )
        assert configuration.token_endpoint == (
            "https://example.okta.com/oauth2/default/v1/token"
        )

    def test_trailing_slash_is_not_doubled(self, configuration):
        assert configuration.token_endpoint == (
            "https://example.okta.com/oauth2/default/v1/token"
        )

    def test_empty_values_are_rejected(self):
        with pytest.raises(ValueError):
            SessionConfiguration(base_url="", client_id="c", redirect_uri="r")
