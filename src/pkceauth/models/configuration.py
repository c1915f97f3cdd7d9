"""Client configuration for an authorization session."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

AUTHORIZE_PATH = "/oauth2/default/v1/authorize"
TOKEN_PATH = "/oauth2/default/v1/token"


class SessionConfiguration(BaseModel):
    """Provider root, client identifier and redirect URI for one application.

    Persisted as a flat record keyed ``baseURL``, ``clientID`` and
    ``redirectURI``. Values are stored exactly as given.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    base_url: str = Field(alias="baseURL", min_length=1)
    client_id: str = Field(alias="clientID", min_length=1)
    redirect_uri: str = Field(alias="redirectURI", min_length=1)

    @property
    def authorization_endpoint(self) -> str:
        return self.base_url.rstrip("/") + AUTHORIZE_PATH

    @property
    def token_endpoint(self) -> str:
        return self.base_url.rstrip("/") + TOKEN_PATH

    def to_record(self) -> dict[str, str]:
        """Serialize to the persisted string record."""
        return self.model_dump(by_alias=True)

    @classmethod
    def from_record(cls, record: dict[str, str]) -> SessionConfiguration:
        return cls.model_validate(record)
