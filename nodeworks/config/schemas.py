"""
Configuration Schemas for nodeworks.

Pydantic models for application settings and stored credentials.

Security:
    Sensitive fields use SecretStr to prevent accidental logging
    of credentials. Access the value with `.get_secret_value()`.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, SecretStr, field_validator


class MattermostCredentials(BaseModel):
    """
    Credentials for a Mattermost account.

    Stored under the ``mattermostApi`` credential name.
    """

    base_url: str = Field(..., description="Server URL, e.g. https://chat.example.com")
    access_token: SecretStr = Field(..., description="Personal access token or bot token")

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class ClockifyCredentials(BaseModel):
    """
    Credentials for a Clockify account.

    Stored under the ``clockifyApi`` credential name.
    """

    api_key: SecretStr = Field(..., description="Clockify API key")
    base_url: str = Field("https://api.clockify.me/api/v1", description="API root URL")


# Credential name → model, as referenced by the nodes
CREDENTIAL_TYPES: dict[str, type[BaseModel]] = {
    "mattermostApi": MattermostCredentials,
    "clockifyApi": ClockifyCredentials,
}


class AppSettings(BaseModel):
    """
    Application settings model.

    Used for type-safe settings access. Values are read from
    ``NODEWORKS_*`` environment variables by ``get_settings()``.
    """

    # HTTP client behaviour
    http_timeout: float = Field(30.0, gt=0)
    max_retries: int = Field(3, ge=0)
    retry_delay: float = Field(1.0, ge=0)
    page_size: int = Field(100, ge=1, le=200)
    log_requests: bool = False
    log_responses: bool = False

    # Credentials file (YAML or JSON) used when the host passes no provider
    credentials_file: str | None = None
