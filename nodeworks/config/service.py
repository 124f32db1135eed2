"""
Credential and settings access for nodeworks.

The host engine owns credential storage; nodes only see the
CredentialProvider protocol. CredentialStore is the in-process
implementation used for local runs and tests.

Sources:
    - Explicit registration: store.set("mattermostApi", {...})
    - File: CredentialStore.from_file("credentials.yaml")
    - Environment: CredentialStore.from_env()
    - Settings: CredentialStore.from_settings() reads NODEWORKS_CREDENTIALS_FILE,
      falling back to the environment

File Format (YAML or JSON):
    mattermostApi:
      base_url: https://chat.example.com
      access_token: xxxx
    clockifyApi:
      api_key: yyyy
"""

from __future__ import annotations

import json
import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import yaml
from pydantic import BaseModel

from .schemas import CREDENTIAL_TYPES, AppSettings

logger = logging.getLogger(__name__)


@lru_cache()
def get_settings() -> AppSettings:
    """
    Get application settings from environment.

    Uses lru_cache for singleton pattern.
    """
    return AppSettings(
        http_timeout=float(os.getenv("NODEWORKS_HTTP_TIMEOUT", "30")),
        max_retries=int(os.getenv("NODEWORKS_MAX_RETRIES", "3")),
        retry_delay=float(os.getenv("NODEWORKS_RETRY_DELAY", "1.0")),
        page_size=int(os.getenv("NODEWORKS_PAGE_SIZE", "100")),
        log_requests=os.getenv("NODEWORKS_LOG_REQUESTS", "false").lower() == "true",
        log_responses=os.getenv("NODEWORKS_LOG_RESPONSES", "false").lower() == "true",
        credentials_file=os.getenv("NODEWORKS_CREDENTIALS_FILE"),
    )


@runtime_checkable
class CredentialProvider(Protocol):
    """
    Protocol for credential lookup.

    Returns the validated credential model for a credential name,
    or None when no credentials are configured.
    """

    def get(self, name: str) -> BaseModel | None:
        ...


class CredentialStore:
    """In-memory credential store keyed by credential name."""

    def __init__(self, credentials: dict[str, Any] | None = None):
        self._credentials: dict[str, BaseModel] = {}
        for name, data in (credentials or {}).items():
            self.set(name, data)

    def set(self, name: str, data: dict[str, Any] | BaseModel) -> None:
        """
        Register credentials.

        Raises:
            KeyError: If the credential name is unknown
            pydantic.ValidationError: If the data does not match the model
        """
        if name not in CREDENTIAL_TYPES:
            raise KeyError(f"Unknown credential type: {name}")

        model = CREDENTIAL_TYPES[name]
        self._credentials[name] = data if isinstance(data, model) else model.model_validate(data)

    def get(self, name: str) -> BaseModel | None:
        return self._credentials.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._credentials

    @classmethod
    def from_file(cls, path: str | Path) -> CredentialStore:
        """Load credentials from a YAML or JSON file."""
        path = Path(path)
        text = path.read_text()

        if path.suffix == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)

        logger.info(f"Loaded credentials from {path}: {sorted((data or {}).keys())}")
        return cls(data or {})

    @classmethod
    def from_env(cls) -> CredentialStore:
        """
        Build credentials from environment variables.

        Reads NODEWORKS_MATTERMOST_URL / NODEWORKS_MATTERMOST_TOKEN and
        NODEWORKS_CLOCKIFY_API_KEY (plus optional NODEWORKS_CLOCKIFY_URL).
        Unset credentials are skipped.
        """
        store = cls()

        mattermost_url = os.getenv("NODEWORKS_MATTERMOST_URL")
        mattermost_token = os.getenv("NODEWORKS_MATTERMOST_TOKEN")
        if mattermost_url and mattermost_token:
            store.set("mattermostApi", {
                "base_url": mattermost_url,
                "access_token": mattermost_token,
            })

        clockify_key = os.getenv("NODEWORKS_CLOCKIFY_API_KEY")
        if clockify_key:
            clockify: dict[str, Any] = {"api_key": clockify_key}
            if os.getenv("NODEWORKS_CLOCKIFY_URL"):
                clockify["base_url"] = os.environ["NODEWORKS_CLOCKIFY_URL"]
            store.set("clockifyApi", clockify)

        return store

    @classmethod
    def from_settings(cls, settings: AppSettings | None = None) -> CredentialStore:
        """
        Default credential source for nodes run without a provider.

        Loads ``settings.credentials_file`` when set, otherwise falls
        back to the environment.
        """
        settings = settings or get_settings()
        if settings.credentials_file:
            return cls.from_file(settings.credentials_file)
        return cls.from_env()
