"""Configuration and credential access for nodeworks."""

from .schemas import AppSettings, ClockifyCredentials, MattermostCredentials
from .service import CredentialProvider, CredentialStore, get_settings

__all__ = [
    "AppSettings",
    "ClockifyCredentials",
    "CredentialProvider",
    "CredentialStore",
    "MattermostCredentials",
    "get_settings",
]
