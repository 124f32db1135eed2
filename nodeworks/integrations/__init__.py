"""
nodeworks integrations layer.

Async HTTP clients for the external platforms the nodes talk to.
Each integration follows the same pattern:

1. Client: authentication and API communication on top of IntegrationClient
2. Schemas: pydantic models for request/response payloads

Directory Structure:
    integrations/
    ├── base.py           # IntegrationClient, errors, pagination
    ├── mattermost/       # Team chat
    │   ├── client.py
    │   └── schemas.py
    └── clockify/         # Time tracking
        ├── client.py
        └── schemas.py
"""

from nodeworks.integrations.base import (
    AuthenticationError,
    IntegrationClient,
    IntegrationConfig,
    IntegrationError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)

__all__ = [
    "AuthenticationError",
    "IntegrationClient",
    "IntegrationConfig",
    "IntegrationError",
    "NotFoundError",
    "RateLimitError",
    "ValidationError",
]
