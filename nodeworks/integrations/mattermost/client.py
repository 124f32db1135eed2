"""
Mattermost API client for nodeworks.

Async access to the Mattermost v4 REST API. Nodes build most requests
generically through ``request()`` / ``request_all_pages()``; the typed
helpers below back the option loaders.

Usage:
    async with MattermostClient(MattermostConfig(
        base_url="https://chat.example.com",
        access_token="xxxx",
    )) as client:
        channels = await client.list_channels()
        post = await client.request("POST", "posts", {"channel_id": "...", "message": "hi"})

API Reference:
    https://api.mattermost.com/
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from nodeworks.integrations.base import IntegrationClient, IntegrationConfig
from nodeworks.integrations.mattermost.schemas import Channel, Team, User

logger = logging.getLogger(__name__)

API_PATH = "/api/v4"


# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True, slots=True)
class MattermostConfig(IntegrationConfig):
    """Configuration for Mattermost client."""

    access_token: str = ""

    def __post_init__(self):
        if not self.base_url:
            raise ValueError("Mattermost base URL is required")
        if not self.access_token:
            raise ValueError("Mattermost access token is required")

    @property
    def api_url(self) -> str:
        return f"{self.base_url.rstrip('/')}{API_PATH}"


# =============================================================================
# Client
# =============================================================================


class MattermostClient(IntegrationClient):
    """
    Async client for the Mattermost API.

    The client handles:
    - Bearer token authentication
    - page/per_page pagination (pages start at 0)
    - Error mapping to IntegrationError subtypes
    """

    def __init__(self, config: MattermostConfig, **kwargs):
        super().__init__(config, **kwargs)
        self._config: MattermostConfig = config

    @property
    def name(self) -> str:
        return "mattermost"

    def _get_auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._config.access_token}"}

    def _base_url(self) -> str:
        return self._config.api_url

    # =========================================================================
    # Lookups
    # =========================================================================

    async def list_teams(self) -> list[Team] | None:
        """List the teams the authenticated user belongs to."""
        data = await self.request("GET", "users/me/teams")
        if data is None:
            return None
        return [Team(**record) for record in data]

    async def list_channels(self) -> list[Channel] | None:
        """List all channels visible to the authenticated user."""
        data = await self.request("GET", "channels")
        if data is None:
            return None
        return [Channel(**record) for record in data]

    async def list_team_channels(self, team_id: str) -> list[Channel] | None:
        """List the user's channels in one team."""
        data = await self.request("GET", f"users/me/teams/{team_id}/channels")
        if data is None:
            return None
        return [Channel(**record) for record in data]

    async def list_users(self) -> list[User] | None:
        """List users (first page, server default page size)."""
        data = await self.request("GET", "users")
        if data is None:
            return None
        return [User(**record) for record in data]

    async def get_users_by_ids(self, user_ids: list[str]) -> list[dict]:
        """Resolve a list of user ids into full user records."""
        logger.debug(f"[mattermost] Resolving {len(user_ids)} user ids")
        return await self.request("POST", "users/ids", user_ids) or []
