"""
Mattermost integration for nodeworks.

Mattermost is an open-source team chat platform. This integration provides
access to channels, posts and users through the v4 REST API.

Usage:
    from nodeworks.integrations.mattermost import MattermostClient, MattermostConfig

    client = MattermostClient(MattermostConfig(
        base_url="https://chat.example.com",
        access_token="xxxx",
    ))
"""

from nodeworks.integrations.mattermost.client import MattermostClient, MattermostConfig
from nodeworks.integrations.mattermost.schemas import (
    Channel,
    ChannelCreate,
    ChannelMember,
    ChannelType,
    Team,
    User,
    UserQuery,
)

__all__ = [
    "Channel",
    "ChannelCreate",
    "ChannelMember",
    "ChannelType",
    "MattermostClient",
    "MattermostConfig",
    "Team",
    "User",
    "UserQuery",
]
