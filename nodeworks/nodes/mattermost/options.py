"""
Option loaders for the Mattermost node.

Each loader lists one kind of record for a UI dropdown, skips soft-deleted
records (``delete_at != 0``) and maps the rest to name/value pairs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from nodeworks.nodes.base import NodeOperationError, NodePropertyOption, NodeValidationError

if TYPE_CHECKING:
    from nodeworks.integrations.mattermost import MattermostClient


def _require_data(data: list | None) -> list:
    if data is None:
        raise NodeOperationError("No data got returned", "mattermost")
    return data


def _public_or_private(record_type: str) -> str:
    return "public" if record_type == "O" else "private"


async def get_channels(
    client: MattermostClient,
    parameters: dict[str, Any],
) -> list[NodePropertyOption]:
    """All live channels, labelled with their visibility."""
    channels = _require_data(await client.list_channels())
    return [
        NodePropertyOption(
            name=f"{channel.name} ({_public_or_private(channel.type)})",
            value=channel.id,
        )
        for channel in channels
        if not channel.is_deleted
    ]


async def get_channels_in_team(
    client: MattermostClient,
    parameters: dict[str, Any],
) -> list[NodePropertyOption]:
    """Live channels of the team selected in ``teamId``."""
    team_id = parameters.get("teamId")
    if not team_id:
        raise NodeValidationError("Parameter 'teamId' is required", "mattermost")

    channels = _require_data(await client.list_team_channels(team_id))
    return [
        NodePropertyOption(
            name=f"{channel.name} ({channel.visibility})",
            value=channel.id,
        )
        for channel in channels
        if not channel.is_deleted
    ]


async def get_teams(
    client: MattermostClient,
    parameters: dict[str, Any],
) -> list[NodePropertyOption]:
    teams = _require_data(await client.list_teams())
    return [
        NodePropertyOption(
            name=f"{team.display_name} ({_public_or_private(team.type)})",
            value=team.id,
        )
        for team in teams
        if not team.is_deleted
    ]


async def get_users(
    client: MattermostClient,
    parameters: dict[str, Any],
) -> list[NodePropertyOption]:
    users = _require_data(await client.list_users())
    return [
        NodePropertyOption(name=user.username, value=user.id)
        for user in users
        if not user.is_deleted
    ]
