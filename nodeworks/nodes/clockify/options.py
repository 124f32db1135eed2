"""
Option loaders for the Clockify node.

Loaders that depend on a workspace return an empty list until one is
selected. Archived records are left out.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from nodeworks.nodes.base import NodePropertyOption

if TYPE_CHECKING:
    from nodeworks.integrations.clockify import ClockifyClient


async def list_workspaces(
    client: ClockifyClient,
    parameters: dict[str, Any],
) -> list[NodePropertyOption]:
    workspaces = await client.list_workspaces()
    return [NodePropertyOption(name=w.name, value=w.id) for w in workspaces]


async def load_users_for_workspace(
    client: ClockifyClient,
    parameters: dict[str, Any],
) -> list[NodePropertyOption]:
    workspace_id = parameters.get("workspaceId")
    if not workspace_id:
        return []

    users = await client.list_users(workspace_id)
    return [NodePropertyOption(name=u.name, value=u.id) for u in users]


async def load_clients_for_workspace(
    client: ClockifyClient,
    parameters: dict[str, Any],
) -> list[NodePropertyOption]:
    workspace_id = parameters.get("workspaceId")
    if not workspace_id:
        return []

    clients = await client.list_clients(workspace_id)
    return [NodePropertyOption(name=c.name, value=c.id) for c in clients if not c.archived]


async def load_projects_for_workspace(
    client: ClockifyClient,
    parameters: dict[str, Any],
) -> list[NodePropertyOption]:
    """Projects are selected by name; the node resolves the id per item."""
    workspace_id = parameters.get("workspaceId")
    if not workspace_id:
        return []

    projects = await client.list_projects(workspace_id)
    return [NodePropertyOption(name=p.name, value=p.name) for p in projects if not p.archived]


async def load_tags_for_workspace(
    client: ClockifyClient,
    parameters: dict[str, Any],
) -> list[NodePropertyOption]:
    workspace_id = parameters.get("workspaceId")
    if not workspace_id:
        return []

    tags = await client.list_tags(workspace_id)
    return [NodePropertyOption(name=t.name, value=t.id) for t in tags if not t.archived]


async def load_tasks_for_project(
    client: ClockifyClient,
    parameters: dict[str, Any],
) -> list[NodePropertyOption]:
    workspace_id = parameters.get("workspaceId")
    project_name = parameters.get("project") or parameters.get("projectName")
    if not workspace_id or not project_name:
        return []

    project = await client.find_project_by_name(
        workspace_id,
        project_name,
        client_id=parameters.get("clientId") or None,
    )
    if project is None:
        return []

    tasks = await client.list_tasks(workspace_id, project.id)
    return [NodePropertyOption(name=t.name, value=t.id) for t in tasks]
