"""
Clockify API client for nodeworks.

Async access to Clockify's REST API for workspaces, projects, tags,
tasks and time entries.

Usage:
    async with ClockifyClient(ClockifyConfig(api_key="xxxx")) as client:
        workspaces = await client.list_workspaces()
        project = await client.find_project_by_name(
            workspaces[0].id, "Website", client_id="client-1",
        )

API Reference:
    https://docs.clockify.me/
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from nodeworks.integrations.base import IntegrationClient, IntegrationConfig
from nodeworks.integrations.clockify.schemas import (
    Client,
    Project,
    ProjectCreate,
    Tag,
    TagCreate,
    Task,
    TimeEntry,
    TimeEntryCreate,
    User,
    Workspace,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True, slots=True)
class ClockifyConfig(IntegrationConfig):
    """Configuration for Clockify client."""

    api_key: str = ""

    # Optional - defaults to Clockify Cloud
    base_url: str = "https://api.clockify.me/api/v1"

    # Clockify caps page-size at 5000; 50 is the server default
    page_size: int = 50

    def __post_init__(self):
        if not self.api_key:
            raise ValueError("Clockify API key is required")


# =============================================================================
# Client
# =============================================================================


class ClockifyClient(IntegrationClient):
    """
    Async client for the Clockify API.

    The client handles:
    - Authentication via X-Api-Key header
    - page/page-size pagination (pages start at 1)
    - Error mapping to IntegrationError subtypes
    """

    page_size_param = "page-size"
    first_page = 1

    def __init__(self, config: ClockifyConfig, **kwargs):
        super().__init__(config, **kwargs)
        self._config: ClockifyConfig = config

    @property
    def name(self) -> str:
        return "clockify"

    def _get_auth_headers(self) -> dict[str, str]:
        return {"X-Api-Key": self._config.api_key}

    # =========================================================================
    # Workspaces
    # =========================================================================

    async def list_workspaces(self) -> list[Workspace]:
        data = await self.request("GET", "workspaces")
        return [Workspace(**record) for record in data or []]

    async def list_users(self, workspace_id: str) -> list[User]:
        data = await self.request_all_pages("GET", f"workspaces/{workspace_id}/users")
        return [User(**record) for record in data]

    async def list_clients(self, workspace_id: str) -> list[Client]:
        data = await self.request_all_pages("GET", f"workspaces/{workspace_id}/clients")
        return [Client(**record) for record in data]

    async def list_tags(self, workspace_id: str) -> list[Tag]:
        data = await self.request_all_pages("GET", f"workspaces/{workspace_id}/tags")
        return [Tag(**record) for record in data]

    # =========================================================================
    # Projects
    # =========================================================================

    async def list_projects(
        self,
        workspace_id: str,
        *,
        name: str | None = None,
        client_id: str | None = None,
    ) -> list[Project]:
        """
        List projects in a workspace.

        Args:
            workspace_id: Workspace id
            name: Filter by project name (server side, case-insensitive)
            client_id: Filter by client id
        """
        query: dict[str, str] = {}
        if name:
            query["name"] = name
        if client_id:
            query["clients"] = client_id

        data = await self.request_all_pages(
            "GET",
            f"workspaces/{workspace_id}/projects",
            query=query,
        )
        return [Project(**record) for record in data]

    async def find_project_by_name(
        self,
        workspace_id: str,
        name: str,
        *,
        client_id: str | None = None,
    ) -> Project | None:
        """
        Find a project by exact name.

        The server-side name filter matches substrings, so results are
        narrowed to an exact match here.

        Returns:
            The matching project, or None
        """
        if not name:
            return None

        projects = await self.list_projects(workspace_id, name=name, client_id=client_id)
        for project in projects:
            if project.name == name:
                return project
        return None

    async def create_project(self, workspace_id: str, project: ProjectCreate) -> Project:
        logger.info(f"[clockify] Creating project: {project.name} in workspace {workspace_id}")

        data = await self.request(
            "POST",
            f"workspaces/{workspace_id}/projects",
            project.to_api_dict(),
        )

        created = Project(**data)
        logger.info(f"[clockify] Created project: {created.id}")
        return created

    async def list_tasks(self, workspace_id: str, project_id: str) -> list[Task]:
        data = await self.request_all_pages(
            "GET",
            f"workspaces/{workspace_id}/projects/{project_id}/tasks",
        )
        return [Task(**record) for record in data]

    # =========================================================================
    # Tags
    # =========================================================================

    async def create_tag(self, workspace_id: str, tag: TagCreate) -> Tag:
        logger.info(f"[clockify] Creating tag: {tag.name} in workspace {workspace_id}")

        data = await self.request(
            "POST",
            f"workspaces/{workspace_id}/tags",
            tag.to_api_dict(),
        )
        return Tag(**data)

    # =========================================================================
    # Time Entries
    # =========================================================================

    async def create_time_entry(
        self,
        workspace_id: str,
        entry: TimeEntryCreate,
        *,
        user_id: str | None = None,
    ) -> TimeEntry:
        """
        Create a time entry.

        Args:
            workspace_id: Workspace id
            entry: Time entry payload
            user_id: Record the entry for another workspace member
                (requires workspace admin rights)
        """
        if user_id:
            path = f"workspaces/{workspace_id}/user/{user_id}/time-entries"
        else:
            path = f"workspaces/{workspace_id}/time-entries"

        logger.info(f"[clockify] Creating time entry in workspace {workspace_id}")

        data = await self.request("POST", path, entry.to_api_dict())
        return TimeEntry(**data)
