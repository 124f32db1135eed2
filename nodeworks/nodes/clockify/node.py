"""
Clockify node.

Creates records in a Clockify workspace:

    project     create   (returns the existing project when the name is taken)
    tag         create
    timeEntry   create   (project chosen by name, optionally created on the fly)

Projects are addressed by name in the form, so operations that need a
project id look it up first.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import TYPE_CHECKING, Any

import pydantic

from nodeworks.integrations.clockify import (
    ClockifyClient,
    ClockifyConfig,
    Project,
    ProjectCreate,
    TagCreate,
    TimeEntryCreate,
)
from nodeworks.nodes.base import (
    ExecutionContext,
    Node,
    NodeOperationError,
    NodeValidationError,
    OptionLoader,
    UnknownOperationError,
)
from nodeworks.nodes.clockify import options

if TYPE_CHECKING:
    from nodeworks.config.schemas import AppSettings, ClockifyCredentials
    from nodeworks.integrations.base import JSON

logger = logging.getLogger(__name__)


class Resource(str, Enum):
    PROJECT = "project"
    TAG = "tag"
    TIME_ENTRY = "timeEntry"


class Operation(str, Enum):
    CREATE = "create"


Handler = Callable[[ClockifyClient, ExecutionContext, int], Awaitable["JSON"]]


class ClockifyNode(Node[ClockifyClient]):
    """
    Node for the Clockify time-tracking service.

    Credentials: ``clockifyApi`` (API key).
    """

    credential_name = "clockifyApi"

    def __init__(self, client: ClockifyClient | None = None):
        super().__init__(client)
        self._handlers: dict[tuple[Resource, Operation], Handler] = {
            (Resource.PROJECT, Operation.CREATE): self._project_create,
            (Resource.TAG, Operation.CREATE): self._tag_create,
            (Resource.TIME_ENTRY, Operation.CREATE): self._time_entry_create,
        }

    @property
    def name(self) -> str:
        return "clockify"

    def _create_client(
        self,
        credentials: ClockifyCredentials,
        settings: AppSettings,
    ) -> ClockifyClient:
        return ClockifyClient(ClockifyConfig(
            api_key=credentials.api_key.get_secret_value(),
            base_url=credentials.base_url,
            timeout=settings.http_timeout,
            max_retries=settings.max_retries,
            retry_delay=settings.retry_delay,
            log_requests=settings.log_requests,
            log_responses=settings.log_responses,
        ))

    def option_loaders(self) -> dict[str, OptionLoader]:
        return {
            "listWorkspaces": options.list_workspaces,
            "loadUsersForWorkspace": options.load_users_for_workspace,
            "loadClientsForWorkspace": options.load_clients_for_workspace,
            "loadProjectsForWorkspace": options.load_projects_for_workspace,
            "loadTagsForWorkspace": options.load_tags_for_workspace,
            "loadTasksForProject": options.load_tasks_for_project,
        }

    # =========================================================================
    # Dispatch
    # =========================================================================

    def resolve_operation(self, ctx: ExecutionContext) -> tuple[Resource, Operation]:
        """
        Read and validate the resource/operation pair from the first item.

        Raises:
            UnknownOperationError: If either value is unknown
        """
        raw_resource = ctx.get_parameter("resource", 0, Resource.PROJECT.value)
        raw_operation = ctx.get_parameter("operation", 0, Operation.CREATE.value)
        try:
            key = (Resource(raw_resource), Operation(raw_operation))
        except ValueError:
            raise UnknownOperationError(
                f'The operation "{raw_operation}" on resource "{raw_resource}" is not known!',
                self.name,
            ) from None

        if key not in self._handlers:
            raise UnknownOperationError(
                f'The operation "{raw_operation}" on resource "{raw_resource}" is not known!',
                self.name,
            )
        return key

    async def _run_item(
        self,
        client: ClockifyClient,
        ctx: ExecutionContext,
        item_index: int,
    ) -> JSON:
        handler = self._handlers[self.resolve_operation(ctx)]
        return await handler(client, ctx, item_index)

    # =========================================================================
    # Handlers
    # =========================================================================

    async def _find_project(
        self,
        client: ClockifyClient,
        ctx: ExecutionContext,
        i: int,
        name: str,
    ) -> Project | None:
        return await client.find_project_by_name(
            ctx.get_parameter("workspaceId", i),
            name,
            client_id=ctx.get_parameter("clientId", i, None) or None,
        )

    async def _create_project(
        self,
        client: ClockifyClient,
        ctx: ExecutionContext,
        i: int,
        name: str,
    ) -> Project:
        try:
            payload = ProjectCreate(
                name=name,
                clientId=ctx.get_parameter("clientId", i, None) or None,
                isPublic=ctx.get_parameter("isPublic", i, False),
                color=ctx.get_parameter("color", i, "#0000FF"),
                note=ctx.get_parameter("projectNote", i, ""),
                billable=ctx.get_parameter("billable", i, False),
            )
        except pydantic.ValidationError as e:
            raise NodeValidationError(str(e), self.name, item_index=i) from e

        return await client.create_project(ctx.get_parameter("workspaceId", i), payload)

    async def _project_create(self, client: ClockifyClient, ctx: ExecutionContext, i: int) -> JSON:
        name = ctx.get_parameter("projectName", i)

        project = await self._find_project(client, ctx, i, name)
        if project is not None:
            logger.info(f"[clockify] Project already exists: {project.id}")
            return project.to_dict()

        created = await self._create_project(client, ctx, i, name)
        return created.to_dict()

    async def _tag_create(self, client: ClockifyClient, ctx: ExecutionContext, i: int) -> JSON:
        try:
            payload = TagCreate(name=ctx.get_parameter("tagName", i))
        except pydantic.ValidationError as e:
            raise NodeValidationError(str(e), self.name, item_index=i) from e

        tag = await client.create_tag(ctx.get_parameter("workspaceId", i), payload)
        return tag.model_dump(exclude_none=True)

    async def _time_entry_create(
        self,
        client: ClockifyClient,
        ctx: ExecutionContext,
        i: int,
    ) -> JSON:
        project_id: str | None = None
        project_name = ctx.get_parameter("project", i, "")
        if project_name:
            project = await self._find_project(client, ctx, i, project_name)
            if project is None:
                if not ctx.get_parameter("createProject", i, False):
                    raise NodeOperationError(
                        f"Project '{project_name}' not found", self.name, item_index=i
                    )
                project = await self._create_project(client, ctx, i, project_name)
            project_id = project.id

        tag_ids: Any = ctx.get_parameter("tagIds", i, [])
        try:
            payload = TimeEntryCreate(
                start=ctx.get_parameter("start", i),
                end=ctx.get_parameter("end", i, None) or None,
                billable=ctx.get_parameter("billable", i, False),
                description=ctx.get_parameter("description", i, ""),
                projectId=project_id,
                taskId=ctx.get_parameter("taskId", i, None) or None,
                tagIds=list(tag_ids) or None,
            )
        except pydantic.ValidationError as e:
            raise NodeValidationError(str(e), self.name, item_index=i) from e

        entry = await client.create_time_entry(
            ctx.get_parameter("workspaceId", i),
            payload,
            user_id=ctx.get_parameter("userId", i, None) or None,
        )
        return entry.to_dict()
