"""
Mattermost node.

Maps (resource, operation) pairs to Mattermost v4 requests:

    channel   create | delete | members | restore | addUser | statistics
    message   delete | post
    user      deactive | getAll | getByEmail | getById

The resource and operation are read from the first item; every other
parameter is read per item. Pairs without a handler raise
UnknownOperationError before any request is made.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

import pydantic

from nodeworks.integrations.mattermost import (
    ChannelCreate,
    ChannelMember,
    ChannelType,
    MattermostClient,
    MattermostConfig,
    UserQuery,
)
from nodeworks.nodes.base import (
    ExecutionContext,
    Node,
    NodeOperationError,
    NodeValidationError,
    OptionLoader,
    RequestSpec,
    UnknownOperationError,
)
from nodeworks.nodes.mattermost import options
from nodeworks.nodes.mattermost.normalizer import normalize_attachments, validate_user_sort

if TYPE_CHECKING:
    from nodeworks.config.schemas import AppSettings, MattermostCredentials
    from nodeworks.integrations.base import JSON

logger = logging.getLogger(__name__)

MAX_LIMIT = 100


class Resource(str, Enum):
    CHANNEL = "channel"
    MESSAGE = "message"
    USER = "user"


class Operation(str, Enum):
    ADD_USER = "addUser"
    CREATE = "create"
    DELETE = "delete"
    MEMBERS = "members"
    RESTORE = "restore"
    STATISTICS = "statistics"
    POST = "post"
    DEACTIVATE = "deactive"
    GET_ALL = "getAll"
    GET_BY_EMAIL = "getByEmail"
    GET_BY_ID = "getById"

    @classmethod
    def _missing_(cls, value: object) -> Operation | None:
        # Misspelled value saved by older workflows
        if value == "desactive":
            return cls.DEACTIVATE
        return None


# Operation preselected by the form for each resource
DEFAULT_OPERATIONS = {
    Resource.CHANNEL: Operation.CREATE,
    Resource.MESSAGE: Operation.POST,
}

Handler = Callable[[ExecutionContext, int], RequestSpec]


class MattermostNode(Node[MattermostClient]):
    """
    Node for the Mattermost team chat platform.

    Credentials: ``mattermostApi`` (base URL + access token).
    """

    credential_name = "mattermostApi"

    def __init__(self, client: MattermostClient | None = None):
        super().__init__(client)
        self._handlers: dict[tuple[Resource, Operation], Handler] = {
            (Resource.CHANNEL, Operation.CREATE): self._channel_create,
            (Resource.CHANNEL, Operation.DELETE): self._channel_delete,
            (Resource.CHANNEL, Operation.MEMBERS): self._channel_members,
            (Resource.CHANNEL, Operation.RESTORE): self._channel_restore,
            (Resource.CHANNEL, Operation.ADD_USER): self._channel_add_user,
            (Resource.CHANNEL, Operation.STATISTICS): self._channel_statistics,
            (Resource.MESSAGE, Operation.DELETE): self._message_delete,
            (Resource.MESSAGE, Operation.POST): self._message_post,
            (Resource.USER, Operation.DEACTIVATE): self._user_deactivate,
            (Resource.USER, Operation.GET_ALL): self._user_get_all,
            (Resource.USER, Operation.GET_BY_EMAIL): self._user_get_by_email,
            (Resource.USER, Operation.GET_BY_ID): self._user_get_by_id,
        }

    @property
    def name(self) -> str:
        return "mattermost"

    def _create_client(
        self,
        credentials: MattermostCredentials,
        settings: AppSettings,
    ) -> MattermostClient:
        return MattermostClient(MattermostConfig(
            base_url=credentials.base_url,
            access_token=credentials.access_token.get_secret_value(),
            timeout=settings.http_timeout,
            max_retries=settings.max_retries,
            retry_delay=settings.retry_delay,
            page_size=settings.page_size,
            log_requests=settings.log_requests,
            log_responses=settings.log_responses,
        ))

    def option_loaders(self) -> dict[str, OptionLoader]:
        return {
            "getChannels": options.get_channels,
            "getChannelsInTeam": options.get_channels_in_team,
            "getTeams": options.get_teams,
            "getUsers": options.get_users,
        }

    # =========================================================================
    # Dispatch
    # =========================================================================

    def resolve_operation(self, ctx: ExecutionContext) -> tuple[Resource, Operation]:
        """
        Read and validate the resource/operation pair from the first item.

        Raises:
            UnknownOperationError: If either value is unknown or the pair
                has no handler
        """
        raw_resource = ctx.get_parameter("resource", 0, Resource.MESSAGE.value)
        try:
            resource = Resource(raw_resource)
        except ValueError:
            raise UnknownOperationError(
                f'The resource "{raw_resource}" is not known!', self.name
            ) from None

        default_operation = DEFAULT_OPERATIONS.get(resource)
        raw_operation = ctx.get_parameter(
            "operation", 0, default_operation.value if default_operation else None
        )
        try:
            operation = Operation(raw_operation)
        except ValueError:
            raise UnknownOperationError(
                f'The operation "{raw_operation}" is not known!', self.name
            ) from None

        if (resource, operation) not in self._handlers:
            raise UnknownOperationError(
                f'The operation "{operation.value}" is not supported '
                f'for resource "{resource.value}"',
                self.name,
            )
        return resource, operation

    def _build_request(self, ctx: ExecutionContext, item_index: int) -> RequestSpec:
        handler = self._handlers[self.resolve_operation(ctx)]
        return handler(ctx, item_index)

    async def _run_item(
        self,
        client: MattermostClient,
        ctx: ExecutionContext,
        item_index: int,
    ) -> JSON | None:
        spec = self._build_request(ctx, item_index)
        data = await self._send(client, spec)

        key = self.resolve_operation(ctx)
        if key == (Resource.CHANNEL, Operation.MEMBERS) and ctx.get_parameter(
            "resolveData", item_index, True
        ):
            try:
                members = [ChannelMember.model_validate(member) for member in data or []]
            except pydantic.ValidationError as e:
                raise NodeOperationError(
                    f"Unexpected channel member record: {e}", self.name, item_index=item_index
                ) from e
            if members:
                data = await client.get_users_by_ids([member.user_id for member in members])

        return data

    # =========================================================================
    # Shared parameters
    # =========================================================================

    def _limit(self, ctx: ExecutionContext, item_index: int) -> int:
        limit = ctx.get_parameter("limit", item_index, MAX_LIMIT)
        if not isinstance(limit, int) or not 1 <= limit <= MAX_LIMIT:
            raise NodeValidationError(
                f"Limit must be between 1 and {MAX_LIMIT}", self.name, item_index=item_index
            )
        return limit

    # =========================================================================
    # Channel
    # =========================================================================

    def _channel_create(self, ctx: ExecutionContext, i: int) -> RequestSpec:
        try:
            channel = ChannelCreate(
                team_id=ctx.get_parameter("teamId", i),
                display_name=ctx.get_parameter("displayName", i),
                name=ctx.get_parameter("channel", i),
                type=ChannelType.from_visibility(ctx.get_parameter("type", i, "public")),
            )
        except pydantic.ValidationError as e:
            raise NodeValidationError(str(e), self.name, item_index=i) from e
        return RequestSpec("POST", "channels", channel.to_api_dict())

    def _channel_delete(self, ctx: ExecutionContext, i: int) -> RequestSpec:
        channel_id = ctx.get_parameter("channelId", i)
        return RequestSpec("DELETE", f"channels/{channel_id}")

    def _channel_members(self, ctx: ExecutionContext, i: int) -> RequestSpec:
        channel_id = ctx.get_parameter("channelId", i)
        return_all = ctx.get_parameter("returnAll", i, True)

        query: dict[str, Any] = {}
        if not return_all:
            query["per_page"] = self._limit(ctx, i)

        return RequestSpec(
            "GET", f"channels/{channel_id}/members", query=query, return_all=return_all
        )

    def _channel_restore(self, ctx: ExecutionContext, i: int) -> RequestSpec:
        channel_id = ctx.get_parameter("channelId", i)
        return RequestSpec("POST", f"channels/{channel_id}/restore")

    def _channel_add_user(self, ctx: ExecutionContext, i: int) -> RequestSpec:
        channel_id = ctx.get_parameter("channelId", i)
        body = {"user_id": ctx.get_parameter("userId", i)}
        return RequestSpec("POST", f"channels/{channel_id}/members", body)

    def _channel_statistics(self, ctx: ExecutionContext, i: int) -> RequestSpec:
        channel_id = ctx.get_parameter("channelId", i)
        return RequestSpec("GET", f"channels/{channel_id}/stats")

    # =========================================================================
    # Message
    # =========================================================================

    def _message_delete(self, ctx: ExecutionContext, i: int) -> RequestSpec:
        post_id = ctx.get_parameter("postId", i)
        return RequestSpec("DELETE", f"posts/{post_id}")

    def _message_post(self, ctx: ExecutionContext, i: int) -> RequestSpec:
        attachments = normalize_attachments(ctx.get_parameter("attachments", i, []))

        body: dict[str, Any] = {
            "channel_id": ctx.get_parameter("channelId", i),
            "message": ctx.get_parameter("message", i),
            "props": {"attachments": attachments},
        }
        body.update(ctx.get_parameter("otherOptions", i, {}))

        return RequestSpec("POST", "posts", body)

    # =========================================================================
    # User
    # =========================================================================

    def _user_deactivate(self, ctx: ExecutionContext, i: int) -> RequestSpec:
        user_id = ctx.get_parameter("userId", i)
        return RequestSpec("DELETE", f"users/{user_id}")

    def _user_get_all(self, ctx: ExecutionContext, i: int) -> RequestSpec:
        return_all = ctx.get_parameter("returnAll", i, True)
        additional_fields = ctx.get_parameter("additionalFields", i, {})

        sort = validate_user_sort(additional_fields.get("sort"), additional_fields)

        query = UserQuery(
            in_team=additional_fields.get("inTeam"),
            not_in_team=additional_fields.get("notInTeam"),
            in_channel=additional_fields.get("inChannel"),
            not_in_channel=additional_fields.get("notInChannel"),
            sort=sort,
            per_page=None if return_all else self._limit(ctx, i),
        )
        return RequestSpec("GET", "users", query=query.to_params(), return_all=return_all)

    def _user_get_by_email(self, ctx: ExecutionContext, i: int) -> RequestSpec:
        email = ctx.get_parameter("email", i)
        return RequestSpec("GET", f"users/email/{email}")

    def _user_get_by_id(self, ctx: ExecutionContext, i: int) -> RequestSpec:
        raw_ids = ctx.get_parameter("userIds", i)
        user_ids = [user_id.strip() for user_id in raw_ids.split(",") if user_id.strip()]
        additional_fields = ctx.get_parameter("additionalFields", i, {})

        query: dict[str, Any] = {}
        if additional_fields.get("since"):
            query["since"] = _epoch_millis(additional_fields["since"], self.name, i)

        return RequestSpec("POST", "users/ids", user_ids, query)


def _epoch_millis(value: str, node: str, item_index: int) -> int:
    """Convert an ISO 8601 timestamp to milliseconds since the epoch."""
    try:
        moment = datetime.fromisoformat(value)
    except ValueError:
        raise NodeValidationError(
            f"Invalid date for 'since': {value}", node, item_index=item_index
        ) from None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return int(moment.timestamp() * 1000)
