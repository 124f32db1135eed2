"""
Node abstraction for nodeworks.

A node turns user-configured parameters into requests against one
external service and maps the JSON responses back into output items.

Lifecycle per execution:
    1. Resolve credentials (MissingCredentialsError when absent)
    2. Open the integration client
    3. For each input item, in order: build one RequestSpec, send it,
       append the response (arrays are flattened) to the output list
    4. Close the client

There is no per-item catch-and-continue: the first error aborts the
execution and propagates to the host.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, TypeVar
from uuid import UUID, uuid4

from nodeworks.config.service import CredentialStore, get_settings

if TYPE_CHECKING:
    from pydantic import BaseModel

    from nodeworks.config.schemas import AppSettings
    from nodeworks.config.service import CredentialProvider
    from nodeworks.integrations.base import JSON, IntegrationClient

logger = logging.getLogger(__name__)

C = TypeVar("C", bound="IntegrationClient")

_MISSING = object()


# =============================================================================
# Exceptions
# =============================================================================


class NodeError(Exception):
    """Base exception for node failures."""

    def __init__(self, message: str, node: str = "", *, item_index: int | None = None):
        super().__init__(message)
        self.node = node
        self.item_index = item_index

    def __str__(self) -> str:
        prefix = f"[{self.node}] " if self.node else ""
        suffix = f" (item {self.item_index})" if self.item_index is not None else ""
        return f"{prefix}{self.args[0]}{suffix}"


class MissingCredentialsError(NodeError):
    """Raised when the node's credentials are not configured."""


class UnknownOperationError(NodeError):
    """Raised for an unknown resource, operation or option loader."""


class NodeValidationError(NodeError):
    """Raised when user-supplied parameters are invalid."""


class NodeOperationError(NodeError):
    """Raised when an operation cannot produce a result."""


# =============================================================================
# Data types
# =============================================================================


@dataclass(frozen=True, slots=True)
class NodePropertyOption:
    """One entry of a UI selection dropdown."""

    name: str
    value: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "value": self.value}


@dataclass(frozen=True, slots=True)
class RequestSpec:
    """A fully built request, ready to hand to the HTTP collaborator."""

    method: str
    endpoint: str
    body: Any = None
    query: dict[str, Any] = field(default_factory=dict)
    return_all: bool = False


@dataclass
class ExecutionContext:
    """
    Execution-scoped state handed to Node.execute().

    Attributes:
        items: Input items, in order
        parameters: Resolved node parameters, either one mapping shared by
            every item or one mapping per item
        credentials: Credential provider for this execution; when omitted,
            credentials come from CredentialStore.from_settings()
        settings: Optional settings overriding the environment defaults
    """

    items: list[dict[str, Any]]
    parameters: dict[str, Any] | list[dict[str, Any]]
    credentials: CredentialProvider | None = None
    settings: AppSettings | None = None
    execution_id: UUID = field(default_factory=uuid4)

    def parameters_for(self, item_index: int) -> dict[str, Any]:
        if isinstance(self.parameters, list):
            return self.parameters[item_index]
        return self.parameters

    def get_parameter(self, name: str, item_index: int = 0, default: Any = _MISSING) -> Any:
        """
        Read one parameter for an item.

        Raises:
            NodeValidationError: If the parameter is missing and has no default
        """
        params = self.parameters_for(item_index)
        if name in params:
            return params[name]
        if default is _MISSING:
            raise NodeValidationError(
                f"Parameter '{name}' is required",
                item_index=item_index,
            )
        return default


OptionLoader = Callable[[Any, dict[str, Any]], Awaitable[list[NodePropertyOption]]]


# =============================================================================
# Node
# =============================================================================


class Node(ABC, Generic[C]):
    """
    Base class for integration nodes.

    Subclasses must implement:
    - name: Node identifier
    - credential_name: Credential type the node needs
    - _create_client(): Build the integration client from credentials
    And one of:
    - _build_request(): Turn one item's parameters into a RequestSpec
    - _run_item(): Full per-item execution, when an operation needs more
      than a single request

    Subclasses may override:
    - option_loaders(): Named callbacks populating UI dropdowns
    """

    credential_name: str = ""

    def __init__(self, client: C | None = None):
        """
        Initialize the node.

        Args:
            client: Pre-built client. When given it is reused across
                executions and never closed by the node.
        """
        self._client = client

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique name for this node, used in logging and errors."""
        ...

    @abstractmethod
    def _create_client(self, credentials: BaseModel, settings: AppSettings) -> C:
        ...

    def _build_request(self, ctx: ExecutionContext, item_index: int) -> RequestSpec:
        raise NotImplementedError(f"{self.name} does not build single requests")

    def option_loaders(self) -> dict[str, OptionLoader]:
        return {}

    # =========================================================================
    # Execution
    # =========================================================================

    async def execute(self, ctx: ExecutionContext) -> list[JSON]:
        """
        Run the node over every input item.

        Returns:
            Output records, one per response (array responses flattened)
        """
        output: list[JSON] = []

        async with self._open_client(ctx.credentials, ctx.settings) as client:
            for item_index in range(len(ctx.items)):
                try:
                    data = await self._run_item(client, ctx, item_index)
                except NodeError as e:
                    if e.item_index is None:
                        e.item_index = item_index
                    if not e.node:
                        e.node = self.name
                    raise
                _append_response(output, data)

        logger.info(
            f"[{self.name}] Execution {str(ctx.execution_id)[:8]} produced "
            f"{len(output)} records from {len(ctx.items)} items"
        )
        return output

    async def _run_item(self, client: C, ctx: ExecutionContext, item_index: int) -> JSON | None:
        spec = self._build_request(ctx, item_index)
        return await self._send(client, spec)

    async def _send(self, client: C, spec: RequestSpec) -> JSON | None:
        logger.debug(f"[{self.name}] {spec.method} {spec.endpoint} query={spec.query}")
        if spec.return_all:
            return await client.request_all_pages(spec.method, spec.endpoint, spec.body, spec.query)
        return await client.request(spec.method, spec.endpoint, spec.body, spec.query)

    async def load_options(
        self,
        method: str,
        parameters: dict[str, Any],
        credentials: CredentialProvider | None = None,
        settings: AppSettings | None = None,
    ) -> list[NodePropertyOption]:
        """
        Populate a UI dropdown.

        Args:
            method: Option loader name (e.g. "getChannels")
            parameters: Current values of the node's other parameters
            credentials: Credential provider (defaults to CredentialStore.from_settings())

        Raises:
            UnknownOperationError: If no loader has that name
        """
        loaders = self.option_loaders()
        if method not in loaders:
            raise UnknownOperationError(f'The option loader "{method}" is not known!', self.name)

        async with self._open_client(credentials, settings) as client:
            return await loaders[method](client, parameters)

    # =========================================================================
    # Client lifecycle
    # =========================================================================

    def _resolve_credentials(
        self,
        credentials: CredentialProvider | None,
        settings: AppSettings | None,
    ) -> BaseModel:
        if credentials is None:
            credentials = CredentialStore.from_settings(settings)
        resolved = credentials.get(self.credential_name)
        if resolved is None:
            raise MissingCredentialsError("No credentials got returned!", self.name)
        return resolved

    def _open_client(self, credentials: CredentialProvider | None, settings: AppSettings | None):
        resolved = self._resolve_credentials(credentials, settings)
        if self._client is not None:
            return _BorrowedClient(self._client)
        return self._create_client(resolved, settings or get_settings())

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}')"


class _BorrowedClient:
    """Async context manager that yields an injected client without closing it."""

    def __init__(self, client: Any):
        self._client = client

    async def __aenter__(self) -> Any:
        return self._client

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        return None


def _append_response(output: list[JSON], data: JSON | None) -> None:
    if data is None:
        output.append({})
    elif isinstance(data, list):
        output.extend(data)
    else:
        output.append(data)
