"""
nodeworks nodes.

A node turns user-configured parameters into REST requests and maps the
responses back into output items.

Usage:
    from nodeworks.config import CredentialStore
    from nodeworks.nodes import ExecutionContext, MattermostNode

    node = MattermostNode()
    output = await node.execute(ExecutionContext(
        items=[{}],
        parameters={
            "resource": "message",
            "operation": "post",
            "channelId": "town-square-id",
            "message": "Deploy finished",
        },
        credentials=CredentialStore.from_env(),
    ))
"""

from nodeworks.nodes.base import (
    ExecutionContext,
    MissingCredentialsError,
    Node,
    NodeError,
    NodeOperationError,
    NodePropertyOption,
    NodeValidationError,
    RequestSpec,
    UnknownOperationError,
)
from nodeworks.nodes.clockify import ClockifyNode
from nodeworks.nodes.mattermost import MattermostNode

__all__ = [
    "ClockifyNode",
    "ExecutionContext",
    "MattermostNode",
    "MissingCredentialsError",
    "Node",
    "NodeError",
    "NodeOperationError",
    "NodePropertyOption",
    "NodeValidationError",
    "RequestSpec",
    "UnknownOperationError",
]
