"""
nodeworks - workflow integration nodes for Mattermost and Clockify.

Each node maps user-configured parameters onto REST requests:

- **Nodes**: Per resource/operation request building and item mapping
- **Integrations**: Async HTTP clients with retry, error mapping and pagination
- **Config**: Settings from the environment and credential stores

Quick Start:
    >>> from nodeworks import ExecutionContext, MattermostNode
    >>> from nodeworks.config import CredentialStore
    >>>
    >>> node = MattermostNode()
    >>> output = await node.execute(ExecutionContext(
    ...     items=[{}],
    ...     parameters={"resource": "user", "operation": "getByEmail", "email": "a@b.c"},
    ...     credentials=CredentialStore.from_env(),
    ... ))
"""

__version__ = "0.1.0"
__license__ = "MIT"

from nodeworks.nodes import ClockifyNode, ExecutionContext, MattermostNode, Node

__all__ = [
    "__version__",
    "__license__",
    "ClockifyNode",
    "ExecutionContext",
    "MattermostNode",
    "Node",
]
