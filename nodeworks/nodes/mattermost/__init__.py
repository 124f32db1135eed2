"""Mattermost node: channels, messages and users."""

from nodeworks.nodes.mattermost.node import MattermostNode, Operation, Resource
from nodeworks.nodes.mattermost.normalizer import (
    SORT_RULES,
    SortRule,
    SortValidationError,
    normalize_attachments,
    validate_user_sort,
)

__all__ = [
    "MattermostNode",
    "Operation",
    "Resource",
    "SORT_RULES",
    "SortRule",
    "SortValidationError",
    "normalize_attachments",
    "validate_user_sort",
]
