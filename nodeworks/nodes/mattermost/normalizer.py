"""
Request normalization for the Mattermost node.

Two pure, single-pass helpers sit between the node's collected parameters
and the outbound request:

normalize_attachments()
    The parameter form collects repeatable groups inside wrapper keys
    (``{"item": [...]}``, ``{"option": [...]}``, ``{"property": [...]}``).
    The message API wants flat lists and a flat context mapping, and treats
    missing ``type`` / ``data_source`` as their defaults. Wrappers are
    removed here, once, so nothing downstream sees the form shape.

validate_user_sort()
    Listing users accepts a sort key only together with a team or channel
    scope, and each scope allows a different set of keys. Violations are
    raised before any request is built.

Neither function does I/O or keeps state between calls.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Mapping
from enum import Enum
from typing import Any

from nodeworks.nodes.base import NodeValidationError

DEFAULT_ACTION_TYPE = "button"
DEFAULT_DATA_SOURCE = "custom"

# Sort keys accepted per scope filter
SORT_RULES: dict[str, tuple[str, ...]] = {
    "inTeam": ("last_activity_at", "created_at", "username"),
    "inChannel": ("status", "username"),
}

# Sorting by username is the server's default order, requested as sort=""
DEFAULT_SORT = "username"

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_SEPARATORS = re.compile(r"[\s\-.]+")


# =============================================================================
# Attachments
# =============================================================================


class _Absent:
    pass


_ABSENT = _Absent()


def _unwrap(value: Any, key: str) -> Any:
    """
    Remove one wrapper level.

    A wrapper mapping yields its inner value, or _ABSENT when the user added
    no entries. Values that are already flat lists, and malformed values,
    are returned unchanged.
    """
    if isinstance(value, Mapping):
        return value[key] if key in value else _ABSENT
    return value


def _fold_context(context: Any) -> Any:
    """Turn ``{"property": [{name, value}, ...]}`` into ``{name: value}``."""
    if not isinstance(context, Mapping):
        return context

    properties = context.get("property")
    if not isinstance(properties, list):
        return context
    if not all(isinstance(p, Mapping) and "name" in p for p in properties):
        return context

    # Later duplicates win
    return {p["name"]: p.get("value") for p in properties}


def _normalize_action(action: Any) -> Any:
    if not isinstance(action, dict):
        return action

    if action.get("type") == DEFAULT_ACTION_TYPE:
        del action["type"]
    if action.get("data_source") == DEFAULT_DATA_SOURCE:
        del action["data_source"]

    if "options" in action:
        options = _unwrap(action["options"], "option")
        if options is _ABSENT:
            del action["options"]
        else:
            action["options"] = options

    integration = action.get("integration")
    if isinstance(integration, Mapping) and "item" in integration:
        integration = integration["item"]
        if isinstance(integration, dict) and "context" in integration:
            integration["context"] = _fold_context(integration["context"])
        action["integration"] = integration

    return action


def _normalize_attachment(attachment: Any) -> Any:
    if not isinstance(attachment, dict):
        return attachment

    attachment = copy.deepcopy(attachment)

    for key in ("fields", "actions"):
        if key not in attachment:
            continue
        unwrapped = _unwrap(attachment[key], "item")
        if unwrapped is _ABSENT:
            del attachment[key]
        else:
            attachment[key] = unwrapped

    actions = attachment.get("actions")
    if isinstance(actions, list):
        attachment["actions"] = [_normalize_action(action) for action in actions]

    return attachment


def normalize_attachments(raw_attachments: Any) -> Any:
    """
    Reshape form-collected attachments into the message API's format.

    For each attachment:
    1. ``fields`` / ``actions`` wrappers are replaced by their ``item`` list,
       or removed when the wrapper is empty.
    2. Each action drops ``type: "button"`` and ``data_source: "custom"``,
       unwraps ``options.option`` and ``integration.item``, and folds the
       integration's ``context.property`` list into a name → value mapping.

    The input is not modified. Already-normalized attachments come back
    unchanged, and shapes that are not understood are passed through for
    the API to accept or reject.

    Args:
        raw_attachments: List of attachment mappings

    Returns:
        New list of attachment mappings
    """
    if not isinstance(raw_attachments, list):
        return raw_attachments
    return [_normalize_attachment(attachment) for attachment in raw_attachments]


# =============================================================================
# User sort
# =============================================================================


class SortRule(str, Enum):
    """Which sort/scope rule a request violated."""

    SCOPE_REQUIRED = "scope_required"
    INVALID_TEAM_SORT = "invalid_team_sort"
    INVALID_CHANNEL_SORT = "invalid_channel_sort"
    EMPTY_CHANNEL_SCOPE = "empty_channel_scope"
    EMPTY_TEAM_SCOPE = "empty_team_scope"


class SortValidationError(NodeValidationError):
    """Raised when a user-listing sort key does not fit the scope filters."""

    def __init__(self, message: str, rule: SortRule, **kwargs):
        super().__init__(message, "mattermost", **kwargs)
        self.rule = rule


def snake_case(value: str) -> str:
    """Convert ``createdAt`` / ``Created At`` / ``created-at`` to ``created_at``."""
    value = _CAMEL_BOUNDARY.sub("_", value.strip())
    return _SEPARATORS.sub("_", value).lower()


def validate_user_sort(
    sort: str | None,
    scope_filters: Mapping[str, Any],
) -> str | None:
    """
    Check a user-listing sort key against the scope filters.

    Rules, first violation wins:
    1. A sort needs an ``inTeam`` or ``inChannel`` scope.
    2. With ``inTeam``, sort must be one of SORT_RULES["inTeam"].
    3. With ``inChannel``, sort must be one of SORT_RULES["inChannel"].
    4. An empty ``inChannel`` is only allowed when sorting by username.
    5. An empty ``inTeam`` is only allowed when sorting by username.

    A scope counts as set when its key is present, even with an empty value.

    Args:
        sort: Sort key in any case style, or None/"" for no sort
        scope_filters: Mapping with optional inTeam, notInTeam, inChannel,
            notInChannel values

    Returns:
        The ``sort`` query value: None when no sort was requested, "" for
        username (the server default), otherwise the snake_case key

    Raises:
        SortValidationError: On the first violated rule
    """
    if not sort:
        return None

    key = snake_case(sort)
    in_team = scope_filters.get("inTeam")
    in_channel = scope_filters.get("inChannel")

    if in_team is None and in_channel is None:
        raise SortValidationError(
            "Scope required for sort: when sort is defined either "
            "'In Team' or 'In Channel' must be set",
            SortRule.SCOPE_REQUIRED,
        )

    if in_team is not None and key not in SORT_RULES["inTeam"]:
        raise SortValidationError(
            "Invalid sort for team scope: when In Team is set the only valid "
            f"values for sorting are {','.join(SORT_RULES['inTeam'])}",
            SortRule.INVALID_TEAM_SORT,
        )

    if in_channel is not None and key not in SORT_RULES["inChannel"]:
        raise SortValidationError(
            "Invalid sort for channel scope: when In Channel is set the only "
            f"valid values for sorting are {','.join(SORT_RULES['inChannel'])}",
            SortRule.INVALID_CHANNEL_SORT,
        )

    if in_channel == "" and key != DEFAULT_SORT:
        raise SortValidationError(
            "Channel scope must be non-empty unless sorting by username",
            SortRule.EMPTY_CHANNEL_SCOPE,
        )

    if in_team == "" and key != DEFAULT_SORT:
        raise SortValidationError(
            "Team scope must be non-empty unless sorting by username",
            SortRule.EMPTY_TEAM_SCOPE,
        )

    return "" if key == DEFAULT_SORT else key
