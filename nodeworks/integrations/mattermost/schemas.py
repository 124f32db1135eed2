"""
Pydantic schemas for the Mattermost API.

Only the fields the nodes read are declared; everything else the server
returns is kept as extra data so records can be passed through untouched.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# Enums
# =============================================================================


class ChannelType(str, Enum):
    """Channel visibility as encoded by the API."""

    OPEN = "O"
    PRIVATE = "P"
    DIRECT = "D"
    GROUP = "G"

    @property
    def label(self) -> str:
        return _CHANNEL_TYPE_LABELS[self]

    @classmethod
    def from_visibility(cls, value: str) -> ChannelType:
        """Map the node's "public"/"private" choice to an API code."""
        return cls.OPEN if value == "public" else cls.PRIVATE


_CHANNEL_TYPE_LABELS = {
    ChannelType.OPEN: "public",
    ChannelType.PRIVATE: "private",
    ChannelType.DIRECT: "direct",
    ChannelType.GROUP: "group",
}


# =============================================================================
# Request Schemas
# =============================================================================


class ChannelCreate(BaseModel):
    """Schema for creating a channel."""

    team_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, description="URL-safe channel handle")
    display_name: str = Field(..., min_length=1)
    type: ChannelType = ChannelType.OPEN

    def to_api_dict(self) -> dict[str, Any]:
        return {
            "team_id": self.team_id,
            "display_name": self.display_name,
            "name": self.name,
            "type": self.type.value,
        }


class UserQuery(BaseModel):
    """Query parameters for listing users."""

    in_team: str | None = None
    not_in_team: str | None = None
    in_channel: str | None = None
    not_in_channel: str | None = None
    sort: str | None = None
    per_page: int | None = Field(None, ge=1, le=200)

    def to_params(self) -> dict[str, Any]:
        """Convert to query parameters, dropping unset filters."""
        params: dict[str, Any] = {}
        for key in ("in_team", "not_in_team", "in_channel", "not_in_channel"):
            value = getattr(self, key)
            if value:
                params[key] = value
        # An empty sort is meaningful: it selects the server's default order.
        if self.sort is not None:
            params["sort"] = self.sort
        if self.per_page is not None:
            params["per_page"] = self.per_page
        return params


# =============================================================================
# Response Schemas
# =============================================================================


class Team(BaseModel):
    """Team representation."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: str = ""
    display_name: str = ""
    type: str = "O"
    delete_at: int = 0

    @property
    def is_deleted(self) -> bool:
        return self.delete_at != 0


class Channel(BaseModel):
    """Channel representation."""

    model_config = ConfigDict(extra="allow")

    id: str
    team_id: str = ""
    name: str = ""
    display_name: str = ""
    type: str = "O"
    delete_at: int = 0

    @property
    def is_deleted(self) -> bool:
        return self.delete_at != 0

    @property
    def visibility(self) -> str | None:
        """Human label for the channel type, if the type is known."""
        try:
            return ChannelType(self.type).label
        except ValueError:
            return None


class User(BaseModel):
    """User representation."""

    model_config = ConfigDict(extra="allow")

    id: str
    username: str = ""
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    delete_at: int = 0

    @property
    def is_deleted(self) -> bool:
        return self.delete_at != 0


class ChannelMember(BaseModel):
    """Membership record returned by channels/{id}/members."""

    model_config = ConfigDict(extra="allow")

    channel_id: str
    user_id: str
