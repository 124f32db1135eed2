"""
Pydantic schemas for the Clockify API.

Clockify uses camelCase field names on the wire; models keep the wire
names so records round-trip without aliasing.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# Request Schemas
# =============================================================================


class ProjectCreate(BaseModel):
    """Schema for creating a project."""

    name: str = Field(..., min_length=1, max_length=250)
    clientId: str | None = None
    isPublic: bool = False
    color: str = "#0000FF"
    note: str = ""
    billable: bool = False

    def to_api_dict(self) -> dict[str, Any]:
        """Convert to API request format, excluding empty optionals."""
        data = self.model_dump(exclude_none=True)
        if not data.get("clientId"):
            data.pop("clientId", None)
        if not data.get("note"):
            data.pop("note", None)
        return data


class TagCreate(BaseModel):
    """Schema for creating a tag."""

    name: str = Field(..., min_length=1, max_length=100)

    def to_api_dict(self) -> dict[str, Any]:
        return {"name": self.name}


class TimeEntryCreate(BaseModel):
    """Schema for creating a time entry."""

    start: str = Field(..., min_length=1, description="ISO 8601 start time")
    end: str | None = Field(None, description="ISO 8601 end time")
    billable: bool = False
    description: str = ""
    projectId: str | None = None
    taskId: str | None = None
    tagIds: list[str] | None = None

    def to_api_dict(self) -> dict[str, Any]:
        """Convert to API request format, excluding None and empty values."""
        data: dict[str, Any] = {
            "start": self.start,
            "billable": self.billable,
            "description": self.description,
        }
        if self.end:
            data["end"] = self.end
        if self.projectId:
            data["projectId"] = self.projectId
        if self.taskId:
            data["taskId"] = self.taskId
        if self.tagIds:
            data["tagIds"] = self.tagIds
        return data


# =============================================================================
# Response Schemas
# =============================================================================


class Workspace(BaseModel):
    """Workspace representation."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: str


class User(BaseModel):
    """Workspace member representation."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    email: str | None = None


class Client(BaseModel):
    """Client (customer) representation."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    workspaceId: str | None = None
    archived: bool = False


class Project(BaseModel):
    """Project representation."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    workspaceId: str | None = None
    clientId: str | None = None
    clientName: str | None = None
    color: str | None = None
    billable: bool = False
    public: bool = False
    archived: bool = False
    note: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class Tag(BaseModel):
    """Tag representation."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    workspaceId: str | None = None
    archived: bool = False


class Task(BaseModel):
    """Task representation."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    projectId: str | None = None
    status: str | None = None


class TimeInterval(BaseModel):
    """Start/end pair of a time entry."""

    model_config = ConfigDict(extra="allow")

    start: str | None = None
    end: str | None = None
    duration: str | None = None


class TimeEntry(BaseModel):
    """Time entry representation."""

    model_config = ConfigDict(extra="allow")

    id: str
    description: str = ""
    billable: bool = False
    isLocked: bool = False
    projectId: str | None = None
    taskId: str | None = None
    tagIds: list[str] | None = None
    userId: str | None = None
    workspaceId: str | None = None
    timeInterval: TimeInterval | None = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
