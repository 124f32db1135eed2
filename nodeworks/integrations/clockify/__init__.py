"""
Clockify integration for nodeworks.

Clockify is a time-tracking service. Workspaces group clients, projects,
tags and time entries.
"""

from nodeworks.integrations.clockify.client import ClockifyClient, ClockifyConfig
from nodeworks.integrations.clockify.schemas import (
    Client,
    Project,
    ProjectCreate,
    Tag,
    TagCreate,
    Task,
    TimeEntry,
    TimeEntryCreate,
    TimeInterval,
    User,
    Workspace,
)

__all__ = [
    "Client",
    "ClockifyClient",
    "ClockifyConfig",
    "Project",
    "ProjectCreate",
    "Tag",
    "TagCreate",
    "Task",
    "TimeEntry",
    "TimeEntryCreate",
    "TimeInterval",
    "User",
    "Workspace",
]
