"""Clockify node: projects, tags and time entries."""

from nodeworks.nodes.clockify.node import ClockifyNode, Operation, Resource

__all__ = ["ClockifyNode", "Operation", "Resource"]
