"""Read tools: lists, tasks, and resolution (3 tools)."""

from __future__ import annotations

from typing import Literal

from ticktick_cli import CliError
from ticktick_cli.mcp_server._core import (
    _call,
    _contract_error,
    _finalize_tool_result,
    _slim_task,
)
from ticktick_cli.mcp_server._security import _clean_field, _sanitize_project, _sanitize_task


def list_projects() -> list | dict:
    """List all task lists. The Inbox comes first and carries task_count.

    Returns:
        List of dicts with id, name, color, view_mode, kind.
    """
    result = _call("list_projects")
    if isinstance(result, list):
        result = [_sanitize_project(p) for p in result]
    return _finalize_tool_result(result)


def list_tasks(
    project: str | None = None,
    status: Literal["all", "pending", "completed"] = "all",
    include_content: bool = False,
) -> dict:
    """List tasks in one list, or across every list when project is omitted.

    Args:
        project: List name or ID. Use "Inbox" for the Inbox.
        status: all, pending, or completed.
        include_content: Include task bodies (off by default to save tokens).

    Returns:
        Dict with count, project, and tasks.
    """
    result = _call("list_tasks", project=project, status=status)
    if isinstance(result, dict) and isinstance(result.get("tasks"), list):
        result = dict(result)
        rows = result["tasks"] if include_content else [_slim_task(t) for t in result["tasks"]]
        result["tasks"] = [_sanitize_task(t) for t in rows]
    return _finalize_tool_result(result)


def resolve_task(identifier: str, project: str | None = None) -> dict:
    """Find which list holds a task, by 24-char ID or title.

    Without project, the Inbox is searched first, then every list in order.
    The first match wins; duplicate titles in other lists are not reported.

    Returns:
        Dict with project_id, task_id, and task.
    """
    try:
        identifier = _clean_field(identifier, "identifier")
    except CliError as e:
        return _finalize_tool_result(_contract_error(str(e), "error"))
    result = _call("resolve_task", identifier=identifier, project=project)
    if isinstance(result, dict) and isinstance(result.get("task"), dict):
        result = dict(result)
        result["task"] = _sanitize_task(result["task"])
    return _finalize_tool_result(result)


def register(mcp):
    """Register all read tools with the FastMCP instance."""
    mcp.tool()(list_projects)
    mcp.tool()(list_tasks)
    mcp.tool()(resolve_task)
