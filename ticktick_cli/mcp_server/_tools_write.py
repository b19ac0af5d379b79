"""Write tools: task and list mutations (6 tools)."""

from __future__ import annotations

from typing import Literal

from ticktick_cli import CliError
from ticktick_cli.mcp_server._core import _call, _contract_error, _finalize_tool_result
from ticktick_cli.mcp_server._security import _clean_field, _clean_tags, _sanitize_task

_Priority = Literal["None", "Low", "Medium", "High"]


def _sanitized(result):
    if isinstance(result, dict) and isinstance(result.get("task"), dict):
        result = dict(result)
        result["task"] = _sanitize_task(result["task"])
    return result


def _clean_text(**fields):
    """Validate optional free-text arguments. Returns the cleaned dict."""
    out = {}
    for field, value in fields.items():
        out[field] = _clean_field(value, field) if value is not None else None
    return out


def create_task(
    title: str,
    content: str | None = None,
    project: str | None = None,
    priority: _Priority | None = None,
    due: str | None = None,
    tags: list[str] | None = None,
) -> dict:
    """Create a task. Lands in the Inbox unless project is given.

    Args:
        title: Task title (max 512 chars).
        content: Task body; markdown and newlines allowed.
        project: Destination list name.
        priority: None, Low, Medium, or High.
        due: YYYY-MM-DDTHH:MM:SS local Pacific time, or with trailing Z for UTC.
        tags: Tag names.

    Returns:
        Dict with ok, action, and task.
    """
    try:
        text = _clean_text(title=title, content=content)
        tags = _clean_tags(tags)
    except CliError as e:
        return _finalize_tool_result(_contract_error(str(e), "error"))
    result = _call(
        "create_task",
        title=text["title"],
        content=text["content"],
        project=project,
        priority=priority,
        due=due,
        tags=tags,
    )
    return _finalize_tool_result(_sanitized(result))


def update_task(
    identifier: str,
    title: str | None = None,
    content: str | None = None,
    project: str | None = None,
    priority: _Priority | None = None,
    due: str | None = None,
    tags: list[str] | None = None,
) -> dict:
    """Update a task by 24-char ID or title. Only given fields change.

    If project is given and the task lives in another list, the task is
    moved there and gets a NEW id (returned as task.id). Priority "None"
    cannot clear an existing priority.

    Returns:
        Dict with ok, action ("updated" or "moved"), task, and move details.
    """
    try:
        text = _clean_text(identifier=identifier, title=title, content=content)
        tags = _clean_tags(tags)
    except CliError as e:
        return _finalize_tool_result(_contract_error(str(e), "error"))
    result = _call(
        "update_task",
        identifier=text["identifier"],
        title=text["title"],
        content=text["content"],
        project=project,
        priority=priority,
        due=due,
        tags=tags,
    )
    return _finalize_tool_result(_sanitized(result))


def move_task(identifier: str, project: str, from_project: str | None = None) -> dict:
    """Move a task to another list. The moved task gets a NEW id.

    On failure the error names the failed step (create, delete, verify);
    a failed delete leaves the task in both lists.

    Returns:
        Dict with ok, action ("moved" or "unchanged"), task, and move details.
    """
    try:
        identifier = _clean_field(identifier, "identifier")
    except CliError as e:
        return _finalize_tool_result(_contract_error(str(e), "error"))
    result = _call("move_task", identifier=identifier, project=project, from_project=from_project)
    return _finalize_tool_result(_sanitized(result))


def complete_task(
    identifier: str, project: str | None = None, tags: list[str] | None = None
) -> dict:
    """Mark a task completed. Tags, if given, are set first.

    Returns:
        Dict with ok, action, task_id, project_id, and title.
    """
    try:
        identifier = _clean_field(identifier, "identifier")
        tags = _clean_tags(tags)
    except CliError as e:
        return _finalize_tool_result(_contract_error(str(e), "error"))
    return _finalize_tool_result(
        _call("complete_task", identifier=identifier, project=project, tags=tags)
    )


def create_project(
    name: str,
    color: str | None = None,
    view_mode: Literal["list", "kanban", "timeline"] | None = None,
) -> dict:
    """Create a list. If one with the same normalized name exists, it is returned instead.

    Returns:
        Dict with ok, created (bool), and project.
    """
    try:
        name = _clean_field(name, "name")
    except CliError as e:
        return _finalize_tool_result(_contract_error(str(e), "error"))
    return _finalize_tool_result(
        _call("create_project", name=name, color=color, view_mode=view_mode)
    )


def update_project(identifier: str, name: str | None = None, color: str | None = None) -> dict:
    """Rename or recolor a list found by name or ID. Color is #RRGGBB."""
    try:
        text = _clean_text(identifier=identifier, name=name)
    except CliError as e:
        return _finalize_tool_result(_contract_error(str(e), "error"))
    return _finalize_tool_result(
        _call("update_project", identifier=text["identifier"], name=text["name"], color=color)
    )


def register(mcp):
    """Register all write tools with the FastMCP instance."""
    mcp.tool()(create_task)
    mcp.tool()(update_task)
    mcp.tool()(move_task)
    mcp.tool()(complete_task)
    mcp.tool()(create_project)
    mcp.tool()(update_project)
