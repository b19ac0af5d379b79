"""
TickTickClient — public Python API for TickTick tasks and lists.

Single entry point for the CLI and the MCP server.
All methods return flat dicts suitable for JSON serialization.
"""

from __future__ import annotations

import re

# TypedDict return types live in ticktick_cli.types for documentation.
# Method signatures use plain dict[str, Any] for mypy compatibility.
from typing import Any

from ticktick_cli import config, directory, resolver, tasks
from ticktick_cli._utils import is_inbox, parse_tags, warn
from ticktick_cli.api import _check_token
from ticktick_cli.exceptions import CliError, EntityNotFoundInContainer, RemoteUnavailable
from ticktick_cli.models import FieldChanges, InPlaceUpdate, Move, Project, Task
from ticktick_cli.move import MoveOrchestrator
from ticktick_cli.planner import plan
from ticktick_cli.tags import reconcile_tags

_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")


def _validate_color(color):
    if color is None:
        return None
    if not _COLOR_RE.match(color):
        raise CliError(f"[ERROR] Invalid color '{color}'. Use a hex value like #4A90E2.")
    return color


def _filter_status(task_list, status):
    if status == "all":
        return task_list
    return [t for t in task_list if t.status == status]


def _dedupe(task_list):
    seen = set()
    out = []
    for task in task_list:
        if task.id in seen:
            continue
        seen.add(task.id)
        out.append(task)
    return out


class TickTickClient:
    """Public API surface for TickTick task management.

    All methods use keyword-only arguments and return plain dicts
    suitable for JSON serialization. Raises CliError/SetupError on failure.
    """

    def __init__(self, *, validate_token=True, sleep=None):
        """Initialize the client.

        Args:
            validate_token: If True, check that an access token is configured
                and not past its expiry before any API call.
            sleep: Sleep function used between move retries (time.sleep if None).
        """
        if validate_token:
            _check_token()
        self._sleep = sleep

    # -------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------

    def _run_move(self, move_plan):
        outcome = MoveOrchestrator(sleep=self._sleep).execute(move_plan)
        return {
            "ok": True,
            "action": "moved",
            "task": outcome.task,
            "move": outcome.to_dict(),
        }

    def _find_project(self, identifier):
        containers = directory.list_containers()
        for project in containers:
            if project.id == identifier:
                return project
        project = directory.find_container(identifier, containers)
        if project is None:
            available = ", ".join(p.name for p in containers)
            hint = f" Available: {available}" if available else ""
            raise CliError(f"[ERROR] List '{identifier}' not found.{hint}")
        return project

    # -------------------------------------------------------------------
    # Read commands
    # -------------------------------------------------------------------

    def list_projects(self) -> list[dict[str, Any]]:
        """List all task lists, Inbox first.

        Returns:
            list of project dicts with id, name, color, view_mode, kind.
            The Inbox entry also carries task_count.
        """
        inbox = Project.inbox().to_dict()
        inbox["task_count"] = len(directory.list_members(config.INBOX_ID))
        return [inbox] + [p.to_dict() for p in directory.list_containers()]

    def list_tasks(self, *, project: str | None = None, status: str = "all") -> dict[str, Any]:
        """List tasks in one list, or across every list.

        Args:
            project: List name or ID ("Inbox" for the Inbox). All lists if omitted.
            status: all, pending, or completed.

        Returns:
            dict with ok, count, project, and tasks.
        """
        status = (status or "all").strip().lower()
        if status not in config.VALID_STATUS_FILTERS:
            raise CliError(
                f"[ERROR] Invalid status '{status}'. "
                f"Valid: {', '.join(sorted(config.VALID_STATUS_FILTERS))}"
            )
        if project:
            container_ids = [directory.resolve_container_id(project)]
        else:
            container_ids = list(directory.iter_containers())

        found = []
        for container_id in container_ids:
            found.extend(directory.list_members(container_id))
            if status in ("all", "completed"):
                try:
                    found.extend(directory.list_completed(container_id))
                except RemoteUnavailable as e:
                    warn(f"Could not load completed tasks for list {container_id}: {e}")

        rows = [t.to_dict() for t in _filter_status(_dedupe(found), status)]
        return {"ok": True, "count": len(rows), "project": project, "tasks": rows}

    def resolve_task(self, identifier: str, *, project: str | None = None) -> dict[str, Any]:
        """Resolve a task name or ID to its list and task IDs.

        Args:
            identifier: 24-char hex task ID, or task title.
            project: Restrict the search to this list.

        Returns:
            dict with ok, project_id, task_id, and task.
        """
        task = resolver.find_task(identifier, project)
        return {
            "ok": True,
            "project_id": task.container_id,
            "task_id": task.id,
            "task": task.to_dict(),
        }

    # -------------------------------------------------------------------
    # Task mutations
    # -------------------------------------------------------------------

    def create_task(
        self,
        title: str,
        *,
        content: str | None = None,
        project: str | None = None,
        priority: str | int | None = None,
        due: str | None = None,
        tags: str | list[str] | None = None,
    ) -> dict[str, Any]:
        """Create a new task.

        Args:
            title: Task title.
            content: Task body (markdown and line breaks allowed).
            project: Place the task in this list. Inbox if omitted.
            priority: None, Low, Medium, High (or 0/1/3/5).
            due: YYYY-MM-DDTHH:MM:SS local time, or with a trailing Z for UTC.
            tags: Comma-separated string or list of tags.

        Returns:
            dict with ok=True, action, and task.
        """
        title = (title or "").strip()
        if not title:
            raise CliError("[ERROR] Task title cannot be empty.")
        changes = FieldChanges.from_inputs(
            title=title, content=content, priority=priority, due=due, tags=tags
        )
        container_id = directory.resolve_container_id(project) if project else None
        create_plan = plan(None, changes, container_id)
        result = tasks.create_task(create_plan.payload)
        if not result.get("id"):
            raise CliError(
                "[ERROR] Task creation failed: API response missing 'id'. "
                f"Response: {str(result)[:200]}"
            )
        return {
            "ok": True,
            "action": "created",
            "task": Task.from_api(result, container_id).to_dict(),
        }

    def update_task(
        self,
        identifier: str,
        *,
        title: str | None = None,
        content: str | None = None,
        project: str | None = None,
        priority: str | int | None = None,
        due: str | None = None,
        tags: str | list[str] | None = None,
    ) -> dict[str, Any]:
        """Update a task found by name or ID.

        When *project* is given and the task lives there, the update is
        in place. When the task lives in another list, it is moved into
        *project* with the changes applied (the task gets a new ID).

        Returns:
            dict with ok=True, action ("updated" or "moved"), and task.
        """
        changes = FieldChanges.from_inputs(
            title=title, content=content, priority=priority, due=due, tags=tags
        )
        desired_container_id = None
        if project:
            try:
                current = resolver.find_task(identifier, project)
            except EntityNotFoundInContainer as e:
                current = resolver.find_task(identifier)
                desired_container_id = e.container_id
        else:
            current = resolver.find_task(identifier)

        mutation = plan(current, changes, desired_container_id)
        if isinstance(mutation, Move):
            return self._run_move(mutation)

        if not mutation.payload:
            raise CliError("[ERROR] Nothing to update. Pass at least one field to change.")
        result = tasks.update_task(mutation.entity_id, mutation.container_id, mutation.payload)
        return {
            "ok": True,
            "action": "updated",
            "task": Task.from_api(result, mutation.container_id).to_dict(),
        }

    def move_task(
        self, identifier: str, project: str, *, from_project: str | None = None
    ) -> dict[str, Any]:
        """Move a task into another list.

        Args:
            identifier: Task name or ID.
            project: Target list name or ID.
            from_project: Only look for the task in this list.

        Returns:
            dict with ok=True, action ("moved" or "unchanged"), and task.
        """
        current = resolver.find_task(identifier, from_project)
        desired_container_id = directory.resolve_container_id(project)
        mutation = plan(current, FieldChanges(), desired_container_id)
        if isinstance(mutation, InPlaceUpdate):
            return {"ok": True, "action": "unchanged", "task": current.to_dict()}
        return self._run_move(mutation)

    def complete_task(
        self,
        identifier: str,
        *,
        project: str | None = None,
        tags: str | list[str] | None = None,
    ) -> dict[str, Any]:
        """Mark a task completed, applying tags first when given.

        A tag failure aborts before completion. A successful tag write
        is kept even if the completion call then fails.

        Returns:
            dict with ok=True, action, task_id, project_id, and title.
        """
        tag_list = parse_tags(tags)
        task = resolver.find_task(identifier, project)
        if tag_list:
            reconcile_tags(task.id, tag_list)
        tasks.complete_task(task.container_id, task.id)
        out = {
            "ok": True,
            "action": "completed",
            "task_id": task.id,
            "project_id": task.container_id,
            "title": task.title,
        }
        if tag_list:
            out["tags"] = tag_list
        return out

    # -------------------------------------------------------------------
    # List mutations
    # -------------------------------------------------------------------

    def create_project(
        self,
        name: str,
        *,
        color: str | None = None,
        view_mode: str | None = None,
    ) -> dict[str, Any]:
        """Create a list, or report the existing one with the same normalized name.

        Returns:
            dict with ok=True, created (bool), and project.
        """
        name = (name or "").strip()
        if not name:
            raise CliError("[ERROR] List name cannot be empty.")
        _validate_color(color)
        if directory.is_inbox_name(name):
            return {"ok": True, "created": False, "project": Project.inbox().to_dict()}
        existing = directory.find_container(name)
        if existing is not None:
            return {"ok": True, "created": False, "project": existing.to_dict()}

        payload = {"name": name, "kind": "TASK"}
        if color:
            payload["color"] = color
        if view_mode:
            payload["viewMode"] = view_mode
        result = tasks.create_project(payload)
        if not result.get("id"):
            raise CliError(
                "[ERROR] List creation failed: API response missing 'id'. "
                f"Response: {str(result)[:200]}"
            )
        return {"ok": True, "created": True, "project": Project.from_api(result).to_dict()}

    def update_project(
        self,
        identifier: str,
        *,
        name: str | None = None,
        color: str | None = None,
    ) -> dict[str, Any]:
        """Rename or recolor a list found by name or ID.

        Returns:
            dict with ok=True and project.
        """
        if name is None and color is None:
            raise CliError("[ERROR] Nothing to update. Pass --name and/or --color.")
        if name is not None and not name.strip():
            raise CliError("[ERROR] List name cannot be empty.")
        _validate_color(color)
        if directory.is_inbox_name(identifier) or is_inbox(identifier):
            raise CliError("[ERROR] The Inbox cannot be renamed or recolored.")

        project = self._find_project(identifier)
        current = tasks.get_project(project.id)
        body = {k: v for k, v in current.items() if k not in config.PROJECT_READONLY_FIELDS}
        if name is not None:
            body["name"] = name.strip()
        if color is not None:
            body["color"] = color
        result = tasks.update_project(project.id, body)
        return {"ok": True, "project": Project.from_api({**body, **result}).to_dict()}
