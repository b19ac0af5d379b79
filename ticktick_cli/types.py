"""Typed response definitions for TickTickClient methods.

These TypedDicts document the shape of dicts returned by public API methods.
They are optional — runtime behavior is unchanged (plain dicts).
"""

from __future__ import annotations

from typing import TypedDict

# ---------------------------------------------------------------------------
# Task types
# ---------------------------------------------------------------------------


class TaskRow(TypedDict):
    """Flat task record returned by reads and mutations."""

    id: str
    title: str
    content: str
    project_id: str
    priority: int
    priority_text: str
    due_date: str | None
    tags: list[str]
    status: str
    status_text: str


class TaskListResult(TypedDict):
    """Return type of TickTickClient.list_tasks()."""

    ok: bool
    count: int
    project: str | None
    tasks: list[TaskRow]


class ResolveResult(TypedDict):
    """Return type of TickTickClient.resolve_task()."""

    ok: bool
    project_id: str
    task_id: str
    task: TaskRow


# ---------------------------------------------------------------------------
# Project types
# ---------------------------------------------------------------------------


class ProjectRow(TypedDict, total=False):
    id: str
    name: str
    color: str | None
    view_mode: str | None
    kind: str | None
    task_count: int


class ProjectResult(TypedDict, total=False):
    """Return type of create_project() / update_project()."""

    ok: bool
    created: bool
    project: ProjectRow


# ---------------------------------------------------------------------------
# Mutation results
# ---------------------------------------------------------------------------


class MoveInfo(TypedDict, total=False):
    state: str
    original_id: str
    new_id: str | None
    from_project_id: str
    to_project_id: str
    last_status: int


class TaskMutationResult(TypedDict, total=False):
    """Return type of create_task() / update_task() / move_task()."""

    ok: bool
    action: str
    task: TaskRow
    move: MoveInfo


class CompleteResult(TypedDict, total=False):
    ok: bool
    action: str
    task_id: str
    project_id: str
    title: str
    tags: list[str]
