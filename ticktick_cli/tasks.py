"""
Thin wrappers over the TickTick Open API task and project endpoints.

Each function is one round-trip and returns parsed JSON. Business logic
(resolution, planning, moves) lives elsewhere.
"""

import urllib.parse

from ticktick_cli import config
from ticktick_cli._utils import is_inbox
from ticktick_cli.api import (
    _expect_list_response,
    _expect_object_response,
    api_request,
    api_status_request,
)


def _quote(segment):
    return urllib.parse.quote(str(segment), safe="")


def _project_path(project_id):
    # Inbox data is only served under the literal sentinel.
    if is_inbox(project_id):
        return f"/project/{config.INBOX_ID}"
    return f"/project/{_quote(project_id)}"


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


def get_projects():
    result = api_request("/project")
    if result is None:
        return []
    return _expect_list_response(result, "project list")


def get_project(project_id):
    return _expect_object_response(api_request(f"/project/{_quote(project_id)}"), "project")


def get_project_data(project_id):
    """Return ``{"project": ..., "tasks": [...]}`` for a project or the Inbox."""
    result = api_request(_project_path(project_id) + "/data")
    if result is None:
        return {"tasks": []}
    return _expect_object_response(result, "project data")


def create_project(payload):
    return _expect_object_response(
        api_request("/project", payload, method="POST"), "project create"
    )


def update_project(project_id, payload):
    return _expect_object_response(
        api_request(f"/project/{_quote(project_id)}", payload, method="POST"),
        "project update",
    )


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


def get_task(task_id):
    """Direct by-ID lookup. Not every account exposes it; callers fall back."""
    return _expect_object_response(api_request(f"/task/{_quote(task_id)}"), "task")


def get_completed_tasks(project_id):
    result = api_request(_project_path(project_id) + "/task/completed?from=0")
    if result is None:
        return []
    # Served either as a bare array or wrapped in an object.
    if isinstance(result, dict):
        result = result.get("tasks", result.get("completedTasks", []))
    return _expect_list_response(result, "completed tasks")


def create_task(payload):
    return _expect_object_response(api_request("/task", payload, method="POST"), "task create")


def update_task(task_id, project_id, payload):
    """Sparse update. The body must echo ``id`` and ``projectId``.

    Inbox tasks are only accepted on the project-scoped route.
    """
    body = dict(payload)
    body["id"] = task_id
    body["projectId"] = project_id
    if is_inbox(project_id):
        path = f"/project/{_quote(project_id)}/task/{_quote(task_id)}"
    else:
        path = f"/task/{_quote(task_id)}"
    result = api_request(path, body, method="POST")
    if result is None:
        return {"id": task_id, "projectId": project_id}
    return _expect_object_response(result, "task update")


def complete_task(project_id, task_id):
    api_request(
        f"/project/{_quote(project_id)}/task/{_quote(task_id)}/complete",
        method="POST",
        idempotent=True,
    )


def delete_task(project_id, task_id):
    """Issue the delete and return the HTTP status (404, 401 and 403 included)."""
    status, _ = api_status_request(
        f"/project/{_quote(project_id)}/task/{_quote(task_id)}",
        method="DELETE",
        raise_auth=False,
    )
    return status
