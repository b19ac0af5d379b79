"""
Container directory: enumerate TickTick lists and their members.

Every call is a fresh round-trip. Nothing is cached between calls, so a
resolution always sees the service's current state.
"""

from ticktick_cli import config, tasks
from ticktick_cli._utils import is_inbox, normalize_name
from ticktick_cli.api import _expect_list_response
from ticktick_cli.exceptions import ContainerNotFound, RemoteUnavailable
from ticktick_cli.models import Project, Task


def list_containers():
    """Return all lists in enumeration order. The Inbox is not included."""
    projects = []
    for raw in tasks.get_projects():
        if not isinstance(raw, dict) or not raw.get("id"):
            raise RemoteUnavailable("[ERROR] Malformed project record in project list.")
        projects.append(Project.from_api(raw))
    return projects


def list_members(container_id):
    """Return the pending tasks of a list (``inbox`` for the Inbox)."""
    data = tasks.get_project_data(container_id)
    raw_tasks = data.get("tasks") or []
    raw_tasks = _expect_list_response(raw_tasks, "project tasks")
    members = []
    for raw in raw_tasks:
        if not isinstance(raw, dict) or not raw.get("id"):
            raise RemoteUnavailable("[ERROR] Malformed task record in project data.")
        members.append(Task.from_api(raw, container_id))
    return members


def list_completed(container_id):
    return [
        Task.from_api(raw, container_id)
        for raw in tasks.get_completed_tasks(container_id)
        if isinstance(raw, dict) and raw.get("id")
    ]


def is_inbox_name(name):
    return bool(name) and name.strip().lower() == config.INBOX_ID


def find_container(name, containers=None):
    """Return the first list whose normalized name matches, or None."""
    wanted = normalize_name(name)
    if not wanted:
        return None
    if containers is None:
        containers = list_containers()
    for project in containers:
        if normalize_name(project.name) == wanted:
            return project
    return None


def resolve_container_id(hint):
    """Map a list name (or ID) to a container id.

    ``inbox`` / ``Inbox`` map straight to the sentinel. Anything else is
    matched by ID, then by normalized name, over a fresh enumeration.
    """
    if is_inbox_name(hint):
        return config.INBOX_ID
    if is_inbox(hint) and hint[len(config.INBOX_ID) :].isdigit():
        return hint
    containers = list_containers()
    for project in containers:
        if project.id == hint:
            return project.id
    project = find_container(hint, containers)
    if project is not None:
        return project.id
    available = ", ".join([config.INBOX_NAME] + [p.name for p in containers])
    raise ContainerNotFound(
        f"[ERROR] List '{hint}' not found. Available lists: {available}",
        name=hint,
    )


def iter_containers():
    """Yield container ids in resolution order: Inbox first, then enumeration."""
    yield config.INBOX_ID
    for project in list_containers():
        yield project.id
