"""
Entity resolution: turn a loose identifier into (container_id, task_id).

TickTick has no cross-list search, so resolution is a linear scan:
Inbox first, then every list in enumeration order. That is one round-trip
per list visited, and callers should budget for it. The first match wins;
tasks sharing a normalized name in different lists are not reported as
ambiguous.
"""

from ticktick_cli import directory
from ticktick_cli._utils import is_task_id, normalize_name
from ticktick_cli.exceptions import EntityNotFound, EntityNotFoundInContainer


def _matcher(identifier):
    """Return a predicate over Task for an ID or a normalized-name match."""
    if is_task_id(identifier):
        return lambda task: task.id == identifier
    wanted = normalize_name(identifier)
    if not wanted:
        return lambda task: False
    return lambda task: task.id == identifier or normalize_name(task.title) == wanted


def _first_match(container_id, matches):
    for task in directory.list_members(container_id):
        if matches(task):
            return task
    return None


def find_task(identifier, container_hint=None):
    """Locate a task and return its full snapshot.

    With *container_hint* only that list is searched and a miss raises
    EntityNotFoundInContainer. Without it the Inbox is searched first, then
    every list, and a miss raises EntityNotFound.
    """
    matches = _matcher(identifier)
    if container_hint:
        container_id = directory.resolve_container_id(container_hint)
        task = _first_match(container_id, matches)
        if task is None:
            raise EntityNotFoundInContainer(
                f"[ERROR] Task '{identifier}' not found in list '{container_hint}'.",
                identifier=identifier,
                container_id=container_id,
            )
        return task

    for container_id in directory.iter_containers():
        task = _first_match(container_id, matches)
        if task is not None:
            return task
    raise EntityNotFound(f"[ERROR] Task '{identifier}' not found in any list.", identifier=identifier)


def resolve(identifier, container_hint=None):
    """Return ``(container_id, task_id)`` for *identifier*."""
    task = find_task(identifier, container_hint)
    return task.container_id, task.id


def locate_task(task_id):
    """Unscoped scan by ID only. Returns the Task or None."""
    for container_id in directory.iter_containers():
        for task in directory.list_members(container_id):
            if task.id == task_id:
                return task
    return None
