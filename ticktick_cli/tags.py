"""
Tag application ahead of completion.

Completing a task and tagging it are separate remote calls, and tag
writes on an already-completed task are unreliable, so tags go first.
The owning list is found from scratch: a direct by-ID lookup, then the
Inbox-first scan.
"""

from ticktick_cli import resolver, tasks
from ticktick_cli._utils import parse_tags
from ticktick_cli.exceptions import RemoteUnavailable, TagReconciliationFailed
from ticktick_cli.models import Task


def _direct_lookup(task_id):
    try:
        raw = tasks.get_task(task_id)
    except RemoteUnavailable:
        return None
    if not raw.get("projectId"):
        return None
    return Task.from_api(raw)


def locate_for_tagging(task_id):
    """Return the task's current snapshot, or raise TagReconciliationFailed."""
    task = _direct_lookup(task_id)
    if task is not None:
        return task
    try:
        task = resolver.locate_task(task_id)
    except RemoteUnavailable as e:
        raise TagReconciliationFailed(
            f"[ERROR] Could not locate task {task_id} to apply tags: {e}",
            task_id=task_id,
            status=e.status,
        ) from e
    if task is None:
        raise TagReconciliationFailed(
            f"[ERROR] Could not locate task {task_id} to apply tags.", task_id=task_id
        )
    return task


def reconcile_tags(task_id, tags):
    """Replace the task's tags. Returns the updated task record.

    Raises TagReconciliationFailed on any failure; the caller aborts the
    completion in that case.
    """
    tag_list = parse_tags(tags) or []
    task = locate_for_tagging(task_id)
    try:
        return tasks.update_task(task.id, task.container_id, {"tags": tag_list})
    except RemoteUnavailable as e:
        raise TagReconciliationFailed(
            f"[ERROR] Failed to apply tags to task {task_id}: {e}",
            task_id=task_id,
            status=e.status,
        ) from e
