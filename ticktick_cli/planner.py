"""
Mutation planning: classify a change as an in-place update, a move, or a
fresh create, and build the payload each needs.
"""

from ticktick_cli import config
from ticktick_cli._utils import same_container
from ticktick_cli.models import CreateNew, InPlaceUpdate, Move


def _place(payload, container_id):
    # Creating without a projectId lands the task in the Inbox.
    if container_id and container_id != config.INBOX_ID:
        payload["projectId"] = container_id
    return payload


def sparse_payload(changes):
    """Only the fields the caller touched.

    Priority is sent only when non-zero: the update endpoint treats a zero
    priority as absent, so clearing it is not expressible here.
    """
    payload = {}
    if changes.is_touched("title"):
        payload["title"] = changes.title
    if changes.is_touched("content"):
        payload["content"] = changes.content
    if changes.is_touched("priority") and changes.priority:
        payload["priority"] = changes.priority
    if changes.is_touched("due_date"):
        payload["dueDate"] = changes.due_date
    if changes.is_touched("tags"):
        payload["tags"] = list(changes.tags)
    return payload


def overlay_payload(snapshot, changes, container_id):
    """Full task body for re-creating *snapshot* in *container_id*."""
    payload = _place(
        {"title": changes.title if changes.is_touched("title") else snapshot.title},
        container_id,
    )
    content = changes.content if changes.is_touched("content") else snapshot.content
    if content:
        payload["content"] = content
    priority = changes.priority if changes.is_touched("priority") else snapshot.priority
    payload["priority"] = priority or 0
    due_date = changes.due_date if changes.is_touched("due_date") else snapshot.due_date
    if due_date:
        payload["dueDate"] = due_date
    tags = changes.tags if changes.is_touched("tags") else snapshot.tags
    if tags:
        payload["tags"] = list(tags)
    return payload


def create_payload(changes, container_id=None):
    payload = _place({"title": changes.title}, container_id)
    if changes.is_touched("content"):
        payload["content"] = changes.content
    if changes.is_touched("priority"):
        payload["priority"] = changes.priority
    if changes.is_touched("due_date"):
        payload["dueDate"] = changes.due_date
    if changes.is_touched("tags"):
        payload["tags"] = list(changes.tags)
    return payload


def plan(current, changes, desired_container_id=None):
    """Classify a mutation.

    - no snapshot: CreateNew, placed in *desired_container_id* if given
    - snapshot and a different desired container: Move
    - anything else with a snapshot: InPlaceUpdate

    Inbox ids (``inbox``, ``inbox123``) compare equal.
    """
    if current is None:
        return CreateNew(payload=create_payload(changes, desired_container_id))

    if desired_container_id and not same_container(current.container_id, desired_container_id):
        return Move(
            from_container_id=current.container_id,
            to_container_id=desired_container_id,
            entity_id=current.id,
            create_payload=overlay_payload(current, changes, desired_container_id),
        )

    return InPlaceUpdate(
        entity_id=current.id,
        container_id=current.container_id,
        payload=sparse_payload(changes),
    )
