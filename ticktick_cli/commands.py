"""
Command implementations for ticktick-cli.
Each cmd_*() function receives an argparse.Namespace and handles one CLI command.

Business logic lives in client.py (TickTickClient). These thin wrappers
handle argparse → keyword args, format selection, and formatter dispatch.
"""

from ticktick_cli.client import TickTickClient
from ticktick_cli.formatters import (
    format_projects_table,
    format_resolve_table,
    format_tasks_table,
    mutation_response,
    output,
)


def _client():
    # cli.main has already validated the token.
    return TickTickClient(validate_token=False)


def _tags_arg(ns):
    tags = getattr(ns, "tag", None)
    return tags if tags else None


# ---------------------------------------------------------------------------
# Read commands
# ---------------------------------------------------------------------------


def cmd_lists(ns):
    output(_client().list_projects(), format_projects_table, ns.format)


def cmd_tasks(ns):
    result = _client().list_tasks(project=ns.list, status=ns.status)
    output(result, format_tasks_table, ns.format)


def cmd_resolve(ns):
    result = _client().resolve_task(ns.identifier, project=ns.list)
    output(result, format_resolve_table, ns.format)


# ---------------------------------------------------------------------------
# Task mutations
# ---------------------------------------------------------------------------


def cmd_task(ns):
    result = _client().create_task(
        ns.title,
        content=ns.content,
        project=ns.list,
        priority=ns.priority,
        due=ns.due,
        tags=_tags_arg(ns),
    )
    task = result["task"]
    detail = f"title='{task['title']}'"
    if ns.list:
        detail += f", list='{ns.list}'"
    mutation_response("Created", task["id"], detail, result, ns.format)


def cmd_update(ns):
    result = _client().update_task(
        ns.identifier,
        title=ns.title,
        content=ns.content,
        project=ns.list,
        priority=ns.priority,
        due=ns.due,
        tags=_tags_arg(ns),
    )
    task = result["task"]
    if result["action"] == "moved":
        move = result["move"]
        detail = f"moved from {move['from_project_id']} to {move['to_project_id']} (new ID)"
        mutation_response("Moved", task["id"], detail, result, ns.format)
    else:
        mutation_response("Updated", task["id"], data=result, fmt=ns.format)


def cmd_move(ns):
    result = _client().move_task(ns.identifier, ns.to, from_project=ns.list)
    task = result["task"]
    if result["action"] == "unchanged":
        mutation_response("Unchanged", task["id"], "already in target list", result, ns.format)
        return
    mutation_response("Moved", task["id"], f"to '{ns.to}' (new ID)", result, ns.format)


def cmd_complete(ns):
    result = _client().complete_task(ns.identifier, project=ns.list, tags=_tags_arg(ns))
    detail = f"title='{result['title']}'"
    if result.get("tags"):
        detail += f", tags={','.join(result['tags'])}"
    mutation_response("Completed", result["task_id"], detail, result, ns.format)


# ---------------------------------------------------------------------------
# List mutations
# ---------------------------------------------------------------------------


def cmd_list_create(ns):
    result = _client().create_project(ns.name, color=ns.color, view_mode=ns.view_mode)
    project = result["project"]
    action = "Created" if result["created"] else "Exists"
    detail = f"list '{project['name']}' ({project['id']})"
    mutation_response(action, details=detail, data=result, fmt=ns.format)


def cmd_list_update(ns):
    result = _client().update_project(ns.identifier, name=ns.name, color=ns.color)
    project = result["project"]
    detail = f"list '{project['name']}' ({project['id']})"
    mutation_response("Updated", details=detail, data=result, fmt=ns.format)
