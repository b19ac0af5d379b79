"""Formatters for tasks and resolution results."""

from ticktick_cli.formatters._table import _sanitize_str, _table, _trunc


def _due(task):
    due = task.get("due_date") or ""
    # 2025-06-15T10:00:00.000+0000 -> 2025-06-15 10:00
    return due[:16].replace("T", " ") if due else "-"


def format_tasks_table(result):
    """Format a TickTickClient.list_tasks() result as a table."""
    tasks = result.get("tasks", [])
    if not tasks:
        return "No tasks found."
    cols = [("Task", 40), ("Priority", 9), ("Due", 17), ("Status", 10), ("Tags", 0)]
    rows = []
    for t in tasks:
        rows.append(
            (
                _trunc(t.get("title", ""), 40),
                t.get("priority_text", ""),
                _due(t),
                t.get("status_text", ""),
                ", ".join(t.get("tags") or []),
            )
        )
    return _table(cols, rows, f"Total: {len(tasks)} tasks")


def format_task_detail(task):
    lines = [
        f"Task:     {_sanitize_str(task.get('title', ''))}",
        f"ID:       {task.get('id', '')}",
        f"List:     {task.get('project_id', '')}",
        f"Priority: {task.get('priority_text', '')}",
        f"Status:   {task.get('status_text', '')}",
        f"Due:      {_due(task)}",
    ]
    if task.get("tags"):
        lines.append(f"Tags:     {', '.join(task['tags'])}")
    if task.get("content"):
        lines.append("")
        lines.append(task["content"])
    return "\n".join(lines)


def format_resolve_table(result):
    return format_task_detail(result.get("task", {}))
