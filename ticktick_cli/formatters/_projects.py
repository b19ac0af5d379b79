"""Formatters for task lists (projects)."""

from ticktick_cli.formatters._table import _table, _trunc


def format_projects_table(projects):
    """Format lists as a readable table.

    Accepts list of flat dicts from TickTickClient.list_projects().
    """
    if not projects:
        return "No lists found."
    cols = [("List", 30), ("Color", 8), ("View", 8), ("Tasks", 6), ("ID", 0)]
    rows = []
    for p in projects:
        count = p.get("task_count")
        rows.append(
            (
                _trunc(p.get("name", ""), 30),
                p.get("color") or "-",
                p.get("view_mode") or "-",
                "-" if count is None else str(count),
                p.get("id", ""),
            )
        )
    return _table(cols, rows, f"Total: {len(projects)} lists")
