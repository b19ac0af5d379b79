"""Output formatting package for ticktick-cli.

Re-exports all public names so consumers can do:
    from ticktick_cli.formatters import format_tasks_table
"""

from ticktick_cli.formatters._core import (
    mutation_response,
    output,
)
from ticktick_cli.formatters._projects import format_projects_table
from ticktick_cli.formatters._table import (
    _CONTROL_RE,
    _sanitize_str,
    _table,
    _trunc,
)
from ticktick_cli.formatters._tasks import (
    format_resolve_table,
    format_task_detail,
    format_tasks_table,
)

__all__ = [
    "_CONTROL_RE",
    "_sanitize_str",
    "_table",
    "_trunc",
    "format_projects_table",
    "format_resolve_table",
    "format_task_detail",
    "format_tasks_table",
    "mutation_response",
    "output",
]
