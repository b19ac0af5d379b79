"""Core output dispatchers."""

import json


def output(data, formatter=None, fmt="json"):
    """Output data in requested format."""
    if fmt == "table" and formatter:
        print(formatter(data))
    else:
        print(json.dumps(data, indent=2, ensure_ascii=False))

def mutation_response(action, task_id=None, details=None, data=None, fmt="json"):
    """Print a mutation confirmation.

    JSON mode prints the full result so callers can pick up new IDs
    (a moved task gets a new one). Table mode prints a one-line summary.
    """
    if fmt == "json":
        print(json.dumps(data if data is not None else {"ok": True}, indent=2, ensure_ascii=False))
        return
    parts = [action]
    if task_id:
        parts.append(f"task {task_id}")
    if details:
        parts.append(details)
    print(f"OK: {': '.join(parts)}")
