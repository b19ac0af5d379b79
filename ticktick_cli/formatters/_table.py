"""Low-level table rendering helpers (stdlib only)."""

import re

_CONTROL_RE = re.compile(r"\x1b\[[0-9;]*[A-Za-z]|[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def _trunc(s, maxlen):
    """Truncate string with ellipsis indicator."""
    if not s:
        return ""
    return s[: maxlen - 1] + "…" if len(s) > maxlen else s


def _sanitize_str(s):
    """Strip ANSI escape sequences and control chars from table output.
    Task content is multi-line, so newlines are folded to spaces too."""
    if not s:
        return s
    return _CONTROL_RE.sub("", str(s)).replace("\r", " ").replace("\n", " ")


def _table(columns, rows, footer=None):
    """Build a plain table string.
    columns: list of (name, width) tuples. Last column has no width (fills).
    rows: list of tuples matching columns.
    footer: optional footer line."""
    widths = [w for _, w in columns]
    header = " ".join(
        name if i == len(columns) - 1 else f"{name:<{widths[i]}}"
        for i, (name, _) in enumerate(columns)
    )
    lines = [header, "-" * max(len(header), 72)]
    for row in rows:
        cells = []
        for i, val in enumerate(row):
            safe = _sanitize_str(val) if isinstance(val, str) else str(val)
            cells.append(safe if i == len(columns) - 1 else f"{safe:<{widths[i]}}")
        lines.append(" ".join(cells))
    if footer:
        lines.append(f"\n{footer}")
    return "\n".join(lines)
