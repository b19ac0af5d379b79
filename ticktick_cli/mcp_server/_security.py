"""Untrusted-text handling for tool results and tool arguments.

Task titles, bodies, tags and list names are typed by people (or synced
from other apps) and reach the model verbatim. Results wrap that text in
[USER_DATA] markers and flag instruction-like content; arguments are
stripped of control characters and capped before they reach TickTick.
"""

from __future__ import annotations

import re

from ticktick_cli import CliError

USER_DATA_OPEN = "[USER_DATA]"
USER_DATA_CLOSE = "[/USER_DATA]"

_DIRECTIVES = {
    "role label": r"^\s*(system|assistant|developer)\s*:",
    "markup directive": r"<\s*/?\s*(system|instructions?|prompt|tool_call|function_call)\b",
    "override directive": (
        r"\b(ignore|disregard|forget)\s+(all\s+|any\s+)?(previous|prior|above|earlier)\s+"
        r"(instructions|prompts|rules|messages)"
    ),
    "persona switch": r"\byou\s+are\s+now\s+(an?\s+)?\w+",
    "tool directive": (
        r"\b(call|invoke|run|use)\s+the\s+\w*\s*(tool|function)\b"
        r"|\b(delete|complete|move)_(task|project)\s*\("
    ),
}
_DIRECTIVE_RES = [
    (label, re.compile(pattern, re.IGNORECASE | re.MULTILINE))
    for label, pattern in _DIRECTIVES.items()
]

# Shorter text cannot hold any of the directives above.
_MIN_SCAN_LEN = 8


def _scan_text(text: str) -> list[str]:
    """Labels of the directive patterns found in *text*."""
    if len(text) < _MIN_SCAN_LEN:
        return []
    return [label for label, regex in _DIRECTIVE_RES if regex.search(text)]


def _mark_user_data(text: str | None) -> str | None:
    if text is None:
        return None
    return f"{USER_DATA_OPEN}{text}{USER_DATA_CLOSE}"


def _sanitize_row(row: dict, text_fields: tuple[str, ...]) -> dict:
    out = dict(row)
    flagged: list[str] = []
    for name in text_fields:
        value = out.get(name)
        if not isinstance(value, str):
            continue
        flagged.extend(f"{name}: {label}" for label in _scan_text(value))
        out[name] = _mark_user_data(value)
    # Tags stay bare so they can be passed back as arguments; they are only scanned.
    for tag in out.get("tags") or ():
        if isinstance(tag, str):
            flagged.extend(f"tags[{tag[:20]}]: {label}" for label in _scan_text(tag))
    if flagged:
        out["_safety_warnings"] = flagged
    return out


def _sanitize_task(task: dict) -> dict:
    """Mark title and content of a task row; flag directives in them and in tags."""
    return _sanitize_row(task, ("title", "content"))


def _sanitize_project(project: dict) -> dict:
    """Mark the name of a list row. The Inbox name is fixed and left as is."""
    if project.get("id") == "inbox":
        return dict(project)
    return _sanitize_row(project, ("name",))


_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

# Client-side caps per argument kind.
_MAX_LEN = {
    "identifier": 256,
    "title": 512,
    "content": 20_000,
    "name": 64,
    "tag": 64,
}
_MAX_TAGS = 50


def _clean_field(value, field: str) -> str:
    """Drop control characters (newlines kept) and enforce the cap for *field*.

    Raises CliError for non-strings and over-long values.
    """
    if not isinstance(value, str):
        raise CliError(f"[ERROR] {field} must be a string, got {type(value).__name__}.")
    cleaned = _CONTROL_CHARS.sub("", value)
    if field != "content":
        cleaned = cleaned.replace("\n", " ").replace("\r", " ").strip()
    cap = _MAX_LEN.get(field, _MAX_LEN["content"])
    if len(cleaned) > cap:
        raise CliError(f"[ERROR] {field} is {len(cleaned)} characters; the limit is {cap}.")
    return cleaned


def _clean_tags(tags: list[str] | None) -> list[str] | None:
    """Clean each tag; blank tags are dropped. Raises CliError past the tag cap."""
    if tags is None:
        return None
    if len(tags) > _MAX_TAGS:
        raise CliError(f"[ERROR] At most {_MAX_TAGS} tags per task, got {len(tags)}.")
    cleaned = [_clean_field(tag, "tag").lstrip("#") for tag in tags]
    return [tag for tag in cleaned if tag]
