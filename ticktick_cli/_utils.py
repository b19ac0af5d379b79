"""
Shared pure-utility functions for ticktick-cli.

These helpers have no business logic and no side effects (apart from
``warn``, which writes to stderr). They are used across directory.py,
resolver.py, planner.py, client.py, and formatters.
"""

import re
import sys

from ticktick_cli import config

_NAME_STRIP_RE = re.compile(r"[^a-zA-Z0-9_\- ]")
_TASK_ID_RE = re.compile(r"^[a-f0-9]{24}$")


def normalize_name(raw):
    """Canonical form for name matching: keep [A-Za-z0-9 _-], trim, lower-case.

    Lossy on purpose. "Fix bug!" and "fix bug" collide.
    """
    if not raw:
        return ""
    return _NAME_STRIP_RE.sub("", raw).strip().lower()


def is_task_id(identifier):
    """True if *identifier* has the lexical shape of a TickTick object ID."""
    return bool(identifier) and bool(_TASK_ID_RE.match(identifier))


def is_inbox(container_id):
    """The Inbox shows up as the ``inbox`` sentinel or as ``inbox<digits>``."""
    return bool(container_id) and container_id.startswith(config.INBOX_ID)


def same_container(a, b):
    if is_inbox(a) and is_inbox(b):
        return True
    return a == b


def parse_tags(raw):
    """Split a comma-separated tag string (or list of such strings) into tags.

    Blank entries are dropped, order is kept, duplicates removed.
    """
    if raw is None:
        return None
    chunks = [raw] if isinstance(raw, str) else list(raw)
    tags = []
    for chunk in chunks:
        for tag in chunk.split(","):
            tag = tag.strip()
            if tag and tag not in tags:
                tags.append(tag)
    return tags


def _get_field(d, snake, camel):
    """Get a value from a dict trying snake_case then camelCase key."""
    if snake in d:
        return d.get(snake)
    return d.get(camel)


def warn(message):
    """Print a warning to stderr unless --quiet is active."""
    if config.RUNTIME_QUIET:
        return
    print(f"[WARN] {message}", file=sys.stderr)
