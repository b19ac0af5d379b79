"""
Typed models for TickTick records, field changes, and mutation plans.
"""

from dataclasses import dataclass, field

from ticktick_cli import config
from ticktick_cli._utils import _get_field, is_inbox, parse_tags
from ticktick_cli.dates import encode_due_date
from ticktick_cli.exceptions import InvalidPriority


# ---------------------------------------------------------------------------
# Remote records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Project:
    """A TickTick list. The Inbox is never returned by enumeration."""

    id: str
    name: str
    color: str | None = None
    view_mode: str | None = None
    kind: str | None = None
    closed: bool = False

    @classmethod
    def from_api(cls, raw):
        return cls(
            id=raw.get("id", ""),
            name=raw.get("name") or "",
            color=raw.get("color"),
            view_mode=_get_field(raw, "view_mode", "viewMode"),
            kind=raw.get("kind"),
            closed=bool(raw.get("closed", False)),
        )

    @classmethod
    def inbox(cls):
        return cls(id=config.INBOX_ID, name=config.INBOX_NAME)

    @property
    def is_inbox(self) -> bool:
        return is_inbox(self.id)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "view_mode": self.view_mode,
            "kind": self.kind,
        }


def status_from_wire(value):
    """Wire status 0 is pending; anything else reads as completed."""
    try:
        return "pending" if int(value or 0) == 0 else "completed"
    except (TypeError, ValueError):
        return "pending"


@dataclass(frozen=True)
class Task:
    id: str
    title: str
    container_id: str
    content: str = ""
    priority: int = 0
    due_date: str | None = None
    tags: tuple[str, ...] = ()
    status: str = "pending"

    @classmethod
    def from_api(cls, raw, container_id=None):
        """Build a Task from an API record.

        *container_id* is the container the record was listed under. Inbox
        members keep their concrete ``inbox<digits>`` projectId when the
        record carries one, since the task endpoints need it.
        """
        try:
            priority = int(raw.get("priority") or 0)
        except (TypeError, ValueError):
            priority = 0
        wire_pid = _get_field(raw, "project_id", "projectId") or ""
        if container_id and not (is_inbox(container_id) and is_inbox(wire_pid)):
            owner = container_id
        else:
            owner = wire_pid or container_id or ""
        return cls(
            id=raw.get("id", ""),
            title=raw.get("title") or "",
            container_id=owner,
            content=raw.get("content") or "",
            priority=priority,
            due_date=_get_field(raw, "due_date", "dueDate") or None,
            tags=tuple(raw.get("tags") or ()),
            status=status_from_wire(raw.get("status")),
        )

    @property
    def completed(self) -> bool:
        return self.status == "completed"

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "project_id": self.container_id,
            "priority": self.priority,
            "priority_text": config.PRIORITY_LABELS.get(self.priority, str(self.priority)),
            "due_date": self.due_date,
            "tags": list(self.tags),
            "status": self.status,
            "status_text": self.status.capitalize(),
        }


# ---------------------------------------------------------------------------
# Field changes
# ---------------------------------------------------------------------------


def parse_priority(value):
    """Accept None/Low/Medium/High (any case) or 0/1/3/5. Returns the wire int."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidPriority(f"[ERROR] Invalid priority '{value}'.")
    if isinstance(value, int):
        if value in config.PRIORITY_LABELS:
            return value
    else:
        text = str(value).strip().lower()
        if text in config.PRIORITY_VALUES:
            return config.PRIORITY_VALUES[text]
        if text.isdigit() and int(text) in config.PRIORITY_LABELS:
            return int(text)
    valid = ", ".join(config.PRIORITY_LABELS.values())
    raise InvalidPriority(f"[ERROR] Invalid priority '{value}'. Use one of: {valid} (or 0/1/3/5).")


@dataclass(frozen=True)
class FieldChanges:
    """Validated field delta with an explicit record of what the caller set.

    ``touched`` lets an explicit ``priority=0`` be told apart from an
    untouched priority, even though the sparse update payload cannot carry it.
    """

    title: str | None = None
    content: str | None = None
    priority: int | None = None
    due_date: str | None = None
    tags: tuple[str, ...] | None = None
    touched: frozenset = field(default_factory=frozenset)

    @classmethod
    def from_inputs(cls, *, title=None, content=None, priority=None, due=None, tags=None):
        """Validate raw user input. Raises InvalidPriority / InvalidDueDate."""
        prio = parse_priority(priority)
        due_date = encode_due_date(due) if due is not None else None
        tag_list = parse_tags(tags)
        values = {
            "title": title,
            "content": content,
            "priority": prio,
            "due_date": due_date,
            "tags": tuple(tag_list) if tag_list is not None else None,
        }
        touched = frozenset(k for k, v in values.items() if v is not None)
        return cls(touched=touched, **values)

    def is_touched(self, name) -> bool:
        return name in self.touched

    @property
    def empty(self) -> bool:
        return not self.touched


# ---------------------------------------------------------------------------
# Mutation plans
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InPlaceUpdate:
    entity_id: str
    container_id: str
    payload: dict

    kind = "update"


@dataclass(frozen=True)
class Move:
    from_container_id: str
    to_container_id: str
    entity_id: str
    create_payload: dict

    kind = "move"


@dataclass(frozen=True)
class CreateNew:
    payload: dict

    kind = "create"


MOVE_MOVED = "moved"
MOVE_DUPLICATE = "duplicate"
MOVE_UNVERIFIED = "unverified"


@dataclass(frozen=True)
class MoveOutcome:
    """Result of a move saga.

    ``state`` is ``moved`` when the replacement was verified in the target
    and the original deleted, ``duplicate`` when the original could not be
    deleted, and ``unverified`` when the replacement was never observed in
    the target container.
    """

    state: str
    original_id: str
    new_id: str | None
    from_container_id: str
    to_container_id: str
    task: dict | None = None
    last_status: int | None = None

    @property
    def ok(self) -> bool:
        return self.state == MOVE_MOVED

    def to_dict(self):
        out = {
            "state": self.state,
            "original_id": self.original_id,
            "new_id": self.new_id,
            "from_project_id": self.from_container_id,
            "to_project_id": self.to_container_id,
        }
        if self.last_status is not None:
            out["last_status"] = self.last_status
        return out
