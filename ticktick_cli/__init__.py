"""ticktick-cli — CLI tool for managing TickTick tasks and lists."""

from ticktick_cli.client import TickTickClient
from ticktick_cli.config import VERSION
from ticktick_cli.exceptions import (
    CliError,
    ContainerNotFound,
    EntityNotFound,
    EntityNotFoundInContainer,
    InvalidDueDate,
    InvalidPriority,
    MoveCreateFailed,
    MoveDeleteFailed,
    MoveError,
    MoveVerificationFailed,
    RemoteUnavailable,
    SetupError,
    TagReconciliationFailed,
)
from ticktick_cli.types import (
    CompleteResult,
    MoveInfo,
    ProjectResult,
    ProjectRow,
    ResolveResult,
    TaskListResult,
    TaskMutationResult,
    TaskRow,
)

__all__ = [
    "VERSION",
    "TickTickClient",
    "CliError",
    "SetupError",
    "RemoteUnavailable",
    "ContainerNotFound",
    "EntityNotFound",
    "EntityNotFoundInContainer",
    "InvalidPriority",
    "InvalidDueDate",
    "MoveError",
    "MoveCreateFailed",
    "MoveDeleteFailed",
    "MoveVerificationFailed",
    "TagReconciliationFailed",
    "CompleteResult",
    "MoveInfo",
    "ProjectResult",
    "ProjectRow",
    "ResolveResult",
    "TaskListResult",
    "TaskMutationResult",
    "TaskRow",
]
