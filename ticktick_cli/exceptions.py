"""
ticktick-cli exception hierarchy.

All custom exceptions live here to avoid circular imports.
"""


class CliError(Exception):
    """Exit code 1 — validation, not-found, network, parse errors."""

    exit_code = 1


class SetupError(CliError):
    """Exit code 2 — token missing or expired, no config."""

    exit_code = 2


class HTTPError(Exception):
    """Raised by _http_request for HTTP errors that callers want to handle."""

    def __init__(self, code, reason, body, headers=None):
        self.code = code
        self.reason = reason
        self.body = body
        self.headers = headers or {}


# ---------------------------------------------------------------------------
# Remote / resolution failures
# ---------------------------------------------------------------------------


class RemoteUnavailable(CliError):
    """Transport failure, error-coded response, or malformed response body."""

    def __init__(self, message, status=None):
        super().__init__(message)
        self.status = status


class ContainerNotFound(CliError):
    """A list name did not match any project."""

    def __init__(self, message, name=None):
        super().__init__(message)
        self.name = name


class EntityNotFound(CliError):
    """No container holds a task matching the identifier."""

    def __init__(self, message, identifier=None):
        super().__init__(message)
        self.identifier = identifier


class EntityNotFoundInContainer(EntityNotFound):
    """The hinted container does not hold a matching task."""

    def __init__(self, message, identifier=None, container_id=None):
        super().__init__(message, identifier)
        self.container_id = container_id


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------


class InvalidPriority(CliError):
    pass


class InvalidDueDate(CliError):
    pass


# ---------------------------------------------------------------------------
# Move / tagging failures
# ---------------------------------------------------------------------------


class MoveError(CliError):
    """Base for move failures. ``outcome`` describes what is left behind."""

    step = None

    def __init__(self, message, outcome=None, status=None):
        super().__init__(message)
        self.outcome = outcome
        self.status = status


class MoveCreateFailed(MoveError):
    step = "create"


class MoveDeleteFailed(MoveError):
    """The replacement exists in the target but the original was not deleted."""

    step = "delete"


class MoveVerificationFailed(MoveError):
    """The replacement was never observed in the target container."""

    step = "verify"


class TagReconciliationFailed(CliError):
    def __init__(self, message, task_id=None, status=None):
        super().__init__(message)
        self.task_id = task_id
        self.status = status
