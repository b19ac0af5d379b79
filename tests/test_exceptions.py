"""Tests for exception hierarchy and re-exports."""

from ticktick_cli.exceptions import (
    CliError,
    ContainerNotFound,
    EntityNotFound,
    EntityNotFoundInContainer,
    HTTPError,
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


class TestExceptionHierarchy:
    def test_setup_error_is_cli_error(self):
        assert issubclass(SetupError, CliError)

    def test_http_error_not_cli_error(self):
        assert not issubclass(HTTPError, CliError)

    def test_exit_codes(self):
        assert CliError.exit_code == 1
        assert SetupError.exit_code == 2
        assert MoveDeleteFailed.exit_code == 1

    def test_domain_errors_are_cli_errors(self):
        for cls in (
            RemoteUnavailable,
            ContainerNotFound,
            EntityNotFound,
            InvalidPriority,
            InvalidDueDate,
            MoveError,
            TagReconciliationFailed,
        ):
            assert issubclass(cls, CliError)

    def test_hinted_miss_is_a_miss(self):
        assert issubclass(EntityNotFoundInContainer, EntityNotFound)

    def test_move_steps(self):
        assert MoveCreateFailed.step == "create"
        assert MoveDeleteFailed.step == "delete"
        assert MoveVerificationFailed.step == "verify"


class TestAttributes:
    def test_http_error(self):
        err = HTTPError(404, "Not Found", "body")
        assert (err.code, err.reason, err.body, err.headers) == (404, "Not Found", "body", {})

    def test_remote_unavailable_status(self):
        assert RemoteUnavailable("x", status=503).status == 503
        assert RemoteUnavailable("x").status is None

    def test_entity_not_found_in_container(self):
        err = EntityNotFoundInContainer("x", identifier="Report", container_id="p1")
        assert err.identifier == "Report"
        assert err.container_id == "p1"

    def test_move_error(self):
        err = MoveDeleteFailed("x", outcome=None, status=500)
        assert err.status == 500
        assert err.outcome is None


class TestReExports:
    def test_config_re_exports_cli_error(self):
        from ticktick_cli.config import CliError as ConfigCliError

        assert ConfigCliError is CliError

    def test_package_exports(self):
        import ticktick_cli

        assert ticktick_cli.MoveError is MoveError
        assert ticktick_cli.SetupError is SetupError
