"""
ticktick-cli — CLI tool for managing TickTick tasks and lists
"""

import argparse
import json
import sys

from ticktick_cli import config
from ticktick_cli.api import _check_token
from ticktick_cli.commands import (
    cmd_complete,
    cmd_list_create,
    cmd_list_update,
    cmd_lists,
    cmd_move,
    cmd_resolve,
    cmd_task,
    cmd_tasks,
    cmd_update,
)
from ticktick_cli.exceptions import CliError, MoveError

HELP_TEXT = """\
Usage: ticktick-cli <command> [args...]

Global flags:
  --format table          Output as readable text instead of JSON (default: json)
  --quiet, -q             Suppress warnings
  --verbose, -v           Enable HTTP and move-step logging
  --version               Show version number

Commands:
  lists                   - List all task lists (Inbox first, with task count)
  tasks                   - List tasks
    -l, --list <name>       Only this list ("Inbox" for the Inbox); all lists if omitted
    -s, --status <s>        all (default), pending, completed
  task <title>            - Create a task
    -c, --content <text>    Task description (markdown and newlines allowed)
    -l, --list <name>       Target list (default: Inbox)
    -p, --priority <p>      None, Low, Medium, High (case-insensitive) or 0/1/3/5
    -d, --due <datetime>    YYYY-MM-DDTHH:MM:SS local (PST/PDT) or ...Z for UTC
    -t, --tag <tags>        Tags, comma-separated (repeatable)
  update <name|id>        - Update a task found by title or 24-char ID
    --title <text>          Rename the task
    -c, --content <text>    Replace the description
    -l, --list <name>       Look in this list; if the task lives elsewhere it is
                            moved here (the task gets a new ID)
    -p, --priority <p>      New priority (None cannot clear an existing priority)
    -d, --due <datetime>    New due date
    -t, --tag <tags>        Replace tags (comma-separated, repeatable)
  move <name|id>          - Move a task to another list (the task gets a new ID)
    --to <name>             Target list (required)
    -l, --list <name>       Only look for the task in this list
  complete <name|id>      - Mark a task completed
    -l, --list <name>       Only look for the task in this list
    -t, --tag <tags>        Set tags before completing (comma-separated)
  resolve <name|id>       - Show which list holds a task, and its ID
    -l, --list <name>       Only look in this list
  list-create <name>      - Create a list (reports the existing one if the name matches)
    --color <#RRGGBB>       List color
    --view-mode <mode>      list, kanban, or timeline
  list-update <name|id>   - Rename or recolor a list
    --name <text>           New name
    --color <#RRGGBB>       New color

Name matching ignores case and punctuation ("Fix bug!" matches "fix bug").
Without --list, tasks are searched in the Inbox first, then every list in order;
the first match wins.
"""


# ---------------------------------------------------------------------------
# Global flag extraction (before argparse, so --format works after subcommand)
# ---------------------------------------------------------------------------


def _extract_global_flags(argv):
    """Extract global flags from argv regardless of position.

    Returns (format_str, quiet, verbose, remaining_argv).
    Handles --version directly.
    """
    fmt = "json"
    quiet = False
    verbose = False
    remaining = []
    i = 0
    while i < len(argv):
        if argv[i] == "--version":
            print(f"ticktick-cli {config.VERSION}")
            sys.exit(0)
        elif argv[i] in ("--quiet", "-q"):
            quiet = True
            i += 1
            continue
        elif argv[i] in ("--verbose", "-v"):
            verbose = True
            i += 1
            continue
        elif argv[i] == "--format" and i + 1 < len(argv):
            fmt = argv[i + 1]
            if fmt not in ("json", "table"):
                raise CliError(f"[ERROR] Invalid format '{fmt}'. Use: json, table")
            i += 2
            continue
        else:
            remaining.append(argv[i])
        i += 1
    if quiet and verbose:
        raise CliError("[ERROR] --quiet and --verbose are mutually exclusive.")
    return fmt, quiet, verbose, remaining


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


class _SubcommandParser(argparse.ArgumentParser):
    """Subparser that raises CliError instead of printing full help text."""

    def error(self, message):
        raise CliError(f"[ERROR] {message}")


def _add_field_args(p):
    p.add_argument("--content", "-c")
    p.add_argument("--list", "-l")
    p.add_argument("--priority", "-p")
    p.add_argument("--due", "-d")
    p.add_argument("--tag", "-t", action="append")


def build_parser():
    parser = _SubcommandParser(
        prog="ticktick-cli",
        description="CLI tool for managing TickTick tasks and lists",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )
    parser.add_argument("--help", "-h", action="store_true", dest="show_help")
    sub = parser.add_subparsers(dest="command", parser_class=_SubcommandParser)

    # --- lists ---
    sub.add_parser("lists").set_defaults(func=cmd_lists)

    # --- tasks ---
    p = sub.add_parser("tasks")
    p.add_argument("--list", "-l")
    p.add_argument("--status", "-s", choices=sorted(config.VALID_STATUS_FILTERS), default="all")
    p.set_defaults(func=cmd_tasks)

    # --- task (create) ---
    p = sub.add_parser("task")
    p.add_argument("title")
    _add_field_args(p)
    p.set_defaults(func=cmd_task)

    # --- update ---
    p = sub.add_parser("update")
    p.add_argument("identifier")
    p.add_argument("--title")
    _add_field_args(p)
    p.set_defaults(func=cmd_update)

    # --- move ---
    p = sub.add_parser("move")
    p.add_argument("identifier")
    p.add_argument("--to", required=True)
    p.add_argument("--list", "-l")
    p.set_defaults(func=cmd_move)

    # --- complete ---
    p = sub.add_parser("complete")
    p.add_argument("identifier")
    p.add_argument("--list", "-l")
    p.add_argument("--tag", "-t", action="append")
    p.set_defaults(func=cmd_complete)

    # --- resolve ---
    p = sub.add_parser("resolve")
    p.add_argument("identifier")
    p.add_argument("--list", "-l")
    p.set_defaults(func=cmd_resolve)

    # --- list-create ---
    p = sub.add_parser("list-create")
    p.add_argument("name")
    p.add_argument("--color")
    p.add_argument("--view-mode", dest="view_mode", choices=["list", "kanban", "timeline"])
    p.set_defaults(func=cmd_list_create)

    # --- list-update ---
    p = sub.add_parser("list-update")
    p.add_argument("identifier")
    p.add_argument("--name")
    p.add_argument("--color")
    p.set_defaults(func=cmd_list_update)

    # --- version (bare word) ---
    sub.add_parser("version").set_defaults(func=None)

    return parser


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

NO_TOKEN_COMMANDS = {"version"}


def _error_type_from_message(message):
    if message.startswith("[TOKEN_EXPIRED]"):
        return "token_expired"
    if message.startswith("[SETUP_NEEDED]"):
        return "setup_needed"
    if message.startswith("[ERROR]"):
        return "error"
    return "cli_error"


def _error_details(err):
    """Structured context an operator needs to reconcile a partial move."""
    details = {}
    status = getattr(err, "status", None)
    if status is not None:
        details["status"] = status
    if isinstance(err, MoveError):
        details["step"] = err.step
        if err.outcome is not None:
            details["outcome"] = err.outcome.to_dict()
    return details


def _emit_cli_error(err, fmt):
    msg = str(err)
    if fmt == "json":
        payload = {
            "ok": False,
            "schema_version": config.CONTRACT_SCHEMA_VERSION,
            "error": {
                "type": _error_type_from_message(msg),
                "message": msg,
                "exit_code": getattr(err, "exit_code", 1),
            },
        }
        payload["error"].update(_error_details(err))
        print(json.dumps(payload, ensure_ascii=False), file=sys.stderr)
        return
    print(msg, file=sys.stderr)


def main(argv=None):
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")

    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print(HELP_TEXT)
        sys.exit(0)

    fmt = "json"
    try:
        # Extract global flags from anywhere in argv
        fmt, quiet, verbose, remaining_argv = _extract_global_flags(argv)
        config.RUNTIME_QUIET = quiet
        config.RUNTIME_VERBOSE = verbose
        if verbose:
            config.HTTP_LOG_ENABLED = True

        if not remaining_argv:
            print(HELP_TEXT)
            sys.exit(0)

        parser = build_parser()
        ns = parser.parse_args(remaining_argv)
        ns.format = fmt  # inject global format flag

        if ns.show_help or not ns.command:
            print(HELP_TEXT)
            sys.exit(0)

        cmd = ns.command

        if cmd == "version":
            print(f"ticktick-cli {config.VERSION}")
            sys.exit(0)

        # Validate token before any API command
        if cmd not in NO_TOKEN_COMMANDS:
            _check_token()

        handler = getattr(ns, "func", None)
        if handler:
            handler(ns)
        else:
            raise CliError(f"[ERROR] Unknown command: {cmd}")

    except CliError as e:
        _emit_cli_error(e, fmt)
        sys.exit(e.exit_code)


if __name__ == "__main__":
    main()
