"""Core helpers: client caching, _call dispatcher, response contract."""

from __future__ import annotations

from ticktick_cli import CliError, SetupError, TickTickClient
from ticktick_cli.config import CONTRACT_SCHEMA_VERSION, MCP_RESPONSE_MODE
from ticktick_cli.exceptions import MoveError

_client: TickTickClient | None = None


def _get_client() -> TickTickClient:
    """Return a cached TickTickClient, creating one on first use."""
    global _client
    if _client is None:
        _client = TickTickClient()
    return _client


def _contract_error(message: str, error_type: str = "error", **extra) -> dict:
    """Return a stable MCP error envelope with legacy compatibility fields."""
    detail = {"type": error_type, "message": message}
    detail.update({k: v for k, v in extra.items() if v is not None})
    return {
        "ok": False,
        "schema_version": CONTRACT_SCHEMA_VERSION,
        "type": error_type,  # legacy
        "error": message,  # legacy
        "error_detail": detail,
    }


def _ensure_contract_dict(payload: dict) -> dict:
    """Add stable contract metadata to dict responses."""
    out = dict(payload)
    out.setdefault("schema_version", CONTRACT_SCHEMA_VERSION)
    if out.get("ok") is False:
        error_type = str(out.get("type", "error"))
        error_message = out.get("error", "Unknown error")
        if not isinstance(error_message, str):
            error_message = str(error_message)
            out["error"] = error_message
        out.setdefault(
            "error_detail",
            {
                "type": error_type,
                "message": error_message,
            },
        )
        return out
    out.setdefault("ok", True)
    return out


def _finalize_tool_result(result):
    """Finalize tool response based on configured MCP response mode.

    Modes:
        - legacy (default): preserve existing top-level shapes; dicts gain
          contract metadata (ok/schema_version).
        - envelope: always return {"ok", "schema_version", "data"} for success.
    """
    if isinstance(result, dict):
        normalized = _ensure_contract_dict(result)
        if normalized.get("ok") is False:
            return normalized
        if MCP_RESPONSE_MODE == "envelope":
            data = dict(normalized)
            data.pop("ok", None)
            data.pop("schema_version", None)
            return {
                "ok": True,
                "schema_version": CONTRACT_SCHEMA_VERSION,
                "data": data,
            }
        return normalized
    if MCP_RESPONSE_MODE == "envelope":
        return {
            "ok": True,
            "schema_version": CONTRACT_SCHEMA_VERSION,
            "data": result,
        }
    return result


_ALLOWED_METHODS = {
    "list_projects",
    "list_tasks",
    "resolve_task",
    "create_task",
    "update_task",
    "move_task",
    "complete_task",
    "create_project",
    "update_project",
}


def _call(method_name: str, **kwargs):
    """Call a TickTickClient method, converting exceptions to error dicts."""
    if method_name not in _ALLOWED_METHODS:
        return _contract_error(f"Unknown method: {method_name}", "error")
    try:
        client = _get_client()
        return getattr(client, method_name)(**kwargs)
    except SetupError as e:
        return _contract_error(str(e), "setup")
    except MoveError as e:
        outcome = e.outcome.to_dict() if e.outcome is not None else None
        return _contract_error(str(e), "move", step=e.step, status=e.status, outcome=outcome)
    except CliError as e:
        return _contract_error(str(e), "error", status=getattr(e, "status", None))
    except Exception as e:
        return _contract_error(f"Unexpected error: {e}", "error")


_SLIM_DROP = {"content"}


def _slim_task(task: dict) -> dict:
    """Drop the task body from list rows for token efficiency."""
    return {k: v for k, v in task.items() if k not in _SLIM_DROP}
