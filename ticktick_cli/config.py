"""
ticktick-cli shared configuration, constants, and module-level state.
Standalone module — no imports from other project files except exceptions.
"""

import os

from ticktick_cli.exceptions import CliError, SetupError  # noqa: F401

# ---------------------------------------------------------------------------
# Config file path and helpers
# ---------------------------------------------------------------------------

CONFIG_PATH = os.environ.get(
    "TICKTICK_CONFIG", os.path.join(os.path.expanduser("~"), ".config", "ticktick-cli")
)

# Keys that fall back to os.environ when the config file does not set them.
_ENV_KEYS = (
    "ACCESS_TOKEN",
    "TOKEN_EXPIRY",
    "TICKTICK_BASE_URL",
    "TICKTICK_HTTP_TIMEOUT_SECONDS",
    "TICKTICK_HTTP_MAX_RETRIES",
    "TICKTICK_HTTP_RETRY_BASE_SECONDS",
    "TICKTICK_HTTP_MAX_RESPONSE_BYTES",
    "TICKTICK_HTTP_LOG",
    "TICKTICK_HTTP_LOG_SAMPLE_RATE",
    "TICKTICK_MOVE_LOG",
    "TICKTICK_DST_RULE",
    "TICKTICK_MCP_RESPONSE_MODE",
)


def _unquote(value):
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def load_env():
    """Read KEY=value pairs from the config file, then fill gaps from os.environ.

    The file uses shell syntax (``ACCESS_TOKEN="..."``); an ``export`` prefix
    and surrounding quotes are stripped.
    """
    env = {}
    if os.path.exists(CONFIG_PATH):
        with open(CONFIG_PATH) as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                if line.startswith("export "):
                    line = line[len("export ") :]
                key, val = line.split("=", 1)
                env[key.strip()] = _unquote(val.strip())
    for key in _ENV_KEYS:
        if key not in env and os.environ.get(key):
            env[key] = os.environ[key]
    return env


def _env_bool(key, default=False):
    """Parse common boolean env formats."""
    raw = env.get(key)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(key, default):
    """Parse integer env values with fallback."""
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(key, default):
    """Parse float env values with fallback."""
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

VERSION = "0.3.0"
CONTRACT_SCHEMA_VERSION = "1.0"

DEFAULT_BASE_URL = "https://api.ticktick.com/open/v1"

# The implicit default container. Never returned by GET /project.
INBOX_ID = "inbox"
INBOX_NAME = "Inbox"

PRIORITY_VALUES = {"none": 0, "low": 1, "medium": 3, "high": 5}
PRIORITY_LABELS = {0: "None", 1: "Low", 3: "Medium", 5: "High"}
VALID_STATUS_FILTERS = {"all", "pending", "completed"}
VALID_DST_RULES = {"fixed", "us"}

# Wire offsets for local due dates (America/Los_Angeles).
DAYLIGHT_OFFSET = "-0700"
STANDARD_OFFSET = "-0800"

# Fields the project update endpoint rejects when echoed back.
PROJECT_READONLY_FIELDS = ("etag", "sortOrder")

# Move saga retry policy
MOVE_PRE_DELETE_ATTEMPTS = 10
MOVE_POLL_INTERVAL_SECONDS = 0.5
MOVE_DELETE_ATTEMPTS = 8
MOVE_DELETE_INITIAL_DELAY = 0.5
MOVE_DELETE_BACKOFF = 1.7
MOVE_DELETE_MAX_DELAY = 4.0
MOVE_VERIFY_ATTEMPTS = 10

# ---------------------------------------------------------------------------
# Module-level state (loaded from the config file)
# ---------------------------------------------------------------------------

env = load_env()

ACCESS_TOKEN = env.get("ACCESS_TOKEN", "")
TOKEN_EXPIRY = _env_int("TOKEN_EXPIRY", 0)
BASE_URL = env.get("TICKTICK_BASE_URL", DEFAULT_BASE_URL).rstrip("/")
HTTP_TIMEOUT_SECONDS = _env_int("TICKTICK_HTTP_TIMEOUT_SECONDS", 30)
HTTP_MAX_RETRIES = _env_int("TICKTICK_HTTP_MAX_RETRIES", 2)
HTTP_RETRY_BASE_SECONDS = _env_float("TICKTICK_HTTP_RETRY_BASE_SECONDS", 1.0)
HTTP_MAX_RESPONSE_BYTES = _env_int("TICKTICK_HTTP_MAX_RESPONSE_BYTES", 5_000_000)
HTTP_LOG_ENABLED = _env_bool("TICKTICK_HTTP_LOG", False)
HTTP_LOG_SAMPLE_RATE = min(1.0, max(0.0, _env_float("TICKTICK_HTTP_LOG_SAMPLE_RATE", 1.0)))
MOVE_LOG_ENABLED = _env_bool("TICKTICK_MOVE_LOG", False)
DST_RULE = env.get("TICKTICK_DST_RULE", "fixed").strip().lower()
if DST_RULE not in VALID_DST_RULES:
    DST_RULE = "fixed"
MCP_RESPONSE_MODE = env.get("TICKTICK_MCP_RESPONSE_MODE", "legacy").strip().lower()
if MCP_RESPONSE_MODE not in ("legacy", "envelope"):
    MCP_RESPONSE_MODE = "legacy"

# ---------------------------------------------------------------------------
# Runtime flags (set by cli.main)
# ---------------------------------------------------------------------------

RUNTIME_QUIET = False
RUNTIME_VERBOSE = False
