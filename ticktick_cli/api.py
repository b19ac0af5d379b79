"""
HTTP request layer, security helpers, and token validation for ticktick-cli.
"""

import hashlib
import json
import re
import sys
import time
import urllib.error
import urllib.parse
import urllib.request
import uuid

from ticktick_cli import config
from ticktick_cli.exceptions import HTTPError, RemoteUnavailable, SetupError

_RETRYABLE_HTTP_CODES = frozenset({429, 502, 503, 504})


# ---------------------------------------------------------------------------
# Security helpers
# ---------------------------------------------------------------------------


def _mask_token(token):
    """Show only first 6 chars of a token for safe logging."""
    return token[:6] + "..." if len(token) > 6 else token


def _sanitize_error(body, max_len=500):
    """Truncate and clean error body for safe display."""
    if not body:
        return ""
    cleaned = re.sub(r"<[^>]+>", "", body)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()
    if len(cleaned) > max_len:
        return cleaned[:max_len] + "... [truncated]"
    return cleaned


# ---------------------------------------------------------------------------
# HTTP request layer
# ---------------------------------------------------------------------------


def _sanitize_url_for_log(url):
    """Mask sensitive query params in URLs before logging."""
    parsed = urllib.parse.urlsplit(url)
    if not parsed.query:
        return url
    pairs = urllib.parse.parse_qsl(parsed.query, keep_blank_values=True)
    masked = []
    for key, value in pairs:
        if key.lower() in {"token", "access_token", "refresh_token", "client_secret"}:
            masked.append((key, "***"))
        else:
            masked.append((key, value))
    safe_query = urllib.parse.urlencode(masked, doseq=True)
    return urllib.parse.urlunsplit(
        (parsed.scheme, parsed.netloc, parsed.path, safe_query, parsed.fragment)
    )


def _log_http_event(**fields):
    """Emit structured HTTP logs to stderr when enabled."""
    if not config.HTTP_LOG_ENABLED:
        return
    print("[HTTP] " + json.dumps(fields, ensure_ascii=False, sort_keys=True), file=sys.stderr)


def _is_sampled_request(request_id):
    """Decide if a request should be logged based on sample rate."""
    rate = config.HTTP_LOG_SAMPLE_RATE
    if rate <= 0:
        return False
    if rate >= 1:
        return True
    if not request_id:
        return False
    digest = hashlib.sha256(request_id.encode("utf-8")).digest()
    bucket = int.from_bytes(digest[:4], "big") / 4294967295.0
    return bucket < rate


def _error_envelope(message, status=None, request_id=None, retryable=None, detail=None):
    """Build a consistent CLI-safe HTTP error message."""
    meta = []
    if status is not None:
        meta.append(f"status={status}")
    if request_id:
        meta.append(f"request_id={request_id}")
    if retryable is not None:
        meta.append(f"retryable={'yes' if retryable else 'no'}")
    suffix = f" ({', '.join(meta)})" if meta else ""
    body = f"[ERROR] {message}{suffix}"
    if detail:
        body += f"\n{detail}"
    return body


def _expect_object_response(result, operation):
    """Ensure API helpers only return JSON objects (dict)."""
    if isinstance(result, dict):
        return result
    raise RemoteUnavailable(
        f"[ERROR] Unexpected {operation} response shape: "
        f"expected JSON object, got {type(result).__name__}."
    )


def _expect_list_response(result, operation):
    """Ensure list endpoints return JSON arrays."""
    if isinstance(result, list):
        return result
    raise RemoteUnavailable(
        f"[ERROR] Unexpected {operation} response shape: "
        f"expected JSON array, got {type(result).__name__}."
    )


def _parse_retry_after(headers):
    """Return Retry-After seconds from response headers, or None."""
    if not headers:
        return None
    value = headers.get("Retry-After")
    if value is None:
        return None
    try:
        secs = int(str(value).strip())
    except ValueError:
        return None
    return max(0, secs)


def _http_request(url, data=None, headers=None, method="POST", idempotent=False):
    """Make an HTTP request with standard error handling.
    Returns (status, parsed JSON) on success; parsed is None for an empty body.
    Raises HTTPError for HTTP errors (caller handles specific codes).
    Raises RemoteUnavailable on network/timeout/parse errors."""
    body = json.dumps(data).encode("utf-8") if data is not None else None
    request_id = (headers or {}).get("X-Request-Id")
    safe_url = _sanitize_url_for_log(url)
    sampled = _is_sampled_request(request_id)
    max_attempts = 1 + max(0, config.HTTP_MAX_RETRIES if idempotent else 0)
    timeout = max(1, config.HTTP_TIMEOUT_SECONDS)
    last_timeout = False
    last_url_error = None

    for attempt in range(max_attempts):
        start = time.perf_counter()
        req = urllib.request.Request(url, data=body, headers=headers or {}, method=method)
        if sampled:
            _log_http_event(
                phase="request",
                method=method,
                url=safe_url,
                attempt=attempt + 1,
                max_attempts=max_attempts,
                idempotent=idempotent,
                request_id=request_id,
                timeout_seconds=timeout,
            )
        try:
            with urllib.request.urlopen(req, timeout=timeout) as resp:
                status = getattr(resp, "status", 200)
                content_type = resp.headers.get("Content-Type", "")
                raw = resp.read(config.HTTP_MAX_RESPONSE_BYTES + 1)
                if len(raw) > config.HTTP_MAX_RESPONSE_BYTES:
                    raise RemoteUnavailable(
                        "[ERROR] Response too large from TickTick API "
                        f"(>{config.HTTP_MAX_RESPONSE_BYTES} bytes).",
                        status=status,
                    )
                if sampled:
                    _log_http_event(
                        phase="response",
                        method=method,
                        url=safe_url,
                        attempt=attempt + 1,
                        status=status,
                        content_type=content_type,
                        bytes=len(raw),
                        latency_ms=round((time.perf_counter() - start) * 1000, 2),
                        request_id=request_id,
                    )
                if not raw.strip():
                    return status, None
                try:
                    return status, json.loads(raw.decode("utf-8"))
                except (json.JSONDecodeError, UnicodeDecodeError):
                    if content_type and "json" not in content_type.lower():
                        raise RemoteUnavailable(
                            f"[ERROR] Unexpected Content-Type from server "
                            f"({content_type}). This may be a proxy or "
                            "network issue.",
                            status=status,
                        ) from None
                    raise RemoteUnavailable(
                        "[ERROR] Unexpected response from TickTick API (not valid JSON).",
                        status=status,
                    ) from None
        except urllib.error.HTTPError as e:
            error_body = (
                e.read(config.HTTP_MAX_RESPONSE_BYTES).decode("utf-8", errors="replace")
                if e.fp
                else ""
            )
            retryable = e.code in _RETRYABLE_HTTP_CODES
            can_retry = idempotent and attempt < max_attempts - 1 and retryable
            if sampled:
                _log_http_event(
                    phase="response",
                    method=method,
                    url=safe_url,
                    attempt=attempt + 1,
                    status=e.code,
                    retryable=retryable,
                    will_retry=can_retry,
                    latency_ms=round((time.perf_counter() - start) * 1000, 2),
                    request_id=request_id,
                )
            if can_retry:
                retry_after = _parse_retry_after(getattr(e, "headers", None))
                if retry_after is None:
                    retry_after = config.HTTP_RETRY_BASE_SECONDS * (2**attempt)
                time.sleep(retry_after)
                continue
            raise HTTPError(e.code, e.reason, error_body, headers=e.headers) from e
        except TimeoutError as e:
            last_timeout = True
            if sampled:
                _log_http_event(
                    phase="network_error",
                    method=method,
                    url=safe_url,
                    attempt=attempt + 1,
                    error="timeout",
                    will_retry=idempotent and attempt < max_attempts - 1,
                    request_id=request_id,
                )
            if idempotent and attempt < max_attempts - 1:
                time.sleep(config.HTTP_RETRY_BASE_SECONDS * (2**attempt))
                continue
            raise RemoteUnavailable(
                _error_envelope(
                    f"Request timed out after {timeout} seconds. Is TickTick API reachable?",
                    request_id=request_id,
                    retryable=False,
                )
            ) from e
        except urllib.error.URLError as e:
            last_url_error = e.reason
            if sampled:
                _log_http_event(
                    phase="network_error",
                    method=method,
                    url=safe_url,
                    attempt=attempt + 1,
                    error=f"url_error: {e.reason}",
                    will_retry=idempotent and attempt < max_attempts - 1,
                    request_id=request_id,
                )
            if idempotent and attempt < max_attempts - 1:
                time.sleep(config.HTTP_RETRY_BASE_SECONDS * (2**attempt))
                continue
            raise RemoteUnavailable(
                _error_envelope(
                    f"Connection failed: {e.reason}",
                    request_id=request_id,
                    retryable=False,
                )
            ) from e

    if last_timeout:
        raise RemoteUnavailable(
            _error_envelope(
                f"Request timed out after {timeout} seconds. Is TickTick API reachable?",
                request_id=request_id,
                retryable=False,
            )
        )
    if last_url_error is not None:
        raise RemoteUnavailable(
            _error_envelope(
                f"Connection failed: {last_url_error}",
                request_id=request_id,
                retryable=False,
            )
        )
    raise RemoteUnavailable(_error_envelope("Request failed.", request_id=request_id))


def _auth_headers():
    return {
        "Authorization": f"Bearer {config.ACCESS_TOKEN}",
        "Content-Type": "application/json",
        "Accept": "application/json",
        "X-Request-Id": str(uuid.uuid4()),
    }


def _raise_for_auth(e):
    if e.code in (401, 403):
        raise SetupError(
            f"[TOKEN_EXPIRED] The TickTick access token {_mask_token(config.ACCESS_TOKEN)} "
            f"was rejected (HTTP {e.code}). Refresh ACCESS_TOKEN in {config.CONFIG_PATH}."
        ) from e


def _remote_error(e):
    """Convert an HTTPError into a RemoteUnavailable carrying the status."""
    server_req_id = e.headers.get("X-Request-Id") if e.headers else None
    if e.code == 429:
        message = "[ERROR] Rate limit reached on TickTick API. Wait a few seconds and retry."
    else:
        message = _error_envelope(
            f"HTTP {e.code}: {e.reason}",
            status=e.code,
            request_id=server_req_id,
            retryable=e.code in _RETRYABLE_HTTP_CODES,
            detail=_sanitize_error(e.body),
        )
    return RemoteUnavailable(message, status=e.code)


def _check_error_code(result, status):
    """TickTick sometimes reports failures as 200 + {"errorCode": ...}."""
    if isinstance(result, dict) and result.get("errorCode"):
        raise RemoteUnavailable(
            _error_envelope(
                f"TickTick error {result.get('errorCode')}: "
                f"{result.get('errorMessage') or 'unknown error'}",
                status=status,
            ),
            status=status,
        )


def api_request(path, data=None, method="GET", idempotent=None):
    """Make an authenticated request against the Open API.

    Returns parsed JSON (None for an empty body). GET requests are retried
    on transient failures; mutations are not, unless *idempotent* is set.
    """
    if idempotent is None:
        idempotent = method == "GET"
    url = config.BASE_URL + path
    try:
        status, result = _http_request(url, data, _auth_headers(), method, idempotent=idempotent)
    except HTTPError as e:
        _raise_for_auth(e)
        raise _remote_error(e) from e
    _check_error_code(result, status)
    return result


def api_status_request(path, data=None, method="DELETE", raise_auth=True):
    """Like api_request, but report the HTTP status instead of raising on it.

    Used where specific codes are meaningful to the caller (e.g. 404 on
    delete means the task is already gone). Transport errors and 2xx bodies
    carrying an errorCode still raise. Auth failures raise SetupError unless
    *raise_auth* is False, in which case 401/403 come back as statuses too.
    """
    url = config.BASE_URL + path
    try:
        status, result = _http_request(url, data, _auth_headers(), method, idempotent=False)
    except HTTPError as e:
        if raise_auth:
            _raise_for_auth(e)
        return e.code, None
    _check_error_code(result, status)
    return status, result


# ---------------------------------------------------------------------------
# Token validation
# ---------------------------------------------------------------------------


def _check_token():
    """Validate that a usable access token is configured. Refresh is external."""
    if not config.ACCESS_TOKEN:
        raise SetupError(
            f"[SETUP_NEEDED] No ACCESS_TOKEN configured.\n  Add it to {config.CONFIG_PATH} "
            "or export ACCESS_TOKEN."
        )
    if config.TOKEN_EXPIRY and time.time() >= config.TOKEN_EXPIRY:
        raise SetupError(
            "[TOKEN_EXPIRED] Your TickTick access token has expired.\n"
            f"  Refresh ACCESS_TOKEN in {config.CONFIG_PATH}."
        )
