"""Tests for api.py — security helpers, HTTP error handling, token validation."""

import io
import json
import urllib.error
from unittest.mock import MagicMock, patch

import pytest

from ticktick_cli import config
from ticktick_cli.api import (
    _check_token,
    _http_request,
    _is_sampled_request,
    _mask_token,
    _parse_retry_after,
    _sanitize_error,
    _sanitize_url_for_log,
    api_request,
    api_status_request,
)
from ticktick_cli.exceptions import HTTPError, RemoteUnavailable, SetupError


def _ok_response(body, status=200, content_type="application/json"):
    cm = MagicMock()
    resp = cm.__enter__.return_value
    resp.status = status
    resp.headers.get.return_value = content_type
    resp.read.return_value = body
    return cm


class TestMaskToken:
    def test_long_token(self):
        assert _mask_token("abcdef1234567890") == "abcdef..."

    def test_short_token(self):
        assert _mask_token("abc") == "abc"

    def test_exactly_six(self):
        assert _mask_token("abcdef") == "abcdef"


class TestSanitizeUrlForLog:
    def test_masks_token_params(self):
        url = "https://api.ticktick.com/open/v1/project?access_token=secret&from=0"
        safe = _sanitize_url_for_log(url)
        assert "secret" not in safe
        assert "access_token=%2A%2A%2A" in safe
        assert "from=0" in safe

    def test_no_query_unchanged(self):
        url = "https://api.ticktick.com/open/v1/project"
        assert _sanitize_url_for_log(url) == url


class TestSampling:
    def test_sample_rate_zero_disables(self, monkeypatch):
        monkeypatch.setattr(config, "HTTP_LOG_SAMPLE_RATE", 0.0)
        assert _is_sampled_request("req-1") is False

    def test_sample_rate_one_enables(self, monkeypatch):
        monkeypatch.setattr(config, "HTTP_LOG_SAMPLE_RATE", 1.0)
        assert _is_sampled_request("req-1") is True

    def test_sampling_is_deterministic(self, monkeypatch):
        monkeypatch.setattr(config, "HTTP_LOG_SAMPLE_RATE", 0.5)
        first = _is_sampled_request("req-abc")
        assert all(_is_sampled_request("req-abc") == first for _ in range(5))


class TestSanitizeError:
    def test_strips_html(self):
        assert _sanitize_error("<b>bad</b> request") == "bad request"

    def test_truncates_long_body(self):
        result = _sanitize_error("x" * 600, max_len=100)
        assert result.endswith("... [truncated]")
        assert len(result) == 100 + len("... [truncated]")

    def test_empty_body(self):
        assert _sanitize_error("") == ""


class TestParseRetryAfter:
    def test_integer_seconds(self):
        assert _parse_retry_after({"Retry-After": "3"}) == 3

    def test_negative_clamped(self):
        assert _parse_retry_after({"Retry-After": "-5"}) == 0

    def test_http_date_ignored(self):
        assert _parse_retry_after({"Retry-After": "Wed, 21 Oct 2015 07:28:00 GMT"}) is None

    def test_missing(self):
        assert _parse_retry_after({}) is None
        assert _parse_retry_after(None) is None


class TestHttpRequest:
    @patch("ticktick_cli.api.urllib.request.urlopen")
    def test_returns_status_and_body(self, mock_urlopen):
        mock_urlopen.return_value = _ok_response(b'{"id": "p1"}')
        status, body = _http_request("https://api.test/x", method="GET")
        assert status == 200
        assert body == {"id": "p1"}

    @patch("ticktick_cli.api.urllib.request.urlopen")
    def test_empty_body_is_none(self, mock_urlopen):
        mock_urlopen.return_value = _ok_response(b"  ", status=204)
        assert _http_request("https://api.test/x", method="DELETE") == (204, None)

    @patch("ticktick_cli.api.time.sleep")
    @patch("ticktick_cli.api.urllib.request.urlopen")
    def test_retries_503_for_idempotent_request(self, mock_urlopen, mock_sleep):
        first = urllib.error.HTTPError(
            "https://api.test/x", 503, "Unavailable", {"Retry-After": "2"}, io.BytesIO(b"busy")
        )
        mock_urlopen.side_effect = [first, _ok_response(b"[]")]

        status, body = _http_request("https://api.test/x", method="GET", idempotent=True)
        assert (status, body) == (200, [])
        assert mock_urlopen.call_count == 2
        mock_sleep.assert_called_once_with(2)

    @patch("ticktick_cli.api.urllib.request.urlopen")
    def test_does_not_retry_non_idempotent_request(self, mock_urlopen):
        mock_urlopen.side_effect = urllib.error.HTTPError(
            "https://api.test/x", 429, "Too Many Requests", {}, io.BytesIO(b"busy")
        )
        with pytest.raises(HTTPError) as exc_info:
            _http_request("https://api.test/x", {"title": "A"}, idempotent=False)
        assert exc_info.value.code == 429
        assert exc_info.value.body == "busy"
        assert mock_urlopen.call_count == 1

    @patch("ticktick_cli.api.urllib.request.urlopen")
    def test_response_size_limit(self, mock_urlopen, monkeypatch):
        monkeypatch.setattr(config, "HTTP_MAX_RESPONSE_BYTES", 4)
        mock_urlopen.return_value = _ok_response(b"12345")
        with pytest.raises(RemoteUnavailable) as exc_info:
            _http_request("https://api.test/x", method="GET")
        assert "Response too large" in str(exc_info.value)

    @patch("ticktick_cli.api.urllib.request.urlopen")
    def test_html_content_type_gives_proxy_message(self, mock_urlopen):
        mock_urlopen.return_value = _ok_response(b"<html>Error</html>", content_type="text/html")
        with pytest.raises(RemoteUnavailable) as exc_info:
            _http_request("https://api.test/x", method="GET")
        assert "proxy" in str(exc_info.value)

    @patch("ticktick_cli.api.urllib.request.urlopen")
    def test_connection_failure(self, mock_urlopen):
        mock_urlopen.side_effect = urllib.error.URLError("refused")
        with pytest.raises(RemoteUnavailable) as exc_info:
            _http_request("https://api.test/x", method="POST")
        assert "Connection failed: refused" in str(exc_info.value)

    @patch("ticktick_cli.api.urllib.request.urlopen")
    def test_logs_when_enabled(self, mock_urlopen, monkeypatch, capsys):
        monkeypatch.setattr(config, "HTTP_LOG_ENABLED", True)
        mock_urlopen.return_value = _ok_response(b"{}")
        _http_request("https://api.test/x", headers={"X-Request-Id": "r1"}, method="GET")
        lines = [line for line in capsys.readouterr().err.splitlines() if line]
        assert lines[0].startswith("[HTTP] ")
        event = json.loads(lines[0][len("[HTTP] ") :])
        assert event["phase"] == "request"
        assert event["request_id"] == "r1"


class TestApiRequest:
    @patch("ticktick_cli.api._http_request")
    def test_sends_auth_and_request_id(self, mock_http):
        mock_http.return_value = (200, [])
        api_request("/project")
        url, data, headers, method = mock_http.call_args.args
        assert url == config.BASE_URL + "/project"
        assert headers["Authorization"] == "Bearer fake-token"
        assert headers["X-Request-Id"]
        assert method == "GET"
        assert mock_http.call_args.kwargs["idempotent"] is True

    @patch("ticktick_cli.api._http_request")
    def test_post_not_idempotent_by_default(self, mock_http):
        mock_http.return_value = (200, {"id": "t1"})
        api_request("/task", {"title": "A"}, method="POST")
        assert mock_http.call_args.kwargs["idempotent"] is False

    @patch("ticktick_cli.api._http_request")
    def test_rate_limit_message(self, mock_http):
        mock_http.side_effect = HTTPError(429, "Too Many Requests", "")
        with pytest.raises(RemoteUnavailable) as exc_info:
            api_request("/project")
        assert "Rate limit" in str(exc_info.value)
        assert exc_info.value.status == 429

    @patch("ticktick_cli.api._http_request")
    @pytest.mark.parametrize("code", [401, 403])
    def test_auth_failure_is_setup_error(self, mock_http, code):
        mock_http.side_effect = HTTPError(code, "Unauthorized", "")
        with pytest.raises(SetupError) as exc_info:
            api_request("/project")
        assert str(exc_info.value).startswith("[TOKEN_EXPIRED]")

    @patch("ticktick_cli.api._http_request")
    def test_server_error_carries_status(self, mock_http):
        mock_http.side_effect = HTTPError(500, "Server Error", "<p>boom</p>")
        with pytest.raises(RemoteUnavailable) as exc_info:
            api_request("/project")
        assert exc_info.value.status == 500
        assert "status=500" in str(exc_info.value)
        assert "boom" in str(exc_info.value)

    @patch("ticktick_cli.api._http_request")
    def test_error_code_body_is_remote_failure(self, mock_http):
        mock_http.return_value = (200, {"errorCode": "task_not_found", "errorMessage": "gone"})
        with pytest.raises(RemoteUnavailable) as exc_info:
            api_request("/task/abc")
        assert "task_not_found" in str(exc_info.value)


class TestApiStatusRequest:
    @patch("ticktick_cli.api._http_request")
    def test_returns_http_error_status(self, mock_http):
        mock_http.side_effect = HTTPError(404, "Not Found", "")
        assert api_status_request("/project/p/task/t") == (404, None)

    @patch("ticktick_cli.api._http_request")
    def test_auth_failure_still_raises(self, mock_http):
        mock_http.side_effect = HTTPError(401, "Unauthorized", "")
        with pytest.raises(SetupError):
            api_status_request("/project/p/task/t")

    @patch("ticktick_cli.api._http_request")
    def test_auth_failure_as_status_when_asked(self, mock_http):
        mock_http.side_effect = HTTPError(403, "Forbidden", "")
        assert api_status_request("/project/p/task/t", raise_auth=False) == (403, None)

    @patch("ticktick_cli.api._http_request")
    def test_error_code_body_raises(self, mock_http):
        mock_http.return_value = (200, {"errorCode": "task_not_found"})
        with pytest.raises(RemoteUnavailable) as exc_info:
            api_status_request("/project/p/task/t")
        assert exc_info.value.status == 200
        assert "task_not_found" in str(exc_info.value)


class TestCheckToken:
    def test_missing_token(self, monkeypatch):
        monkeypatch.setattr(config, "ACCESS_TOKEN", "")
        with pytest.raises(SetupError) as exc_info:
            _check_token()
        assert str(exc_info.value).startswith("[SETUP_NEEDED]")

    def test_expired_token(self, monkeypatch):
        monkeypatch.setattr(config, "TOKEN_EXPIRY", 1)
        with pytest.raises(SetupError) as exc_info:
            _check_token()
        assert str(exc_info.value).startswith("[TOKEN_EXPIRED]")

    def test_valid_token(self, monkeypatch):
        monkeypatch.setattr(config, "TOKEN_EXPIRY", 0)
        _check_token()
