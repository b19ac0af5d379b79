"""
Shared test fixtures for ticktick-cli tests.
Patches config module to avoid loading the real config file, and provides
an in-memory TickTick service that stands in for the HTTP transport.
"""

import itertools
import json
import urllib.parse

import pytest

from ticktick_cli import api, config
from ticktick_cli.exceptions import HTTPError

BASE_URL = "https://api.ticktick.test/open/v1"
INBOX_PID = "inbox114478622"


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch):
    """Ensure every test starts with a clean config state.
    Prevents tests from reading the real config file or leaking runtime flags."""
    monkeypatch.setattr(config, "env", {})
    monkeypatch.setattr(config, "ACCESS_TOKEN", "fake-token")
    monkeypatch.setattr(config, "TOKEN_EXPIRY", 0)
    monkeypatch.setattr(config, "BASE_URL", BASE_URL)
    monkeypatch.setattr(config, "HTTP_LOG_ENABLED", False)
    monkeypatch.setattr(config, "HTTP_LOG_SAMPLE_RATE", 1.0)
    monkeypatch.setattr(config, "MOVE_LOG_ENABLED", False)
    monkeypatch.setattr(config, "DST_RULE", "fixed")
    monkeypatch.setattr(config, "RUNTIME_QUIET", False)
    monkeypatch.setattr(config, "RUNTIME_VERBOSE", False)


class FakeTickTick:
    """In-memory TickTick Open API.

    Replaces ``api._http_request`` so requests still go through
    ``api_request`` / ``api_status_request`` and their error mapping.

    Knobs:
        hide(task_id, reads): hide a task from the next N member listings
            (read-after-write lag).
        delete_statuses: statuses returned by DELETE before it succeeds.
        fail(method, path, status, times): fail matching requests with an
            HTTP error.
        direct_lookup: when False, ``GET /task/{id}`` returns 404.
    """

    def __init__(self):
        self._ids = itertools.count(1)
        self.projects = []
        self.tasks = {}
        self.calls = []
        self.hidden = {}
        self.delete_statuses = []
        self.failures = []
        self.direct_lookup = True
        self.inbox_id = INBOX_PID

    # -- seeding -----------------------------------------------------------

    def new_id(self):
        return f"{0xABC000 + next(self._ids):024x}"

    def add_project(self, name, **extra):
        record = {"id": self.new_id(), "name": name, "kind": "TASK", "viewMode": "list"}
        record.update(extra)
        self.projects.append(record)
        return record

    def add_task(self, title, project_id=None, **extra):
        record = {
            "id": self.new_id(),
            "projectId": project_id or INBOX_PID,
            "title": title,
            "content": "",
            "priority": 0,
            "status": 0,
            "tags": [],
        }
        record.update(extra)
        self.tasks[record["id"]] = record
        return record

    def hide(self, task_id, reads):
        self.hidden[task_id] = reads

    def fail(self, method, path, status, times=1):
        self.failures.append([method, path, status, times])

    def tasks_in(self, project_id):
        return [t for t in self.tasks.values() if t["projectId"] == project_id]

    def paths(self, method=None):
        return [p for m, p, _ in self.calls if method is None or m == method]

    # -- transport ---------------------------------------------------------

    def __call__(self, url, data=None, headers=None, method="POST", idempotent=False):
        assert url.startswith(BASE_URL)
        assert headers["Authorization"] == "Bearer fake-token"
        parsed = urllib.parse.urlsplit(url[len(BASE_URL) :])
        path = parsed.path
        body = json.loads(json.dumps(data)) if data is not None else None
        self.calls.append((method, path, body))

        for failure in self.failures:
            f_method, f_path, f_status, f_times = failure
            if f_times > 0 and f_method == method and f_path == path:
                failure[3] -= 1
                raise HTTPError(f_status, "Injected", '{"errorMessage": "injected"}')

        parts = [urllib.parse.unquote(p) for p in path.strip("/").split("/")]
        return self._route(method, parts, body)

    def _pid(self, pid):
        return INBOX_PID if pid == "inbox" else pid

    def _project(self, pid):
        for project in self.projects:
            if project["id"] == pid:
                return project
        raise HTTPError(404, "Not Found", '{"errorCode": "project_not_found"}')

    def _visible(self, project_id, status):
        out = []
        for task in self.tasks_in(project_id):
            if task["status"] != status:
                continue
            remaining = self.hidden.get(task["id"], 0)
            if remaining > 0:
                self.hidden[task["id"]] = remaining - 1
                continue
            out.append(dict(task))
        return out

    def _create_task(self, body):
        pid = self._pid(body.get("projectId") or INBOX_PID)
        if pid != INBOX_PID:
            self._project(pid)
        record = self.add_task(body["title"], pid)
        for key in ("content", "priority", "dueDate", "tags"):
            if key in body:
                record[key] = body[key]
        return 200, dict(record)

    def _update_task(self, task_id, body, scoped):
        task = self.tasks.get(task_id)
        if task is None:
            return 200, {"errorCode": "task_not_found", "errorMessage": "task not found"}
        if task["projectId"] == INBOX_PID and not scoped:
            return 200, {"errorCode": "task_not_found", "errorMessage": "task not found"}
        for key, value in body.items():
            if key not in ("id", "projectId"):
                task[key] = value
        return 200, dict(task)

    def _route(self, method, parts, body):
        if parts == ["project"]:
            if method == "GET":
                return 200, [dict(p) for p in self.projects]
            record = self.add_project(body["name"])
            record.update({k: v for k, v in body.items() if k != "name"})
            return 200, dict(record)

        if parts[0] == "project" and len(parts) == 2:
            project = self._project(parts[1])
            if method == "GET":
                return 200, dict(project, etag="abc123", sortOrder=-1)
            assert "etag" not in body and "sortOrder" not in body
            project.update(body)
            return 200, dict(project)

        if parts[0] == "project" and len(parts) == 3 and parts[2] == "data":
            pid = self._pid(parts[1])
            if pid != INBOX_PID:
                self._project(pid)
            return 200, {"tasks": self._visible(pid, 0)}

        if parts[0] == "project" and parts[2:] == ["task", "completed"]:
            return 200, self._visible(self._pid(parts[1]), 2)

        if parts[0] == "project" and len(parts) == 4 and parts[2] == "task":
            task_id = parts[3]
            if method == "DELETE":
                if self.delete_statuses:
                    status = self.delete_statuses.pop(0)
                    raise HTTPError(status, "Injected", "")
                if task_id not in self.tasks:
                    raise HTTPError(404, "Not Found", "")
                del self.tasks[task_id]
                return 200, None
            return self._update_task(task_id, body, scoped=True)

        if parts[0] == "project" and len(parts) == 5 and parts[4] == "complete":
            task = self.tasks.get(parts[3])
            if task is None:
                raise HTTPError(404, "Not Found", "")
            task["status"] = 2
            return 200, None

        if parts == ["task"]:
            return self._create_task(body)

        if parts[0] == "task" and len(parts) == 2:
            if method == "GET":
                task = self.tasks.get(parts[1])
                if task is None or not self.direct_lookup:
                    raise HTTPError(404, "Not Found", "")
                return 200, dict(task)
            return self._update_task(parts[1], body, scoped=False)

        raise HTTPError(404, "Not Found", f"no route for {method} /{'/'.join(parts)}")


@pytest.fixture
def fake_ticktick(monkeypatch):
    """Install an in-memory TickTick service behind the HTTP layer."""
    fake = FakeTickTick()
    monkeypatch.setattr(api, "_http_request", fake)
    return fake


@pytest.fixture
def no_sleep():
    """Recording stand-in for time.sleep."""
    delays = []
    return delays, delays.append
