"""
Cross-list task moves.

TickTick has no move endpoint, so a move is a saga:

1. create the replacement in the target list (no retry)
2. read the target back once (a miss is tolerated)
3. wait for the original to be visible in the source list
4. delete the original, with exponential backoff
5. poll every list until the replacement is seen in the target

Nothing is rolled back. A failed delete leaves the task in both lists and
a failed verification leaves its location uncertain; the raised error
carries a MoveOutcome naming both ids so the state can be fixed by hand.
The replacement gets a new id.
"""

import json
import sys
import time

from ticktick_cli import config, directory, resolver, tasks
from ticktick_cli._utils import same_container, warn
from ticktick_cli.exceptions import (
    MoveCreateFailed,
    MoveDeleteFailed,
    MoveVerificationFailed,
    RemoteUnavailable,
)
from ticktick_cli.models import MOVE_DUPLICATE, MOVE_MOVED, MOVE_UNVERIFIED, MoveOutcome

DELETE_OK_STATUSES = frozenset({200, 204, 404})


def _log_move_event(**fields):
    """Emit structured move-step logs to stderr when enabled."""
    if not (config.MOVE_LOG_ENABLED or config.RUNTIME_VERBOSE):
        return
    print("[MOVE] " + json.dumps(fields, ensure_ascii=False, sort_keys=True), file=sys.stderr)


def delete_delays(attempts=None, initial=None, factor=None, cap=None):
    """Sleep lengths between delete attempts (one fewer than attempts)."""
    attempts = config.MOVE_DELETE_ATTEMPTS if attempts is None else attempts
    delay = config.MOVE_DELETE_INITIAL_DELAY if initial is None else initial
    factor = config.MOVE_DELETE_BACKOFF if factor is None else factor
    cap = config.MOVE_DELETE_MAX_DELAY if cap is None else cap
    delays = []
    for _ in range(max(0, attempts - 1)):
        delays.append(min(delay, cap))
        delay *= factor
    return delays


class MoveOrchestrator:
    """Drive a Move plan to completion.

    *sleep* is injectable so tests can run the saga without waiting.
    """

    def __init__(self, sleep=None):
        self._sleep = sleep or time.sleep

    def execute(self, move):
        new_id = self._create(move)
        self._confirm_visible(move, new_id)
        self._await_original(move)
        self._delete_original(move, new_id)
        task = self._verify(move, new_id)
        _log_move_event(step="done", original_id=move.entity_id, new_id=new_id)
        return MoveOutcome(
            state=MOVE_MOVED,
            original_id=move.entity_id,
            new_id=new_id,
            from_container_id=move.from_container_id,
            to_container_id=move.to_container_id,
            task=task.to_dict(),
        )

    # -- steps ---------------------------------------------------------------

    def _create(self, move):
        _log_move_event(step="create", to_project_id=move.to_container_id)
        try:
            created = tasks.create_task(move.create_payload)
        except RemoteUnavailable as e:
            raise MoveCreateFailed(
                f"[ERROR] Move failed at step 'create': could not create task in "
                f"list {move.to_container_id}. Original {move.entity_id} is untouched. {e}",
                status=e.status,
            ) from e

        new_id = created.get("id")
        assigned = created.get("projectId")
        if not new_id:
            raise MoveCreateFailed(
                "[ERROR] Move failed at step 'create': response carried no task id. "
                f"Original {move.entity_id} is untouched."
            )
        if not assigned or not same_container(assigned, move.to_container_id):
            raise MoveCreateFailed(
                f"[ERROR] Move failed at step 'create': task {new_id} was created in "
                f"list {assigned or '(none)'} instead of {move.to_container_id}. "
                f"Original {move.entity_id} is untouched.",
                outcome=MoveOutcome(
                    state=MOVE_DUPLICATE,
                    original_id=move.entity_id,
                    new_id=new_id,
                    from_container_id=move.from_container_id,
                    to_container_id=move.to_container_id,
                    task=created,
                ),
            )
        _log_move_event(step="create", status="ok", new_id=new_id)
        return new_id

    def _confirm_visible(self, move, new_id):
        try:
            members = directory.list_members(move.to_container_id)
        except RemoteUnavailable as e:
            _log_move_event(step="confirm", visible=False, status=e.status)
            return False
        visible = any(task.id == new_id for task in members)
        _log_move_event(step="confirm", visible=visible)
        if not visible:
            warn(f"Task {new_id} is not visible in the target list yet; continuing.")
        return visible

    def _poll(self, step, attempts, probe):
        """Call *probe* up to *attempts* times, sleeping between misses."""
        for attempt in range(1, attempts + 1):
            try:
                result = probe()
            except RemoteUnavailable as e:
                result = None
                _log_move_event(step=step, attempt=attempt, status=e.status, error="remote")
            if result:
                _log_move_event(step=step, attempt=attempt, found=True)
                return result
            _log_move_event(step=step, attempt=attempt, found=False)
            if attempt < attempts:
                self._sleep(config.MOVE_POLL_INTERVAL_SECONDS)
        return None

    def _await_original(self, move):
        def probe():
            members = directory.list_members(move.from_container_id)
            return any(task.id == move.entity_id for task in members)

        # Exhausting this wait is not an error; the delete goes ahead anyway.
        return self._poll("pre_delete", config.MOVE_PRE_DELETE_ATTEMPTS, probe)

    def _delete_original(self, move, new_id):
        attempts = config.MOVE_DELETE_ATTEMPTS
        delays = delete_delays(attempts)
        last_status = None
        for attempt in range(1, attempts + 1):
            try:
                last_status = tasks.delete_task(move.from_container_id, move.entity_id)
                deleted = last_status in DELETE_OK_STATUSES
            except RemoteUnavailable as e:
                last_status = e.status
                deleted = False
            if deleted:
                _log_move_event(step="delete", attempt=attempt, status=last_status)
                return last_status
            will_retry = attempt < attempts
            _log_move_event(
                step="delete",
                attempt=attempt,
                status=last_status,
                will_retry=will_retry,
                delay=delays[attempt - 1] if will_retry else None,
            )
            if will_retry:
                self._sleep(delays[attempt - 1])

        outcome = MoveOutcome(
            state=MOVE_DUPLICATE,
            original_id=move.entity_id,
            new_id=new_id,
            from_container_id=move.from_container_id,
            to_container_id=move.to_container_id,
            last_status=last_status,
        )
        hint = ""
        if last_status in (401, 403):
            hint = f" The access token was rejected; refresh ACCESS_TOKEN in {config.CONFIG_PATH}."
        raise MoveDeleteFailed(
            f"[ERROR] Move failed at step 'delete' after {attempts} attempts "
            f"(last status={last_status}). The task now exists in both lists: "
            f"original {move.entity_id} in {move.from_container_id}, "
            f"new {new_id} in {move.to_container_id}.{hint}",
            outcome=outcome,
            status=last_status,
        )

    def _verify(self, move, new_id):
        def probe():
            task = resolver.locate_task(new_id)
            if task is not None and same_container(task.container_id, move.to_container_id):
                return task
            return None

        task = self._poll("verify", config.MOVE_VERIFY_ATTEMPTS, probe)
        if task is None:
            outcome = MoveOutcome(
                state=MOVE_UNVERIFIED,
                original_id=move.entity_id,
                new_id=new_id,
                from_container_id=move.from_container_id,
                to_container_id=move.to_container_id,
            )
            raise MoveVerificationFailed(
                f"[ERROR] Move failed at step 'verify': task {new_id} was not observed in "
                f"list {move.to_container_id} after {config.MOVE_VERIFY_ATTEMPTS} attempts. "
                f"Original {move.entity_id} was deleted; resolve the task again to find it.",
                outcome=outcome,
            )
        return task
