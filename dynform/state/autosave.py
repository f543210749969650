"""Debounced best-effort autosave of form snapshots."""

from __future__ import annotations

import logging
from typing import Any, Callable

from dynform.model.field import FormValues
from dynform.runtime.runner import TaskRunner
from dynform.runtime.scheduler import Scheduler

logger = logging.getLogger(__name__)

DEFAULT_AUTOSAVE_DELAY_MS = 2000


class AutosaveScheduler:
    """Saves the latest snapshot once no change has arrived for ``delay_ms``.

    Every notification cancels the pending timer and arms a new one, so a
    burst of edits produces a single save carrying the last snapshot. Save
    calls are not serialized: a save can start while an earlier one is still
    in flight. Failures are logged and otherwise ignored.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        runner: TaskRunner,
        save: Callable[[FormValues], Any],
        delay_ms: int = DEFAULT_AUTOSAVE_DELAY_MS,
    ) -> None:
        self._scheduler = scheduler
        self._runner = runner
        self._save = save
        self.delay_ms = delay_ms
        self._handle: object | None = None
        self._pending: FormValues | None = None
        self._generation = 0
        self._closed = False
        self.last_response: Any = None
        self.in_flight = 0

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def notify(self, snapshot: FormValues) -> None:
        if self._closed:
            return
        self._cancel_timer()
        self._pending = dict(snapshot)
        self._handle = self._scheduler.schedule(self.delay_ms, self._fire)

    def cancel(self) -> None:
        """Drop the pending save and ignore responses to saves already issued."""
        self._cancel_timer()
        self._pending = None
        self._generation += 1

    def close(self) -> None:
        self.cancel()
        self._closed = True

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._scheduler.cancel(self._handle)
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        snapshot, self._pending = self._pending, None
        if self._closed or snapshot is None:
            return

        generation = self._generation
        self.in_flight += 1
        logger.debug("Autosaving %d field(s)", len(snapshot))

        def on_done(result: Any, error: BaseException | None) -> None:
            self.in_flight -= 1
            if self._closed or generation != self._generation:
                return
            if error is not None:
                logger.warning("Autosave failed: %s", error)
                return
            self.last_response = result

        self._runner.submit(self._save, snapshot, on_done=on_done)
