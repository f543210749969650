"""Cancellable delayed callbacks on the Qt event loop."""

from __future__ import annotations

import logging
from typing import Callable, Protocol

from PySide6.QtCore import QTimer

logger = logging.getLogger(__name__)


class Scheduler(Protocol):
    def schedule(self, delay_ms: int, fn: Callable[[], None]) -> object: ...

    def cancel(self, handle: object) -> None: ...


class QtScheduler:
    """Single-shot ``QTimer`` per scheduled callback; the handle is the timer."""

    def __init__(self) -> None:
        self._timers: set[QTimer] = set()

    def schedule(self, delay_ms: int, fn: Callable[[], None]) -> QTimer:
        timer = QTimer()
        timer.setSingleShot(True)

        def fire() -> None:
            self._timers.discard(timer)
            timer.deleteLater()
            fn()

        timer.timeout.connect(fire)
        self._timers.add(timer)
        timer.start(max(0, int(delay_ms)))
        logger.debug("Scheduled callback in %d ms", delay_ms)
        return timer

    def cancel(self, handle: object) -> None:
        if not isinstance(handle, QTimer) or handle not in self._timers:
            return
        handle.stop()
        self._timers.discard(handle)
        handle.deleteLater()

    @property
    def pending(self) -> int:
        return len(self._timers)

    def cancel_all(self) -> None:
        for timer in list(self._timers):
            self.cancel(timer)
