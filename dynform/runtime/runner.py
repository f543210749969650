"""Run blocking calls off the GUI thread and deliver results back to it."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
import logging
from typing import Any, Callable, Protocol

from PySide6.QtCore import QObject, Signal, Slot

logger = logging.getLogger(__name__)

DoneCallback = Callable[[Any, "BaseException | None"], None]


class TaskRunner(Protocol):
    def submit(self, fn: Callable[..., Any], *args: Any, on_done: DoneCallback) -> None: ...


class _ResultBridge(QObject):
    finished = Signal(object, object, object)

    def __init__(self) -> None:
        super().__init__()
        self.closed = False
        self.finished.connect(self._deliver)

    @Slot(object, object, object)
    def _deliver(self, on_done: DoneCallback, result: Any, error: BaseException | None) -> None:
        if self.closed:
            return
        on_done(result, error)


class QtTaskRunner:
    """Thread pool whose completions are queued onto the thread that owns the runner."""

    def __init__(self, max_workers: int = 4) -> None:
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="dynform")
        self._bridge = _ResultBridge()
        self._closed = False

    def submit(self, fn: Callable[..., Any], *args: Any, on_done: DoneCallback) -> None:
        if self._closed:
            logger.debug("Runner closed, dropping %s", getattr(fn, "__name__", fn))
            return
        future = self._executor.submit(fn, *args)
        future.add_done_callback(lambda done: self._complete(done, on_done))

    def shutdown(self) -> None:
        self._closed = True
        self._bridge.closed = True
        self._executor.shutdown(wait=False, cancel_futures=True)

    def _complete(self, future: Future, on_done: DoneCallback) -> None:
        if future.cancelled():
            return
        error = future.exception()
        result = None if error is not None else future.result()
        self._bridge.finished.emit(on_done, result, error)
