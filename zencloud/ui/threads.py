import time
from typing import Any, Callable, Optional, Set

from PySide6.QtCore import QObject, QRunnable, Qt, QThreadPool, Signal, Slot

from ..utils import get_logger


def _task_label(fn: Callable[[], Any]) -> str:
    target = getattr(fn, "func", fn)
    return getattr(target, "__name__", repr(target))


class WorkerSignals(QObject):
    finished = Signal()
    error = Signal(Exception)
    result = Signal(object)


class Worker(QRunnable):
    def __init__(self, fn: Callable[[], Any]) -> None:
        super().__init__()
        self.fn = fn
        self.label = _task_label(fn)
        self.signals = WorkerSignals()
        self.logger = get_logger("zencloud.qt")

    @Slot()
    def run(self) -> None:
        started = time.monotonic()
        try:
            result = self.fn()
        except Exception as exc:
            self.logger.debug("Task %s failed after %.2fs: %s", self.label, time.monotonic() - started, exc)
            self.signals.error.emit(exc)
        else:
            self.logger.debug("Task %s done in %.2fs", self.label, time.monotonic() - started)
            self.signals.result.emit(result)
        finally:
            self.signals.finished.emit()


class TaskRunner:
    """Runs blocking server calls (list, upload, download, delete) on the global thread pool.

    Callbacks are connected with ``Qt.QueuedConnection`` so they always execute
    on the UI thread; the store and the widgets are never touched from a worker.
    """

    def __init__(self) -> None:
        self.pool = QThreadPool.globalInstance()
        self.logger = get_logger("zencloud.qt")
        self._workers: Set[Worker] = set()

    @property
    def pending(self) -> int:
        return len(self._workers)

    def run(
        self,
        fn: Callable[[], Any],
        on_result: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
        on_finished: Optional[Callable[[], None]] = None,
    ) -> Worker:
        worker = Worker(fn)
        worker.setAutoDelete(False)
        self._workers.add(worker)
        if on_result:
            worker.signals.result.connect(on_result, Qt.QueuedConnection)
        if on_error:
            worker.signals.error.connect(on_error, Qt.QueuedConnection)
        if on_finished:
            worker.signals.finished.connect(on_finished, Qt.QueuedConnection)
        worker.signals.finished.connect(lambda: self._workers.discard(worker), Qt.QueuedConnection)
        self.logger.debug("Task %s queued (%s in flight)", worker.label, len(self._workers))
        self.pool.start(worker)
        return worker

    def wait(self, msecs: int = -1) -> bool:
        return self.pool.waitForDone(msecs)
