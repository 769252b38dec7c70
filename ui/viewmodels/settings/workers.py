"""Background workers and request bookkeeping for network operations."""

from __future__ import annotations

import itertools
import logging
from typing import Callable, Optional

from PySide6.QtCore import QObject, QThread, QTimer, Signal

from core.errors import NetworkError

logger = logging.getLogger(__name__)

# Request tokens are unique across every tracker in the process
_TOKENS = itertools.count(1)


class ServiceWorker(QThread):
    """Worker thread running one blocking service call.

    The call result or failure message is emitted together with the request
    token so the receiver can drop results of superseded requests.

    Signals:
        succeeded: Emitted with (result, token) when the call returns
        failed: Emitted with (message, token) when the call raises
    """

    succeeded = Signal(object, int)
    failed = Signal(str, int)

    def __init__(self, call: Callable[[], object], token: int, description: str = ""):
        super().__init__()
        self._call = call
        self.token = token
        self.description = description or getattr(call, "__qualname__", "service call")

    def run(self):
        try:
            result = self._call()
        except NetworkError as e:
            logger.info("%s failed: %s", self.description, e)
            self.failed.emit(str(e), self.token)
            return
        except Exception as e:
            logger.exception("%s raised unexpectedly: %s", self.description, e)
            self.failed.emit(f"Unexpected error: {e}", self.token)
            return
        self.succeeded.emit(result, self.token)


class RequestTracker(QObject):
    """
    Tracks the single in-flight request of one logical operation.

    A request is identified by a token from a process-wide monotonic counter.
    Only the active token is honored when a result arrives; cancelling or
    timing out simply forgets it. Worker threads are kept alive until they
    finish and are then released, so a hung call never blocks the caller.
    """

    timed_out = Signal(int)

    def __init__(self, deadline_ms: int, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._active: Optional[int] = None
        self._workers: dict[int, ServiceWorker] = {}

        self._deadline = QTimer(self)
        self._deadline.setSingleShot(True)
        self._deadline.setInterval(max(1, int(deadline_ms)))
        self._deadline.timeout.connect(self._on_deadline)

    @property
    def busy(self) -> bool:
        return self._active is not None

    @property
    def running_workers(self) -> int:
        return sum(1 for worker in self._workers.values() if worker.isRunning())

    def begin(self) -> Optional[int]:
        """Reserve a new token, or return None while a request is active."""
        if self._active is not None:
            return None
        self._active = next(_TOKENS)
        return self._active

    def start(self, token: int, worker: ServiceWorker) -> None:
        """Start the worker for a token obtained from begin()."""
        self._release_finished()
        self._workers[token] = worker
        worker.finished.connect(self._release_finished)
        if token == self._active:
            self._deadline.start()
        worker.start()

    def finish(self, token: int) -> bool:
        """Resolve a request; returns False for a stale token."""
        if token != self._active:
            logger.debug("Discarding result of stale request %s", token)
            return False
        self._active = None
        self._deadline.stop()
        return True

    def cancel(self) -> None:
        """Forget the active request; its worker runs to completion unobserved."""
        if self._active is not None:
            logger.debug("Cancelled request %s", self._active)
        self._active = None
        self._deadline.stop()

    def shutdown(self) -> None:
        """Cancel and block until every worker thread has exited."""
        self.cancel()
        for worker in self._workers.values():
            worker.wait()
        self._release_finished()

    def _on_deadline(self) -> None:
        token = self._active
        if token is None:
            return
        self._active = None
        logger.warning("Request %s exceeded its deadline", token)
        self.timed_out.emit(token)

    def _release_finished(self) -> None:
        for token, worker in list(self._workers.items()):
            if worker.isFinished():
                del self._workers[token]
                worker.deleteLater()
