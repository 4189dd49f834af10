"""Per-instance background sweep timer.

Runs a callback every `interval` seconds on a daemon thread until stopped.
`stop()` joins the thread, so once it returns no further callback runs.

Bound-method callbacks are held through a weak reference, so the thread
never keeps its owner alive; once the owner is collected the loop exits.
"""

from __future__ import annotations

import inspect
import threading
import weakref
from typing import Callable, Optional

from core.logging import get_logger

logger = get_logger(__name__)


class CleanupScheduler:
    def __init__(
        self,
        *,
        interval: float,
        callback: Callable[[], object],
        name: str = "cache-cleanup",
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self._interval = float(interval)
        self._callback_ref: Callable[[], Optional[Callable[[], object]]]
        if inspect.ismethod(callback):
            self._callback_ref = weakref.WeakMethod(callback)
        else:
            self._callback_ref = lambda: callback
        self._name = name
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive() and not self._stop_event.is_set()

    def start(self) -> None:
        with self._lock:
            if self._thread is not None or self._stop_event.is_set():
                return
            self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
            self._thread.start()

    def stop(self) -> None:
        with self._lock:
            self._stop_event.set()
            thread = self._thread

        # A callback may stop its own scheduler; joining itself would deadlock
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    def _run(self) -> None:
        # Event.wait returns True once stop() was called
        while not self._stop_event.wait(self._interval):
            if not self._tick():
                logger.debug("cleanup_owner_collected", scheduler=self._name)
                self._stop_event.set()
                return

    def _tick(self) -> bool:
        # Resolve per tick so no strong reference outlives the call
        callback = self._callback_ref()
        if callback is None:
            return False
        try:
            callback()
        except Exception:
            logger.exception("cleanup_sweep_failed", scheduler=self._name)
        return True
