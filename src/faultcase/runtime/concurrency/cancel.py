"""Cancellation tokens shared between threads and event loops.

A CancellationToken is a one-shot, thread-safe signal. Blocking code waits on
it with a timeout; async code registers a callback that resolves a future on
its own loop. Either way a long wait wakes as soon as cancel() is called.

Example:
    >>> token = CancellationToken()
    >>> threading.Timer(0.5, token.cancel).start()
    >>> token.wait(30.0)  # returns True after ~0.5s
    True
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable

from faultcase.foundation.errors import RetryCancelledError

logger = logging.getLogger("faultcase.concurrency")

Callback = Callable[[], None]


@dataclass(slots=True, eq=False)
class CancellationToken:
    """One-shot cancellation signal.

    Callbacks run exactly once, on the thread that calls cancel(). A callback
    registered after cancellation runs immediately on the registering thread.
    """

    _event: threading.Event = field(default_factory=threading.Event, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _callbacks: list[Callback] = field(default_factory=list, repr=False)

    @property
    def cancelled(self) -> bool:
        """Whether cancellation was requested."""
        return self._event.is_set()

    def cancel(self) -> None:
        """Request cancellation. Idempotent."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
        for cb in callbacks:
            _run_callback(cb)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled or timeout elapses. Returns True if cancelled."""
        return self._event.wait(timeout)

    def add_callback(self, cb: Callback) -> Callback:
        """Register cb to run on cancellation. Returns a function that unregisters it."""
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(cb)
                return lambda: self._remove(cb)
        _run_callback(cb)
        return lambda: None

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise RetryCancelledError()

    def _remove(self, cb: Callback) -> None:
        with self._lock:
            try:
                self._callbacks.remove(cb)
            except ValueError:
                pass  # Already fired or removed


def _run_callback(cb: Callback) -> None:
    try:
        cb()
    except Exception:
        logger.exception("Cancellation callback failed")
