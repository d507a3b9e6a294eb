"""Execution adapters: how an operation is invoked and how a delay is waited out.

The retry decision logic is identical for blocking and suspendable
operations; only these two primitives differ.

- SyncAdapter: Calls the operation, blocks the thread while waiting
- AsyncAdapter: Awaits the operation, yields to the event loop while waiting

Both wake as soon as a CancellationToken fires, without polling.
"""

from __future__ import annotations

import asyncio
import inspect
import time
from collections.abc import Awaitable
from typing import TYPE_CHECKING, Callable, TypeVar

if TYPE_CHECKING:
    from faultcase.runtime.concurrency import CancellationToken

T = TypeVar("T")


class SyncAdapter:
    """Blocking execution on the calling thread."""

    __slots__ = ()

    def invoke(self, operation: Callable[[], T]) -> T:
        return operation()

    def wait(self, delay: float, cancel: CancellationToken | None) -> bool:
        """Wait `delay` seconds. Returns True if cancelled before the delay elapsed."""
        if cancel is not None:
            return cancel.wait(delay)
        if delay > 0:
            time.sleep(delay)
        return False


class AsyncAdapter:
    """Cooperative execution on the running event loop.

    Operations may return an awaitable or a plain value. Cancelling the
    surrounding task raises asyncio.CancelledError as usual.
    """

    __slots__ = ()

    async def invoke(self, operation: Callable[[], Awaitable[T] | T]) -> T:
        result = operation()
        if inspect.isawaitable(result):
            return await result
        return result

    async def wait(self, delay: float, cancel: CancellationToken | None) -> bool:
        """Suspend for `delay` seconds. Returns True if cancelled before the delay elapsed."""
        if cancel is None:
            await asyncio.sleep(delay)
            return False
        if cancel.cancelled:
            return True

        loop = asyncio.get_running_loop()
        woken: asyncio.Future[None] = loop.create_future()

        def _resolve() -> None:
            if not woken.done():
                woken.set_result(None)

        # cancel() may be called from any thread
        unregister = cancel.add_callback(lambda: loop.call_soon_threadsafe(_resolve))
        try:
            await asyncio.wait_for(woken, timeout=delay)
        except TimeoutError:
            return cancel.cancelled
        finally:
            unregister()
        return True


SYNC = SyncAdapter()
ASYNC = AsyncAdapter()
