"""Progress reporting, throttling and cooperative cancellation."""

from __future__ import annotations

import time
from typing import Any, Callable, Protocol

from locale_sync.domain.exceptions import SyncCancelledError

DEFAULT_INTERVAL_MS = 75

Dispatch = Callable[..., Any]
"""``dispatch(fn, *args)`` runs ``fn(*args)`` on the caller's context.

``asyncio.AbstractEventLoop.call_soon_threadsafe`` has this shape, so a
sync started from a worker thread can report back to an event loop.
"""


def call_inline(fn: Callable[..., Any], *args: Any) -> None:
    """Default dispatcher: invoke the callback immediately."""
    fn(*args)


class ProgressCallback(Protocol):
    """Receiver of sync progress.

    ``on_progress_update`` may fire any number of times;
    ``on_progress_finished`` fires exactly once per sync.
    """

    def on_progress_update(self, title: str, detail: str) -> None: ...

    def on_progress_finished(self, message: str | None, success: bool) -> None: ...


class ProgressThrottle:
    """Coalesce a rapid-fire progress source to one emit per interval.

    Call :meth:`ready` for every raw update and only emit when it returns
    ``True``.  :meth:`reset` starts a new phase so its first update passes.
    """

    def __init__(
        self,
        interval_ms: int = DEFAULT_INTERVAL_MS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._interval = interval_ms / 1000.0
        self._clock = clock
        self._last: float | None = None

    def ready(self) -> bool:
        now = self._clock()
        if self._last is None or now - self._last >= self._interval:
            self._last = now
            return True
        return False

    def reset(self) -> None:
        self._last = None


class CancellationToken:
    """Cooperative cancellation flag checked between sync steps."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise SyncCancelledError("Synchronization cancelled.")
