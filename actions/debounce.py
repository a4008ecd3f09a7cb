"""Cancellable deferred task for debouncing a stream of edits."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Optional, Tuple

DEFAULT_DEBOUNCE_S = 0.2


class Debouncer:
    """Run only the most recently scheduled callback, after a quiet period.

    Each :meth:`schedule` call cancels the previous, not yet fired callback
    before arming a new timer on the event loop, so at most one deferred task
    is live at any time.  When no ``loop`` is given the running loop is used.
    """

    def __init__(self, delay_s: float = DEFAULT_DEBOUNCE_S, *, loop: Any = None) -> None:
        if delay_s < 0:
            raise ValueError("delay_s must be non-negative")
        self.delay_s = float(delay_s)
        self._loop = loop
        self._handle: Any = None
        self._pending: Optional[Tuple[Callable[..., Any], Tuple[Any, ...]]] = None

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def schedule(self, callback: Callable[..., Any], *args: Any) -> None:
        self.cancel()
        loop = self._loop if self._loop is not None else asyncio.get_running_loop()
        self._pending = (callback, args)
        self._handle = loop.call_later(self.delay_s, self._fire)

    def cancel(self) -> bool:
        """Drop the pending callback; return whether one was dropped."""

        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        had_pending = self._pending is not None
        self._pending = None
        return had_pending

    def flush(self) -> bool:
        """Run the pending callback now instead of waiting for the timer."""

        if self._pending is None:
            return False
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._fire()
        return True

    def _fire(self) -> None:
        pending = self._pending
        self._handle = None
        self._pending = None
        if pending is None:
            return
        callback, args = pending
        callback(*args)


__all__ = ["DEFAULT_DEBOUNCE_S", "Debouncer"]
