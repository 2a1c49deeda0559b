from __future__ import annotations

"""
Frame scheduling and resize debouncing.

FrameTicker and ManualTicker share one small interface:

    ticker.start(callback)   # begin calling callback() once per frame
    ticker.cancel()          # stop for good (cancellation is final)
    ticker.active / ticker.cancelled

FrameTicker is driven by a QTimer and the Qt event loop; ManualTicker is
advanced explicitly with tick(), which makes the simulation steppable in
tests and in headless captures without a real frame clock.
"""

from typing import Any, Callable, Optional, Tuple

from PyQt6.QtCore import QTimer

FRAME_INTERVAL_MS = 16  # ~60 FPS
RESIZE_DEBOUNCE_MS = 200


class FrameTicker:
    """Calls a callback on every QTimer timeout until cancelled."""

    def __init__(self, interval_ms: int = FRAME_INTERVAL_MS) -> None:
        self._callback: Optional[Callable[[], None]] = None
        self._cancelled = False
        self._timer = QTimer()
        self._timer.setInterval(max(1, int(interval_ms)))
        self._timer.timeout.connect(self._on_tick)

    @property
    def active(self) -> bool:
        return self._timer.isActive()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def start(self, callback: Callable[[], None]) -> None:
        if self._cancelled:
            return
        self._callback = callback
        self._timer.start()

    def cancel(self) -> None:
        self._cancelled = True
        self._timer.stop()
        self._callback = None

    def _on_tick(self) -> None:
        if self._cancelled or self._callback is None:
            return
        self._callback()


class ManualTicker:
    """Ticker advanced by explicit tick() calls."""

    def __init__(self) -> None:
        self._callback: Optional[Callable[[], None]] = None
        self._cancelled = False
        self.ticks = 0

    @property
    def active(self) -> bool:
        return self._callback is not None and not self._cancelled

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def start(self, callback: Callable[[], None]) -> None:
        if self._cancelled:
            return
        self._callback = callback

    def cancel(self) -> None:
        self._cancelled = True
        self._callback = None

    def tick(self, n: int = 1) -> int:
        """Run up to *n* frames; returns how many actually ran."""
        ran = 0
        for _ in range(max(0, int(n))):
            if not self.active:
                break
            callback = self._callback
            callback()
            self.ticks += 1
            ran += 1
        return ran


class Debouncer:
    """
    Coalesce bursts of calls into one delayed call.

    Every call restarts a single-shot QTimer; when it finally fires, *fn* is
    invoked once with the arguments of the most recent call.
    """

    def __init__(self, fn: Callable[..., Any], wait_ms: int = RESIZE_DEBOUNCE_MS) -> None:
        self._fn = fn
        self._args: Optional[Tuple[Any, ...]] = None
        self._kwargs: dict = {}
        self._timer = QTimer()
        self._timer.setSingleShot(True)
        self._timer.setInterval(max(0, int(wait_ms)))
        self._timer.timeout.connect(self.flush)

    @property
    def pending(self) -> bool:
        return self._args is not None

    @property
    def wait_ms(self) -> int:
        return self._timer.interval()

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        self._args = args
        self._kwargs = kwargs
        # start() on an active timer restarts the countdown.
        self._timer.start()

    def flush(self) -> bool:
        """Run the pending call now. Returns False when nothing was pending."""
        self._timer.stop()
        if self._args is None:
            return False
        args, kwargs = self._args, self._kwargs
        self._args = None
        self._kwargs = {}
        self._fn(*args, **kwargs)
        return True

    def cancel(self) -> None:
        self._timer.stop()
        self._args = None
        self._kwargs = {}
