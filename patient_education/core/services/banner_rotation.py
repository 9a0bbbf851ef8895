from __future__ import annotations

"""Banner rotation state machine.

The controller tracks which banner is shown and advances it automatically.
Timers come from an injected scheduler: any object exposing
``call_later(delay_seconds, callback)`` that returns a handle with
``cancel()``.  A running ``asyncio`` event loop satisfies this directly.

Exactly one timer is pending at any time: every transition cancels the
current handle before scheduling the next one, and :meth:`dispose` cancels
it for good.
"""

import logging
from typing import Any, Callable, Optional

__all__ = ["BannerRotationController"]

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 5.0


class BannerRotationController:
    """Cycles through ``banner_count`` banners.

    Parameters
    ----------
    banner_count : int
        Number of banners currently displayed.
    scheduler : object
        Provides ``call_later(delay, callback) -> handle``.
    interval : float, default=5.0
        Seconds between automatic advances.
    on_change : callable, optional
        Called with the new index after every change of index.

    Notes
    -----
    With one banner or none no timer runs and the index stays 0.
    """

    def __init__(self, banner_count: int, scheduler: Any,
                 interval: float = DEFAULT_INTERVAL_SECONDS,
                 on_change: Optional[Callable[[int], None]] = None) -> None:
        self._count = max(0, int(banner_count))
        self._scheduler = scheduler
        self._interval = float(interval)
        self._on_change = on_change
        self._index = 0
        self._handle: Optional[Any] = None
        self._disposed = False
        self._schedule()

    # --------------------------------------------------------------------- API

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def banner_count(self) -> int:
        return self._count

    @property
    def timer_pending(self) -> bool:
        return self._handle is not None

    def next(self) -> int:
        """Show the following banner and restart the countdown."""
        if self._count > 1:
            self._move_to((self._index + 1) % self._count)
        return self._index

    def previous(self) -> int:
        """Show the preceding banner and restart the countdown."""
        if self._count > 1:
            self._move_to((self._index - 1 + self._count) % self._count)
        return self._index

    def goto(self, index: int) -> int:
        """Jump to *index* (callers pass ``0 <= index < banner_count``)."""
        if self._count > 1:
            self._move_to(index)
        return self._index

    def set_banner_count(self, banner_count: int) -> None:
        """Re-arm after the banner list changed size."""
        count = max(0, int(banner_count))
        if self._disposed or count == self._count:
            return
        self._count = count
        new_index = self._index if self._index < self._count else 0
        if self._count <= 1:
            new_index = 0
        self._cancel()
        self._set_index(new_index)
        self._schedule()

    def dispose(self) -> None:
        """Cancel the pending timer; later transitions are ignored."""
        self._cancel()
        self._disposed = True

    # --------------------------------------------------------------- internals

    def _move_to(self, index: int) -> None:
        if self._disposed:
            return
        self._cancel()
        self._set_index(index)
        self._schedule()

    def _set_index(self, index: int) -> None:
        changed = index != self._index
        self._index = index
        if changed and self._on_change is not None:
            self._on_change(index)

    def _schedule(self) -> None:
        if self._disposed or self._count <= 1:
            return
        self._handle = self._scheduler.call_later(self._interval, self._on_timer)

    def _cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _on_timer(self) -> None:
        # The handle has fired; it must not be cancelled again
        self._handle = None
        if self._disposed:
            return
        logger.debug("Banner rotation tick: %d -> %d", self._index, (self._index + 1) % self._count)
        self._move_to((self._index + 1) % self._count)
