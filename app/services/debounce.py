"""
Project Status Dashboard
Single-slot debounce timer.

At most one timer is outstanding.  ``arm()`` cancels the pending timer and
starts a fresh quiet period; only the last timer of a burst ever runs the
callback.  A timer that had already started when it was superseded is
recognised by its generation number and returns without calling back.

Timer construction is injectable: ``timer_factory`` must accept the
``threading.Timer`` signature ``(interval, function, args=...)`` and return
an object with ``start()`` and ``cancel()``.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


class DebounceTimer:
    """Cancel-then-arm timer around one callback."""

    def __init__(
        self,
        delay_seconds: float,
        callback: Callable[[], None],
        *,
        timer_factory: Callable[..., object] = threading.Timer,
        name: str = "debounce",
    ) -> None:
        self.delay_seconds = delay_seconds
        self._callback = callback
        self._timer_factory = timer_factory
        self._name = name
        self._lock = threading.Lock()
        self._timer = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def arm(self) -> None:
        """Discard any pending timer and start a new quiet period."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            timer = self._timer_factory(self.delay_seconds, self._fire, args=(self._generation,))
            if isinstance(timer, threading.Thread):
                timer.daemon = True
                timer.name = f"{self._name}-{self._generation}"
            self._timer = timer
            timer.start()

    def cancel(self) -> bool:
        """Drop the pending timer.  Returns True if one was pending."""
        with self._lock:
            if self._timer is None:
                return False
            self._timer.cancel()
            self._timer = None
            self._generation += 1
            return True

    def flush(self) -> bool:
        """Run the pending callback now instead of waiting.  Returns True if it ran."""
        if not self.cancel():
            return False
        self._callback()
        return True

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._timer is None:
                logger.debug("%s: stale timer %d ignored", self._name, generation)
                return
            self._timer = None
        self._callback()
