from typing import Callable
import logging

from PyQt6.QtCore import QTimer

logger = logging.getLogger(__name__)

SESSION_TICK_MS = 1000
QUESTION_TICK_MS = 1000
INTERFERENCE_TICK_MS = 300


class QtTimerBackend:
    """Repeating QTimer that calls `on_timeout` on every interval."""
    def __init__(self, on_timeout: Callable[[], None]):
        self._timer = QTimer()
        self._timer.timeout.connect(on_timeout)

    def start(self, interval_ms: int) -> None:
        self._timer.start(interval_ms)

    def stop(self) -> None:
        self._timer.stop()


class PhaseTimer:
    """
    Scoped repeating timer owned by the session controller.

    A timeout delivered after `cancel()` (e.g. one already queued in the event
    loop) is dropped, so a stale tick can never act on a later phase.
    """
    def __init__(self, name: str, interval_ms: int, callback: Callable[[], None],
                 backend_factory: Callable[[Callable[[], None]], object] = QtTimerBackend):
        self.name = name
        self.interval_ms = interval_ms
        self._callback = callback
        self._armed = False
        self._backend = backend_factory(self._on_timeout)

    @property
    def active(self) -> bool:
        return self._armed

    def arm(self) -> None:
        if self._armed:
            self._backend.stop()
        self._armed = True
        self._backend.start(self.interval_ms)
        logger.debug(f"Timer '{self.name}' armed ({self.interval_ms} ms).")

    def cancel(self) -> None:
        if self._armed:
            self._armed = False
            self._backend.stop()
            logger.debug(f"Timer '{self.name}' cancelled.")

    def _on_timeout(self) -> None:
        if not self._armed:
            logger.debug(f"Dropped stale tick from timer '{self.name}'.")
            return
        self._callback()
