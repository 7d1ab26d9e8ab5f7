"""Press-duration state machine — short, long and very long presses."""

from __future__ import annotations

import enum
import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)

# Second threshold is this many times the long-press time
VERY_LONG_FACTOR = 5


class PressPhase(enum.Enum):
    DISABLED = 0
    SHORT = 1
    LONG = 2
    VERY_LONG = 3


class ThreadingScheduler:
    """Timer source backed by daemon threading.Timer objects."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


class PressTimer:
    """Classify a press by how long it is held.

    A single timer is re-armed at each threshold:

        activate ── T ──> LONG (on_long) ── 5T ──> VERY_LONG (on_very_long) -> DISABLED

    Releasing while still SHORT fires on_short. Releasing later only cancels
    the pending timer. Timer callbacks and press events are serialized by one
    lock, so a stale timer can never race a release.
    """

    def __init__(self, long_press_time: float,
                 on_short: Callable[[], None],
                 on_long: Callable[[], None],
                 on_very_long: Callable[[], None],
                 scheduler=None):
        self.long_press_time = long_press_time
        self.on_short = on_short
        self.on_long = on_long
        self.on_very_long = on_very_long
        self.scheduler = scheduler or ThreadingScheduler()
        self.lock = threading.RLock()
        self._timer = None
        self._phase = PressPhase.DISABLED

    @property
    def phase(self) -> PressPhase:
        return self._phase

    @property
    def pending(self) -> bool:
        """True while a threshold timer is armed."""
        return self._timer is not None

    def _set_phase(self, phase: PressPhase):
        logger.debug("New state: %s", phase.name)
        self._phase = phase

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _queue_state_change(self, next_phase: PressPhase, delay: float,
                            callback: Callable[[], None]):
        """Replace the pending timer with one that enters next_phase."""
        self._cancel_timer()
        handle = None

        def fire():
            with self.lock:
                # Cancelled or replaced after the timer thread woke up
                if self._timer is not handle:
                    return
                self._timer = None
                self._set_phase(next_phase)
                callback()

        handle = self.scheduler.call_later(delay, fire)
        self._timer = handle

    def _enter_long(self):
        try:
            self.on_long()
        finally:
            self._queue_state_change(
                PressPhase.VERY_LONG,
                self.long_press_time * VERY_LONG_FACTOR,
                self._enter_very_long,
            )

    def _enter_very_long(self):
        try:
            self.on_very_long()
        finally:
            self._set_phase(PressPhase.DISABLED)

    def on_activate(self):
        """Button pressed."""
        with self.lock:
            assert self._timer is None and self._phase is PressPhase.DISABLED, \
                "activate without matching deactivate"
            # Drop whatever is left of an unfinished cycle
            self._cancel_timer()

            self._set_phase(PressPhase.SHORT)
            self._queue_state_change(PressPhase.LONG, self.long_press_time, self._enter_long)

    def on_deactivate(self):
        """Button released."""
        with self.lock:
            self._cancel_timer()
            phase = self._phase
            self._set_phase(PressPhase.DISABLED)
            if phase is PressPhase.SHORT:
                self.on_short()

    def cancel(self):
        """Abandon the current press without applying anything."""
        with self.lock:
            self._cancel_timer()
            self._set_phase(PressPhase.DISABLED)
