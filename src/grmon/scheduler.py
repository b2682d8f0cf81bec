"""Background refresh timer and the schedule state it shares with the UI.

// [LAW:single-enforcer] ScheduleState is the only cross-thread mutable state;
//   every read and write goes through its lock.
// [LAW:locality-or-seam] The tick thread only signals "refresh due" via on_due.
//   Polling, reconcile and rendering stay on the foreground loop.

Two-level timing: the thread wakes every tick_seconds, and a refresh is due
once interval_seconds have elapsed since the last completed refresh. Changing
the pause flag never needs a timer restart.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_TICK_SECONDS = 0.5


@dataclass(frozen=True)
class ScheduleSnapshot:
    paused: bool
    interval_seconds: int
    last_refresh_at: Optional[float]
    in_flight: bool


class ScheduleState:
    """Pause flag, refresh timestamps and the single in-flight poll slot."""

    def __init__(self, interval_seconds: int, clock: Callable[[], float] = time.monotonic):
        if interval_seconds < 0:
            raise ValueError("interval_seconds must be >= 0")
        self._lock = threading.Lock()
        self._clock = clock
        self._interval = int(interval_seconds)
        self._paused = self._interval == 0
        self._last_refresh_at: Optional[float] = None
        self._in_flight = False

    @property
    def paused(self) -> bool:
        with self._lock:
            return self._paused

    @property
    def interval_seconds(self) -> int:
        with self._lock:
            return self._interval

    @property
    def last_refresh_at(self) -> Optional[float]:
        with self._lock:
            return self._last_refresh_at

    def toggle_pause(self) -> bool:
        """Flip the pause flag; returns the new value."""
        with self._lock:
            self._paused = not self._paused
            return self._paused

    def _due_locked(self) -> bool:
        if self._paused or self._interval <= 0 or self._in_flight:
            return False
        if self._last_refresh_at is None:
            return True
        return self._clock() - self._last_refresh_at >= self._interval

    def refresh_due(self) -> bool:
        with self._lock:
            return self._due_locked()

    def begin_refresh(self, manual: bool) -> bool:
        """Claim the in-flight slot.

        Manual refreshes skip the threshold and pause checks. Returns False
        when the request is dropped (a poll is already outstanding, or an
        automatic request is no longer due).
        """
        with self._lock:
            if self._in_flight:
                return False
            if not manual and not self._due_locked():
                return False
            self._in_flight = True
            return True

    def finish_refresh(self) -> None:
        with self._lock:
            self._in_flight = False
            self._last_refresh_at = self._clock()

    def snapshot(self) -> ScheduleSnapshot:
        with self._lock:
            return ScheduleSnapshot(
                paused=self._paused,
                interval_seconds=self._interval,
                last_refresh_at=self._last_refresh_at,
                in_flight=self._in_flight,
            )


class Scheduler:
    """Owns the background tick thread. start()/stop() are called from the UI loop."""

    def __init__(
        self,
        state: ScheduleState,
        on_due: Callable[[], None],
        tick_seconds: float = DEFAULT_TICK_SECONDS,
    ):
        self.state = state
        self._on_due = on_due
        self._tick_seconds = tick_seconds
        self._thread: Optional[threading.Thread] = None
        self._stop_event: Optional[threading.Event] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def tick(self) -> bool:
        """One wake-up: signal a refresh if one is due. Returns whether it signalled."""
        if not self.state.refresh_due():
            return False
        self._on_due()
        return True

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self._tick_seconds):
            try:
                self.tick()
            except Exception:
                logger.exception("scheduler tick failed")

    def start(self) -> None:
        if self.running:
            return
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._run,
            args=(self._stop_event,),
            name="grmon-scheduler",
            daemon=True,
        )
        self._thread.start()
        logger.debug("scheduler started tick=%.2fs", self._tick_seconds)

    def stop(self) -> None:
        """Cancel the tick thread and wait for it to exit."""
        if self._thread is None:
            return
        assert self._stop_event is not None
        self._stop_event.set()
        self._thread.join(timeout=max(1.0, self._tick_seconds * 4))
        if self._thread.is_alive():
            logger.warning("scheduler thread did not stop in time")
        self._thread = None
        self._stop_event = None
        logger.debug("scheduler stopped")
