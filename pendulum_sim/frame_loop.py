"""Frame-driven loop that feeds elapsed wall time into a simulation session.

The host event loop is hidden behind :class:`TickScheduler`, so the loop can be
driven by a background timer thread, a GUI toolkit or a test double.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Optional, Protocol

from pendulum_sim.sim_session import SimulationSession

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class TickScheduler(Protocol):
    def schedule(self, callback: Callable[[], None]) -> Any:
        """Arrange for callback to run once at the next frame; return a cancel handle."""

    def cancel(self, handle: Any) -> None:
        """Cancel a pending callback. Cancelling a fired handle is a no-op."""


class ThreadTickScheduler:
    """Runs each callback on a daemon ``threading.Timer`` after ``interval`` seconds."""

    def __init__(self, interval: float = 1.0 / 60.0) -> None:
        self.interval = interval

    def schedule(self, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(self.interval, callback)
        timer.daemon = True
        timer.start()
        return timer

    def cancel(self, handle: threading.Timer) -> None:
        handle.cancel()


class FrameLoop:
    """Measures the time between frames, caps it and ticks the session.

    Ticks run strictly one after another: the next frame is only scheduled
    once the current tick has been applied.
    """

    def __init__(
        self,
        session: SimulationSession,
        scheduler: Optional[TickScheduler] = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self.session = session
        self.scheduler = scheduler or ThreadTickScheduler(session.config.frame_interval)
        self.clock = clock
        self._handle: Any = None
        self._last: Optional[float] = None
        self._stopped = True
        self._lock = threading.RLock()

    @property
    def running(self) -> bool:
        return not self._stopped and self._handle is not None

    def start(self) -> None:
        with self._lock:
            if self.running:
                return
            self._stopped = False
            self._last = self.clock()
            self._handle = self.scheduler.schedule(self._on_frame)
        logger.debug("Frame loop started")

    def stop(self) -> None:
        with self._lock:
            self._stopped = True
            if self._handle is not None:
                self.scheduler.cancel(self._handle)
                self._handle = None
        logger.debug("Frame loop stopped")

    def _on_frame(self) -> None:
        with self._lock:
            if self._stopped:
                return
            now = self.clock()
            last = now if self._last is None else self._last
            self._last = now
            dt = min(max(0.0, now - last), self.session.config.max_frame_dt)
            self.session.tick(dt)
            if not self._stopped:
                self._handle = self.scheduler.schedule(self._on_frame)
