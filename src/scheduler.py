"""
AIO Price Randomizer - Cycle Scheduler
Runs one randomization cycle immediately, then repeats it on a daemon timer.

Each repetition is armed only after the previous one finishes, so cycles
never overlap. A failing cycle is logged and the next one is still armed;
the only way to stop is stop() (or process exit, the timer is a daemon).
"""

import logging
import threading
from typing import Optional

logger = logging.getLogger(__name__)


class CycleScheduler:
    """Idle -> Running -> Idle, repeated every interval_seconds."""

    def __init__(self, engine, interval_seconds: Optional[float] = None):
        self.engine = engine
        self.interval = (engine.config.interval_seconds
                         if interval_seconds is None else interval_seconds)
        self.last_result = None
        self.last_error: Optional[str] = None
        self._db = None
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()
        self._running = False
        self._stopped = False
        self._generation = 0

    @property
    def scheduled(self) -> bool:
        with self._lock:
            return self._timer is not None

    @property
    def state(self) -> str:
        if self._running:
            return "running"
        if self._stopped:
            return "stopped"
        return "idle"

    def start(self, db):
        """Run a cycle now and, if interval > 0, every interval seconds after.

        Calling start() again cancels the pending repetition first, including
        one whose callback is already running. A failed first cycle is logged
        like any other; repetition is still armed.
        """
        self.stop()
        with self._lock:
            self._db = db
            self._stopped = False
            generation = self._generation

        try:
            self.run_once()
        except Exception as e:
            self.last_error = str(e)
            logger.error(f"Initial cycle failed: {e}", exc_info=True)

        if self.interval > 0:
            self._schedule_next(generation)
            logger.info(f"Scheduled cycle every {self.interval}s")

    def stop(self):
        """Cancel the pending repetition; a cycle already running finishes."""
        with self._lock:
            self._generation += 1
            if self._timer:
                self._timer.cancel()
                self._timer = None
            self._stopped = True

    def run_once(self):
        """Run a single cycle on the caller's thread; errors propagate."""
        self._running = True
        try:
            self.last_result = self.engine.run_cycle(self._db)
            self.last_error = None
        finally:
            self._running = False
        return self.last_result

    def _schedule_next(self, generation: int):
        # Only the chain armed by the latest start() may re-arm itself.
        with self._lock:
            if self._stopped or generation != self._generation:
                return
            self._timer = threading.Timer(
                self.interval, self._scheduled_cycle, args=(generation,))
            self._timer.daemon = True
            self._timer.start()

    def _scheduled_cycle(self, generation: int):
        """Timer callback: run, log any failure, re-arm."""
        try:
            self.run_once()
        except Exception as e:
            self.last_error = str(e)
            logger.error(f"Cycle error: {e}", exc_info=True)
        self._schedule_next(generation)
