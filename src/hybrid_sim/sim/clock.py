"""Fixed-period tick source running on a background thread."""
from __future__ import annotations

import logging
import threading
import time
from typing import Optional

from ..errors import SimulationError, ValidationError

logger = logging.getLogger(__name__)


class PeriodicTicker:
    """Calls controller.tick(interval) every `interval_ms` of wall-clock time.

    Simulated time advances by the nominal interval on every tick, even if
    the thread falls behind. Any exception raised by a tick stops the ticker
    and is kept in `last_error`; after a clean `stop()` it stays None.
    """

    def __init__(self, controller, interval_ms: float = 20.0):
        if not interval_ms > 0:
            raise ValidationError(f"interval_ms must be positive, got {interval_ms}")
        self.controller = controller
        self.interval = float(interval_ms) / 1000.0
        self.ticks = 0
        self.last_error: Optional[Exception] = None
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> "PeriodicTicker":
        if self.running:
            raise RuntimeError("Ticker already running")
        self._stop.clear()
        self.last_error = None
        self._thread = threading.Thread(
            target=self._run, name=f"ticker-{self.controller.name}", daemon=True
        )
        self._thread.start()
        return self

    def stop(self, timeout: Optional[float] = None):
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def __enter__(self) -> "PeriodicTicker":
        return self.start()

    def __exit__(self, exc_type, exc, tb):
        self.stop()

    def _run(self):
        next_wall = time.perf_counter()
        while not self._stop.is_set():
            try:
                self.controller.tick(self.interval)
            except SimulationError as e:
                self.last_error = e
                logger.error("Ticker for %s stopped: %s", self.controller.name, e)
                break
            except Exception as e:
                self.last_error = e
                logger.exception("Ticker for %s stopped on an unexpected error", self.controller.name)
                break
            self.ticks += 1

            # Real-time pacing
            next_wall += self.interval
            delay = next_wall - time.perf_counter()
            if delay > 0:
                self._stop.wait(delay)
