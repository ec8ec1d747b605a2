"""Background timer that asks the display to redraw at a fixed rate."""

from __future__ import annotations

import enum
import logging
import threading
import time
from typing import Callable, Optional


class DriverState(enum.Enum):
    NEW = "new"
    RUNNING = "running"
    TERMINATING = "terminating"
    STOPPED = "stopped"


def sleep_ms(duration_ms: float) -> None:
    """Sleep for the full duration, going back to sleep after any early wakeup."""
    wakeup_time = time.monotonic() + duration_ms / 1000.0
    remaining = duration_ms / 1000.0
    while remaining > 0:
        time.sleep(remaining)
        remaining = wakeup_time - time.monotonic()


class RefreshDriver:
    """
    Calls ``request_refresh`` every interval on a daemon thread.

    The callback only signals the display; it should not do pixel work.
    Termination is cooperative: the loop checks the state after each sleep,
    so ``terminate()`` stops the next request, not the one in flight. A
    driver runs once; build a new one to start again.
    """

    def __init__(self, request_refresh: Callable[[], None]):
        self._request_refresh = request_refresh
        self._lock = threading.Lock()
        self._state = DriverState.NEW
        self._stopped = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.interval_ms: Optional[float] = None
        self._ticks = 0

    @property
    def ticks(self) -> int:
        with self._lock:
            return self._ticks

    @property
    def state(self) -> DriverState:
        with self._lock:
            return self._state

    def start(self, interval_ms: float) -> None:
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")
        with self._lock:
            if self._state is not DriverState.NEW:
                raise RuntimeError(f"Refresh driver cannot be started from state {self._state.value}")
            self._state = DriverState.RUNNING
        self.interval_ms = interval_ms
        self._thread = threading.Thread(target=self._run, name="refresh-driver", daemon=True)
        self._thread.start()
        logging.debug("Refresh driver started (interval=%s ms)", interval_ms)

    def terminate(self) -> None:
        with self._lock:
            if self._state is DriverState.RUNNING:
                self._state = DriverState.TERMINATING
            elif self._state is DriverState.NEW:
                self._state = DriverState.STOPPED
                self._stopped.set()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the driver to stop; returns True once it has."""
        return self._stopped.wait(timeout)

    def _run(self) -> None:
        try:
            while True:
                with self._lock:
                    if self._state is not DriverState.RUNNING:
                        break
                    self._ticks += 1
                try:
                    self._request_refresh()
                except Exception:  # noqa: BLE001
                    logging.exception("Refresh request failed")
                sleep_ms(self.interval_ms)
        finally:
            with self._lock:
                self._state = DriverState.STOPPED
            self._stopped.set()
            logging.debug("Refresh driver stopped after %d ticks", self._ticks)
