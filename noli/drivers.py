"""
Tick drivers: decide when the simulation loop stops and pace it in wall time.
"""

import threading

from loguru import logger

from .errors import ConfigError

# Wait per poll, in seconds
DEFAULT_POLL_INTERVAL = 0.5


class EventTickDriver:
    """Stops when `stop()` is called, waiting up to `interval` seconds per poll.

    `stop()` may be called from another thread or a signal handler; a pending
    wait returns immediately.
    """

    def __init__(self, interval: float = DEFAULT_POLL_INTERVAL):
        if interval < 0:
            raise ConfigError(f"Poll interval must be non-negative, got {interval}")
        self.interval = interval
        self._stop_event = threading.Event()

    def should_stop(self) -> bool:
        return self._stop_event.wait(self.interval)

    def stop(self) -> None:
        if not self._stop_event.is_set():
            logger.info("Stop requested")
        self._stop_event.set()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()


class FixedTickDriver:
    """Stops after a fixed number of polls. Never blocks."""

    def __init__(self, ticks: int):
        if ticks < 1:
            raise ConfigError(f"Tick count must be at least 1, got {ticks}")
        self.ticks = ticks
        self.polls = 0

    def should_stop(self) -> bool:
        self.polls += 1
        return self.polls >= self.ticks
