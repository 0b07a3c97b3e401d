"""Periodic tick driving break-rule checks while a day is running."""

from __future__ import annotations

import logging
import threading
from datetime import timedelta
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class Ticker(Protocol):
    def start(self) -> None: ...

    def stop(self) -> None: ...

    def is_running(self) -> bool: ...


class TickRunner:
    """Call ``callback`` every ``interval`` on a background thread."""

    def __init__(self, interval: timedelta, callback: Callable[[], None]) -> None:
        self._interval = interval.total_seconds()
        self._callback = callback
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._stop_event: Optional[threading.Event] = None

    def start(self) -> None:
        with self._lock:
            if self._thread and self._thread.is_alive():
                return
            stop_event = threading.Event()
            thread = threading.Thread(
                target=self._run, args=(stop_event,), name="worktime-tick", daemon=True
            )
            self._thread = thread
            self._stop_event = stop_event
            thread.start()
            logger.debug("Tick thread started.")

    def stop(self) -> None:
        thread: Optional[threading.Thread] = None
        with self._lock:
            if not self._thread or not self._stop_event:
                return
            self._stop_event.set()
            thread = self._thread
            self._thread = None
            self._stop_event = None
        # The callback itself may end the day and stop us.
        if thread is not threading.current_thread():
            thread.join(timeout=5)
        logger.debug("Tick thread stopped.")

    def is_running(self) -> bool:
        with self._lock:
            return bool(self._thread and self._thread.is_alive())

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self._interval):
            try:
                self._callback()
            except Exception:
                logger.exception("Tick callback failed.")


class InertTicker:
    """Tracks whether ticking is wanted without scheduling anything.

    Used by one-shot commands and by tests that drive ``tick()`` by hand.
    """

    def __init__(self) -> None:
        self._running = False

    def start(self) -> None:
        self._running = True

    def stop(self) -> None:
        self._running = False

    def is_running(self) -> bool:
        return self._running
