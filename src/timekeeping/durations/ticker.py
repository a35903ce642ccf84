from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_TICK_SECONDS

logger = logging.getLogger(__name__)


class LiveTicker:
    """Repeating task that feeds a freshly sampled ``now`` to a callback.

    Runs on a daemon thread until ``cancel()`` is called, the owning ``with``
    block exits, or the callback raises. A raised error stops the ticker and
    is kept on ``error``.
    """

    def __init__(
        self,
        callback: Callable[[datetime], None],
        *,
        interval: float = DEFAULT_TICK_SECONDS,
        clock: Callable[[], datetime] = now_local,
        name: str = "live-ticker",
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._callback = callback
        self._interval = float(interval)
        self._clock = clock
        self._name = name
        self._cancelled = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.error: Optional[BaseException] = None
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def start(self) -> "LiveTicker":
        if self._thread is not None:
            raise RuntimeError(f"{self._name} already started")
        self._thread = threading.Thread(target=self._loop, name=self._name, daemon=True)
        self._thread.start()
        logger.debug("%s started (interval=%ss)", self._name, self._interval)
        return self

    def cancel(self, *, wait: bool = True, timeout: Optional[float] = None) -> None:
        self._cancelled.set()
        thread = self._thread
        if wait and thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        logger.debug("%s cancelled after %d tick(s)", self._name, self.ticks)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the ticker is cancelled. Returns False on timeout."""
        return self._cancelled.wait(timeout)

    def _loop(self) -> None:
        # First tick fires immediately, then once per interval.
        while not self._cancelled.is_set():
            try:
                self._callback(self._clock())
            except Exception as exc:
                self.error = exc
                self._cancelled.set()
                logger.exception("%s callback failed, ticker stopped", self._name)
                return
            self.ticks += 1
            self._cancelled.wait(self._interval)

    def __enter__(self) -> "LiveTicker":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cancel()
