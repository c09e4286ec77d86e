"""Search budget shared by every position generated during one search."""

import logging
import threading
import time
from typing import Optional

logger = logging.getLogger(__name__)


class SearchBudget:
    """
    Externally managed limit on a search.

    The budget is spent when `stop()` has been called (from any thread), when
    the number of generated positions reaches `node_limit`, or when
    `time_limit_ms` has elapsed since construction. Once the clock runs out
    the stop event is latched so later polls are cheap.
    """

    def __init__(self, time_limit_ms: Optional[int] = None, node_limit: Optional[int] = None):
        self.time_limit_ms = time_limit_ms
        self.node_limit = node_limit
        self.nodes = 0
        self._stop_event = threading.Event()
        self._start = time.monotonic()

    def stop(self) -> None:
        self._stop_event.set()

    @property
    def is_stopped(self) -> bool:
        return self._stop_event.is_set()

    @property
    def elapsed_ms(self) -> float:
        return (time.monotonic() - self._start) * 1000.0

    def count(self, n: int = 1) -> None:
        self.nodes += n

    def exhausted(self) -> bool:
        if self._stop_event.is_set():
            return True
        if self.node_limit is not None and self.nodes >= self.node_limit:
            return True
        if self.time_limit_ms is not None and self.elapsed_ms >= self.time_limit_ms:
            logger.debug("time budget of %d ms spent after %d nodes", self.time_limit_ms, self.nodes)
            self._stop_event.set()
            return True
        return False
