"""
Circuit Breaker Module

Stops hammering the API after repeated server failures, and bounds the
number of requests in flight at once (bulkhead).
"""

import threading
import time
from typing import Callable, Optional, Tuple, Type, TypeVar

from notion_sync.config import CIRCUIT_BREAKER_RESET_SECONDS, CIRCUIT_BREAKER_THRESHOLD, MAX_PARALLEL_REQUESTS
from notion_sync.exceptions import NotionSyncError
from notion_sync.logger import logger


T = TypeVar('T')


class CircuitOpenError(NotionSyncError):
    """Raised when a call is rejected because the circuit is open."""


class CircuitBreaker:
    """
    Classic three-state circuit breaker (thread-safe).

    - closed: calls pass through; consecutive failures are counted
    - open: calls are rejected with CircuitOpenError until reset_seconds pass
    - half_open: one trial call; success closes, failure re-opens
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

    def __init__(self,
                 failure_threshold: int = CIRCUIT_BREAKER_THRESHOLD,
                 reset_seconds: float = CIRCUIT_BREAKER_RESET_SECONDS,
                 failure_exceptions: Tuple[Type[BaseException], ...] = (Exception,),
                 clock: Callable[[], float] = time.monotonic):
        """
        Args:
            failure_threshold: Consecutive failures before the circuit opens
            reset_seconds: How long the circuit stays open
            failure_exceptions: Exception types counted as failures
            clock: Time source, replaceable in tests
        """
        self.failure_threshold = failure_threshold
        self.reset_seconds = reset_seconds
        self.failure_exceptions = failure_exceptions
        self._clock = clock
        self._lock = threading.Lock()
        self._state = self.CLOSED
        self._failures = 0
        self._opened_at: Optional[float] = None

    @property
    def state(self) -> str:
        with self._lock:
            self._refresh()
            return self._state

    def _refresh(self):
        """Move open -> half_open once the reset window has elapsed (lock held)."""
        if self._state == self.OPEN and self._clock() - self._opened_at >= self.reset_seconds:
            self._state = self.HALF_OPEN
            logger.info("Circuit half-open, allowing a trial request")

    def call(self, func: Callable[..., T], *args, **kwargs) -> T:
        with self._lock:
            self._refresh()
            if self._state == self.OPEN:
                remaining = self.reset_seconds - (self._clock() - self._opened_at)
                raise CircuitOpenError(f"Circuit open, retry in {remaining:.1f}s")

        try:
            result = func(*args, **kwargs)
        except self.failure_exceptions:
            self._record_failure()
            raise

        self._record_success()
        return result

    def _record_failure(self):
        with self._lock:
            self._failures += 1
            if self._state == self.HALF_OPEN or self._failures >= self.failure_threshold:
                if self._state != self.OPEN:
                    logger.warning(
                        f"Circuit opened after {self._failures} failures, "
                        f"pausing for {self.reset_seconds:.1f}s"
                    )
                self._state = self.OPEN
                self._opened_at = self._clock()

    def _record_success(self):
        with self._lock:
            if self._state == self.HALF_OPEN:
                logger.info("Circuit closed")
            self._state = self.CLOSED
            self._failures = 0
            self._opened_at = None


class Bulkhead:
    """
    Limit concurrent calls with a bounded semaphore.

    Usage:
        bulkhead = Bulkhead(10)
        with bulkhead:
            session.get(...)
    """

    def __init__(self, max_concurrent: int = MAX_PARALLEL_REQUESTS):
        self.max_concurrent = max_concurrent
        self._semaphore = threading.BoundedSemaphore(max_concurrent)

    def __enter__(self):
        self._semaphore.acquire()
        return self

    def __exit__(self, exc_type, exc, tb):
        self._semaphore.release()
        return False
