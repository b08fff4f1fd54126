"""Process-wide bound on simultaneous Canvas requests."""

import threading
from typing import Optional

from constants import DEFAULT_CONCURRENCY_LIMIT


class ConcurrencyGate:
    """
    Counting semaphore limiting the number of in-flight requests.

    One gate is normally shared by every client talking to the same Canvas
    instance. Use it as a context manager so the permit is released on every
    exit path:

        with gate:
            session.request(...)
    """

    def __init__(self, limit: int = DEFAULT_CONCURRENCY_LIMIT) -> None:
        if limit < 1:
            raise ValueError("Concurrency limit must be at least 1")
        self.limit = limit
        self._semaphore = threading.BoundedSemaphore(limit)
        self._lock = threading.Lock()
        self._in_flight = 0
        self._peak = 0

    @property
    def in_flight(self) -> int:
        with self._lock:
            return self._in_flight

    @property
    def peak_in_flight(self) -> int:
        """Highest number of permits held at once since construction."""
        with self._lock:
            return self._peak

    def acquire(self, timeout: Optional[float] = None) -> bool:
        """Take a permit, blocking up to ``timeout`` seconds (forever if None)."""
        if timeout is None:
            acquired = self._semaphore.acquire()
        else:
            acquired = self._semaphore.acquire(timeout=timeout)
        if acquired:
            with self._lock:
                self._in_flight += 1
                self._peak = max(self._peak, self._in_flight)
        return acquired

    def release(self) -> None:
        with self._lock:
            if self._in_flight == 0:
                raise ValueError("ConcurrencyGate released more times than acquired")
            self._in_flight -= 1
        self._semaphore.release()

    def __enter__(self) -> "ConcurrencyGate":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def __repr__(self) -> str:
        return f"ConcurrencyGate(limit={self.limit}, in_flight={self.in_flight})"
