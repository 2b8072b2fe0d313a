"""
Edge Proxy — Fixed Window Rate Limiter
========================================

What:  Per-client request counter that decides admit/reject for each request.
How:   Fixed window counter keyed by client IP. Each key owns a RateRecord
       holding the count and the start of its current window.
Who:   Called by RateLimitMiddleware for every non-preflight /api/airtable
       request.

Algorithm: Fixed Window Counter
    1. First request from a key, or the key's window has expired
       (now - window_start > window_ms): reset to count=1, allow.
    2. Otherwise increment count; reject once count exceeds the limit.

    Rejected requests still count. A client that keeps hammering a closed
    window does not get a fresh budget until the window expires.

Scope of the limit:
    The counter table lives in process memory. It is reset on restart and is
    NOT shared between worker processes or instances, so with N workers the
    effective limit is N × limit. A shared store (e.g. Redis INCR + PEXPIRE)
    would make the limit global; that changes observable behavior and is not
    done here.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional


def _now_ms() -> float:
    return time.time() * 1000


@dataclass
class RateRecord:
    """Counter state for one client key. count is always >= 1."""
    count: int
    window_start: float


class FixedWindowRateLimiter:
    """
    In-memory fixed window rate limiter.

    Thread Safety:
        The read-increment-compare sequence runs under a lock, so concurrent
        requests for the same key never undercount, whether the server runs
        one event loop or a thread pool.

    Args:
        limit:     Requests admitted per window per key.
        window_ms: Window length in milliseconds.
        clock:     Returns the current time in milliseconds. Injectable for tests.
    """

    def __init__(
        self,
        limit: int = 1000,
        window_ms: int = 60_000,
        clock: Callable[[], float] = _now_ms,
    ):
        self.limit = limit
        self.window_ms = window_ms
        self._clock = clock
        self._records: Dict[str, RateRecord] = {}
        self._lock = threading.Lock()

    def check_and_record(self, client_key: str) -> bool:
        """
        Record one request for `client_key` and report whether it is allowed.

        Never raises. Any string is a valid key; callers map unknown clients
        to the literal "unknown", which then acts as one shared bucket.
        """
        now = self._clock()
        with self._lock:
            record = self._records.get(client_key)

            if record is None or now - record.window_start > self.window_ms:
                self._records[client_key] = RateRecord(count=1, window_start=now)
                return True

            record.count += 1
            return record.count <= self.limit

    def get_record(self, client_key: str) -> Optional[RateRecord]:
        """Return a copy of the current record for `client_key`, or None."""
        with self._lock:
            record = self._records.get(client_key)
            if record is None:
                return None
            return RateRecord(count=record.count, window_start=record.window_start)

    def __len__(self) -> int:
        return len(self._records)
