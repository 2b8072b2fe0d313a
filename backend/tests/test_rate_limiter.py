"""
Edge Proxy — Rate Limiter Unit Tests
======================================

What:  Tests for FixedWindowRateLimiter on a fake clock.

What we test:
    ✅ The (limit + 1)-th request inside one window is rejected
    ✅ A request more than window_ms after the window start resets the count
    ✅ A request exactly window_ms after the window start is still in-window
    ✅ Keys are independent; "unknown" is just another shared key
    ✅ Concurrent callers never undercount
"""

from concurrent.futures import ThreadPoolExecutor

from edgeproxy.services.rate_limiter import FixedWindowRateLimiter

from conftest import FakeClock


class TestFixedWindow:
    """Admit/reject decisions within and across windows."""

    def setup_method(self):
        self.clock = FakeClock()
        self.limiter = FixedWindowRateLimiter(limit=5, window_ms=60_000, clock=self.clock)

    def test_first_request_creates_record(self):
        """First request from a key starts a window with count 1."""
        assert self.limiter.check_and_record("10.0.0.1") is True
        record = self.limiter.get_record("10.0.0.1")
        assert record.count == 1
        assert record.window_start == self.clock.now

    def test_requests_up_to_limit_are_allowed(self):
        """Every request up to the limit is admitted."""
        results = [self.limiter.check_and_record("10.0.0.1") for _ in range(5)]
        assert results == [True] * 5

    def test_request_over_limit_is_rejected(self):
        """The (limit + 1)-th request in one window is rejected."""
        for _ in range(5):
            self.limiter.check_and_record("10.0.0.1")
        assert self.limiter.check_and_record("10.0.0.1") is False

    def test_rejected_requests_still_count(self):
        """Rejected requests still increment the counter."""
        for _ in range(8):
            self.limiter.check_and_record("10.0.0.1")
        assert self.limiter.get_record("10.0.0.1").count == 8

    def test_window_expiry_resets_count(self):
        """window_ms + 1 after the window start, any prior count is forgotten."""
        for _ in range(20):
            self.limiter.check_and_record("10.0.0.1")

        self.clock.advance(60_001)

        assert self.limiter.check_and_record("10.0.0.1") is True
        record = self.limiter.get_record("10.0.0.1")
        assert record.count == 1
        assert record.window_start == self.clock.now

    def test_exact_window_boundary_is_same_window(self):
        """Exactly window_ms after the start is still the old window."""
        for _ in range(5):
            self.limiter.check_and_record("10.0.0.1")

        self.clock.advance(60_000)

        assert self.limiter.check_and_record("10.0.0.1") is False

    def test_window_is_anchored_at_first_request(self):
        """Requests inside the window do not push the window start forward."""
        self.limiter.check_and_record("10.0.0.1")
        start = self.limiter.get_record("10.0.0.1").window_start

        self.clock.advance(30_000)
        self.limiter.check_and_record("10.0.0.1")

        assert self.limiter.get_record("10.0.0.1").window_start == start

    def test_keys_are_independent(self):
        """Exhausting one key leaves other keys untouched."""
        for _ in range(6):
            self.limiter.check_and_record("10.0.0.1")
        assert self.limiter.check_and_record("10.0.0.2") is True
        assert len(self.limiter) == 2

    def test_unknown_key_is_a_shared_bucket(self):
        """"unknown" is limited like any other key."""
        for _ in range(5):
            assert self.limiter.check_and_record("unknown") is True
        assert self.limiter.check_and_record("unknown") is False

    def test_limit_of_one(self):
        """A limit of 1 admits one request and rejects the next."""
        limiter = FixedWindowRateLimiter(limit=1, window_ms=1_000, clock=self.clock)
        assert limiter.check_and_record("k") is True
        assert limiter.check_and_record("k") is False

    def test_get_record_returns_copy(self):
        """Mutating a returned record does not affect the limiter."""
        self.limiter.check_and_record("10.0.0.1")
        record = self.limiter.get_record("10.0.0.1")
        record.count = 999
        assert self.limiter.get_record("10.0.0.1").count == 1

    def test_get_record_for_unseen_key(self):
        """A key never seen has no record."""
        assert self.limiter.get_record("never-seen") is None


class TestConcurrency:
    """The increment-and-compare must not race."""

    def test_parallel_callers_admit_exactly_limit(self):
        """8 threads x 250 calls on one key admit exactly 1000."""
        clock = FakeClock()
        limiter = FixedWindowRateLimiter(limit=1000, window_ms=60_000, clock=clock)

        def burst(_):
            return sum(limiter.check_and_record("203.0.113.9") for _ in range(250))

        with ThreadPoolExecutor(max_workers=8) as pool:
            allowed = sum(pool.map(burst, range(8)))

        assert allowed == 1000
        assert limiter.get_record("203.0.113.9").count == 2000
