"""Tests for the Rate Limiter."""

import pytest
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

from fakes import FakeClock
from ratelimit.limiter import RateLimiter
from storage.in_memory import InMemoryStateStore
from storage.sqlite_store import SQLiteStateStore


class TestRateLimiter:
    """Test fixed-window admission control."""

    def setup_method(self):
        """Set up test fixtures."""
        self.clock = FakeClock()
        self.store = InMemoryStateStore(clock=self.clock)
        self.limiter = RateLimiter(
            store=self.store,
            limit=30,
            window=timedelta(hours=24),
            clock=self.clock
        )

    def test_admits_exactly_limit_then_denies(self):
        """Test that the limit+1-th request in a window is denied."""
        results = [self.limiter.check_and_admit("u1") for _ in range(30)]

        assert all(r.allowed for r in results)
        assert results[-1].count == 30

        denied = self.limiter.check_and_admit("u1")
        assert denied.allowed is False
        assert denied.limit == 30

    def test_denial_does_not_increment_count(self):
        """Test that denied checks leave the counter at the limit."""
        for _ in range(30):
            self.limiter.check_and_admit("u1")

        for _ in range(5):
            result = self.limiter.check_and_admit("u1")
            assert result.count == 30

        assert self.limiter.peek("u1").count == 30

    def test_window_resets_after_duration(self):
        """Test that admission resets only once the window end has passed."""
        for _ in range(31):
            self.limiter.check_and_admit("u1")

        self.clock.advance(hours=23, minutes=59)
        assert self.limiter.check_and_admit("u1").allowed is False

        self.clock.advance(minutes=1)
        assert self.limiter.check_and_admit("u1").allowed is False

        self.clock.advance(seconds=1)
        result = self.limiter.check_and_admit("u1")
        assert result.allowed is True
        assert result.count == 1
        assert result.window_start == self.clock.now

    def test_subscribers_are_independent(self):
        """Test that one subscriber's usage does not affect another."""
        for _ in range(30):
            self.limiter.check_and_admit("u1")

        assert self.limiter.check_and_admit("u1").allowed is False
        assert self.limiter.check_and_admit("u2").allowed is True

    def test_resets_at_reported(self):
        """Test that the result reports when the window ends."""
        result = self.limiter.check_and_admit("u1")
        assert result.resets_at == self.clock.now + timedelta(hours=24)

    def test_concurrent_checks_never_over_admit(self):
        """Test that concurrent checks for one subscriber admit at most limit."""
        limiter = RateLimiter(store=InMemoryStateStore(), limit=30)

        with ThreadPoolExecutor(max_workers=16) as pool:
            results = list(pool.map(lambda _: limiter.check_and_admit("u1"), range(200)))

        admitted = [r for r in results if r.allowed]
        assert len(admitted) == 30
        assert sorted(r.count for r in admitted) == list(range(1, 31))

    def test_reset_forgets_window(self):
        """Test that reset clears a subscriber's counter."""
        for _ in range(30):
            self.limiter.check_and_admit("u1")
        self.limiter.reset("u1")

        assert self.limiter.check_and_admit("u1").count == 1

    def test_rejects_invalid_configuration(self):
        """Test constructor validation."""
        with pytest.raises(ValueError):
            RateLimiter(store=self.store, limit=-1)
        with pytest.raises(ValueError):
            RateLimiter(store=self.store, window=timedelta(0))


class TestRateLimiterSQLite:
    """Test the rate limiter over the SQLite state store."""

    def test_counts_survive_new_limiter(self, tmp_path):
        """Test that windows persist across limiter instances."""
        clock = FakeClock()
        db_path = str(tmp_path / "state.db")

        first = RateLimiter(SQLiteStateStore(db_path, clock=clock), limit=3, clock=clock)
        for _ in range(3):
            first.check_and_admit("u1")

        second = RateLimiter(SQLiteStateStore(db_path, clock=clock), limit=3, clock=clock)
        assert second.check_and_admit("u1").allowed is False

    def test_concurrent_checks_never_over_admit(self, tmp_path):
        """Test that the SQLite store serializes one subscriber's checks."""
        limiter = RateLimiter(SQLiteStateStore(str(tmp_path / "state.db")), limit=10)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: limiter.check_and_admit("u1"), range(40)))

        assert sum(1 for r in results if r.allowed) == 10
