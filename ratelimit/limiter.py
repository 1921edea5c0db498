"""Fixed-window per-subscriber admission control."""

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from schemas.responses import AdmissionResult
from storage.base import BaseStateStore
from .models import RateLimitWindow

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Admits at most ``limit`` messages per subscriber per window.

    The check and the increment happen inside one store update, so two
    concurrent checks for the same subscriber can never both pass on a
    stale count.
    """

    NAMESPACE = "rate_limit"

    def __init__(
        self,
        store: BaseStateStore,
        limit: int = 30,
        window: timedelta = timedelta(hours=24),
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize rate limiter.

        Args:
            store: Keyed state store holding the windows
            limit: Maximum admissions per window
            window: Window duration
            clock: Optional time source (defaults to datetime.now)
        """
        if limit < 0:
            raise ValueError("limit must be >= 0")
        if window <= timedelta(0):
            raise ValueError("window must be positive")

        self.store = store
        self.limit = limit
        self.window = window
        self._clock = clock or datetime.now

    def check_and_admit(self, subscriber_id: str) -> AdmissionResult:
        """
        Check the subscriber's window and count this message if admitted.

        Args:
            subscriber_id: Normalized subscriber id

        Returns:
            AdmissionResult; count is not incremented on denial
        """
        now = self._clock()

        def mutate(current):
            state = self._load_window(current, now)
            allowed = state.count < self.limit
            if allowed:
                state.count += 1
            result = self._result(state, allowed)
            return state.model_dump(mode="json"), result

        result = self.store.update(self.NAMESPACE, subscriber_id, mutate)

        if result.allowed:
            logger.debug(f"Admitted {subscriber_id}: {result.count}/{result.limit}")
        else:
            logger.warning(
                f"AdmissionDenied for {subscriber_id}: {result.count}/{result.limit}, "
                f"resets at {result.resets_at.isoformat()}"
            )
        return result

    def peek(self, subscriber_id: str) -> AdmissionResult:
        """Current usage without counting a message."""
        now = self._clock()
        state = self._load_window(self.store.get(self.NAMESPACE, subscriber_id), now)
        return self._result(state, state.count < self.limit)

    def reset(self, subscriber_id: str) -> None:
        """Forget a subscriber's window."""
        self.store.delete(self.NAMESPACE, subscriber_id)

    def _load_window(self, raw: Optional[dict], now: datetime) -> RateLimitWindow:
        """Parse stored state; a fresh window opens once now is past the old window end."""
        if raw:
            state = RateLimitWindow.model_validate(raw)
            if now <= state.window_start + self.window:
                return state
        return RateLimitWindow(count=0, window_start=now)

    def _result(self, state: RateLimitWindow, allowed: bool) -> AdmissionResult:
        return AdmissionResult(
            allowed=allowed,
            count=state.count,
            limit=self.limit,
            window_start=state.window_start,
            resets_at=state.window_start + self.window
        )
