"""Per-subscriber rate limiting."""

from .models import RateLimitWindow
from .limiter import RateLimiter

__all__ = ["RateLimitWindow", "RateLimiter"]
