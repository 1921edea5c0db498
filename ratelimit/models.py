"""Rate limit data models."""

from datetime import datetime
from pydantic import BaseModel, Field


class RateLimitWindow(BaseModel):
    """Admission counter for one subscriber's current fixed window."""
    count: int = Field(0, ge=0)
    window_start: datetime
