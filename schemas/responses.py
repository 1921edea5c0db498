"""Pipeline outcome schemas."""

from datetime import datetime
from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, ConfigDict, Field

from .context import Category, Language


class AdmissionResult(BaseModel):
    """Outcome of a rate-limit admission check."""
    allowed: bool
    count: int = Field(..., ge=0)
    limit: int = Field(..., ge=0)
    window_start: datetime
    resets_at: datetime


class DeliveryResult(BaseModel):
    """Outcome of an outbound channel send."""
    success: bool
    provider_response: Optional[Any] = None
    error: Optional[str] = None


class PipelineStatus(str, Enum):
    """Caller-visible status of a processed message."""
    SUCCESS = "success"
    RATE_LIMITED = "rate_limited"


class PipelineResult(BaseModel):
    """What the inbound caller gets back for one message."""
    status: PipelineStatus
    subscriber_id: str
    category: Optional[Category] = None
    language: Optional[Language] = None
    response_text: str
    delivered: bool = False
    warnings: list[str] = Field(default_factory=list)
    duration_ms: int = 0


class AnalyticsRecord(BaseModel):
    """Immutable snapshot of one processed interaction."""
    model_config = ConfigDict(frozen=True)

    subscriber_id: str
    display_name: str
    category: Category
    sanitized_input: str
    sanitized_output: str
    escalated: bool
    duration_ms: int
    language: Language
    created_at: datetime = Field(default_factory=datetime.now)
