"""Pydantic schemas for the dispatch pipeline."""

from .context import Category, Language, ClassificationResult, AgentContext
from .evidence import KnowledgeSnippet
from .inbound import InboundMessage, normalize_subscriber_id
from .responses import (
    AdmissionResult,
    DeliveryResult,
    PipelineStatus,
    PipelineResult,
    AnalyticsRecord,
)

__all__ = [
    "Category",
    "Language",
    "ClassificationResult",
    "AgentContext",
    "KnowledgeSnippet",
    "InboundMessage",
    "normalize_subscriber_id",
    "AdmissionResult",
    "DeliveryResult",
    "PipelineStatus",
    "PipelineResult",
    "AnalyticsRecord",
]
