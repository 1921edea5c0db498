"""Knowledge retrieval schemas."""

from typing import Optional
from pydantic import BaseModel, Field


class KnowledgeSnippet(BaseModel):
    """One ranked result from the knowledge retrieval service."""
    text: str
    relevance: float = Field(0.0, ge=0.0, le=1.0, description="Relevance score")
    source: Optional[str] = None
