"""Memory data models."""

from datetime import datetime
from typing import Literal
from pydantic import BaseModel, ConfigDict, Field


class ConversationTurn(BaseModel):
    """A single turn in a conversation. Never mutated after append."""
    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime = Field(default_factory=datetime.now)
