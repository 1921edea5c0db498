"""Classification and per-request context schemas."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

from llm.base_client import Message


class Category(str, Enum):
    """Closed set of labels that select agent behavior."""
    SALES = "SALES"
    SUPPORT = "SUPPORT"
    TECHNICAL = "TECHNICAL"
    ESCALATION = "ESCALATION"


class Language(str, Enum):
    """Languages the assistant answers in."""
    ES = "es"
    EN = "en"
    PT = "pt"


DEFAULT_LANGUAGE = Language.ES


class ClassificationResult(BaseModel):
    """Output from the Classifier. Consumed immediately by the dispatcher."""
    category: Category
    degraded: bool = Field(False, description="True when the conservative default was applied")
    raw_label: Optional[str] = Field(None, description="Label as returned by the provider")


class AgentContext(BaseModel):
    """Everything needed to render one agent prompt."""
    language: Language
    display_name: str
    subscriber_id: str
    greeting: str
    knowledge: str = ""
    history: list[Message] = Field(default_factory=list)
    message: str

    def template_fields(self) -> dict:
        """Fields available to the system prompt templates."""
        return {
            "language": self.language.value,
            "name": self.display_name,
            "greeting": self.greeting,
            "subscriber_id": self.subscriber_id,
            "knowledge": self.knowledge,
        }
