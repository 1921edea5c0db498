"""Agent profiles and message templates loaded from YAML."""

import logging
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from errors import PromptConfigError
from schemas.context import AgentContext, Category, Language, DEFAULT_LANGUAGE

logger = logging.getLogger(__name__)


class AgentProfile(BaseModel):
    """Behavior of one conversational agent."""
    template: str
    temperature: float = Field(0.5, ge=0.0, le=2.0)
    max_tokens: int = Field(500, gt=0)

    def render(self, context: AgentContext) -> str:
        """Fill the system prompt for one request."""
        return self.template.format(**context.template_fields()).strip()


class ClassifierProfile(BaseModel):
    """Instruction and label table for the classifier."""
    system_prompt: str
    temperature: float = Field(0.1, ge=0.0, le=2.0)
    max_tokens: int = Field(50, gt=0)
    labels: Dict[Category, List[str]] = Field(default_factory=dict)


class PromptCatalog(BaseModel):
    """
    Versioned prompt configuration.

    The pipeline only looks up ``category -> (template, temperature)`` and
    per-language canned messages; the wording lives in the YAML file.
    """
    version: int = 1
    classifier: ClassifierProfile
    agents: Dict[Category, AgentProfile]
    escalation_messages: Dict[Language, str]
    fallback_messages: Dict[Language, str]
    rate_limit_messages: Dict[Language, str]
    admin_alert: str

    @classmethod
    def load(cls, path: Optional[str] = None) -> "PromptCatalog":
        """
        Load and validate a prompt catalog.

        Args:
            path: YAML file path (defaults to config/prompts.yaml)

        Returns:
            Validated PromptCatalog

        Raises:
            PromptConfigError: If the file is missing or incomplete
        """
        if path is None:
            path = str(Path(__file__).resolve().parent.parent / "config" / "prompts.yaml")

        prompts_path = Path(path)
        if not prompts_path.exists():
            raise PromptConfigError(f"Prompt file not found: {prompts_path}")

        with open(prompts_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        catalog = cls.from_dict(data)
        logger.info(f"Loaded prompt catalog v{catalog.version} from {prompts_path}")
        return catalog

    @classmethod
    def from_dict(cls, data: dict) -> "PromptCatalog":
        """Validate raw configuration data."""
        try:
            catalog = cls.model_validate(data)
        except ValidationError as e:
            raise PromptConfigError(f"Invalid prompt configuration: {e}") from e
        catalog.check_complete()
        return catalog

    def check_complete(self) -> None:
        """Every category and language must be covered."""
        missing_agents = [
            c.value for c in Category
            if c != Category.ESCALATION and c not in self.agents
        ]
        if missing_agents:
            raise PromptConfigError(f"No agent profile for: {', '.join(missing_agents)}")

        for field in ("escalation_messages", "fallback_messages", "rate_limit_messages"):
            messages = getattr(self, field)
            missing = [lang.value for lang in Language if not messages.get(lang)]
            if missing:
                raise PromptConfigError(f"{field} missing languages: {', '.join(missing)}")

    def agent_for(self, category: Category) -> AgentProfile:
        return self.agents[category]

    def escalation_message(self, language: Language) -> str:
        return self.escalation_messages.get(language) or self.escalation_messages[DEFAULT_LANGUAGE]

    def fallback_message(self, language: Language) -> str:
        return self.fallback_messages.get(language) or self.fallback_messages[DEFAULT_LANGUAGE]

    def rate_limit_message(self, language: Language) -> str:
        return self.rate_limit_messages.get(language) or self.rate_limit_messages[DEFAULT_LANGUAGE]
