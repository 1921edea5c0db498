"""Application settings."""

import os
from pathlib import Path
from datetime import timedelta
from typing import Optional
from pydantic import BaseModel

CONFIG_DIR = Path(__file__).resolve().parent

SMALL_MODELS = {
    "openai": "gpt-4o-mini",
    "anthropic": "claude-3-5-haiku-latest",
}


class Settings(BaseModel):
    """Application configuration settings."""

    # LLM Provider settings
    llm_provider: str = "openai"  # "openai" or "anthropic"
    classifier_model: Optional[str] = None  # Defaults to a small model per provider
    agent_model: Optional[str] = None

    # API Keys
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None

    # Timeouts applied to every external call, in seconds
    request_timeout_seconds: float = 10.0

    # Rate limiting
    rate_limit: int = 30
    rate_limit_window_hours: float = 24.0

    # Conversation memory
    memory_max_turns: int = 10

    # Idle subscriber state (history, windows) expires after this long;
    # never shorter than the rate-limit window
    state_ttl_hours: float = 24.0
    purge_interval_minutes: float = 60.0

    # State storage: "memory" or "sqlite"
    storage_backend: str = "memory"
    db_path: str = "data/subscriber_state.db"

    # Prompt and knowledge data
    prompts_path: str = str(CONFIG_DIR / "prompts.yaml")
    knowledge_path: str = str(CONFIG_DIR / "knowledge.yaml")
    knowledge_api_url: Optional[str] = None
    knowledge_top_k: int = 3

    # Outbound channel (ManyChat WhatsApp)
    manychat_api_url: str = "https://api.manychat.com/whatsapp/sending/sendContent"
    manychat_token: Optional[str] = None
    admin_subscriber_id: Optional[str] = None

    # Analytics (Supabase)
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    analytics_table: str = "analytics"

    # Detached task pool
    background_workers: int = 4

    # Logging
    verbose: bool = False

    def __init__(self, **data):
        # Auto-load secrets and endpoints from environment if not provided
        env_fields = {
            "openai_api_key": "OPENAI_API_KEY",
            "anthropic_api_key": "ANTHROPIC_API_KEY",
            "manychat_token": "MANYCHAT_TOKEN",
            "admin_subscriber_id": "ADMIN_SUBSCRIBER_ID",
            "supabase_url": "SUPABASE_URL",
            "supabase_key": "SUPABASE_KEY",
            "knowledge_api_url": "KNOWLEDGE_API_URL",
            "classifier_model": "LLM_MODEL_CLASSIFIER",
            "agent_model": "LLM_MODEL_AGENT",
        }
        for field, env_var in env_fields.items():
            if field not in data or data[field] is None:
                data[field] = os.environ.get(env_var)

        if "manychat_api_url" not in data and os.environ.get("MANYCHAT_API_URL"):
            data["manychat_api_url"] = os.environ["MANYCHAT_API_URL"]

        super().__init__(**data)

    def get_llm_api_key(self) -> Optional[str]:
        """Get the API key for the configured LLM provider."""
        if self.llm_provider == "openai":
            return self.openai_api_key
        elif self.llm_provider == "anthropic":
            return self.anthropic_api_key
        return None

    @property
    def rate_limit_window_seconds(self) -> float:
        return self.rate_limit_window_hours * 3600

    @property
    def state_ttl(self) -> timedelta:
        """Idle expiry for subscriber state, at least one rate-limit window."""
        return max(
            timedelta(hours=self.state_ttl_hours),
            timedelta(hours=self.rate_limit_window_hours)
        )

    def get_classifier_model(self) -> Optional[str]:
        """Model for classification; a cheaper model than the agents by default."""
        if self.classifier_model:
            return self.classifier_model
        return SMALL_MODELS.get(self.llm_provider)
