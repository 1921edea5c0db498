"""Builds completion clients from provider names or settings."""

import logging
from enum import Enum
from typing import Optional, Tuple

from .base_client import BaseLLMClient
from .openai_client import OpenAIClient
from .anthropic_client import AnthropicClient

logger = logging.getLogger(__name__)


class LLMProvider(str, Enum):
    """Supported completion providers."""
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


_CLIENTS = {
    LLMProvider.OPENAI: OpenAIClient,
    LLMProvider.ANTHROPIC: AnthropicClient,
}


def create_llm_client(
    provider: LLMProvider,
    api_key: Optional[str] = None,
    model: Optional[str] = None,
    timeout: float = 10.0
) -> BaseLLMClient:
    """
    Create a completion client.

    Args:
        provider: openai or anthropic
        api_key: Provider API key
        model: Optional model override
        timeout: Per-request timeout in seconds

    Returns:
        Configured client

    Raises:
        ValueError: If the provider is not supported
    """
    client_cls = _CLIENTS.get(LLMProvider(provider))
    if client_cls is None:
        raise ValueError(f"Unsupported LLM provider: {provider}")
    return client_cls(api_key=api_key, model=model, timeout=timeout)


def create_clients_from_settings(
    settings
) -> Tuple[Optional[BaseLLMClient], Optional[BaseLLMClient]]:
    """
    Agent and classifier clients for the configured provider.

    The classifier gets the smaller model unless one is configured.
    Returns (None, None) when no API key is available.
    """
    api_key = settings.get_llm_api_key()
    if not api_key:
        logger.warning(
            f"No API key for {settings.llm_provider}; every message will take the fallback path"
        )
        return None, None

    provider = LLMProvider(settings.llm_provider)
    timeout = settings.request_timeout_seconds
    agent_client = create_llm_client(provider, api_key, settings.agent_model, timeout)
    classifier_client = create_llm_client(
        provider, api_key, settings.get_classifier_model(), timeout
    )
    logger.info(
        f"LLM clients initialized: {provider.value} "
        f"(agents={agent_client.get_model_name()}, "
        f"classifier={classifier_client.get_model_name()})"
    )
    return agent_client, classifier_client
