"""Completion provider interface."""

from abc import ABC, abstractmethod
from typing import Optional, List, Dict
from pydantic import BaseModel

from errors import LLMError


class Message(BaseModel):
    """Role-tagged chat message."""
    role: str  # "system", "user", "assistant"
    content: str


class LLMResponse(BaseModel):
    """Raw completion returned by a provider."""
    content: str
    usage: Optional[Dict[str, int]] = None
    finish_reason: Optional[str] = None


class BaseLLMClient(ABC):
    """
    Abstract base class for completion providers.

    Implementations make exactly one request per call with the timeout
    they were built with, and raise LLMError for any provider failure.
    """

    @abstractmethod
    def chat(
        self,
        messages: List[Message],
        temperature: float = 0.7,
        max_tokens: int = 500
    ) -> LLMResponse:
        """
        Send one chat completion request.

        Args:
            messages: Role-tagged messages, system instruction first
            temperature: Sampling temperature
            max_tokens: Maximum tokens in the completion

        Returns:
            LLMResponse with the completion text

        Raises:
            LLMError: On timeout, provider error or malformed response
        """
        pass

    def complete(
        self,
        messages: List[Message],
        temperature: float = 0.7,
        max_tokens: int = 500
    ) -> str:
        """Completion text, stripped; an empty completion raises LLMError."""
        response = self.chat(messages, temperature=temperature, max_tokens=max_tokens)
        text = (response.content or "").strip()
        if not text:
            raise LLMError(
                f"{self.get_provider_name()} returned an empty completion "
                f"(finish_reason={response.finish_reason})"
            )
        return text

    @abstractmethod
    def get_provider_name(self) -> str:
        pass

    @abstractmethod
    def get_model_name(self) -> str:
        pass
