"""LLM-based classifier mapping a message to an agent category."""

import logging
import re
import unicodedata
from typing import Dict, Optional

from errors import LLMError
from llm.base_client import BaseLLMClient, Message
from schemas.context import Category, ClassificationResult, Language, DEFAULT_LANGUAGE
from .profiles import ClassifierProfile

logger = logging.getLogger(__name__)

_EDGE_RE = re.compile(r"^[^A-Z]+|[^A-Z]+$")


def normalize_label(raw: str) -> str:
    """Uppercase, strip accents and surrounding punctuation or markdown."""
    folded = unicodedata.normalize("NFKD", raw.strip().upper())
    folded = "".join(ch for ch in folded if not unicodedata.combining(ch))
    return _EDGE_RE.sub("", folded)


class ClassifierAgent:
    """
    Classifies a message with one low-temperature completion call.

    Anything other than a known label (provider error, timeout, empty or
    unexpected output) resolves to ESCALATION so a person sees the message.
    """

    CONSERVATIVE_DEFAULT = Category.ESCALATION

    def __init__(self, llm_client: Optional[BaseLLMClient], profile: ClassifierProfile):
        """
        Initialize classifier.

        Args:
            llm_client: Completion provider (None degrades every call)
            profile: System instruction, temperature and label table
        """
        self.llm_client = llm_client
        self.profile = profile
        self._label_map = self._build_label_map(profile)

    @staticmethod
    def _build_label_map(profile: ClassifierProfile) -> Dict[str, Category]:
        label_map = {normalize_label(c.value): c for c in Category}
        for category, labels in profile.labels.items():
            for label in labels:
                label_map[normalize_label(label)] = category
        return label_map

    def classify(self, message: str, language: Language = DEFAULT_LANGUAGE) -> ClassificationResult:
        """
        Classify a message.

        Args:
            message: User message
            language: Detected language (for logging; the instruction is fixed)

        Returns:
            ClassificationResult, never raises
        """
        logger.info(f"Classifying message (length={len(message)}, language={language.value})")

        if not self.llm_client:
            return self._degraded("no completion provider configured")

        messages = [
            Message(role="system", content=self.profile.system_prompt),
            Message(role="user", content=message),
        ]

        try:
            raw_label = self.llm_client.complete(
                messages,
                temperature=self.profile.temperature,
                max_tokens=self.profile.max_tokens
            )
        except LLMError as e:
            return self._degraded(f"provider error: {e}")
        except Exception as e:
            logger.exception("Unexpected classifier failure")
            return self._degraded(f"unexpected error: {e}")

        category = self._label_map.get(normalize_label(raw_label))

        if category is None:
            return self._degraded(f"unknown label {raw_label!r}", raw_label=raw_label)

        logger.info(f"Message classified: {category.value}")
        return ClassificationResult(category=category, raw_label=raw_label)

    def _degraded(self, reason: str, raw_label: Optional[str] = None) -> ClassificationResult:
        logger.warning(
            f"ClassificationDegraded: {reason}; using {self.CONSERVATIVE_DEFAULT.value}"
        )
        return ClassificationResult(
            category=self.CONSERVATIVE_DEFAULT,
            degraded=True,
            raw_label=raw_label
        )
