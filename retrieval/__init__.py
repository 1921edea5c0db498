"""Knowledge retrieval layer."""

from .base_provider import BaseKnowledgeProvider
from .knowledge_api_provider import KnowledgeAPIProvider
from .local_knowledge import LocalKnowledgeBase

__all__ = ["BaseKnowledgeProvider", "KnowledgeAPIProvider", "LocalKnowledgeBase"]
