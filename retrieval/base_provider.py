"""Knowledge retrieval provider interface."""

from abc import ABC, abstractmethod
from typing import List

from schemas.evidence import KnowledgeSnippet


class BaseKnowledgeProvider(ABC):
    """Returns ranked knowledge snippets for free text."""

    CONTEXT_HEADER = "baseConocimiento (informacion verificada):"

    @abstractmethod
    def search(self, query: str, top_k: int = 3) -> List[KnowledgeSnippet]:
        """
        Search the knowledge base.

        Args:
            query: Raw user message
            top_k: Maximum number of snippets

        Returns:
            Snippets ordered by relevance, highest first (may be empty)
        """
        pass

    def format_context(self, snippets: List[KnowledgeSnippet]) -> str:
        """Render snippets as a block for the system prompt; empty when none."""
        if not snippets:
            return ""
        lines = [self.CONTEXT_HEADER]
        for snippet in snippets:
            lines.append(f"- {snippet.text.strip()}")
        return "\n".join(lines)
