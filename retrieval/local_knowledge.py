"""Keyword-scored knowledge base loaded from YAML."""

import logging
import re
import unicodedata
from pathlib import Path
from typing import List, Optional

import yaml

from errors import RetrievalError
from schemas.evidence import KnowledgeSnippet
from .base_provider import BaseKnowledgeProvider

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"[a-z0-9+#]+")


def _tokens(text: str) -> set[str]:
    """Lowercased, accent-free tokens of three or more characters."""
    folded = unicodedata.normalize("NFKD", text.lower())
    folded = "".join(ch for ch in folded if not unicodedata.combining(ch))
    return {tok for tok in _TOKEN_RE.findall(folded) if len(tok) >= 3}


class LocalKnowledgeBase(BaseKnowledgeProvider):
    """
    Knowledge entries kept in a YAML file.

    Each entry has ``id``, ``text`` and optional ``keywords``. Relevance is
    the share of query tokens found in the entry's keywords and text.
    """

    def __init__(
        self,
        entries: Optional[list[dict]] = None,
        knowledge_path: Optional[str] = None,
        min_relevance: float = 0.1
    ):
        """
        Initialize knowledge base.

        Args:
            entries: Inline entries (take precedence over the file)
            knowledge_path: Path to a knowledge YAML file
            min_relevance: Snippets scoring below this are dropped
        """
        self.min_relevance = min_relevance
        if entries is None and knowledge_path:
            entries = self._load(Path(knowledge_path))
        self.entries = entries or []
        self._index = [
            (entry, _tokens(" ".join(entry.get("keywords", [])) + " " + entry.get("text", "")))
            for entry in self.entries
        ]
        logger.info(f"Local knowledge base loaded with {len(self.entries)} entries")

    def _load(self, path: Path) -> list[dict]:
        """Load entries from YAML."""
        if not path.exists():
            logger.warning(f"Knowledge file not found: {path}")
            return []
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise RetrievalError(f"Invalid knowledge file {path}: {e}") from e

        entries = data.get("entries", []) if isinstance(data, dict) else None
        if not isinstance(entries, list):
            raise RetrievalError(f"Knowledge file {path} must hold an 'entries' list")
        return entries

    def search(self, query: str, top_k: int = 3) -> List[KnowledgeSnippet]:
        query_tokens = _tokens(query or "")
        if not query_tokens:
            return []

        scored = []
        for entry, entry_tokens in self._index:
            overlap = len(query_tokens & entry_tokens)
            if not overlap:
                continue
            relevance = overlap / len(query_tokens)
            if relevance >= self.min_relevance:
                scored.append(KnowledgeSnippet(
                    text=entry["text"],
                    relevance=min(1.0, relevance),
                    source=entry.get("id")
                ))

        scored.sort(key=lambda s: s.relevance, reverse=True)
        return scored[:top_k]
