"""HTTP knowledge retrieval provider."""

import logging
from typing import List, Optional

import requests

from schemas.evidence import KnowledgeSnippet
from .base_provider import BaseKnowledgeProvider

logger = logging.getLogger(__name__)


class KnowledgeAPIProvider(BaseKnowledgeProvider):
    """
    Knowledge search over an HTTP endpoint.

    Sends ``GET {base_url}/search?q=...&limit=...`` and accepts either
    ``{"results": [...]}`` or a bare list. Any error yields no snippets.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10,
        auth_token: Optional[str] = None
    ):
        """
        Initialize knowledge API provider.

        Args:
            base_url: Base URL of the knowledge service
            timeout: Request timeout in seconds (default: 10)
            auth_token: Optional bearer token
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.auth_token = auth_token
        self._last_error: Optional[str] = None

    def _get_headers(self) -> dict:
        """Build request headers."""
        headers = {"Accept": "application/json"}
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"
        return headers

    def _handle_error(self, error: Exception, context: str) -> None:
        self._last_error = str(error)
        logger.warning(f"Knowledge API error during {context}: {error}")

    def search(self, query: str, top_k: int = 3) -> List[KnowledgeSnippet]:
        if not query or not query.strip():
            return []

        try:
            response = requests.get(
                f"{self.base_url}/search",
                params={"q": query, "limit": top_k},
                headers=self._get_headers(),
                timeout=self.timeout
            )

            if response.status_code != 200:
                self._handle_error(
                    Exception(f"API returned status {response.status_code}: {response.text}"),
                    "search"
                )
                return []

            data = response.json()

            if isinstance(data, dict):
                results = data.get("results", []) or data.get("data", [])
            elif isinstance(data, list):
                results = data
            else:
                logger.warning(f"Unexpected API response format: {type(data)}")
                return []

            snippets = []
            for item in results:
                snippet = self._parse_item(item)
                if snippet:
                    snippets.append(snippet)

            snippets.sort(key=lambda s: s.relevance, reverse=True)
            self._last_error = None
            return snippets[:top_k]

        except requests.exceptions.Timeout:
            self._handle_error(Exception(f"Request timeout after {self.timeout}s"), "search")
            return []
        except (requests.exceptions.RequestException, ValueError) as e:
            self._handle_error(e, "search")
            return []

    def _parse_item(self, item) -> Optional[KnowledgeSnippet]:
        """Map one API item to a snippet, tolerating field name variations."""
        if isinstance(item, str):
            return KnowledgeSnippet(text=item, relevance=0.0) if item.strip() else None
        if not isinstance(item, dict):
            return None

        text = item.get("snippet") or item.get("text") or item.get("content") or ""
        if not str(text).strip():
            return None

        relevance = item.get("relevance", item.get("score", 0.0))
        try:
            relevance = max(0.0, min(1.0, float(relevance)))
        except (TypeError, ValueError):
            relevance = 0.0

        return KnowledgeSnippet(
            text=str(text),
            relevance=relevance,
            source=item.get("source") or item.get("id")
        )

    def get_last_error(self) -> Optional[str]:
        """Get the last error message."""
        return self._last_error
