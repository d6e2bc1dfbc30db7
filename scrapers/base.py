"""
Base Search Provider
Abstract base classes shared by every search backend
"""
from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional
import logging

import httpx

from core import Reference
from utils.exceptions import SearchError


logger = logging.getLogger(__name__)


class SearchProviderKind(str, Enum):
    """Closed set of supported search backends"""
    SERPER = "serper"
    SERPAPI = "serpapi"
    HTML = "html"


class BaseSearchProvider(ABC):
    """
    Search provider base class

    Every backend normalizes its results into ordered Reference candidates.
    """

    def __init__(self, *, timeout: Optional[float] = None):
        self.timeout = timeout

    @property
    @abstractmethod
    def kind(self) -> SearchProviderKind:
        """Backend tag"""
        pass

    @property
    def name(self) -> str:
        return self.kind.value

    @abstractmethod
    async def search(self, query: str) -> List[Reference]:
        """
        Search interface

        Args:
            query: search keywords

        Returns:
            Candidates in the backend's result order
        """
        pass

    def is_configured(self) -> bool:
        """
        Whether required credentials are present
        Subclasses override this to check their API keys
        """
        return True

    def _log_search(self, query: str, count: int):
        logger.info(f"[{self.name}] Search '{query}' returned {count} results")

    def _log_error(self, message: str, error: Exception):
        logger.error(f"[{self.name}] {message}: {error}")


class KeywordSearchProvider(BaseSearchProvider):
    """
    Keyword API backend that degrades to HTML scraping without a credential
    """

    def __init__(
        self,
        api_key: Optional[str],
        *,
        fallback: BaseSearchProvider,
        timeout: Optional[float] = None,
    ):
        super().__init__(timeout=timeout)
        self.api_key = (api_key or "").strip() or None
        self.fallback = fallback

    def is_configured(self) -> bool:
        return self.api_key is not None

    async def search(self, query: str) -> List[Reference]:
        if not self.is_configured():
            logger.info(f"[{self.name}] API key not set, falling back to {self.fallback.name} search.")
            return await self.fallback.search(query)

        try:
            results = await self._search_api(query)
        except httpx.HTTPError as exc:
            self._log_error("Search request failed", exc)
            raise SearchError(f"{self.name} search failed: {exc}", provider=self.name) from exc

        self._log_search(query, len(results))
        return results

    @abstractmethod
    async def _search_api(self, query: str) -> List[Reference]:
        """Call the keyword API with the configured credential"""
        pass


def organic_to_references(items) -> List[Reference]:
    """Map `{title, link}` result entries, skipping those without a link."""
    references: List[Reference] = []
    for item in list(items or []):
        if not isinstance(item, dict):
            continue
        link = str(item.get("link") or "").strip()
        if not link:
            continue
        title = str(item.get("title") or "").strip() or link
        references.append(Reference(title=title, url=link))
    return references
