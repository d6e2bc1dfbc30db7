"""
Serper Search
Google results through the Serper keyword API
API docs: https://serper.dev
"""
from typing import List

from core import Reference
from sources import fetch

from .base import KeywordSearchProvider, SearchProviderKind, organic_to_references


class SerperSearchProvider(KeywordSearchProvider):
    """Serper backend (X-API-KEY header)"""

    ENDPOINT = "https://google.serper.dev/search"

    @property
    def kind(self) -> SearchProviderKind:
        return SearchProviderKind.SERPER

    async def _search_api(self, query: str) -> List[Reference]:
        data = await fetch.post_json(
            self.ENDPOINT,
            {"q": query},
            headers={"X-API-KEY": self.api_key},
            timeout=self.timeout,
        )
        return organic_to_references((data or {}).get("organic"))
