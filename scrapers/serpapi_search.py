"""
SerpApi Search
Google results through SerpApi
API docs: https://serpapi.com/search-api
"""
from typing import List

from core import Reference
from sources import fetch

from .base import KeywordSearchProvider, SearchProviderKind, organic_to_references


class SerpApiSearchProvider(KeywordSearchProvider):
    """SerpApi backend (api_key query parameter)"""

    ENDPOINT = "https://serpapi.com/search.json"

    @property
    def kind(self) -> SearchProviderKind:
        return SearchProviderKind.SERPAPI

    async def _search_api(self, query: str) -> List[Reference]:
        data = await fetch.get_json(
            self.ENDPOINT,
            params={"engine": "google", "q": query, "api_key": self.api_key},
            timeout=self.timeout,
        )
        return organic_to_references((data or {}).get("organic_results"))
