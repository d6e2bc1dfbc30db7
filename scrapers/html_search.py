"""
HTML Search
Scrapes a search-engine results page rendered to text by a reader proxy.
No credential required.
"""
from typing import List, Optional
from urllib.parse import quote_plus
import logging
import re

import httpx

from config import get_settings
from core import Reference
from processing import clean_text
from sources import fetch
from sources.url_filter import normalize_url, url_key
from utils.exceptions import SearchError

from .base import BaseSearchProvider, SearchProviderKind


logger = logging.getLogger(__name__)

SEARCH_PAGE_URL = "http://www.google.com/search?q={query}"

# [title](url) as emitted by the reader proxy
# one level of balanced parentheses is allowed inside a URL, e.g. /wiki/Chatbot_(software)
_MARKDOWN_LINK = re.compile(r"\[([^\]]*)\]\((https?://(?:[^()\s]|\([^()\s]*\))+)\)")
_BARE_URL = re.compile(r"https?://(?:[^\s\"'<>()\[\]]|\([^\s\"'<>()\[\]]*\))+")


def extract_result_links(text: str) -> List[Reference]:
    """
    Collect result URLs in page order from proxy-rendered search results.

    Both markdown links and bare URLs are scanned; the markdown form wins
    when both point at the same page because it carries a title.
    """
    found = []
    link_targets = []
    for match in _MARKDOWN_LINK.finditer(text or ""):
        found.append((match.start(2), clean_text(match.group(1)), match.group(2)))
        link_targets.append(match.span(2))
    for match in _BARE_URL.finditer(text or ""):
        if any(start <= match.start() < end for start, end in link_targets):
            continue
        found.append((match.start(), "", match.group(0)))
    found.sort(key=lambda entry: (entry[0], not entry[1]))

    references: List[Reference] = []
    seen = set()
    for _, title, raw_url in found:
        normalized = normalize_url(raw_url)
        if not normalized:
            continue
        key = url_key(normalized)
        if key in seen:
            continue
        seen.add(key)
        references.append(Reference(title=title or normalized, url=normalized))
    return references


class HtmlSearchProvider(BaseSearchProvider):
    """
    Search via a proxy-rendered results page

    The page structure is outside our control; zero results is an accepted outcome.
    """

    def __init__(self, proxy_base_url: str = "https://r.jina.ai", *, timeout: Optional[float] = None):
        super().__init__(timeout=timeout)
        self.proxy_base_url = proxy_base_url.rstrip("/")

    @property
    def kind(self) -> SearchProviderKind:
        return SearchProviderKind.HTML

    def build_url(self, query: str) -> str:
        return f"{self.proxy_base_url}/{SEARCH_PAGE_URL.format(query=quote_plus(query))}"

    async def _fetch_page(self, url: str) -> str:
        timeout = float(self.timeout or get_settings().general.request_timeout)
        try:
            return await fetch.get_text(url, timeout=timeout)
        except httpx.TimeoutException:
            logger.warning(f"[{self.name}] Timed out after {timeout:.0f}s, retrying with {timeout * 2:.0f}s")
            return await fetch.get_text(url, timeout=timeout * 2)

    async def search(self, query: str) -> List[Reference]:
        try:
            text = await self._fetch_page(self.build_url(query))
        except httpx.HTTPError as exc:
            self._log_error("Search page fetch failed", exc)
            raise SearchError(f"html search failed: {exc}", provider=self.name) from exc

        results = extract_result_links(text)
        self._log_search(query, len(results))
        return results
