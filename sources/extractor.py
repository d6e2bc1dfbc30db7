"""Tiered readable-content extraction for arbitrary web pages.

Tiers are tried in order and the first one that yields non-empty text wins:

1. readability: boilerplate removal over the fetched HTML
2. raw_dom: page <title> plus the whole <body> text
3. proxy_text: the page rendered to text by a reader proxy
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import logging
from typing import List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup
from readability import Document

from core import ExtractedContent
from processing import clean_text, html_to_text
from utils.exceptions import ExtractionError

from . import fetch


logger = logging.getLogger(__name__)

DEFAULT_PROXY_BASE_URL = "https://r.jina.ai"

_PROXY_HEADER_PREFIXES = ("Title:", "URL Source:", "Published Time:", "Warning:", "Description:")
_PROXY_CONTENT_MARKER = "Markdown Content:"
_NON_CONTENT_TAGS = ("script", "style", "noscript", "template")


class PageFetcher:
    """Fetches a page lazily and keeps the HTML once a fetch succeeds.

    A failed fetch is not cached, so a later tier fetches again.
    """

    def __init__(self, url: str, *, timeout: Optional[float] = None) -> None:
        self.url = url
        self.timeout = timeout
        self._html: Optional[str] = None

    async def html(self) -> str:
        if self._html is None:
            self._html = await fetch.get_text(self.url, timeout=self.timeout)
        return self._html


class ExtractionTier(ABC):
    """One extraction strategy; returns None when it has nothing usable."""

    name: str = "tier"

    @abstractmethod
    async def extract(self, page: PageFetcher) -> Optional[ExtractedContent]:
        pass


class ReadabilityTier(ExtractionTier):
    name = "readability"

    async def extract(self, page: PageFetcher) -> Optional[ExtractedContent]:
        markup = await page.html()
        if not markup.strip():
            return None
        document = Document(markup)
        summary = document.summary(html_partial=True)
        text = html_to_text(summary)
        if not text:
            return None
        title = clean_text(document.short_title()) or page.url
        return ExtractedContent(title=title, html=summary, text=text, url=page.url, method=self.name)


class RawDomTier(ExtractionTier):
    name = "raw_dom"

    async def extract(self, page: PageFetcher) -> Optional[ExtractedContent]:
        markup = await page.html()
        soup = BeautifulSoup(markup, "lxml")
        title = clean_text(soup.title.get_text()) if soup.title else ""
        body = soup.body or soup
        for tag in body(_NON_CONTENT_TAGS):
            tag.decompose()
        text = clean_text(body.get_text(" "))
        if not text:
            return None
        return ExtractedContent(title=title or page.url, html="", text=text, url=page.url, method=self.name)


def parse_proxy_text(raw: str) -> Tuple[str, str]:
    """Split reader-proxy output into (title, body) without its header block."""
    lines = str(raw or "").replace("\r\n", "\n").split("\n")
    marker_idx = next(
        (idx for idx, line in enumerate(lines) if line.startswith(_PROXY_CONTENT_MARKER)),
        None,
    )
    if marker_idx is None:
        header = [line for line in lines if line.startswith(_PROXY_HEADER_PREFIXES)]
        body = [line for line in lines if not line.startswith(_PROXY_HEADER_PREFIXES)]
    else:
        header = lines[:marker_idx]
        remainder = lines[marker_idx][len(_PROXY_CONTENT_MARKER):].strip()
        body = ([remainder] if remainder else []) + lines[marker_idx + 1:]

    title = ""
    for line in header:
        if line.startswith("Title:"):
            title = line[len("Title:"):].strip()
            break
    return title, "\n".join(body).strip()


class ProxyTextTier(ExtractionTier):
    name = "proxy_text"

    def __init__(self, proxy_base_url: str = DEFAULT_PROXY_BASE_URL) -> None:
        self.proxy_base_url = proxy_base_url.rstrip("/")

    async def extract(self, page: PageFetcher) -> Optional[ExtractedContent]:
        raw = await fetch.get_text(
            f"{self.proxy_base_url}/{page.url}",
            headers={"Accept": "text/plain"},
            timeout=page.timeout,
        )
        title, text = parse_proxy_text(raw)
        if not text:
            return None
        return ExtractedContent(title=title or page.url, html="", text=text, url=page.url, method=self.name)


def default_tiers(proxy_base_url: str = DEFAULT_PROXY_BASE_URL) -> List[ExtractionTier]:
    return [ReadabilityTier(), RawDomTier(), ProxyTextTier(proxy_base_url)]


async def first_successful(tiers: Sequence[ExtractionTier], page: PageFetcher) -> Optional[ExtractedContent]:
    """Walk the tiers in order and stop at the first usable result."""
    for tier in tiers:
        try:
            result = await tier.extract(page)
        except Exception as exc:
            logger.warning("%s extraction failed for %s: %s", tier.name, page.url, exc)
            continue
        if result is not None:
            logger.info("Extracted %s via %s (%d chars)", page.url, tier.name, len(result.text))
            return result
        logger.info("%s extraction found no content for %s", tier.name, page.url)
    return None


class ContentExtractor:
    """Extracts readable title/text/HTML from a URL using the tier chain."""

    def __init__(
        self,
        tiers: Optional[Sequence[ExtractionTier]] = None,
        *,
        proxy_base_url: str = DEFAULT_PROXY_BASE_URL,
        timeout: Optional[float] = None,
    ) -> None:
        self.tiers = list(tiers) if tiers is not None else default_tiers(proxy_base_url)
        self.timeout = timeout

    async def extract(self, url: str) -> ExtractedContent:
        """
        Readable content of `url` from the first tier that yields text.

        Raises:
            ExtractionError: every tier failed or came back empty
        """
        page = PageFetcher(url, timeout=self.timeout)
        result = await first_successful(self.tiers, page)
        if result is None:
            raise ExtractionError(f"No extraction tier produced text for {url}", url=url)
        return result
