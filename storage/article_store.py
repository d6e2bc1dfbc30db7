"""
Article Store Client
HTTP client for the external article CRUD API
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from core import OriginalArticle, Reference, UpdatedArticlePayload
from processing import build_excerpt, html_to_text
from sources import fetch
from utils.exceptions import ArticleStoreError


logger = logging.getLogger(__name__)

UPDATED_TITLE_SUFFIX = " (Updated)"


def build_updated_payload(
    original: OriginalArticle,
    content_html: str,
    references: Sequence[Reference],
) -> UpdatedArticlePayload:
    content_text = html_to_text(content_html)
    return UpdatedArticlePayload(
        title=f"{original.title}{UPDATED_TITLE_SUFFIX}",
        original_article_id=original.id,
        content_html=content_html,
        content_text=content_text,
        excerpt=build_excerpt(content_html),
        references=list(references),
    )


class ArticleStoreClient:
    """Reads originals and publishes rewritten articles."""

    def __init__(self, base_url: str, *, timeout: Optional[float] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @property
    def articles_url(self) -> str:
        return f"{self.base_url}/articles"

    async def list_originals(self) -> List[OriginalArticle]:
        """Original articles with their updated versions attached."""
        try:
            data = await fetch.get_json(
                self.articles_url,
                params={"type": "original", "withUpdated": "true"},
                timeout=self.timeout,
            )
        except httpx.HTTPError as exc:
            raise ArticleStoreError(f"Failed to load original articles: {exc}") from exc

        if data is None:
            return []
        if not isinstance(data, list):
            raise ArticleStoreError("Unexpected originals payload", {"type": type(data).__name__})
        originals = [OriginalArticle.model_validate(item) for item in data]
        logger.info("Loaded %d original articles", len(originals))
        return originals

    async def publish_updated(
        self,
        original: OriginalArticle,
        content_html: str,
        references: Sequence[Reference],
    ) -> Dict[str, Any]:
        payload = build_updated_payload(original, content_html, references)
        try:
            data = await fetch.post_json(
                self.articles_url,
                payload.model_dump(mode="json"),
                timeout=self.timeout,
            )
        except httpx.HTTPError as exc:
            raise ArticleStoreError(f"Failed to publish update for '{original.title}': {exc}") from exc

        created = data if isinstance(data, dict) else {}
        logger.info("Published updated article: %s", created.get("id", "unknown id"))
        return created
