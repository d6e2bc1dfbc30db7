"""Web sources: URL selection and readable-content extraction."""

from .extractor import (
    ContentExtractor,
    ExtractionTier,
    PageFetcher,
    ProxyTextTier,
    RawDomTier,
    ReadabilityTier,
    default_tiers,
    first_successful,
    parse_proxy_text,
)
from .url_filter import is_likely_article, normalize_url, select_candidates, url_key

__all__ = [
    "ContentExtractor",
    "ExtractionTier",
    "PageFetcher",
    "ProxyTextTier",
    "RawDomTier",
    "ReadabilityTier",
    "default_tiers",
    "first_successful",
    "parse_proxy_text",
    "is_likely_article",
    "normalize_url",
    "select_candidates",
    "url_key",
]
