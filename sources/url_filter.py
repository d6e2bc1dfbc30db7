"""URL normalization and article-likeness heuristics for reference selection."""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Sequence
from urllib.parse import parse_qs, parse_qsl, urlencode, urlparse, urlunparse

from core import Reference


DENYLIST_HOSTS = (
    # search engines
    "google.com",
    "googleusercontent.com",
    "bing.com",
    "duckduckgo.com",
    "yahoo.com",
    "yandex.com",
    "baidu.com",
    "search.brave.com",
    # social networks
    "facebook.com",
    "twitter.com",
    "x.com",
    "instagram.com",
    "linkedin.com",
    "pinterest.com",
    "tiktok.com",
    "reddit.com",
    "quora.com",
    "threads.net",
    # video / image hosts
    "youtube.com",
    "youtu.be",
    "vimeo.com",
    "dailymotion.com",
    "imgur.com",
    "flickr.com",
    "giphy.com",
    "gstatic.com",
    # marketplaces
    "amazon.com",
    "ebay.com",
    "etsy.com",
    "aliexpress.com",
    # text proxy
    "r.jina.ai",
)

NON_DOCUMENT_EXTENSIONS = (
    ".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg", ".ico", ".bmp", ".tif", ".tiff",
    ".mp3", ".mp4", ".m4a", ".wav", ".ogg", ".webm", ".mov", ".avi", ".mkv",
    ".zip", ".rar", ".gz", ".tar", ".7z", ".exe", ".dmg", ".apk",
    ".css", ".js", ".json", ".xml", ".rss",
)

TRACKING_PARAMS = {
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "utm_term",
    "utm_content",
    "utm_id",
    "gclid",
    "fbclid",
    "mc_cid",
    "mc_eid",
    "ref_src",
}

_ADMIN_PATH = re.compile(r"/(?:tag|tags|category|categories|author|page|search|feed)(?:/|$)", re.IGNORECASE)
_TRAILING_PUNCTUATION = ".,;:!?)]}>'\""
_MAX_UNWRAP_DEPTH = 3


def _trim_trailing(text: str) -> str:
    """Drop trailing punctuation, keeping a closing parenthesis that balances one in the URL."""
    while text and text[-1] in _TRAILING_PUNCTUATION:
        if text[-1] == ")" and text.count("(") >= text.count(")"):
            break
        text = text[:-1]
    return text


def _bare_host(host: str) -> str:
    host = str(host or "").strip().lower().rstrip(".")
    return host[4:] if host.startswith("www.") else host


def _host_matches(host: str, domains: Iterable[str]) -> bool:
    for domain in domains:
        domain = _bare_host(domain)
        if domain and (host == domain or host.endswith("." + domain)):
            return True
    return False


def _unwrap_redirect(parsed) -> Optional[str]:
    host = _bare_host(parsed.hostname or "")
    params = parse_qs(parsed.query)
    if (host == "google.com" or host.endswith(".google.com")) and parsed.path == "/url":
        for key in ("q", "url"):
            values = params.get(key)
            if values and values[0].startswith(("http://", "https://")):
                return values[0]
    if host.endswith("duckduckgo.com") and parsed.path.startswith("/l/"):
        values = params.get("uddg")
        if values:
            return values[0]
    return None


def normalize_url(url: str, *, _depth: int = 0) -> Optional[str]:
    """Canonical form of a result URL, or None when it cannot be used.

    - Trims surrounding quotes/brackets and trailing punctuation
    - Unwraps search-engine redirect wrappers to their target
    - Lowercases scheme and host, drops credentials and the fragment
    - Strips common tracking query parameters
    """
    text = str(url or "").strip().strip("<>\"'")
    text = _trim_trailing(text)
    if not text:
        return None
    try:
        parsed = urlparse(text)
        if _depth < _MAX_UNWRAP_DEPTH:
            target = _unwrap_redirect(parsed)
            if target:
                return normalize_url(target, _depth=_depth + 1)

        scheme = (parsed.scheme or "").lower()
        host = (parsed.hostname or "").lower()
        if scheme not in ("http", "https") or not host:
            return None
        netloc = f"{host}:{parsed.port}" if parsed.port else host
    except ValueError:
        return None

    kept = [
        (key, value)
        for key, value in parse_qsl(parsed.query, keep_blank_values=True)
        if key.lower() not in TRACKING_PARAMS
    ]
    query = urlencode(kept, doseq=True)
    return urlunparse((scheme, netloc, parsed.path or "/", "", query, ""))


def url_key(url: str) -> Optional[str]:
    """Deduplication key: scheme + host + path."""
    normalized = normalize_url(url)
    if not normalized:
        return None
    parsed = urlparse(normalized)
    path = parsed.path.rstrip("/")
    return f"{parsed.scheme}://{_bare_host(parsed.netloc)}{path}"


def is_likely_article(url: str, *, blocked_hosts: Sequence[str] = ()) -> bool:
    """True when the URL plausibly points at a standalone article. Never raises."""
    try:
        parsed = urlparse(str(url or "").strip())
        scheme = (parsed.scheme or "").lower()
        host = _bare_host(parsed.hostname or "")
    except ValueError:
        return False

    if scheme not in ("http", "https") or not host:
        return False
    if _host_matches(host, DENYLIST_HOSTS) or _host_matches(host, blocked_hosts):
        return False

    path = parsed.path or ""
    if not path or path == "/":
        return False
    if path.lower().endswith(NON_DOCUMENT_EXTENSIONS):
        return False
    return not _ADMIN_PATH.search(path)


def select_candidates(
    references: Iterable[Reference],
    *,
    limit: Optional[int] = None,
    blocked_hosts: Sequence[str] = (),
) -> List[Reference]:
    """Normalize, classify and dedupe search results; first match wins."""
    selected: List[Reference] = []
    seen = set()
    for ref in references:
        normalized = normalize_url(ref.url)
        if not normalized or not is_likely_article(normalized, blocked_hosts=blocked_hosts):
            continue
        key = url_key(normalized)
        if key in seen:
            continue
        seen.add(key)
        title = ref.title.strip() if ref.title and ref.title.strip() != ref.url else normalized
        selected.append(Reference(title=title, url=normalized))
        if limit is not None and len(selected) >= limit:
            break
    return selected
