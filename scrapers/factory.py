"""
Search Provider Factory
Builds the configured search backend at startup
"""
from typing import Optional
import logging

from config import SearchSettings, get_search_settings
from utils.exceptions import ConfigurationError

from .base import BaseSearchProvider, SearchProviderKind
from .html_search import HtmlSearchProvider
from .serpapi_search import SerpApiSearchProvider
from .serper_search import SerperSearchProvider


logger = logging.getLogger(__name__)


def get_search_provider(
    settings: Optional[SearchSettings] = None,
    *,
    timeout: Optional[float] = None,
) -> BaseSearchProvider:
    """
    Create the search provider selected by configuration

    Keyword providers receive the HTML provider as their fallback.

    Raises:
        ConfigurationError: unknown provider name
    """
    settings = settings or get_search_settings()

    try:
        kind = SearchProviderKind(str(settings.provider or "").strip().lower())
    except ValueError as exc:
        raise ConfigurationError(
            f"Unsupported search provider: {settings.provider}",
            {"supported": [item.value for item in SearchProviderKind]},
        ) from exc

    html = HtmlSearchProvider(settings.proxy_base_url, timeout=timeout)

    if kind == SearchProviderKind.SERPER:
        provider = SerperSearchProvider(settings.serper_api_key, fallback=html, timeout=timeout)
    elif kind == SearchProviderKind.SERPAPI:
        provider = SerpApiSearchProvider(settings.serpapi_api_key, fallback=html, timeout=timeout)
    else:
        provider = html

    logger.info(f"Using search provider: {provider.name}")
    return provider
