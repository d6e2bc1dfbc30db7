"""
Search Providers Module
Interchangeable search backends for reference discovery
"""
from .base import BaseSearchProvider, KeywordSearchProvider, SearchProviderKind
from .html_search import HtmlSearchProvider, extract_result_links
from .serper_search import SerperSearchProvider
from .serpapi_search import SerpApiSearchProvider
from .factory import get_search_provider

__all__ = [
    "BaseSearchProvider",
    "KeywordSearchProvider",
    "SearchProviderKind",
    "HtmlSearchProvider",
    "SerperSearchProvider",
    "SerpApiSearchProvider",
    "extract_result_links",
    "get_search_provider",
]
