"""
Configuration Management Module
"""
from .settings import (
    ArticleStoreSettings,
    GeneralSettings,
    LLMSettings,
    RunSettings,
    SearchSettings,
    Settings,
    get_llm_settings,
    get_run_settings,
    get_search_settings,
    get_settings,
)

__all__ = [
    "ArticleStoreSettings",
    "GeneralSettings",
    "LLMSettings",
    "RunSettings",
    "SearchSettings",
    "Settings",
    "get_settings",
    "get_search_settings",
    "get_llm_settings",
    "get_run_settings",
]
