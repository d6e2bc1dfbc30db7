"""
Utils Module
"""
from .logger import setup_logger, get_logger, attach_package_loggers
from .exceptions import (
    RefreshError,
    ConfigurationError,
    SearchError,
    ExtractionError,
    RewriteError,
    CapacityError,
    ArticleStoreError,
)

__all__ = [
    "setup_logger",
    "get_logger",
    "attach_package_loggers",
    "RefreshError",
    "ConfigurationError",
    "SearchError",
    "ExtractionError",
    "RewriteError",
    "CapacityError",
    "ArticleStoreError",
]
