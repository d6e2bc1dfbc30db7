"""
Custom Exceptions
"""
from typing import Optional


class RefreshError(Exception):
    """Base exception for the refresh pipeline"""

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(RefreshError):
    """Missing or invalid configuration"""
    pass


class SearchError(RefreshError):
    """Search provider failure"""

    def __init__(self, message: str, provider: str = None, **kwargs):
        super().__init__(message, kwargs)
        self.provider = provider


class ExtractionError(RefreshError):
    """Content extraction failure"""

    def __init__(self, message: str, url: str = None, **kwargs):
        super().__init__(message, kwargs)
        self.url = url


class RewriteError(RefreshError):
    """Text-generation failure"""
    pass


class CapacityError(RewriteError):
    """Model endpoint is warming up or over capacity"""

    def __init__(self, message: str, estimated_time: Optional[float] = None, **kwargs):
        super().__init__(message, kwargs)
        self.estimated_time = estimated_time


class ArticleStoreError(RefreshError):
    """Article Store API failure"""
    pass
