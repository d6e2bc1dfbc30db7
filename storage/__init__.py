"""
Storage Module
Article Store client and the run status file
"""
from .article_store import ArticleStoreClient, build_updated_payload
from .status_store import StatusFileStore, describe_status, is_stale

__all__ = [
    "ArticleStoreClient",
    "build_updated_payload",
    "StatusFileStore",
    "describe_status",
    "is_stale",
]
