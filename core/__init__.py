"""Core contracts and shared types for the refresh pipeline."""

from .contracts import (
    ArticleOutcome,
    ExtractedContent,
    OriginalArticle,
    Reference,
    RewriteRequest,
    RunState,
    RunStatus,
    RunSummary,
    UpdatedArticlePayload,
    utcnow,
)

__all__ = [
    "ArticleOutcome",
    "ExtractedContent",
    "OriginalArticle",
    "Reference",
    "RewriteRequest",
    "RunState",
    "RunStatus",
    "RunSummary",
    "UpdatedArticlePayload",
    "utcnow",
]
