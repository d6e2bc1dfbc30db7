"""Canonical data contracts for the refresh pipeline."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OriginalArticle(BaseModel):
    """Source article owned by the Article Store; read-only to the pipeline."""

    model_config = ConfigDict(extra="ignore")

    id: Union[int, str]
    title: str
    content_html: str = ""
    updated_articles: List[Dict[str, Any]] = Field(default_factory=list)

    @field_validator("title", "content_html", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return str(value or "")

    @field_validator("updated_articles", mode="before")
    @classmethod
    def _updated_list(cls, value: Any) -> List[Dict[str, Any]]:
        return list(value or [])

    @property
    def updated_count(self) -> int:
        return len(self.updated_articles)


class Reference(BaseModel):
    """Candidate reference page produced by a search provider."""

    title: str = ""
    url: str


class ExtractedContent(BaseModel):
    """Readable content recovered from a reference page."""

    title: str = ""
    html: str = ""
    text: str
    url: str
    method: str = ""

    @field_validator("text")
    @classmethod
    def _non_empty_text(cls, value: str) -> str:
        text = str(value or "").strip()
        if not text:
            raise ValueError("extracted text must not be empty")
        return text

    def as_reference(self) -> Reference:
        return Reference(title=self.title or self.url, url=self.url)


class RewriteRequest(BaseModel):
    """Prompt inputs for one article, with texts already truncated."""

    original_title: str
    original_text: str
    references: List[ExtractedContent] = Field(default_factory=list)


class UpdatedArticlePayload(BaseModel):
    """Body sent to the Article Store when publishing a rewritten article."""

    title: str
    original_article_id: Union[int, str]
    version: str = "updated"
    source: str = "llm"
    content_html: str
    content_text: str
    excerpt: str
    references: List[Reference] = Field(default_factory=list)
    published_at: datetime = Field(default_factory=utcnow)


class RunState(str, Enum):
    """Lifecycle of a pipeline run."""

    IDLE = "idle"
    RUNNING = "running"
    SUCCESS = "success"
    ERROR = "error"


class RunStatus(BaseModel):
    """Process-wide progress snapshot shared with the launcher through a file."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status: RunState = RunState.IDLE
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    total_count: int = 0
    current_index: int = 0
    current_title: str = ""
    updated_count: int = 0
    skipped_count: int = 0
    last_updated_at: Optional[datetime] = None
    message: str = ""

    @field_validator("started_at", "finished_at", "last_updated_at")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ArticleOutcome(BaseModel):
    """Result of processing one original article."""

    original_id: Union[int, str]
    title: str
    published: bool = False
    reason: str = ""
    references: List[Reference] = Field(default_factory=list)
    article_id: Optional[Union[int, str]] = None


class RunSummary(BaseModel):
    """Aggregate result of a run."""

    total: int = 0
    updated: int = 0
    skipped: int = 0
    outcomes: List[ArticleOutcome] = Field(default_factory=list)
