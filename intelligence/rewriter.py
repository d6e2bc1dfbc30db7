"""Rewrite an original article in the style of extracted references."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from core import ExtractedContent, OriginalArticle, RewriteRequest
from processing import html_to_text, limit_text, strip_code_fence

from .llm import BaseLLM, Message


logger = logging.getLogger(__name__)

SYSTEM_PERSONA = "You are a senior editor who writes clean, structured HTML."

REWRITE_INSTRUCTIONS = """
You are an expert editor. Rewrite the original article so its structure, tone, and formatting
match the reference articles. Keep the topic and key ideas, but improve clarity and flow.
Return valid HTML only (no Markdown, no code fences).
""".strip()

DEFAULT_ORIGINAL_MAX_CHARS = 3500
DEFAULT_REFERENCE_MAX_CHARS = 2500


def build_rewrite_request(
    original: OriginalArticle,
    references: Sequence[ExtractedContent],
    *,
    original_max_chars: int = DEFAULT_ORIGINAL_MAX_CHARS,
    reference_max_chars: int = DEFAULT_REFERENCE_MAX_CHARS,
) -> RewriteRequest:
    """Truncate the original and each reference to their prompt budgets."""
    truncated = []
    for ref in references:
        text = ref.text or html_to_text(ref.html)
        truncated.append(ref.model_copy(update={"text": limit_text(text, reference_max_chars)}))

    return RewriteRequest(
        original_title=original.title,
        original_text=limit_text(html_to_text(original.content_html), original_max_chars),
        references=truncated,
    )


def build_prompt(request: RewriteRequest) -> str:
    reference_blocks = [
        f"Reference {idx} ({ref.title or ref.url}):\n{ref.text}"
        for idx, ref in enumerate(request.references, 1)
    ]
    sections = [
        REWRITE_INSTRUCTIONS,
        f"Original article title: {request.original_title}\nOriginal content:\n{request.original_text}",
        "\n\n".join(reference_blocks),
    ]
    return "\n\n".join(section for section in sections if section).strip()


class ArticleRewriter:
    """Builds the prompt and asks the configured LLM for rewritten HTML."""

    def __init__(
        self,
        llm: BaseLLM,
        *,
        temperature: Optional[float] = None,
        original_max_chars: int = DEFAULT_ORIGINAL_MAX_CHARS,
        reference_max_chars: int = DEFAULT_REFERENCE_MAX_CHARS,
    ) -> None:
        self.llm = llm
        self.temperature = temperature
        self.original_max_chars = original_max_chars
        self.reference_max_chars = reference_max_chars

    async def rewrite(self, original: OriginalArticle, references: Sequence[ExtractedContent]) -> str:
        """Rewritten article HTML; empty when the model returned nothing."""
        request = build_rewrite_request(
            original,
            references,
            original_max_chars=self.original_max_chars,
            reference_max_chars=self.reference_max_chars,
        )
        messages = [Message.system(SYSTEM_PERSONA), Message.user(build_prompt(request))]

        kwargs = {}
        if self.temperature is not None:
            kwargs["temperature"] = self.temperature
        response = await self.llm.acomplete(messages, **kwargs)

        html = strip_code_fence(response.content)
        logger.info(
            "Rewrote '%s' with %s (%d chars)",
            original.title,
            self.llm.provider,
            len(html),
        )
        return html

    async def aclose(self) -> None:
        await self.llm.aclose()
