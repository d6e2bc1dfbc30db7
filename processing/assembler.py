"""Final HTML assembly for rewritten articles."""

from __future__ import annotations

import html as html_lib
from typing import Sequence

from core import Reference

from .cleaner import html_to_text


EXCERPT_LENGTH = 200


def ensure_article_wrapper(content_html: str) -> str:
    trimmed = (content_html or "").strip()
    if trimmed.lower().startswith("<article"):
        return trimmed
    return f"<article>{trimmed}</article>"


def render_references(references: Sequence[Reference]) -> str:
    items = "".join(
        '<li><a href="{url}" rel="noopener noreferrer">{title}</a></li>'.format(
            url=html_lib.escape(ref.url, quote=True),
            title=html_lib.escape(ref.title or ref.url),
        )
        for ref in references
    )
    return (
        "<hr />\n"
        '<section class="references">\n'
        "  <h2>References</h2>\n"
        f"  <ul>{items}</ul>\n"
        "</section>"
    )


def append_references(content_html: str, references: Sequence[Reference]) -> str:
    return f"{content_html}\n{render_references(references)}"


def assemble_article(model_html: str, references: Sequence[Reference]) -> str:
    """Wrap model output in an article container and append the References section."""
    return append_references(ensure_article_wrapper(model_html), references)


def build_excerpt(content_html: str, length: int = EXCERPT_LENGTH) -> str:
    return html_to_text(content_html)[:length]
