"""
Text Cleaner
HTML-to-text conversion and length budgeting for prompts and payloads.
"""
import html
import re
from typing import Optional

from bs4 import BeautifulSoup


MULTIPLE_SPACES = re.compile(r"\s+")
CODE_FENCE = re.compile(r"^\s*```[a-zA-Z0-9_-]*\s*\n(.*?)\n?\s*```\s*$", re.DOTALL)
_NON_CONTENT_TAGS = ("script", "style", "noscript", "template")


def clean_text(text: Optional[str]) -> str:
    """Unescape entities and collapse whitespace."""
    if not text:
        return ""
    text = html.unescape(text)
    return MULTIPLE_SPACES.sub(" ", text).strip()


def html_to_text(markup: Optional[str]) -> str:
    """
    Visible text of an HTML fragment or document.

    Args:
        markup: HTML source

    Returns:
        Whitespace-collapsed text, empty for empty input
    """
    if not markup or not markup.strip():
        return ""
    soup = BeautifulSoup(markup, "lxml")
    for tag in soup(_NON_CONTENT_TAGS):
        tag.decompose()
    return clean_text(soup.get_text(" "))


def limit_text(text: str, max_length: int) -> str:
    """Hard cap with an ellipsis marker when truncated."""
    text = text or ""
    if len(text) <= max_length:
        return text
    return f"{text[:max_length]}..."


def strip_code_fence(text: str) -> str:
    """Remove a Markdown code fence wrapped around the whole response."""
    stripped = (text or "").strip()
    match = CODE_FENCE.match(stripped)
    if match:
        return match.group(1).strip()
    return stripped
