"""
Processing Module
Text cleaning and final article assembly.
"""
from .cleaner import clean_text, html_to_text, limit_text, strip_code_fence
from .assembler import (
    append_references,
    assemble_article,
    build_excerpt,
    ensure_article_wrapper,
    render_references,
)

__all__ = [
    # Cleaner
    "clean_text",
    "html_to_text",
    "limit_text",
    "strip_code_fence",
    # Assembler
    "append_references",
    "assemble_article",
    "build_excerpt",
    "ensure_article_wrapper",
    "render_references",
]
