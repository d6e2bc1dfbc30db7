"""
Intelligence Module
LLM backends and the article rewriter
"""
from .llm import (
    BaseLLM,
    HuggingFaceLLM,
    OpenAILLM,
    get_llm,
)
from .rewriter import (
    ArticleRewriter,
    SYSTEM_PERSONA,
    build_prompt,
    build_rewrite_request,
)

__all__ = [
    # LLM
    "BaseLLM",
    "HuggingFaceLLM",
    "OpenAILLM",
    "get_llm",
    # Rewriter
    "ArticleRewriter",
    "SYSTEM_PERSONA",
    "build_prompt",
    "build_rewrite_request",
]
