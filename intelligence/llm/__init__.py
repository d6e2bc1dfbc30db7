"""
LLM Module
Text-generation backends
"""
from .base import BaseLLM, LLMResponse, Message, MessageRole
from .openai_llm import OpenAILLM
from .huggingface_llm import HuggingFaceLLM
from .retry import call_with_retry, capacity_delay, is_capacity_error
from .factory import get_llm, resolve_provider

__all__ = [
    "BaseLLM",
    "LLMResponse",
    "Message",
    "MessageRole",
    "OpenAILLM",
    "HuggingFaceLLM",
    "call_with_retry",
    "capacity_delay",
    "is_capacity_error",
    "get_llm",
    "resolve_provider",
]
