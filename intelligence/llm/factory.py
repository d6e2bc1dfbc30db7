"""
LLM Factory
Creates the text-generation backend from configuration
"""
from typing import Optional
import logging

from config import LLMSettings
from utils.exceptions import ConfigurationError

from .base import BaseLLM
from .huggingface_llm import HuggingFaceLLM
from .openai_llm import OpenAILLM


logger = logging.getLogger(__name__)


SUPPORTED_PROVIDERS = ("auto", "openai", "huggingface")


def resolve_provider(settings: LLMSettings) -> str:
    """
    Pick the backend name

    `auto` prefers OpenAI when its key is set, then Hugging Face.

    Raises:
        ConfigurationError: unknown provider or no usable credential
    """
    provider = str(settings.provider or "auto").strip().lower()
    if provider not in SUPPORTED_PROVIDERS:
        raise ConfigurationError(
            f"Unsupported LLM provider: {settings.provider}",
            {"supported": list(SUPPORTED_PROVIDERS)},
        )

    if provider == "auto":
        if settings.openai_api_key:
            return "openai"
        if settings.hf_api_key:
            return "huggingface"
        raise ConfigurationError("Set LLM_OPENAI_API_KEY or LLM_HF_API_KEY to generate updated articles.")

    if provider == "openai" and not settings.openai_api_key:
        raise ConfigurationError("LLM_PROVIDER=openai requires LLM_OPENAI_API_KEY.")
    if provider == "huggingface" and not settings.hf_api_key:
        raise ConfigurationError("LLM_PROVIDER=huggingface requires LLM_HF_API_KEY.")
    return provider


def get_llm(settings: Optional[LLMSettings] = None, **kwargs) -> BaseLLM:
    """
    Get an LLM instance

    The credential check happens here, before any network call.

    Args:
        settings: LLM settings (defaults to the process configuration)
        **kwargs: extra constructor arguments (e.g. sleep for HF retries)

    Returns:
        BaseLLM instance
    """
    if settings is None:
        from config import get_llm_settings
        settings = get_llm_settings()

    provider = resolve_provider(settings)

    common = {
        "temperature": settings.temperature,
        "max_tokens": settings.max_tokens,
        "timeout": settings.request_timeout,
    }

    if provider == "openai":
        llm: BaseLLM = OpenAILLM(
            model=settings.openai_model,
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            **common,
            **kwargs,
        )
    else:
        llm = HuggingFaceLLM(
            model=settings.hf_model,
            api_key=settings.hf_api_key,
            base_url=settings.hf_base_url,
            max_attempts=settings.max_attempts,
            retry_margin_seconds=settings.retry_margin_seconds,
            **common,
            **kwargs,
        )

    logger.info(f"Using LLM backend: {llm.provider} ({llm.model})")
    return llm
