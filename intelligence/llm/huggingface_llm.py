"""
Hugging Face LLM
Legacy single-string text-generation inference endpoint
"""
from typing import Any, Awaitable, Callable, List, Optional
from urllib.parse import quote
import asyncio
import logging

import httpx

from sources import fetch
from utils.exceptions import CapacityError, RewriteError

from .base import BaseLLM, Message, MessageRole, LLMResponse
from .retry import call_with_retry, capacity_delay, is_capacity_error


logger = logging.getLogger(__name__)


def _estimated_time(response: httpx.Response) -> Optional[float]:
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    value = body.get("estimated_time")
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def parse_generated_text(data: Any) -> str:
    """Read `generated_text` from either the list or the object response shape."""
    if isinstance(data, list):
        data = data[0] if data else {}
    if not isinstance(data, dict):
        raise RewriteError("Unexpected text-generation response", {"type": type(data).__name__})
    return str(data.get("generated_text") or "").strip()


def flatten_messages(messages: List[Message]) -> str:
    """Single prompt string for endpoints without chat roles."""
    parts = []
    for message in messages:
        if message.role == MessageRole.ASSISTANT:
            parts.append(f"Assistant: {message.content}")
        else:
            parts.append(message.content)
    return "\n\n".join(part.strip() for part in parts if part and part.strip())


class HuggingFaceLLM(BaseLLM):
    """
    Hugging Face Inference API implementation

    A 503 carrying `estimated_time` means the model is still loading; those
    calls are retried after the hinted wait.
    """

    def __init__(
        self,
        model: str = "HuggingFaceH4/zephyr-7b-beta",
        api_key: Optional[str] = None,
        base_url: str = "https://api-inference.huggingface.co/models",
        temperature: float = 0.7,
        max_tokens: int = 1200,
        timeout: float = 60.0,
        max_attempts: int = 3,
        retry_margin_seconds: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        **kwargs,
    ):
        super().__init__(model, temperature, max_tokens, timeout, **kwargs)
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.max_attempts = max_attempts
        self.retry_margin_seconds = retry_margin_seconds
        self._sleep = sleep

    @property
    def provider(self) -> str:
        return "huggingface"

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/{quote(self.model, safe='')}"

    async def _post(self, payload: dict) -> Any:
        try:
            return await fetch.post_json(
                self.endpoint,
                payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
        except httpx.HTTPStatusError as exc:
            estimated = _estimated_time(exc.response)
            if exc.response.status_code == 503 and estimated is not None:
                raise CapacityError(
                    f"{self.model} is loading",
                    estimated_time=estimated,
                    status_code=503,
                ) from exc
            raise

    async def acomplete(
        self,
        messages: List[Message],
        **kwargs,
    ) -> LLMResponse:
        payload = {
            "inputs": flatten_messages(messages),
            "parameters": {
                "max_new_tokens": kwargs.get("max_tokens", self.max_tokens),
                "temperature": kwargs.get("temperature", self.temperature),
                "return_full_text": False,
            },
        }

        data = await call_with_retry(
            lambda: self._post(payload),
            is_retryable=is_capacity_error,
            delay_for=capacity_delay(self.retry_margin_seconds),
            max_attempts=self.max_attempts,
            sleep=self._sleep,
        )

        return LLMResponse(
            content=parse_generated_text(data),
            model=self.model,
            raw_response=data,
        )
