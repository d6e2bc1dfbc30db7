"""Async HTTP helpers shared by search, extraction and publishing."""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from config import get_settings


def _timeout(seconds: Optional[float]) -> httpx.Timeout:
    if seconds is None:
        seconds = float(get_settings().general.request_timeout)
    return httpx.Timeout(seconds)


def _headers(headers: Optional[Dict[str, str]]) -> Dict[str, str]:
    merged = {"User-Agent": get_settings().general.user_agent}
    merged.update(headers or {})
    return merged


async def get_text(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    params: Optional[Dict[str, Any]] = None,
    timeout: Optional[float] = None,
) -> str:
    async with httpx.AsyncClient(timeout=_timeout(timeout), follow_redirects=True) as client:
        response = await client.get(url, headers=_headers(headers), params=params)
        response.raise_for_status()
        return str(response.text or "")


async def get_json(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    params: Optional[Dict[str, Any]] = None,
    timeout: Optional[float] = None,
) -> Any:
    async with httpx.AsyncClient(timeout=_timeout(timeout), follow_redirects=True) as client:
        response = await client.get(url, headers=_headers(headers), params=params)
        response.raise_for_status()
        return response.json()


async def post_json(
    url: str,
    payload: Any,
    *,
    headers: Optional[Dict[str, str]] = None,
    timeout: Optional[float] = None,
) -> Any:
    async with httpx.AsyncClient(timeout=_timeout(timeout), follow_redirects=True) as client:
        response = await client.post(url, json=payload, headers=_headers(headers))
        response.raise_for_status()
        if not response.content:
            return None
        return response.json()
