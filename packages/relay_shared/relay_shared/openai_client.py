"""OpenAI client helpers."""
from typing import Optional

import httpx
from openai import AsyncOpenAI

from .config import Settings


def build_openai_client(settings: Settings, *, http_client: Optional[httpx.AsyncClient] = None) -> AsyncOpenAI:
    """Return an async client that never retries on its own.

    Each upstream attempt is final for the request that made it, so retries
    are disabled and every call is bounded by ``request_timeout_seconds``.
    """

    if not settings.openai_api_key:
        raise ValueError("OpenAI API key not configured")

    return AsyncOpenAI(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        timeout=settings.request_timeout_seconds,
        max_retries=0,
        http_client=http_client,
    )
