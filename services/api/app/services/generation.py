from __future__ import annotations

import asyncio
import logging
from typing import Any, List, Optional, Sequence

from openai import APIConnectionError, APIStatusError, AsyncOpenAI, OpenAIError

from relay_shared import PromptMessage, Settings

from ..errors import ConfigurationError, MalformedUpstreamResponseError, RelayServerError, UpstreamError

logger = logging.getLogger(__name__)


def build_completion_payload(settings: Settings, messages: Sequence[PromptMessage], *, stream: bool = False) -> dict:
    payload: dict = {
        "model": settings.openai_model,
        "messages": [message.model_dump() for message in messages],
        **settings.sampling_params(),
    }
    if stream:
        payload["stream"] = True
    return payload


def require_client(client: Optional[AsyncOpenAI]) -> AsyncOpenAI:
    if client is None:
        raise ConfigurationError(detail="OPENAI_API_KEY is not set")
    return client


def extract_reply(data: Any) -> Optional[str]:
    """Return ``choices[0].message.content`` or None when any part is absent."""

    if not isinstance(data, dict):
        return None
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return None
    message = choices[0].get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    if not isinstance(content, str) or not content:
        return None
    return content


async def generate_reply(
    client: Optional[AsyncOpenAI],
    messages: List[PromptMessage],
    *,
    settings: Settings,
) -> str:
    """Send one buffered completion request and return the trimmed reply."""

    client = require_client(client)
    payload = build_completion_payload(settings, messages)

    try:
        response = await asyncio.wait_for(
            client.chat.completions.with_raw_response.create(**payload),
            timeout=settings.request_timeout_seconds,
        )
    except APIStatusError as exc:
        logger.error("OpenAI chat error: %s %s", exc.status_code, exc.response.text)
        raise UpstreamError(detail=f"upstream returned {exc.status_code}") from exc
    except (APIConnectionError, asyncio.TimeoutError) as exc:
        logger.error("OpenAI chat transport failure: %s", exc)
        raise RelayServerError(detail=f"transport failure: {exc!r}") from exc
    except OpenAIError as exc:
        logger.error("OpenAI chat client failure: %s", exc)
        raise RelayServerError(detail=str(exc)) from exc

    try:
        data = response.http_response.json()
    except ValueError as exc:
        logger.error("OpenAI returned a non-JSON body: %s", response.http_response.text[:500])
        raise MalformedUpstreamResponseError(detail="completion body is not JSON") from exc

    reply = extract_reply(data)
    if reply is None:
        logger.error("OpenAI unexpected response shape: %s", data)
        raise MalformedUpstreamResponseError(detail="completion response has no choices[0].message.content")

    usage = data.get("usage")
    if not isinstance(usage, dict):
        usage = {}
    logger.info("completion received", extra={"model": data.get("model"), "tokens_used": usage.get("total_tokens", 0)})
    return reply.strip()
