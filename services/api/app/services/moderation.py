"""Best-effort content moderation gate."""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from openai import AsyncOpenAI, APIStatusError, OpenAIError

from relay_shared import ModerationVerdict, Settings

logger = logging.getLogger(__name__)


async def check_moderation(client: Optional[AsyncOpenAI], text: str, *, settings: Settings) -> ModerationVerdict:
    """Classify ``text`` with the upstream moderation endpoint.

    Fails open: an unconfigured client, a failed call or an unreadable
    response all yield an unflagged verdict.
    """

    if client is None or not settings.moderation_enabled:
        return ModerationVerdict(flagged=False)

    try:
        response = await asyncio.wait_for(
            client.moderations.with_raw_response.create(input=text, model=settings.moderation_model),
            timeout=settings.request_timeout_seconds,
        )
        payload = response.http_response.json()
    except APIStatusError as exc:
        logger.error("Moderation API error status: %s", exc.status_code)
        return ModerationVerdict(flagged=False)
    except (OpenAIError, asyncio.TimeoutError, ValueError) as exc:
        logger.error("Moderation failed: %s", exc)
        return ModerationVerdict(flagged=False)

    results = payload.get("results") if isinstance(payload, dict) else None
    result = results[0] if isinstance(results, list) and results else None
    if not isinstance(result, dict):
        logger.error("Moderation response has no results: %s", payload)
        return ModerationVerdict(flagged=False)

    verdict = ModerationVerdict(flagged=bool(result.get("flagged")), raw_result=result)
    if verdict.flagged:
        categories = result.get("categories")
        if not isinstance(categories, dict):
            categories = {}
        logger.warning("message flagged by moderation", extra={"categories": [k for k, v in categories.items() if v]})
    return verdict
