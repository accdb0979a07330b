"""Request pipeline shared by the buffered and streaming chat routes."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from openai import AsyncOpenAI

from relay_shared import ChatTurn, PromptMessage, RankedDoc, Settings

from ..errors import MessageValidationError, PolicyViolationError
from .corpus import CorpusStore
from .moderation import check_moderation
from .prompting import assemble_messages, truncate_history
from .retrieval import retrieve_documents

logger = logging.getLogger(__name__)


@dataclass
class PreparedPrompt:
    messages: List[PromptMessage]
    documents: List[RankedDoc] = field(default_factory=list)


def validate_message(message: Optional[str], *, max_length: int) -> str:
    if not message:
        raise MessageValidationError("El mensaje está vacío o no es válido.")
    if not message.strip():
        raise MessageValidationError("El mensaje está vacío.")
    if len(message) > max_length:
        raise MessageValidationError("Mensaje demasiado largo.")
    return message


async def prepare_prompt(
    message: Optional[str],
    history: Sequence[ChatTurn],
    *,
    settings: Settings,
    client: Optional[AsyncOpenAI],
    corpus: CorpusStore,
) -> PreparedPrompt:
    """Validate, moderate, retrieve and assemble, strictly in that order."""

    message = validate_message(message, max_length=settings.max_message_length)

    verdict = await check_moderation(client, message, settings=settings)
    if verdict.flagged:
        raise PolicyViolationError()

    bounded_history = truncate_history(history, settings.history_limit)
    documents = await retrieve_documents(client, corpus, message, settings=settings)
    messages = assemble_messages(settings.system_prompt, documents, bounded_history, message)

    logger.debug(
        "prompt assembled",
        extra={"history_turns": len(bounded_history), "documents": len(documents), "messages": len(messages)},
    )
    return PreparedPrompt(messages=messages, documents=documents)
