from __future__ import annotations

from typing import List, Sequence

from langchain_core.prompts import PromptTemplate

from relay_shared import ChatTurn, PromptMessage, RankedDoc

RAG_SYSTEM_TEMPLATE = """{system_prompt}

Documentos relevantes:
{documents}

Usa esta información cuando sea pertinente y cita la fuente si es necesario."""

_rag_system_prompt = PromptTemplate.from_template(RAG_SYSTEM_TEMPLATE)


def truncate_history(history: Sequence[ChatTurn], limit: int) -> List[ChatTurn]:
    """Keep the most recent ``limit`` turns in their original order."""
    if limit <= 0:
        return []
    return list(history[-limit:])


def _format_documents(documents: Sequence[RankedDoc]) -> str:
    return "\n\n".join(
        f"Documento {index} ({doc.id}):\n{doc.text}" for index, doc in enumerate(documents, 1)
    )


def build_system_prompt(system_prompt: str, documents: Sequence[RankedDoc]) -> str:
    if not documents:
        return system_prompt
    return _rag_system_prompt.format(system_prompt=system_prompt, documents=_format_documents(documents))


def assemble_messages(
    system_prompt: str,
    documents: Sequence[RankedDoc],
    history: Sequence[ChatTurn],
    user_message: str,
) -> List[PromptMessage]:
    """Build the message list sent to the completion endpoint.

    The result always starts with one system message and ends with the
    current user message; history sits in between, in order.
    """
    messages = [PromptMessage(role="system", content=build_system_prompt(system_prompt, documents))]
    for turn in history:
        role = "assistant" if turn.role == "assistant" else "user"
        messages.append(PromptMessage(role=role, content=str(turn.content)))
    messages.append(PromptMessage(role="user", content=user_message))
    return messages
