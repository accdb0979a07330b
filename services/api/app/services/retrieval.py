from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from openai import AsyncOpenAI, OpenAIError

from relay_shared import RankedDoc, Settings

from .corpus import CorpusStore
from .similarity import rank_documents, top_k

logger = logging.getLogger(__name__)


async def embed_query(client: AsyncOpenAI, text: str, *, settings: Settings) -> List[float]:
    """Embed ``text`` through the upstream embeddings endpoint."""

    response = await asyncio.wait_for(
        client.embeddings.with_raw_response.create(
            input=text,
            model=settings.embedding_model,
            encoding_format="float",
        ),
        timeout=settings.request_timeout_seconds,
    )
    payload = response.http_response.json()

    data = payload.get("data") if isinstance(payload, dict) else None
    first = data[0] if isinstance(data, list) and data else None
    embedding = first.get("embedding") if isinstance(first, dict) else None
    if not isinstance(embedding, list) or not embedding:
        raise ValueError("embeddings response has no data[0].embedding")
    return [float(value) for value in embedding]


async def retrieve_documents(
    client: Optional[AsyncOpenAI],
    corpus: CorpusStore,
    query: str,
    *,
    settings: Settings,
) -> List[RankedDoc]:
    """Return the top-k corpus documents for ``query``.

    Any failure leaves the request without context instead of failing it.
    """

    if not settings.rag_enabled or corpus.is_empty or client is None:
        return []

    try:
        vector = await embed_query(client, query, settings=settings)
        ranked = rank_documents(corpus, vector)
    except (OpenAIError, asyncio.TimeoutError, ValueError, TypeError) as exc:
        logger.error("RAG embedding error, continuing without context: %s", exc)
        return []

    documents = top_k(ranked, settings.rag_top_k)
    logger.info(
        "retrieval results",
        extra={"count": len(documents), "top_k": settings.rag_top_k, "ids": [doc.id for doc in documents]},
    )
    return documents
