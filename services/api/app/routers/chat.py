import time
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from openai import AsyncOpenAI

from relay_shared import Settings

from ..dependencies import get_corpus_dep, get_openai_dep, get_settings_dep
from ..errors import RelayError, RelayServerError
from ..models import ChatReply, ChatRequest, ErrorResponse
from ..services.corpus import CorpusStore
from ..services.generation import generate_reply, require_client
from ..services.pipeline import prepare_prompt
from ..services.streaming import SSE_HEADERS, SSE_MEDIA_TYPE, stream_completion

router = APIRouter(prefix="/chat", tags=["chat"])
logger = logging.getLogger(__name__)

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}


@router.post("", response_model=ChatReply, responses=_ERROR_RESPONSES)
async def chat(
    payload: ChatRequest,
    settings: Settings = Depends(get_settings_dep),
    client: Optional[AsyncOpenAI] = Depends(get_openai_dep),
    corpus: CorpusStore = Depends(get_corpus_dep),
) -> ChatReply:
    """
    Buffered chat: one upstream completion, one JSON reply.
    """
    start_time = time.perf_counter()

    try:
        prepared = await prepare_prompt(
            payload.message,
            payload.history,
            settings=settings,
            client=client,
            corpus=corpus,
        )
        reply = await generate_reply(client, prepared.messages, settings=settings)
    except RelayError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error in chat: {str(e)}", exc_info=True)
        raise RelayServerError(detail=str(e)) from e

    total_time_ms = int((time.perf_counter() - start_time) * 1000)
    logger.info(
        f"Chat completed in {total_time_ms}ms with {len(prepared.documents)} context documents"
    )
    return ChatReply(reply=reply)


@router.post("/stream", responses=_ERROR_RESPONSES)
async def chat_stream(
    request: Request,
    payload: ChatRequest,
    settings: Settings = Depends(get_settings_dep),
    client: Optional[AsyncOpenAI] = Depends(get_openai_dep),
    corpus: CorpusStore = Depends(get_corpus_dep),
) -> StreamingResponse:
    """
    Streaming chat. Errors before the stream opens are ordinary JSON errors;
    after that every outcome is reported as an event.
    """
    prepared = await prepare_prompt(
        payload.message,
        payload.history,
        settings=settings,
        client=client,
        corpus=corpus,
    )
    client = require_client(client)

    frames = stream_completion(
        client,
        prepared.messages,
        settings=settings,
        is_disconnected=request.is_disconnected,
    )
    return StreamingResponse(frames, media_type=SSE_MEDIA_TYPE, headers=SSE_HEADERS)
