from typing import Optional

from fastapi import APIRouter, Depends
from openai import AsyncOpenAI

from relay_shared import Settings

from ..dependencies import get_corpus_dep, get_openai_dep, get_settings_dep
from ..models import HealthResponse
from ..services.corpus import CorpusStore

router = APIRouter(tags=["system"])


@router.get("/health", response_model=HealthResponse)
async def healthcheck(
    settings: Settings = Depends(get_settings_dep),
    corpus: CorpusStore = Depends(get_corpus_dep),
    client: Optional[AsyncOpenAI] = Depends(get_openai_dep),
) -> HealthResponse:
    return HealthResponse(
        status="ok",
        retrieval_enabled=settings.rag_enabled and client is not None and not corpus.is_empty,
        corpus_size=len(corpus),
    )
