from typing import Optional

from fastapi import Request
from openai import AsyncOpenAI

from relay_shared import Settings

from .services.corpus import CorpusStore


async def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_openai_dep(request: Request) -> Optional[AsyncOpenAI]:
    """Process-wide upstream client, or None when no API key is configured."""
    return request.app.state.openai_client


def get_corpus_dep(request: Request) -> CorpusStore:
    return request.app.state.corpus
