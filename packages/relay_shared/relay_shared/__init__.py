"""Shared settings, schemas and client helpers for the chat relay."""

from .config import Settings, get_settings
from .logging import configure_logging
from .openai_client import build_openai_client
from .schemas import ChatTurn, EmbeddingRecord, ModerationVerdict, PromptMessage, RankedDoc

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "build_openai_client",
    "ChatTurn",
    "EmbeddingRecord",
    "ModerationVerdict",
    "PromptMessage",
    "RankedDoc",
]
