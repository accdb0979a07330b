from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from relay_shared import ChatTurn


class ChatRequest(BaseModel):
    message: Optional[str] = Field(None, description="Current user message")
    history: List[ChatTurn] = Field(default_factory=list, description="Prior turns, oldest first")

    @field_validator("message", mode="before")
    @classmethod
    def _coerce_message(cls, value: Any) -> Optional[str]:
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("history", mode="before")
    @classmethod
    def _coerce_history(cls, value: Any) -> list:
        if not isinstance(value, list):
            return []
        return [entry for entry in value if isinstance(entry, dict)]


class ChatReply(BaseModel):
    reply: str


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str = "ok"
    retrieval_enabled: bool
    corpus_size: int
