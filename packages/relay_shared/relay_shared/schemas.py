"""Shared Pydantic schemas."""
from typing import Annotated, Any, Literal, Optional, List

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class ChatTurn(BaseModel):
    """A prior turn of the conversation supplied by the caller."""

    role: Literal["user", "assistant"] = "user"
    content: str = ""

    @field_validator("role", mode="before")
    @classmethod
    def _coerce_role(cls, value: Any) -> str:
        return "assistant" if value == "assistant" else "user"

    @field_validator("content", mode="before")
    @classmethod
    def _coerce_content(cls, value: Any) -> str:
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)


FiniteFloat = Annotated[float, Field(strict=True, allow_inf_nan=False)]


class EmbeddingRecord(BaseModel):
    """Precomputed document embedding loaded from the corpus file."""

    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    vector: List[FiniteFloat] = Field(validation_alias=AliasChoices("embedding", "vector"), min_length=1)


class RankedDoc(BaseModel):
    """A corpus record scored against a query vector."""

    id: str
    text: str
    similarity: float


class PromptMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class ModerationVerdict(BaseModel):
    flagged: bool = False
    raw_result: Optional[dict] = None
