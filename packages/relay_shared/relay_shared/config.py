"""Application configuration shared across services."""
from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SYSTEM_PROMPT = (
    "Eres Atenea, un asistente virtual profesional, amable y servicial para empresas hispanas.\n"
    "Responde en español de forma clara, concisa y profesional. No ofrezcas consejos legales, "
    "médicos o financieros específicos; sugiere consultar a un especialista cuando corresponda."
)


class Settings(BaseSettings):
    """Environment-driven configuration."""

    # Core service metadata
    env: str = "development"
    service_name: str = "atenea-relay"

    # Network/service endpoints
    api_host: str = "0.0.0.0"
    api_port: int = 3000

    # External LLM provider
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    openai_model: str = "gpt-3.5-turbo"
    embedding_model: str = "text-embedding-3-small"
    moderation_model: str = "omni-moderation-latest"
    moderation_enabled: bool = True
    request_timeout_seconds: float = 30.0

    # Sampling
    temperature: float = 0.2
    max_tokens: int = 800
    top_p: float = 1.0
    frequency_penalty: float = 0.0
    presence_penalty: float = 0.0

    # Prompt
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    history_limit: int = 20
    max_message_length: int = 8000

    # Retrieval
    rag_enabled: bool = False
    rag_top_k: int = 3
    corpus_path: str = "vectors.json"
    corpus_text_limit: int = 10000

    # Observability
    log_level: str = "INFO"
    enable_metrics: bool = True
    otel_exporter_endpoint: Optional[str] = None

    allowed_cors_origins: List[str] = ["*"]

    model_config = SettingsConfigDict(env_file=(".env", ".env.local"), env_nested_delimiter="__", extra="ignore")

    def sampling_params(self) -> dict:
        return {
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "top_p": self.top_p,
            "frequency_penalty": self.frequency_penalty,
            "presence_penalty": self.presence_penalty,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached :class:`Settings` instance."""

    return Settings()
