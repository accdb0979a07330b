import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from relay_shared import Settings, build_openai_client, configure_logging, get_settings

from .errors import register_error_handlers
from .routers import chat, system
from .services.corpus import CorpusStore, load_corpus_or_empty
from .telemetry import setup_observability

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    configure_logging(f"api::{settings.env}", settings.log_level)

    if settings.openai_api_key:
        app.state.openai_client = build_openai_client(settings)
    else:
        logger.error("OPENAI_API_KEY is not set; chat requests will fail until it is configured")

    app.state.corpus = load_corpus_or_empty(settings)
    try:
        yield
    finally:
        client = app.state.openai_client
        app.state.openai_client = None
        if client is not None:
            await client.close()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(title="Atenea Chat Relay", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.openai_client = None
    app.state.corpus = CorpusStore.empty()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    setup_observability(app, settings)

    app.include_router(system.router)
    app.include_router(chat.router)

    @app.get("/")
    async def root() -> dict:
        return {"service": settings.service_name, "env": settings.env}

    return app


app = create_app()
