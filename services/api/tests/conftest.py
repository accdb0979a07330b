from __future__ import annotations

from typing import Callable, List

import pytest
from fastapi.testclient import TestClient

from relay_shared import Settings

from app.dependencies import get_openai_dep
from app.main import create_app

from fakes import FakeUpstream


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    def _make(**overrides) -> Settings:
        values = {
            "openai_api_key": "test-key",
            "enable_metrics": False,
            "rag_enabled": False,
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make


@pytest.fixture
def settings(make_settings) -> Settings:
    return make_settings()


@pytest.fixture
def build_client(upstream: FakeUpstream):
    """Return a factory for a TestClient whose upstream calls hit ``upstream``."""

    clients: List[TestClient] = []

    def _build(settings: Settings, *, with_upstream: bool = True) -> TestClient:
        app = create_app(settings)
        fake_client = upstream.client() if with_upstream else None
        app.dependency_overrides[get_openai_dep] = lambda: fake_client
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _build

    for client in clients:
        client.__exit__(None, None, None)
