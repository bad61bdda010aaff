"""API test fixtures: engine with faked remote services + FastAPI test client.

Invariants:
    - The word source always fails (HTTP 503), so hybrid sessions play curated puzzles
    - The dictionary knows only "listen"
    - Every test gets a fresh engine and an empty session registry
"""

import random

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from scramble.api.routes import session_helpers
from scramble.config import Settings
from scramble.main import app
from scramble.services import engine_factory


def _remote(request: httpx.Request) -> httpx.Response:
    if "datamuse" in request.url.host:
        return httpx.Response(503)
    return httpx.Response(200 if request.url.path.endswith("/listen") else 404)


@pytest.fixture
async def engine():
    settings = Settings(
        cache_store_url="",
        round_complete_display_seconds=60,
        timeout_reveal_seconds=60,
    )
    http = httpx.AsyncClient(transport=httpx.MockTransport(_remote))
    engine = engine_factory.init_engine(settings, http_client=http, rng=random.Random(3))
    yield engine
    session_helpers.end_all_sessions()
    await engine_factory.close_engine()
    await http.aclose()


@pytest.fixture
async def client(engine):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
