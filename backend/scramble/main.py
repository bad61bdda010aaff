"""Scramble Engine API: FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map ScrambleError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Engine (HTTP client, puzzle cache, cache store) created on startup via lifespan
      and released on shutdown, after every live session has been ended

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from scramble.api.error_handlers import register_error_handlers
from scramble.api.routes import health, session_lifecycle, session_stream
from scramble.api.routes.session_helpers import end_all_sessions
from scramble.config import get_settings
from scramble.infrastructure.observability import setup_logging
from scramble.services.engine_factory import close_engine, init_engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_engine(settings)
    logger.info("Scramble engine API started")
    yield
    logger.info("Scramble engine API shutting down")
    end_all_sessions()
    await close_engine()


app = FastAPI(
    title="Scramble Engine API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(session_lifecycle.router)
app.include_router(session_stream.router)

register_error_handlers(app)
