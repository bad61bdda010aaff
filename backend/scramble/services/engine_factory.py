"""Engine Factory: process-wide shared resources and per-session controller assembly.

Invariants:
    - One Engine per process, created on startup by the lifespan (init_engine) and
      released on shutdown (close_engine)
    - The httpx client, cache store and PuzzleCache are shared; SessionState, supplier
      mode, timer and validator stats are per session
    - A cache store that fails to open downgrades the cache to in-memory, never startup

Design Decisions:
    - Module-level singleton initialized in lifespan rather than at import time
      (no global import side effects)
    - Each session gets its own PuzzleSupplier so set_mode() never leaks across sessions
"""

import logging
import random

import httpx

from scramble.config import Settings
from scramble.core.domain_types import SupplyMode
from scramble.core.errors import DatabaseError
from scramble.core.repository_protocols import EventSink
from scramble.core.word_scrambler import WordScrambler
from scramble.infrastructure.dictionary_client import DictionaryClient
from scramble.infrastructure.kv_store import SqlKeyValueStore
from scramble.infrastructure.observability import LoggingEventSink
from scramble.infrastructure.puzzle_cache import PuzzleCache
from scramble.infrastructure.word_source import DatamuseWordSource
from scramble.services.puzzle_supplier import PuzzleSupplier
from scramble.services.round_timer import RoundTimer
from scramble.services.session_controller import SessionController
from scramble.services.solution_validator import SolutionValidator

logger = logging.getLogger(__name__)


class Engine:
    """Shared collaborators for every session in this process."""

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
        event_sink: EventSink | None = None,
        cache: PuzzleCache | None = None,
        rng: random.Random | None = None,
    ):
        self.settings = settings
        self.rng = rng or random.Random()
        self.http_client = http_client or httpx.AsyncClient()
        self._owns_client = http_client is None
        self.event_sink = event_sink or LoggingEventSink()
        self.store: SqlKeyValueStore | None = None
        self.cache = cache or self._build_cache()
        self.word_source = DatamuseWordSource(
            client=self.http_client,
            base_url=settings.datamuse_base_url,
            timeout_ms=settings.remote_timeout_ms,
            pool_size=settings.remote_pool_size,
            rng=self.rng,
        )
        self.dictionary = (
            DictionaryClient(
                client=self.http_client,
                base_url=settings.dictionary_base_url,
                timeout_ms=settings.dictionary_timeout_ms,
                cache_size=settings.dictionary_cache_size,
            )
            if settings.dictionary_enabled else None
        )

    def _build_cache(self) -> PuzzleCache:
        url = self.settings.cache_store_url
        if url:
            try:
                self.store = SqlKeyValueStore(url)
            except DatabaseError as e:
                logger.warning(f"Cache store unavailable, using in-memory cache: {e.message}")
        return PuzzleCache(
            store=self.store,
            capacity=self.settings.cache_capacity,
            storage_key=self.settings.cache_storage_key,
            rng=self.rng,
        )

    def build_session_controller(
        self, mode: SupplyMode | str | None = None,
    ) -> SessionController:
        settings = self.settings
        supplier = PuzzleSupplier(
            cache=self.cache,
            word_source=self.word_source,
            scrambler=WordScrambler(rng=self.rng),
            mode=mode or settings.default_mode,
            event_sink=self.event_sink,
            max_attempts=settings.remote_max_attempts,
            rng=self.rng,
        )
        validator = SolutionValidator(
            dictionary=self.dictionary,
            timeout_seconds=settings.dictionary_timeout_ms / 1000,
        )
        return SessionController(
            supplier=supplier,
            validator=validator,
            timer=RoundTimer(poll_interval_ms=settings.timer_poll_interval_ms),
            event_sink=self.event_sink,
            round_duration_seconds=settings.round_duration_seconds,
            round_complete_display_seconds=settings.round_complete_display_seconds,
            timeout_reveal_seconds=settings.timeout_reveal_seconds,
            max_idle_timeouts=settings.max_idle_timeouts,
        )

    def health_check(self) -> dict:
        store_ok = self.store.health_check() if self.store is not None else None
        return {
            "cache_store": (
                "disabled" if store_ok is None else "healthy" if store_ok else "unavailable"
            ),
            "cache": self.cache.stats(),
        }

    async def close(self) -> None:
        if self._owns_client:
            await self.http_client.aclose()
        if self.store is not None:
            self.store.close()


# Singleton (initialized on startup)
engine: Engine | None = None


def init_engine(settings: Settings, **kwargs) -> Engine:
    global engine
    engine = Engine(settings, **kwargs)
    logger.info(
        "Engine initialized",
        extra={"mode": settings.default_mode.value},
    )
    return engine


async def close_engine() -> None:
    global engine
    if engine is not None:
        await engine.close()
        engine = None


def get_engine() -> Engine:
    """FastAPI dependency for the shared engine."""
    if engine is None:
        raise RuntimeError("Engine not initialized")
    return engine
