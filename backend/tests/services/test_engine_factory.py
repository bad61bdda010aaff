"""Engine Factory: shared resources from settings and per-session controllers."""

import httpx

from scramble.config import Settings
from scramble.core.domain_types import SupplyMode
from scramble.services import engine_factory
from scramble.services.engine_factory import Engine, close_engine, get_engine, init_engine


def _settings(**overrides) -> Settings:
    return Settings(cache_store_url="", **overrides)


def _http() -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(404)))


async def test_in_memory_cache_when_store_url_is_empty():
    engine = Engine(_settings(), http_client=_http())
    assert engine.store is None
    assert not engine.cache.is_persistent
    assert engine.health_check()["cache_store"] == "disabled"
    await engine.close()


async def test_sqlite_store_backs_the_cache(tmp_path):
    settings = Settings(cache_store_url=f"sqlite:///{tmp_path / 'cache.db'}")
    engine = Engine(settings, http_client=_http())
    assert engine.cache.is_persistent
    assert engine.health_check()["cache_store"] == "healthy"
    await engine.close()


async def test_unusable_store_url_falls_back_to_memory():
    engine = Engine(Settings(cache_store_url="sqlite:////nonexistent/dir/x.db"), http_client=_http())
    assert engine.store is None
    assert not engine.cache.is_persistent
    await engine.close()


async def test_sessions_share_cache_but_not_mode():
    engine = Engine(_settings(), http_client=_http())
    first = engine.build_session_controller("curated")
    second = engine.build_session_controller()
    assert first.supplier.cache is second.supplier.cache
    assert first.supplier.mode == SupplyMode.CURATED
    assert second.supplier.mode == SupplyMode.HYBRID
    assert first.state is not second.state
    assert first.timer is not second.timer
    await engine.close()


async def test_dictionary_can_be_disabled():
    engine = Engine(_settings(dictionary_enabled=False), http_client=_http())
    assert engine.dictionary is None
    assert engine.build_session_controller().validator.dictionary is None
    await engine.close()


async def test_init_get_close_lifecycle():
    engine = init_engine(_settings(), http_client=_http())
    assert get_engine() is engine
    await close_engine()
    assert engine_factory.engine is None
