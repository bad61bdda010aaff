"""Datamuse Word Source: request shape, band filtering and failure mapping.

Tests use httpx.MockTransport; nothing touches the network.
"""

import asyncio
import random

import httpx
import pytest

from scramble.core.errors import RemoteEmptyError, RemoteError, RemoteTimeoutError
from scramble.infrastructure.word_source import DatamuseWordSource


def _source(handler, **kwargs) -> DatamuseWordSource:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return DatamuseWordSource(client=client, rng=random.Random(0), **kwargs)


async def test_sends_pattern_frequency_and_pool_size():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(request.url.params)
        return httpx.Response(200, json=[{"word": "lamp", "tags": ["f:80"]}])

    source = _source(handler, pool_size=50)
    assert await source.fetch_random_word(1) == "lamp"
    assert seen == {"sp": "????*", "md": "f", "max": "50"}


async def test_picks_only_words_inside_the_band():
    payload = [
        {"word": "cat", "tags": ["f:500"]},
        {"word": "garden", "tags": ["f:40"]},
        {"word": "Planet", "tags": ["f:30"]},
        {"word": "obscure", "tags": ["f:0.1"]},
    ]
    source = _source(lambda request: httpx.Response(200, json=payload))
    for _ in range(20):
        assert await source.fetch_random_word(2) in {"garden", "planet"}


async def test_no_usable_candidates_is_remote_empty():
    source = _source(lambda r: httpx.Response(200, json=[{"word": "x-ray", "tags": ["f:9"]}]))
    with pytest.raises(RemoteEmptyError):
        await source.fetch_random_word(1)


async def test_http_error_status_is_remote_error():
    source = _source(lambda r: httpx.Response(503))
    with pytest.raises(RemoteError) as exc:
        await source.fetch_random_word(1)
    assert exc.value.reason == "http_503"


async def test_rate_limit_is_reported():
    source = _source(lambda r: httpx.Response(429))
    with pytest.raises(RemoteError) as exc:
        await source.fetch_random_word(1)
    assert exc.value.reason == "rate_limited"


async def test_bad_json_is_remote_error():
    source = _source(lambda r: httpx.Response(200, content=b"<html>"))
    with pytest.raises(RemoteError):
        await source.fetch_random_word(1)


async def test_transport_failure_is_remote_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(RemoteError):
        await _source(handler).fetch_random_word(1)


async def test_slow_response_is_remote_timeout():
    async def handler(request):
        await asyncio.sleep(1)
        return httpx.Response(200, json=[])

    source = _source(handler, timeout_ms=50)
    with pytest.raises(RemoteTimeoutError):
        await source.fetch_random_word(1)
