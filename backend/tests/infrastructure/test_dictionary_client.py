"""Dictionary Client: 200/404 mapping, outage errors and result caching."""

import httpx
import pytest

from scramble.core.errors import ValidationServiceUnavailableError
from scramble.infrastructure.dictionary_client import DictionaryClient


def _client(handler, **kwargs):
    calls = []

    def recording(request):
        calls.append(request.url.path)
        return handler(request)

    http = httpx.AsyncClient(transport=httpx.MockTransport(recording))
    return DictionaryClient(client=http, base_url="https://dict.test/en", **kwargs), calls


async def test_200_is_a_word_and_404_is_not():
    client, calls = _client(
        lambda r: httpx.Response(200 if r.url.path.endswith("/listen") else 404),
    )
    assert await client.is_valid_word("listen") is True
    assert await client.is_valid_word("tinsel") is False
    assert calls == ["/en/listen", "/en/tinsel"]


async def test_lookups_are_normalized_and_cached():
    client, calls = _client(lambda r: httpx.Response(200))
    assert await client.is_valid_word(" Listen ")
    assert await client.is_valid_word("listen")
    assert len(calls) == 1
    assert client.cached_words == 1


async def test_server_error_raises_unavailable_and_is_not_cached():
    client, calls = _client(lambda r: httpx.Response(500))
    for _ in range(2):
        with pytest.raises(ValidationServiceUnavailableError):
            await client.is_valid_word("listen")
    assert len(calls) == 2


async def test_transport_error_raises_unavailable():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    client, _ = _client(handler)
    with pytest.raises(ValidationServiceUnavailableError):
        await client.is_valid_word("listen")


async def test_cache_is_bounded():
    client, calls = _client(lambda r: httpx.Response(200), cache_size=2)
    for word in ("one", "two", "three", "one"):
        await client.is_valid_word(word)
    assert client.cached_words == 2
    assert len(calls) == 4
