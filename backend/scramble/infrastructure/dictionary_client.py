"""Dictionary Client: word recognition over the public Free Dictionary API.

Invariants:
    - HTTP 200 -> recognised, HTTP 404 -> not a word, anything else raises
      ValidationServiceUnavailableError (core/errors.py)
    - Transport errors and timeouts also raise ValidationServiceUnavailableError
    - Only definitive answers (200/404) are cached; outages are never cached
    - Cache bounded to cache_size entries, least-recently-used evicted first

Design Decisions:
    - Caching here rather than in SolutionValidator: the validator stays IO-agnostic
    - OrderedDict LRU over functools.lru_cache: async method, and failures must not be memoised
"""

import logging
from collections import OrderedDict
from urllib.parse import quote

import httpx

from scramble.core.errors import ValidationServiceUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.dictionaryapi.dev/api/v2/entries/en"


class DictionaryClient:
    """Dictionary backed by dictionaryapi.dev."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout_ms: int = 1500,
        cache_size: int = 512,
    ):
        self._client = client or httpx.AsyncClient()
        self._owns_client = client is None
        self.base_url = base_url
        self.timeout_ms = timeout_ms
        self.cache_size = cache_size
        self._cache: OrderedDict[str, bool] = OrderedDict()

    async def is_valid_word(self, word: str) -> bool:
        word = word.strip().lower()
        if word in self._cache:
            self._cache.move_to_end(word)
            return self._cache[word]

        try:
            response = await self._client.get(
                f"{self.base_url}/{quote(word)}", timeout=self.timeout_ms / 1000,
            )
        except httpx.HTTPError as e:
            logger.warning(f"Dictionary lookup failed for {word!r}: {e}")
            raise ValidationServiceUnavailableError(f"Dictionary lookup failed: {e}")

        if response.status_code == 200:
            result = True
        elif response.status_code == 404:
            result = False
        else:
            logger.warning(
                f"Dictionary returned HTTP {response.status_code} for {word!r}",
            )
            raise ValidationServiceUnavailableError(
                f"Dictionary returned HTTP {response.status_code}",
            )
        self._remember(word, result)
        return result

    def _remember(self, word: str, result: bool) -> None:
        if self.cache_size <= 0:
            return
        self._cache[word] = result
        self._cache.move_to_end(word)
        while len(self._cache) > self.cache_size:
            self._cache.popitem(last=False)

    @property
    def cached_words(self) -> int:
        return len(self._cache)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
