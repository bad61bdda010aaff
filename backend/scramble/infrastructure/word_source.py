"""Datamuse Word Source: remote random-word provider over httpx.

Invariants:
    - One HTTP request per fetch_random_word call; no internal retries
    - Hard per-call deadline (default 500ms) enforced with asyncio.wait_for
    - Returned word is lowercase ASCII letters, length and frequency inside the tier band
    - All failures mapped to WordSourceError subclasses (core/errors.py):
      timeout -> RemoteTimeoutError, transport/status/payload -> RemoteError,
      nothing usable -> RemoteEmptyError

Design Decisions:
    - Datamuse over a word-list API: free, no key, pattern + frequency metadata in one call
    - Retrying belongs to PuzzleSupplier, which knows the fallback policy
    - Shared AsyncClient injected by the engine factory; tests inject httpx.MockTransport
"""

import asyncio
import logging
import random

import httpx

from scramble.core.errors import RemoteEmptyError, RemoteError, RemoteTimeoutError
from scramble.core.word_bands import band_for_tier, filter_candidates

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.datamuse.com/words"
_RATE_LIMITED_STATUS = 429


class DatamuseWordSource:
    """WordSource backed by the Datamuse `/words` endpoint."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout_ms: int = 500,
        pool_size: int = 200,
        rng: random.Random | None = None,
    ):
        self._client = client or httpx.AsyncClient()
        self._owns_client = client is None
        self.base_url = base_url
        self.timeout_ms = timeout_ms
        self.pool_size = pool_size
        self._rng = rng or random.Random()

    async def fetch_random_word(self, tier: int) -> str:
        band = band_for_tier(tier)
        params = {"sp": band.length_pattern(), "md": "f", "max": str(self.pool_size)}
        try:
            response = await asyncio.wait_for(
                self._client.get(self.base_url, params=params),
                timeout=self.timeout_ms / 1000,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.warning(
                f"Word source timed out after {self.timeout_ms}ms",
                extra={"tier": tier, "reason": "timeout"},
            )
            raise RemoteTimeoutError(self.timeout_ms)
        except httpx.HTTPError as e:
            logger.warning(
                f"Word source transport error: {e}",
                extra={"tier": tier, "reason": "error"},
            )
            raise RemoteError(f"Word source request failed: {e}")

        if response.status_code == _RATE_LIMITED_STATUS:
            raise RemoteError("Word source rate limited", reason="rate_limited")
        if response.status_code != 200:
            raise RemoteError(
                f"Word source returned HTTP {response.status_code}",
                reason=f"http_{response.status_code}",
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise RemoteError(f"Word source returned invalid JSON: {e}", reason="bad_payload")
        if not isinstance(payload, list):
            raise RemoteError("Word source returned a non-list payload", reason="bad_payload")

        candidates = filter_candidates(
            [item for item in payload if isinstance(item, dict)], band,
        )
        if not candidates:
            raise RemoteEmptyError(f"No usable words for tier {tier}")
        word = self._rng.choice(candidates)
        logger.debug(
            f"Word source picked 1 of {len(candidates)} candidates",
            extra={"tier": tier},
        )
        return word

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
