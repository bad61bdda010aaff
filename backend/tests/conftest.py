"""Root conftest: shared test configuration and fixtures."""

import os
import random

import pytest

# Tests never touch a cache file or the public word/dictionary services
os.environ.setdefault("CACHE_STORE_URL", "")
os.environ.setdefault("LOG_FORMAT", "text")

from scramble.infrastructure.observability import RecordingEventSink  # noqa: E402
from scramble.infrastructure.puzzle_cache import PuzzleCache  # noqa: E402


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def sink():
    return RecordingEventSink()


@pytest.fixture
def cache(rng):
    """In-memory cache with the default capacity."""
    return PuzzleCache(rng=rng)
