"""Boundary Protocols: contracts between core/services and the infrastructure shell.

Invariants:
    - Core NEVER imports from infrastructure; dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by the engine factory via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, fakes in tests need no inheritance
    - KeyValueStore is synchronous on purpose: PuzzleCache persists before returning
    - WordSource and Dictionary are async because their implementations do network IO
"""

from typing import Protocol


class KeyValueStore(Protocol):
    """One serialized blob per key. May raise; callers absorb failures."""
    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...


class WordSource(Protocol):
    """Remote random-word provider.

    Raises RemoteTimeoutError, RemoteError or RemoteEmptyError. Callers must not assume
    unlimited call volume.
    """
    async def fetch_random_word(self, tier: int) -> str: ...


class Dictionary(Protocol):
    """Word recognition collaborator. Raises ValidationServiceUnavailableError when down."""
    async def is_valid_word(self, word: str) -> bool: ...


class EventSink(Protocol):
    """Telemetry collaborator. Storage and display are its concern, not the engine's."""
    def emit(self, event: str, payload: dict) -> None: ...
