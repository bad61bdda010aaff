"""Puzzle Cache: bounded, persistent, least-recently-used store of generated puzzles.

Invariants:
    - Capacity is shared across tiers; len(entries) <= capacity after every call returns
    - Overflow evicts exactly the entry with the oldest last_accessed_at, across all tiers
    - A hit bumps last_accessed_at and access_count; a miss leaves entries untouched
    - Every mutating call (hit, put, clear, preload) persists a fresh snapshot before returning
    - Never raises to callers: a corrupt snapshot resets the cache, a failing store switches
      the cache to in-memory-only for the rest of the process

Design Decisions:
    - last_accessed_at is a logical clock (monotonic counter) persisted with the snapshot:
      wall-clock ties and clock skew cannot reorder LRU, and order survives restarts
    - CacheEntry never leaves this module; get() hands out the Puzzle re-tagged origin=cache
    - Snapshot is versioned JSON; any other version counts as corruption
    - Cross-process writers are last-writer-wins (no locking) by decision
"""

import json
import logging
import random
from dataclasses import dataclass

from scramble.core.domain_types import PuzzleOrigin, is_valid_tier
from scramble.core.errors import CacheCorruptionError, InvalidTierError
from scramble.core.puzzle import Puzzle
from scramble.core.repository_protocols import KeyValueStore

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1
DEFAULT_CAPACITY = 200
DEFAULT_STORAGE_KEY = "scramble-generated-cache"


@dataclass
class CacheEntry:
    """Puzzle plus LRU bookkeeping. Owned exclusively by PuzzleCache."""
    tier: int
    puzzle: Puzzle
    last_accessed_at: int
    access_count: int = 0


def tier_for_word_length(length: int) -> int:
    """Heuristic tier for preloaded puzzles."""
    if length <= 4:
        return 1
    if length == 5:
        return 2
    if length == 6:
        return 3
    if length == 7:
        return 4
    return 5


class PuzzleCache:
    """LRU cache keyed by difficulty tier, persisted as one blob in a KeyValueStore."""

    def __init__(
        self,
        store: KeyValueStore | None = None,
        capacity: int = DEFAULT_CAPACITY,
        storage_key: str = DEFAULT_STORAGE_KEY,
        rng: random.Random | None = None,
    ):
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._store = store
        self.capacity = capacity
        self.storage_key = storage_key
        self._rng = rng or random.Random()
        self._entries: dict[str, CacheEntry] = {}
        self._clock = 0
        self.hits = 0
        self.misses = 0
        self.evictions = 0
        self._load()

    # -- Public API --------------------------------------------------------

    @property
    def is_persistent(self) -> bool:
        return self._store is not None

    def get(
        self, tier: int, exclude_ids: set[str] | frozenset[str] = frozenset(),
    ) -> Puzzle | None:
        """Uniformly chosen cached puzzle for the tier, or None.

        Entries whose puzzle id is in exclude_ids are skipped; if nothing else is cached
        for the tier, that is a miss.
        """
        _check_tier(tier)
        candidates = [
            e for e in self._entries.values()
            if e.tier == tier and e.puzzle.id not in exclude_ids
        ]
        if not candidates:
            self.misses += 1
            return None
        entry = self._rng.choice(candidates)
        entry.last_accessed_at = self._tick()
        entry.access_count += 1
        self.hits += 1
        self._persist()
        return entry.puzzle.with_origin(PuzzleOrigin.CACHE)

    def put(self, tier: int, puzzle: Puzzle) -> None:
        _check_tier(tier)
        self._entries[_key(tier, puzzle.id)] = CacheEntry(
            tier=tier, puzzle=puzzle, last_accessed_at=self._tick(),
        )
        while len(self._entries) > self.capacity:
            self._evict_lru()
        self._persist()

    def preload(self, puzzles: list[Puzzle]) -> None:
        """Bulk insert, tier inferred from word length."""
        for puzzle in puzzles:
            self._entries[_key(tier_for_word_length(puzzle.word_length), puzzle.id)] = (
                CacheEntry(
                    tier=tier_for_word_length(puzzle.word_length),
                    puzzle=puzzle,
                    last_accessed_at=self._tick(),
                )
            )
            while len(self._entries) > self.capacity:
                self._evict_lru()
        self._persist()

    def clear(self, tier: int | None = None) -> None:
        """Drop everything (and reset stats), or only one tier's bucket."""
        if tier is None:
            self._entries.clear()
            self.hits = self.misses = self.evictions = 0
        else:
            _check_tier(tier)
            self._entries = {
                k: e for k, e in self._entries.items() if e.tier != tier
            }
        self._persist()

    def size(self, tier: int | None = None) -> int:
        if tier is None:
            return len(self._entries)
        return sum(1 for e in self._entries.values() if e.tier == tier)

    def contains(self, puzzle_id: str) -> bool:
        return any(e.puzzle.id == puzzle_id for e in self._entries.values())

    def stats(self) -> dict:
        lookups = self.hits + self.misses
        return {
            "size": len(self._entries),
            "capacity": self.capacity,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "hit_rate": round(self.hits / lookups, 2) if lookups else 0.0,
            "persistent": self.is_persistent,
        }

    # -- LRU ---------------------------------------------------------------

    def _tick(self) -> int:
        self._clock += 1
        return self._clock

    def _evict_lru(self) -> None:
        oldest_key = min(
            self._entries, key=lambda k: self._entries[k].last_accessed_at,
        )
        evicted = self._entries.pop(oldest_key)
        self.evictions += 1
        logger.debug(
            f"Evicted cached puzzle {evicted.puzzle.id}",
            extra={"puzzle_id": evicted.puzzle.id, "tier": evicted.tier},
        )

    # -- Persistence -------------------------------------------------------

    def _snapshot(self) -> str:
        return json.dumps({
            "version": SNAPSHOT_VERSION,
            "clock": self._clock,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "entries": [
                {
                    "tier": e.tier,
                    "last_accessed_at": e.last_accessed_at,
                    "access_count": e.access_count,
                    "puzzle": e.puzzle.to_snapshot(),
                }
                for e in self._entries.values()
            ],
        })

    def _persist(self) -> None:
        if self._store is None:
            return
        try:
            self._store.set(self.storage_key, self._snapshot())
        except Exception as e:
            logger.warning(
                f"Puzzle cache store write failed, continuing in memory only: {e}",
            )
            self._store = None

    def _load(self) -> None:
        if self._store is None:
            return
        try:
            raw = self._store.get(self.storage_key)
        except Exception as e:
            logger.warning(
                f"Puzzle cache store read failed, continuing in memory only: {e}",
            )
            self._store = None
            return
        if raw is None:
            return
        try:
            self._restore(_decode_snapshot(raw))
        except CacheCorruptionError as e:
            logger.warning(f"{e.message}; starting with an empty cache")
            self._entries.clear()
            self._clock = 0
            self.hits = self.misses = self.evictions = 0
            self._persist()

    def _restore(self, data: dict) -> None:
        entries: dict[str, CacheEntry] = {}
        for entry in data["entries"]:
            entries[_key(entry.tier, entry.puzzle.id)] = entry
        self._entries = entries
        clock_floor = max((e.last_accessed_at for e in entries.values()), default=0)
        self._clock = max(data["clock"], clock_floor)
        self.hits = data["hits"]
        self.misses = data["misses"]
        self.evictions = data["evictions"]
        while len(self._entries) > self.capacity:
            self._evict_lru()
        logger.info(f"Restored {len(self._entries)} cached puzzles")


def _key(tier: int, puzzle_id: str) -> str:
    return f"{tier}:{puzzle_id}"


def _check_tier(tier: int) -> None:
    if not is_valid_tier(tier):
        raise InvalidTierError(tier)


def _decode_snapshot(raw: str) -> dict:
    """Parse and validate a persisted snapshot. Raises CacheCorruptionError on anything off."""
    try:
        data = json.loads(raw)
    except (TypeError, ValueError, RecursionError) as e:
        raise CacheCorruptionError(f"invalid JSON ({e})")
    if not isinstance(data, dict):
        raise CacheCorruptionError("snapshot is not an object")
    if data.get("version") != SNAPSHOT_VERSION:
        raise CacheCorruptionError(f"unsupported version {data.get('version')!r}")
    raw_entries = data.get("entries")
    if not isinstance(raw_entries, list):
        raise CacheCorruptionError("entries missing")
    try:
        entries = [
            CacheEntry(
                tier=_valid_tier(item["tier"]),
                puzzle=Puzzle.from_snapshot(item["puzzle"]),
                last_accessed_at=int(item["last_accessed_at"]),
                access_count=int(item.get("access_count", 0)),
            )
            for item in raw_entries
        ]
        return {
            "entries": entries,
            "clock": int(data.get("clock", 0)),
            "hits": int(data.get("hits", 0)),
            "misses": int(data.get("misses", 0)),
            "evictions": int(data.get("evictions", 0)),
        }
    except (KeyError, TypeError, ValueError, AttributeError, OverflowError) as e:
        raise CacheCorruptionError(f"malformed entry ({e})")


def _valid_tier(value: object) -> int:
    if not is_valid_tier(value):
        raise ValueError(f"bad tier {value!r}")
    return value  # type: ignore[return-value]
