"""Puzzle Cache: bounded LRU across tiers, persistence and failure recovery.

Tests:
    - 201 inserts into a capacity-200 cache leave 200 entries, oldest-accessed evicted
    - get() bumps recency; a miss changes no entries
    - Snapshots persist on every mutation and restore on construction
    - Corrupt snapshots reset the cache; failing stores degrade to in-memory
"""

import json
import random

from scramble.core.domain_types import PuzzleOrigin
from scramble.infrastructure.kv_store import InMemoryKeyValueStore, SqlKeyValueStore
from scramble.infrastructure.puzzle_cache import PuzzleCache, tier_for_word_length

from tests.fakes import FailingStore, make_puzzle

KEY = "scramble-generated-cache"


def _numbered(i: int, tier: int = 1):
    return make_puzzle("lamp", "pmal", tier=tier, puzzle_id=f"generated-{i:04d}-lamp")


def test_empty_tier_is_a_miss():
    cache = PuzzleCache()
    assert cache.get(1) is None
    assert cache.stats()["misses"] == 1
    assert cache.size() == 0


def test_hit_returns_cache_tagged_copy():
    cache = PuzzleCache()
    puzzle = make_puzzle()
    cache.put(2, puzzle)
    hit = cache.get(2)
    assert hit.id == puzzle.id
    assert hit.origin == PuzzleOrigin.CACHE
    assert cache.get(3) is None


def test_201_inserts_keep_200_and_evict_the_least_recently_used():
    cache = PuzzleCache(capacity=200)
    for i in range(201):
        cache.put(1 + i % 5, _numbered(i, tier=1 + i % 5))
    assert cache.size() == 200
    assert not cache.contains("generated-0000-lamp")
    assert cache.contains("generated-0001-lamp")
    assert cache.contains("generated-0200-lamp")
    assert cache.stats()["evictions"] == 1


def test_get_refreshes_recency():
    cache = PuzzleCache(capacity=3, rng=random.Random(0))
    for i in range(3):
        cache.put(i + 1, _numbered(i, tier=i + 1))
    assert cache.get(1).id == "generated-0000-lamp"
    cache.put(4, _numbered(3, tier=4))
    assert cache.contains("generated-0000-lamp")
    assert not cache.contains("generated-0001-lamp")


def test_exclude_ids_skips_used_puzzles():
    cache = PuzzleCache()
    cache.put(1, _numbered(1))
    assert cache.get(1, exclude_ids={"generated-0001-lamp"}) is None
    cache.put(1, _numbered(2))
    assert cache.get(1, exclude_ids={"generated-0001-lamp"}).id == "generated-0002-lamp"


def test_clear_one_tier_or_all():
    cache = PuzzleCache()
    cache.put(1, _numbered(1, tier=1))
    cache.put(2, _numbered(2, tier=2))
    cache.clear(1)
    assert cache.size(1) == 0
    assert cache.size(2) == 1
    cache.clear()
    assert cache.size() == 0


def test_preload_infers_tier_from_length():
    cache = PuzzleCache()
    cache.preload([
        make_puzzle("lamp", "pmal", puzzle_id="p1"),
        make_puzzle("silent", "litens", puzzle_id="p2"),
        make_puzzle("elephant", "naplehet", puzzle_id="p3"),
    ])
    assert (cache.size(1), cache.size(3), cache.size(5)) == (1, 1, 1)
    assert [tier_for_word_length(n) for n in (3, 4, 5, 6, 7, 8, 12)] == [1, 1, 2, 3, 4, 5, 5]


def test_every_mutation_persists_a_snapshot():
    store = InMemoryKeyValueStore()
    cache = PuzzleCache(store=store)
    cache.put(2, make_puzzle())
    assert len(json.loads(store.data[KEY])["entries"]) == 1
    cache.get(2)
    assert json.loads(store.data[KEY])["hits"] == 1
    cache.clear()
    assert json.loads(store.data[KEY])["entries"] == []


def test_restores_entries_and_lru_order_from_snapshot():
    store = InMemoryKeyValueStore()
    first = PuzzleCache(store=store, capacity=2)
    first.put(1, _numbered(1))
    first.put(1, _numbered(2))

    second = PuzzleCache(store=store, capacity=2)
    assert second.size() == 2
    second.put(1, _numbered(3))
    assert not second.contains("generated-0001-lamp")
    assert second.contains("generated-0002-lamp")


def test_restores_from_sqlite_store(tmp_path):
    url = f"sqlite:///{tmp_path / 'cache.db'}"
    store = SqlKeyValueStore(url)
    PuzzleCache(store=store).put(2, make_puzzle())
    store.close()

    reopened = SqlKeyValueStore(url)
    assert PuzzleCache(store=reopened).get(2).solution_word == "listen"
    reopened.close()


def test_corrupt_snapshot_resets_to_empty():
    store = InMemoryKeyValueStore({KEY: "{not json"})
    cache = PuzzleCache(store=store)
    assert cache.size() == 0
    assert json.loads(store.data[KEY])["entries"] == []


def test_incompatible_version_resets_to_empty():
    store = InMemoryKeyValueStore({KEY: json.dumps({"version": 99, "entries": []})})
    assert PuzzleCache(store=store).size() == 0


def test_invalid_entry_resets_to_empty():
    bad_entry = {
        "tier": 1, "last_accessed_at": 1,
        "puzzle": {"id": "x", "scrambled_letters": "abc", "solution_word": "xyz",
                   "difficulty_tier": 1, "origin": "remote"},
    }
    store = InMemoryKeyValueStore({KEY: json.dumps({"version": 1, "entries": [bad_entry]})})
    assert PuzzleCache(store=store).size() == 0


def test_infinite_clock_resets_to_empty():
    store = InMemoryKeyValueStore({KEY: '{"version": 1, "clock": Infinity, "entries": []}'})
    cache = PuzzleCache(store=store)
    assert cache.size() == 0
    assert json.loads(store.data[KEY])["clock"] == 0


def test_infinite_entry_fields_reset_to_empty():
    puzzle = make_puzzle("silent", "litens").to_snapshot()
    entry = json.dumps({"tier": 2, "last_accessed_at": 1, "puzzle": puzzle})
    for bad in (
        entry.replace('"last_accessed_at": 1', '"last_accessed_at": Infinity'),
        entry.replace('"difficulty_tier": 2', '"difficulty_tier": -Infinity'),
    ):
        store = InMemoryKeyValueStore({KEY: f'{{"version": 1, "entries": [{bad}]}}'})
        assert PuzzleCache(store=store).size() == 0


def test_deeply_nested_snapshot_resets_to_empty():
    store = InMemoryKeyValueStore({KEY: "[" * 100000 + "]" * 100000})
    assert PuzzleCache(store=store).size() == 0


def test_write_failure_degrades_to_in_memory_without_raising():
    store = FailingStore(fail_set=True)
    cache = PuzzleCache(store=store)
    cache.put(2, make_puzzle())
    assert not cache.is_persistent
    cache.put(2, make_puzzle("tiger", "regit"))
    assert store.set_calls == 1
    assert cache.size() == 2


def test_read_failure_degrades_to_in_memory_without_raising():
    cache = PuzzleCache(store=FailingStore(fail_get=True, fail_set=False))
    assert not cache.is_persistent
    cache.put(1, _numbered(1))
    assert cache.get(1) is not None


def test_stats_hit_rate():
    cache = PuzzleCache()
    cache.put(1, _numbered(1))
    cache.get(1)
    cache.get(2)
    cache.get(1)
    stats = cache.stats()
    assert (stats["hits"], stats["misses"]) == (2, 1)
    assert stats["hit_rate"] == 0.67
