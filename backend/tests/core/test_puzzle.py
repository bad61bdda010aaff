"""Puzzle: permutation invariant, normalization, snapshots and id namespaces."""

import pytest

from scramble.core.domain_types import PuzzleOrigin
from scramble.core.puzzle import (
    CURATED_ID_PREFIX, GENERATED_ID_PREFIX, Puzzle, new_generated_id, origin_family_from_id,
)


def _puzzle(**overrides):
    data = dict(
        id="generated-x-listen", scrambled_letters="tnesil", solution_word="listen",
        difficulty_tier=2, origin=PuzzleOrigin.REMOTE, category="generated",
    )
    data.update(overrides)
    return Puzzle(**data)


def test_solution_and_letters_are_lowercased_and_stripped():
    puzzle = _puzzle(scrambled_letters=" TNESIL ", solution_word="Listen ")
    assert puzzle.solution_word == "listen"
    assert puzzle.scrambled_letters == "tnesil"
    assert puzzle.word_length == 6


def test_rejects_non_permutation():
    with pytest.raises(ValueError):
        _puzzle(scrambled_letters="tnesix")


def test_rejects_unscrambled_letters_for_long_words():
    with pytest.raises(ValueError):
        _puzzle(scrambled_letters="listen")


def test_two_letter_puzzle_may_equal_its_solution():
    puzzle = _puzzle(scrambled_letters="at", solution_word="at")
    assert puzzle.scrambled_letters == "at"


def test_with_origin_returns_retagged_copy():
    puzzle = _puzzle()
    cached = puzzle.with_origin(PuzzleOrigin.CACHE)
    assert cached.origin == PuzzleOrigin.CACHE
    assert puzzle.origin == PuzzleOrigin.REMOTE
    assert cached.id == puzzle.id


def test_snapshot_can_hide_the_solution():
    assert _puzzle().to_snapshot(reveal_solution=False)["solution_word"] is None


def test_snapshot_round_trip():
    puzzle = _puzzle()
    assert Puzzle.from_snapshot(puzzle.to_snapshot()) == puzzle


def test_generated_ids_are_unique_and_namespaced():
    first, second = new_generated_id("listen"), new_generated_id("listen")
    assert first != second
    assert first.startswith(GENERATED_ID_PREFIX)
    assert _puzzle(id=first).is_generated


def test_origin_family_from_id():
    assert origin_family_from_id(f"{CURATED_ID_PREFIX}t1-001") == PuzzleOrigin.STATIC
    assert origin_family_from_id(new_generated_id("word")) == PuzzleOrigin.REMOTE
    assert origin_family_from_id("other") is None
