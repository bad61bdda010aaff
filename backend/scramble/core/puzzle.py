"""Puzzle: one round's scrambled letters, target word, and provenance.

Invariants:
    - sorted(scrambled_letters) == sorted(solution_word) (same letter multiset)
    - scrambled_letters != solution_word whenever len(solution_word) > 2
    - solution_word and scrambled_letters are lowercase
    - id carries an origin namespace: "curated-" for the static table, "generated-" for remote
      words, so provenance can be inferred from the id alone

Design Decisions:
    - Frozen dataclass: a puzzle never changes after creation; a cache hit is a
      dataclasses.replace() copy re-tagged with origin=cache
    - to_snapshot/from_snapshot live here (not in PuzzleCache): the HTTP layer and the
      cache both need the same JSON-safe shape
"""

import uuid
from collections import Counter
from dataclasses import dataclass, replace

from scramble.core.domain_types import PuzzleOrigin

CURATED_ID_PREFIX = "curated-"
GENERATED_ID_PREFIX = "generated-"
GENERATED_CATEGORY = "generated"


@dataclass(frozen=True)
class Puzzle:
    """A single round's content."""

    id: str
    scrambled_letters: str
    solution_word: str
    difficulty_tier: int
    origin: PuzzleOrigin
    category: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "solution_word", self.solution_word.strip().lower())
        object.__setattr__(
            self, "scrambled_letters", self.scrambled_letters.strip().lower(),
        )
        problem = puzzle_invariant_violation(self.scrambled_letters, self.solution_word)
        if problem:
            raise ValueError(f"Invalid puzzle {self.id!r}: {problem}")

    @property
    def word_length(self) -> int:
        return len(self.solution_word)

    @property
    def is_generated(self) -> bool:
        return self.id.startswith(GENERATED_ID_PREFIX)

    def with_origin(self, origin: PuzzleOrigin) -> "Puzzle":
        return replace(self, origin=origin)

    def to_snapshot(self, reveal_solution: bool = True) -> dict:
        """JSON-safe dict. reveal_solution=False hides the answer from players mid-round."""
        return {
            "id": self.id,
            "scrambled_letters": self.scrambled_letters,
            "solution_word": self.solution_word if reveal_solution else None,
            "difficulty_tier": self.difficulty_tier,
            "category": self.category,
            "origin": self.origin.value,
        }

    @classmethod
    def from_snapshot(cls, data: dict) -> "Puzzle":
        """Rebuild from to_snapshot() output. Raises KeyError/ValueError on bad data."""
        return cls(
            id=str(data["id"]),
            scrambled_letters=str(data["scrambled_letters"]),
            solution_word=str(data["solution_word"]),
            difficulty_tier=int(data["difficulty_tier"]),
            origin=PuzzleOrigin(data["origin"]),
            category=data.get("category"),
        )


def puzzle_invariant_violation(scrambled: str, solution: str) -> str | None:
    """Describe why (scrambled, solution) is not a valid pair, or None if it is."""
    if not solution:
        return "solution word is empty"
    if Counter(scrambled) != Counter(solution):
        return "scrambled letters are not a permutation of the solution"
    if len(solution) > 2 and scrambled == solution:
        return "scrambled letters equal the solution"
    return None


def new_generated_id(word: str) -> str:
    """Namespaced id for a remotely generated puzzle."""
    return f"{GENERATED_ID_PREFIX}{uuid.uuid4().hex[:12]}-{word.lower()}"


def origin_family_from_id(puzzle_id: str) -> PuzzleOrigin | None:
    """Diagnostic: STATIC for curated ids, REMOTE for generated ids, None otherwise."""
    if puzzle_id.startswith(CURATED_ID_PREFIX):
        return PuzzleOrigin.STATIC
    if puzzle_id.startswith(GENERATED_ID_PREFIX):
        return PuzzleOrigin.REMOTE
    return None
