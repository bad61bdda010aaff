"""Curated Puzzles: the static, hand-picked puzzle table (last tier of the supply cascade).

Invariants:
    - Every tier 1–5 has at least one puzzle, so curated selection never comes back empty
    - Every entry satisfies the Puzzle invariants (checked at import by Puzzle.__post_init__)
    - ids are "curated-t<tier>-<nnn>", disjoint from generated ids

Design Decisions:
    - Tuples of (solution, scrambled, category) keep the table readable; Puzzle objects are
      built once at import time
    - select_curated() takes the rng and the excluded ids explicitly, so it stays pure
"""

import random

from scramble.core.domain_types import PuzzleOrigin, is_valid_tier
from scramble.core.errors import InvalidTierError
from scramble.core.puzzle import CURATED_ID_PREFIX, Puzzle

_RAW_TABLE: dict[int, tuple[tuple[str, str, str], ...]] = {
    1: (
        ("tear", "aert", "emotion"),
        ("bake", "kbea", "cooking"),
        ("lion", "olni", "animals"),
        ("frog", "orgf", "animals"),
        ("milk", "kmli", "food"),
        ("boat", "atob", "transport"),
        ("plant", "lntap", "nature"),
        ("storm", "tmsor", "weather"),
    ),
    2: (
        ("house", "usoeh", "home"),
        ("plate", "eltpa", "kitchen"),
        ("tiger", "rgeti", "animals"),
        ("bread", "dbare", "food"),
        ("cloud", "dulco", "weather"),
        ("garden", "dragne", "nature"),
        ("silent", "litens", "adjectives"),
        ("orange", "nogera", "fruit"),
    ),
    3: (
        ("frozen", "zfnore", "weather"),
        ("castle", "tlcsae", "places"),
        ("pencil", "nilpce", "school"),
        ("rabbit", "tbiarb", "animals"),
        ("journey", "nueyojr", "travel"),
        ("picture", "ctpeuri", "art"),
        ("kitchen", "heknict", "home"),
        ("monster", "trosnem", "fantasy"),
    ),
    4: (
        ("blanket", "tankleb", "home"),
        ("crystal", "yatlcsr", "minerals"),
        ("dolphin", "lhpoidn", "animals"),
        ("library", "ryarbli", "places"),
        ("airplane", "lraepnai", "transport"),
        ("mountain", "nmtiaoun", "nature"),
        ("treasure", "ersuatre", "adventure"),
        ("sandwich", "dhcnwasi", "food"),
    ),
    5: (
        ("elephant", "naplehet", "animals"),
        ("breakfast", "katsfebra", "food"),
        ("adventure", "nrueavdte", "adventure"),
        ("chocolate", "tochaloce", "food"),
        ("telescope", "peclotees", "science"),
        ("butterfly", "tufrelbty", "animals"),
        ("hurricane", "rinuechar", "weather"),
        ("volcanoes", "sonaclove", "nature"),
    ),
}


def _build_table() -> dict[int, tuple[Puzzle, ...]]:
    table: dict[int, tuple[Puzzle, ...]] = {}
    for tier, rows in _RAW_TABLE.items():
        table[tier] = tuple(
            Puzzle(
                id=f"{CURATED_ID_PREFIX}t{tier}-{index:03d}",
                scrambled_letters=scrambled,
                solution_word=solution,
                difficulty_tier=tier,
                origin=PuzzleOrigin.STATIC,
                category=category,
            )
            for index, (solution, scrambled, category) in enumerate(rows, start=1)
        )
    return table


CURATED_PUZZLES: dict[int, tuple[Puzzle, ...]] = _build_table()


def curated_for_tier(tier: int) -> tuple[Puzzle, ...]:
    if not is_valid_tier(tier):
        raise InvalidTierError(tier)
    return CURATED_PUZZLES[tier]


def select_curated(
    tier: int,
    exclude_ids: set[str] | frozenset[str] = frozenset(),
    rng: random.Random | None = None,
) -> Puzzle:
    """Uniform pick for the tier, preferring ids not in exclude_ids.

    When every puzzle of the tier is excluded, repeats are allowed rather than failing.
    """
    rng = rng or random.Random()
    pool = curated_for_tier(tier)
    unused = [p for p in pool if p.id not in exclude_ids]
    return rng.choice(unused or list(pool))
