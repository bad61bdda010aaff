"""Word Bands: difficulty tier to (length, frequency) band mapping and candidate filtering.

Invariants:
    - Every tier 1–5 maps to exactly one band
    - Tier 1 is short/common (4–5 letters), tier 5 is long/rare (8+ letters)
    - filter_candidates keeps only alphabetic words inside the band, lowercased

Design Decisions:
    - Frequency is occurrences per million words, as reported by the remote source's
      "f:<float>" tag; a missing or malformed tag counts as 0
    - Pure module: WordSource does the IO, this decides which words qualify
"""

import re
from dataclasses import dataclass

from scramble.core.domain_types import is_valid_tier
from scramble.core.errors import InvalidTierError

_ALPHA = re.compile(r"[a-zA-Z]+")


@dataclass(frozen=True)
class WordBand:
    """Length/frequency constraints for one difficulty tier."""
    min_length: int
    max_length: int
    min_frequency: float

    def length_pattern(self) -> str:
        """Wildcard pattern: at least min_length letters (`?` = one letter, `*` = any run)."""
        return "?" * self.min_length + "*"


_BANDS: dict[int, WordBand] = {
    1: WordBand(4, 5, 20.0),
    2: WordBand(5, 6, 10.0),
    3: WordBand(6, 7, 5.0),
    4: WordBand(7, 8, 2.0),
    5: WordBand(8, 12, 0.5),
}


def band_for_tier(tier: int) -> WordBand:
    if not is_valid_tier(tier):
        raise InvalidTierError(tier)
    return _BANDS[tier]


def extract_frequency(tags: list[str] | None) -> float:
    """Parse the first "f:<float>" tag; 0.0 when absent or unparsable."""
    for tag in tags or []:
        if isinstance(tag, str) and tag.startswith("f:"):
            try:
                return float(tag[2:])
            except ValueError:
                return 0.0
    return 0.0


def filter_candidates(candidates: list[dict], band: WordBand) -> list[str]:
    """Keep alphabetic words within the band's length and frequency floor."""
    selected = []
    for candidate in candidates:
        if not isinstance(candidate, dict):
            continue
        word = candidate.get("word")
        if not isinstance(word, str) or not _ALPHA.fullmatch(word):
            continue
        if not band.min_length <= len(word) <= band.max_length:
            continue
        if extract_frequency(candidate.get("tags")) < band.min_frequency:
            continue
        selected.append(word.lower())
    return selected
