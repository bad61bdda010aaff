"""Word Scrambler: turns a word into a letter permutation that is "hard enough".

Invariants:
    - Output is a permutation of the input letters (lowercased)
    - Output NEVER equals the input (case-insensitive); this rule is never relaxed
    - Prefix, suffix and visual-distance rules are best-effort across MAX_SHUFFLE_ATTEMPTS
    - Words whose letters are all identical raise UnscramblableWordError

Design Decisions:
    - Fisher-Yates over an injected random.Random: unbiased, seedable in tests
    - Quality score (0-100) ranks candidates so the best one seen survives failed retries;
      "differs from original" is worth 40 points, more than every other rule combined can
      give a non-differing candidate, so a differing candidate always wins when one exists
    - Last resort is the best-scoring rotation/reversal: a one-step rotation differs from the
      original for any word with two distinct letters
"""

import random

from scramble.core.errors import UnscramblableWordError

COMMON_PREFIXES: tuple[str, ...] = ("th", "un", "re", "in", "de", "ex", "pre", "com")
COMMON_SUFFIXES: tuple[str, ...] = ("ing", "ed", "ly", "er", "est", "tion", "able")

MAX_SHUFFLE_ATTEMPTS = 5
MIN_VISUAL_DISTANCE = 2


def has_common_prefix(word: str) -> bool:
    return word.startswith(COMMON_PREFIXES)


def has_common_suffix(word: str) -> bool:
    return word.endswith(COMMON_SUFFIXES)


def visual_distance(original: str, scrambled: str) -> int:
    """Number of positions where the two words differ."""
    if len(original) != len(scrambled):
        return max(len(original), len(scrambled))
    return sum(1 for a, b in zip(original, scrambled) if a != b)


def is_good_scramble(original: str, scrambled: str) -> bool:
    """All four rules: differs, no common prefix, no common suffix, distance > 2."""
    return (
        scrambled != original
        and not has_common_prefix(scrambled)
        and not has_common_suffix(scrambled)
        and visual_distance(original, scrambled) > MIN_VISUAL_DISTANCE
    )


def quality_score(original: str, scrambled: str) -> float:
    """0-100; higher is a better scramble."""
    score = 0.0
    if scrambled != original:
        score += 40
    if not has_common_prefix(scrambled):
        score += 20
    if not has_common_suffix(scrambled):
        score += 20
    distance = visual_distance(original, scrambled)
    score += min(20.0, distance / len(original) * 20)
    return score


class WordScrambler:
    """Stateless apart from its random source."""

    def __init__(
        self,
        rng: random.Random | None = None,
        max_attempts: int = MAX_SHUFFLE_ATTEMPTS,
    ):
        self._rng = rng or random.Random()
        self.max_attempts = max_attempts

    def scramble(self, word: str) -> str:
        original = word.strip().lower()
        if len(original) < 2 or len(set(original)) == 1:
            raise UnscramblableWordError(word)

        if len(original) == 2:
            return original[::-1]

        best = original
        best_score = -1.0
        for _ in range(self.max_attempts):
            candidate = self._shuffle(original)
            score = quality_score(original, candidate)
            if score > best_score:
                best, best_score = candidate, score
            if is_good_scramble(original, candidate):
                return candidate

        if best != original:
            return best
        return self._forced_scramble(original)

    def _shuffle(self, word: str) -> str:
        letters = list(word)
        for i in range(len(letters) - 1, 0, -1):
            j = self._rng.randrange(i + 1)
            letters[i], letters[j] = letters[j], letters[i]
        return "".join(letters)

    @staticmethod
    def _forced_scramble(original: str) -> str:
        """Best differing rotation or reversal. Caller guarantees >= 2 distinct letters."""
        candidates = [original[k:] + original[:k] for k in range(1, len(original))]
        candidates.append(original[::-1])
        differing = [c for c in candidates if c != original]
        return max(differing, key=lambda c: quality_score(original, c))
