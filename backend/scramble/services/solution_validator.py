"""Solution Validator: letter-multiset check plus dictionary confirmation.

Invariants:
    - Player-facing rejections are returned as ValidationResult, never raised
    - Hygiene (too-short, invalid-characters) runs first, then the letter check
    - A `letters` rejection never reaches the dictionary
    - The puzzle's own solution word is accepted without a dictionary call
    - Dictionary unavailable, erroring, timing out or disabled -> accepted and flagged
      manually_validated (infrastructure failures never penalise the player)
    - The dictionary call is bounded by timeout_seconds; the validator never blocks
      indefinitely on it

Design Decisions:
    - Pure checks live in core/answer_check.py; this service only adds the IO step
    - Stats are running counters on the instance, surfaced for diagnostics
"""

import asyncio
import logging

from scramble.core.answer_check import (
    LetterDiff, ValidationResult, check_hygiene, letter_diff, letters_error,
    normalize_answer, validate_structure,
)
from scramble.core.domain_types import ValidationErrorKind
from scramble.core.puzzle import Puzzle
from scramble.core.repository_protocols import Dictionary

logger = logging.getLogger(__name__)


class SolutionValidator:
    """Validates submissions against a puzzle."""

    def __init__(self, dictionary: Dictionary | None = None, timeout_seconds: float = 2.0):
        self.dictionary = dictionary
        self.timeout_seconds = timeout_seconds
        self.stats = {
            "total": 0,
            "correct": 0,
            "letter_errors": 0,
            "word_errors": 0,
            "input_errors": 0,
            "manual_accepts": 0,
        }

    def validate_structure(self, puzzle: Puzzle, answer: str) -> bool:
        return validate_structure(puzzle, answer)

    def letter_diff(self, puzzle: Puzzle, answer: str) -> LetterDiff:
        return letter_diff(puzzle, answer)

    async def validate_solution(self, puzzle: Puzzle, answer: str) -> ValidationResult:
        self.stats["total"] += 1

        rejected = check_hygiene(answer)
        if rejected is not None:
            self.stats["input_errors"] += 1
            return rejected

        if not validate_structure(puzzle, answer):
            self.stats["letter_errors"] += 1
            return letters_error(puzzle, answer)

        word = normalize_answer(answer)
        if word == puzzle.solution_word:
            self.stats["correct"] += 1
            return ValidationResult(valid=True, answer=word)

        recognised = await self._lookup(word)
        if recognised is None:
            self.stats["correct"] += 1
            self.stats["manual_accepts"] += 1
            return ValidationResult(valid=True, answer=word, manually_validated=True)
        if not recognised:
            self.stats["word_errors"] += 1
            return ValidationResult(
                valid=False,
                answer=word,
                error_kind=ValidationErrorKind.NOT_A_WORD,
                message=f"'{word}' is not a recognised word",
            )
        self.stats["correct"] += 1
        return ValidationResult(valid=True, answer=word)

    async def _lookup(self, word: str) -> bool | None:
        """True/False from the dictionary, None when it cannot answer."""
        if self.dictionary is None:
            return None
        try:
            return await asyncio.wait_for(
                self.dictionary.is_valid_word(word), timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Dictionary check timed out for {word!r}; accepting manually")
        except Exception as e:
            logger.warning(f"Dictionary unavailable for {word!r}; accepting manually: {e}")
        return None
