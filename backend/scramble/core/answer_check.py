"""Answer Check: pure letter-level checks on a submitted answer.

Invariants:
    - Answers are case-folded and stripped of surrounding whitespace before any comparison
    - Structure is valid iff the answer's letter multiset equals the puzzle's, exactly
    - Hygiene runs before structure: too-short (< MIN_ANSWER_LENGTH) and non-alphabetic
      input never reach the letter comparison
    - Nothing here raises for bad player input; problems come back as values

Design Decisions:
    - collections.Counter for multisets: subtraction yields extra/missing letters directly
    - ValidationResult lives here so the pure checks and the async validator share one shape
"""

import re
from collections import Counter
from dataclasses import dataclass, field

from scramble.core.domain_types import ValidationErrorKind
from scramble.core.puzzle import Puzzle

MIN_ANSWER_LENGTH = 2

_LETTERS_ONLY = re.compile(r"[a-zA-Z]+")


@dataclass(frozen=True)
class LetterDiff:
    """Letters the answer has too many of (extra) or too few of (missing), sorted."""
    extra: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)

    @property
    def matches(self) -> bool:
        return not self.extra and not self.missing


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one submission. Never raised, always returned."""
    valid: bool
    answer: str
    error_kind: ValidationErrorKind | None = None
    message: str | None = None
    extra_letters: list[str] = field(default_factory=list)
    missing_letters: list[str] = field(default_factory=list)
    manually_validated: bool = False

    def to_snapshot(self) -> dict:
        return {
            "valid": self.valid,
            "answer": self.answer,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "message": self.message,
            "extra_letters": self.extra_letters,
            "missing_letters": self.missing_letters,
            "manually_validated": self.manually_validated,
        }


def normalize_answer(text: str) -> str:
    return text.strip().casefold()


def letter_diff(puzzle: Puzzle, answer: str) -> LetterDiff:
    expected = Counter(puzzle.scrambled_letters.casefold())
    given = Counter(normalize_answer(answer))
    return LetterDiff(
        extra=sorted((given - expected).elements()),
        missing=sorted((expected - given).elements()),
    )


def validate_structure(puzzle: Puzzle, answer: str) -> bool:
    """Instant letter-multiset check for validation-as-you-type. No IO."""
    return Counter(normalize_answer(answer)) == Counter(puzzle.scrambled_letters.casefold())


def check_hygiene(answer: str) -> ValidationResult | None:
    """Reject too-short or non-alphabetic input; None when the input is clean."""
    cleaned = normalize_answer(answer)
    if len(cleaned) < MIN_ANSWER_LENGTH:
        return ValidationResult(
            valid=False, answer=cleaned,
            error_kind=ValidationErrorKind.TOO_SHORT,
            message=f"Answer must be at least {MIN_ANSWER_LENGTH} letters long",
        )
    if not _LETTERS_ONLY.fullmatch(cleaned):
        return ValidationResult(
            valid=False, answer=cleaned,
            error_kind=ValidationErrorKind.INVALID_CHARACTERS,
            message="Answer must contain only letters",
        )
    return None


def letters_error(puzzle: Puzzle, answer: str) -> ValidationResult:
    """Build the `letters` rejection with extra/missing diagnostics."""
    diff = letter_diff(puzzle, answer)
    message = "Must use all letters exactly once"
    if diff.extra:
        message += f". Extra: {', '.join(diff.extra)}"
    if diff.missing:
        message += f". Missing: {', '.join(diff.missing)}"
    return ValidationResult(
        valid=False,
        answer=normalize_answer(answer),
        error_kind=ValidationErrorKind.LETTERS,
        message=message,
        extra_letters=diff.extra,
        missing_letters=diff.missing,
    )
