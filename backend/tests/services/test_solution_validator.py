"""Solution Validator: letter check first, dictionary second, manual accept on outage."""

import pytest

from scramble.core.domain_types import ValidationErrorKind
from scramble.core.errors import ValidationServiceUnavailableError
from scramble.services.solution_validator import SolutionValidator

from tests.fakes import FakeDictionary, make_puzzle

SILENT = make_puzzle("silent", "litens")


async def test_solution_word_is_accepted_without_dictionary_call():
    dictionary = FakeDictionary()
    result = await SolutionValidator(dictionary).validate_solution(SILENT, " Silent ")
    assert result.valid
    assert not result.manually_validated
    assert dictionary.lookups == []


async def test_other_anagram_checked_against_dictionary():
    dictionary = FakeDictionary(words={"listen"})
    result = await SolutionValidator(dictionary).validate_solution(SILENT, "listen")
    assert result.valid
    assert dictionary.lookups == ["listen"]


async def test_unknown_anagram_is_not_a_word():
    dictionary = FakeDictionary(words={"listen"})
    result = await SolutionValidator(dictionary).validate_solution(SILENT, "tinsle")
    assert not result.valid
    assert result.error_kind == ValidationErrorKind.NOT_A_WORD


async def test_wrong_letters_never_reach_the_dictionary():
    dictionary = FakeDictionary(words={"listens"})
    result = await SolutionValidator(dictionary).validate_solution(SILENT, "listens")
    assert result.error_kind == ValidationErrorKind.LETTERS
    assert result.extra_letters == ["s"]
    assert dictionary.lookups == []


@pytest.mark.parametrize("text,kind", [
    ("a", ValidationErrorKind.TOO_SHORT),
    ("list3n", ValidationErrorKind.INVALID_CHARACTERS),
])
async def test_input_hygiene_runs_first(text, kind):
    result = await SolutionValidator(FakeDictionary()).validate_solution(SILENT, text)
    assert result.error_kind == kind


async def test_dictionary_outage_accepts_manually():
    dictionary = FakeDictionary(error=ValidationServiceUnavailableError("503"))
    validator = SolutionValidator(dictionary)
    result = await validator.validate_solution(SILENT, "listen")
    assert result.valid
    assert result.manually_validated
    assert validator.stats["manual_accepts"] == 1


async def test_slow_dictionary_is_bounded_and_accepts_manually():
    dictionary = FakeDictionary(words=set(), delay=1.0)
    result = await SolutionValidator(dictionary, timeout_seconds=0.05).validate_solution(
        SILENT, "listen",
    )
    assert result.valid
    assert result.manually_validated


async def test_no_dictionary_configured_accepts_manually():
    result = await SolutionValidator(None).validate_solution(SILENT, "listen")
    assert result.valid and result.manually_validated


def test_structure_check_and_letter_diff():
    validator = SolutionValidator()
    assert validator.validate_structure(SILENT, "listen")
    assert not validator.validate_structure(SILENT, "listens")
    assert validator.letter_diff(SILENT, "listens").extra == ["s"]


async def test_stats_track_each_outcome():
    validator = SolutionValidator(FakeDictionary(words={"listen"}))
    for text in ("silent", "listen", "tinsle", "listens", "x"):
        await validator.validate_solution(SILENT, text)
    assert validator.stats == {
        "total": 5,
        "correct": 2,
        "letter_errors": 1,
        "word_errors": 1,
        "input_errors": 1,
        "manual_accepts": 0,
    }
