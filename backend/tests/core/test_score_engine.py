"""Score Engine: base x speed x (1 + streak bonus), rounded half up.

Tests:
    - Reference scores for the documented examples
    - Speed multiplier boundaries (> 40, > 20)
    - Streak bonus capped at +100%
    - Breakdown derivable from the three inputs
"""

import pytest

from scramble.core.score_engine import (
    base_score, compute_score, format_breakdown, max_potential_score,
    speed_multiplier, speed_tier, streak_bonus_fraction, streak_tier, zero_breakdown,
)


@pytest.mark.parametrize("length,expected", [
    (3, 10), (4, 10), (5, 20), (6, 40), (7, 60), (8, 70), (10, 90),
])
def test_base_score_by_length(length, expected):
    assert base_score(length) == expected


@pytest.mark.parametrize("seconds,expected", [
    (60, 2.0), (41, 2.0), (40, 1.5), (21, 1.5), (20, 1.0), (0, 1.0),
])
def test_speed_multiplier_boundaries(seconds, expected):
    assert speed_multiplier(seconds) == expected


def test_streak_bonus_grows_ten_percent_per_answer_and_caps():
    assert streak_bonus_fraction(0) == 0.0
    assert streak_bonus_fraction(3) == pytest.approx(0.3)
    assert streak_bonus_fraction(10) == 1.0
    assert streak_bonus_fraction(25) == 1.0


def test_four_letters_fast_no_streak_scores_20():
    assert compute_score(4, 50, 0).final_score == 20


def test_seven_letters_mid_speed_streak_five_scores_135():
    assert compute_score(7, 30, 5).final_score == 135


def test_streak_bonus_clamps_at_one_hundred_percent():
    assert compute_score(4, 60, 20).final_score == 40


def test_six_letters_at_45_seconds_streak_nine_scores_152():
    breakdown = compute_score(6, 45, 9)
    assert breakdown.base_score == 40
    assert breakdown.speed_multiplier == 2.0
    assert breakdown.streak_bonus_fraction == pytest.approx(0.9)
    assert breakdown.final_score == 152


def test_rounds_half_up():
    # 20 * 1.5 * 1.1 = 33.0; 10 * 1.5 * 1.3 = 19.5 -> 20
    assert compute_score(5, 30, 1).final_score == 33
    assert compute_score(4, 30, 3).final_score == 20


def test_breakdown_records_inputs():
    breakdown = compute_score(5, 25, 2)
    assert (breakdown.word_length, breakdown.seconds_remaining, breakdown.streak_before) == (
        5, 25, 2,
    )
    assert breakdown.speed_bonus_percent == 50
    assert breakdown.streak_bonus_percent == 20
    assert breakdown.to_snapshot()["final_score"] == breakdown.final_score


def test_zero_breakdown_awards_nothing():
    breakdown = zero_breakdown(6, 0, 4)
    assert breakdown.final_score == 0
    assert breakdown.streak_before == 4


def test_max_potential_score_is_instant_answer_on_capped_streak():
    assert max_potential_score(4) == 40
    assert max_potential_score(7) == 240


def test_speed_and_streak_tiers():
    assert speed_tier(50)["tier"] == "lightning"
    assert speed_tier(30)["tier"] == "quick"
    assert speed_tier(10)["tier"] == "normal"
    assert streak_tier(0)["tier"] == "none"
    assert streak_tier(3)["tier"] == "building"
    assert streak_tier(7)["tier"] == "hot"
    assert streak_tier(12)["bonus"] == 100


def test_format_breakdown_mentions_each_bonus():
    text = format_breakdown(compute_score(6, 45, 9))
    assert text.startswith("Base: 40 pts")
    assert "100% speed bonus" in text
    assert "90% streak bonus" in text
    assert text.endswith("= 152 pts")


def test_format_breakdown_without_bonuses():
    assert format_breakdown(compute_score(4, 5, 0)) == "Base: 10 pts = 10 pts"
