"""Score Engine: pure scoring of a correct answer from (length, time left, streak).

Invariants:
    - base: <=4 letters -> 10, 5 -> 20, 6 -> 40, 7+ -> 60 + (len - 7) * 10
    - speed: >40s remaining -> x2.0, >20s -> x1.5, else x1.0
    - streak bonus fraction: min(streak * 0.1, 1.0); negative streaks count as 0
    - final = round_half_up(base * speed * (1 + streak_bonus_fraction))
    - Breakdown is derived from the three inputs only (no hidden state)
    - Skip/timeout outcomes score zero_breakdown()

Design Decisions:
    - Arithmetic in fractions.Fraction: 1.5 * 1.1 style products land exactly on .5 and
      must round the same way on every platform; float + banker's round() would not
    - Round half up (not Python's round-half-even) so 16.5 -> 17
"""

import math
from dataclasses import dataclass
from fractions import Fraction

from scramble.core.domain_types import ROUND_DURATION_SECONDS

MAX_STREAK_BONUS_STEPS = 10   # 10 x 10% = +100%


@dataclass(frozen=True)
class ScoreBreakdown:
    """Transparent score calculation for one answer."""
    word_length: int
    seconds_remaining: int
    streak_before: int
    base_score: int
    speed_multiplier: float
    streak_bonus_fraction: float
    final_score: int

    @property
    def speed_bonus_percent(self) -> int:
        return round((self.speed_multiplier - 1) * 100)

    @property
    def streak_bonus_percent(self) -> int:
        return round(self.streak_bonus_fraction * 100)

    def to_snapshot(self) -> dict:
        return {
            "word_length": self.word_length,
            "seconds_remaining": self.seconds_remaining,
            "streak_before": self.streak_before,
            "base_score": self.base_score,
            "speed_multiplier": self.speed_multiplier,
            "streak_bonus_fraction": self.streak_bonus_fraction,
            "final_score": self.final_score,
        }


def base_score(word_length: int) -> int:
    if word_length <= 4:
        return 10
    if word_length == 5:
        return 20
    if word_length == 6:
        return 40
    return 60 + (word_length - 7) * 10


def _speed_fraction(seconds_remaining: float) -> Fraction:
    if seconds_remaining > 40:
        return Fraction(2)
    if seconds_remaining > 20:
        return Fraction(3, 2)
    return Fraction(1)


def _streak_fraction(streak: int) -> Fraction:
    return Fraction(min(max(streak, 0), MAX_STREAK_BONUS_STEPS), 10)


def speed_multiplier(seconds_remaining: float) -> float:
    return float(_speed_fraction(seconds_remaining))


def streak_bonus_fraction(streak: int) -> float:
    return float(_streak_fraction(streak))


def _round_half_up(value: Fraction) -> int:
    return math.floor(value + Fraction(1, 2))


def compute_score(
    word_length: int, seconds_remaining: int, streak: int,
) -> ScoreBreakdown:
    """Score a correct answer. Pure, deterministic."""
    base = base_score(word_length)
    speed = _speed_fraction(seconds_remaining)
    bonus = _streak_fraction(streak)
    final = _round_half_up(base * speed * (1 + bonus))
    return ScoreBreakdown(
        word_length=word_length,
        seconds_remaining=seconds_remaining,
        streak_before=streak,
        base_score=base,
        speed_multiplier=float(speed),
        streak_bonus_fraction=float(bonus),
        final_score=final,
    )


def zero_breakdown(
    word_length: int, seconds_remaining: int, streak: int,
) -> ScoreBreakdown:
    """Breakdown for skip/timeout: no points, neutral multipliers."""
    return ScoreBreakdown(
        word_length=word_length,
        seconds_remaining=seconds_remaining,
        streak_before=streak,
        base_score=0,
        speed_multiplier=1.0,
        streak_bonus_fraction=0.0,
        final_score=0,
    )


def max_potential_score(word_length: int) -> int:
    """Best case: answered instantly on a capped streak."""
    return compute_score(
        word_length, ROUND_DURATION_SECONDS, MAX_STREAK_BONUS_STEPS,
    ).final_score


def speed_tier(seconds_remaining: float) -> dict:
    if seconds_remaining > 40:
        return {"tier": "lightning", "description": "Lightning Fast!", "multiplier": 2.0}
    if seconds_remaining > 20:
        return {"tier": "quick", "description": "Quick Thinking!", "multiplier": 1.5}
    return {"tier": "normal", "description": "Good Job!", "multiplier": 1.0}


def streak_tier(streak: int) -> dict:
    if streak >= 10:
        return {"tier": "legendary", "description": "Legendary Streak!", "bonus": 100}
    if streak >= 5:
        return {"tier": "hot", "description": "On Fire!", "bonus": streak * 10}
    if streak >= 2:
        return {"tier": "building", "description": "Building Momentum!", "bonus": streak * 10}
    return {"tier": "none", "description": "", "bonus": 0}


def format_breakdown(breakdown: ScoreBreakdown) -> str:
    """One-line human summary, e.g. 'Base: 40 pts x 2.0 (100% speed bonus) ... = 152 pts'."""
    parts = [f"Base: {breakdown.base_score} pts"]
    if breakdown.speed_bonus_percent > 0:
        parts.append(
            f"x {breakdown.speed_multiplier} ({breakdown.speed_bonus_percent}% speed bonus)",
        )
    if breakdown.streak_bonus_percent > 0:
        parts.append(
            f"x {1 + breakdown.streak_bonus_fraction:.1f} "
            f"({breakdown.streak_bonus_percent}% streak bonus)",
        )
    parts.append(f"= {breakdown.final_score} pts")
    return " ".join(parts)
