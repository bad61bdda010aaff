"""Session Schemas: Pydantic models with field-level validation for the session API.

Invariants:
    - Tiers are integers 1-5; anything else is rejected before reaching a route
    - mode values are the SupplyMode wire names (curated, hybrid, remote-only)
    - Answer text is 1-64 chars; finer hygiene (too-short, invalid-characters) is a
      validation result, not a 400

Design Decisions:
    - Response models mirror SessionState.to_snapshot() so routes return snapshots as-is
    - StrictInt for tiers: "3" and true are not tiers
"""

from typing import Annotated

from pydantic import BaseModel, Field, StrictInt

from scramble.core.domain_types import (
    MAX_TIER, MIN_TIER, RoundOutcome, SessionStatus, SupplyMode, ValidationErrorKind,
)


class SessionCreate(BaseModel):
    """Session creation: starting tier and optional supply mode.

    Omitted fields fall back to the configured default tier and mode.
    """
    initial_tier: Annotated[StrictInt, Field(ge=MIN_TIER, le=MAX_TIER)] | None = None
    mode: SupplyMode | None = None


class AnswerSubmit(BaseModel):
    text: str = Field(min_length=1, max_length=64)


class DifficultyUpdate(BaseModel):
    tier: StrictInt = Field(ge=MIN_TIER, le=MAX_TIER)


class ModeUpdate(BaseModel):
    mode: SupplyMode


# --- Responses ---------------------------------------------------------------

class PuzzleView(BaseModel):
    """Puzzle as shown to a player; solution_word is null while the round is live."""
    id: str
    scrambled_letters: str
    solution_word: str | None
    difficulty_tier: int
    category: str | None
    origin: str


class ScoreBreakdownView(BaseModel):
    word_length: int
    seconds_remaining: int
    streak_before: int
    base_score: int
    speed_multiplier: float
    streak_bonus_fraction: float
    final_score: int


class ValidationView(BaseModel):
    valid: bool
    answer: str
    error_kind: ValidationErrorKind | None = None
    message: str | None = None
    extra_letters: list[str] = []
    missing_letters: list[str] = []
    manually_validated: bool = False


class SessionStateResponse(BaseModel):
    session_id: str
    status: SessionStatus
    active_puzzle: PuzzleView | None
    seconds_remaining: int
    score: int
    streak_count: int
    used_puzzle_ids: list[str]
    difficulty_tier: int
    mode: SupplyMode
    round_number: int
    correct_answers: int
    total_answers: int
    best_streak: int
    last_outcome: RoundOutcome | None
    last_breakdown: ScoreBreakdownView | None
    last_validation: ValidationView | None
    error: str | None


class SubmissionResponse(BaseModel):
    accepted: bool
    stale: bool
    validation: ValidationView
    breakdown: ScoreBreakdownView | None
    state: SessionStateResponse


class StructureCheckResponse(BaseModel):
    matches: bool
    extra_letters: list[str]
    missing_letters: list[str]


class SessionStatsResponse(BaseModel):
    rounds_played: int
    score: int
    current_streak: int
    best_streak: int
    correct_answers: int
    total_answers: int
    accuracy: float
    average_score: float
