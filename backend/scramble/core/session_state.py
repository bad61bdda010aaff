"""Session State: the engine's single mutable record, owned by one SessionController.

Invariants:
    - score, correct_answers, total_answers only grow within a session
    - streak_count grows by one per correct answer and resets to 0 on incorrect/timeout
    - skip leaves both score and streak unchanged
    - seconds_remaining is authoritative only while status == PLAYING
    - to_snapshot() hides the solution word while the round is still being played

Design Decisions:
    - Plain dataclass passed by reference, never a module-level singleton: independent
      sessions (and tests) never share state
    - Outcome helpers (record_*) keep the score/streak bookkeeping in one place; the
      controller decides WHEN they apply, this decides WHAT they change
"""

import uuid
from dataclasses import dataclass, field

from scramble.core.answer_check import ValidationResult
from scramble.core.domain_types import (
    ROUND_DURATION_SECONDS, RoundOutcome, SessionStatus, SupplyMode,
)
from scramble.core.puzzle import Puzzle
from scramble.core.score_engine import ScoreBreakdown

_SOLUTION_VISIBLE = {
    SessionStatus.ROUND_COMPLETE,
    SessionStatus.TIMEOUT_REVEAL,
}


@dataclass
class SessionState:
    """Per-session game state. Pure dataclass, no IO."""

    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    status: SessionStatus = SessionStatus.IDLE
    active_puzzle: Puzzle | None = None
    seconds_remaining: int = ROUND_DURATION_SECONDS
    score: int = 0
    streak_count: int = 0
    used_puzzle_ids: set[str] = field(default_factory=set)
    difficulty_tier: int = 1
    mode: SupplyMode = SupplyMode.HYBRID

    # Round bookkeeping
    round_number: int = 0
    correct_answers: int = 0
    total_answers: int = 0
    best_streak: int = 0
    last_outcome: RoundOutcome | None = None
    last_breakdown: ScoreBreakdown | None = None
    last_validation: ValidationResult | None = None

    # Set when the session ends because no puzzle could be supplied
    error: str | None = None

    @property
    def is_playing(self) -> bool:
        return self.status == SessionStatus.PLAYING

    @property
    def is_ended(self) -> bool:
        return self.status == SessionStatus.ENDED

    def begin_round(self, puzzle: Puzzle, duration_seconds: int) -> None:
        self.active_puzzle = puzzle
        self.used_puzzle_ids.add(puzzle.id)
        self.seconds_remaining = duration_seconds
        self.round_number += 1
        self.last_breakdown = None
        self.last_validation = None
        self.status = SessionStatus.PLAYING

    def record_correct(self, breakdown: ScoreBreakdown) -> None:
        self.score += breakdown.final_score
        self.streak_count += 1
        self.best_streak = max(self.best_streak, self.streak_count)
        self.correct_answers += 1
        self.total_answers += 1
        self.last_breakdown = breakdown
        self.last_outcome = RoundOutcome.CORRECT
        self.status = SessionStatus.ROUND_COMPLETE

    def record_incorrect(self) -> None:
        """Wrong answer: streak resets, round keeps playing."""
        self.streak_count = 0
        self.total_answers += 1

    def record_skip(self) -> None:
        self.total_answers += 1
        self.last_outcome = RoundOutcome.SKIP
        self.status = SessionStatus.ROUND_COMPLETE

    def record_timeout(self) -> None:
        self.streak_count = 0
        self.seconds_remaining = 0
        self.last_outcome = RoundOutcome.TIMEOUT
        self.status = SessionStatus.TIMEOUT_REVEAL

    def end(self, error: str | None = None) -> None:
        self.status = SessionStatus.ENDED
        self.active_puzzle = None
        if error:
            self.error = error

    def to_snapshot(self) -> dict:
        """JSON-safe copy for subscribers and the HTTP layer."""
        puzzle = None
        if self.active_puzzle is not None:
            puzzle = self.active_puzzle.to_snapshot(
                reveal_solution=self.status in _SOLUTION_VISIBLE,
            )
        return {
            "session_id": self.session_id,
            "status": self.status.value,
            "active_puzzle": puzzle,
            "seconds_remaining": self.seconds_remaining,
            "score": self.score,
            "streak_count": self.streak_count,
            "used_puzzle_ids": sorted(self.used_puzzle_ids),
            "difficulty_tier": self.difficulty_tier,
            "mode": self.mode.value,
            "round_number": self.round_number,
            "correct_answers": self.correct_answers,
            "total_answers": self.total_answers,
            "best_streak": self.best_streak,
            "last_outcome": self.last_outcome.value if self.last_outcome else None,
            "last_breakdown": (
                self.last_breakdown.to_snapshot() if self.last_breakdown else None
            ),
            "last_validation": (
                self.last_validation.to_snapshot() if self.last_validation else None
            ),
            "error": self.error,
        }
