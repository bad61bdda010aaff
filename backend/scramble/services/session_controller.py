"""Session Controller: the game session state machine.

States: idle -> loading -> playing -> {round_complete | timeout_reveal} -> loading ... | ended

Invariants:
    - One SessionState per controller, never shared; ended is terminal
    - At most one puzzle fetch in flight; a fetch that resolves after end_session() or
      after its round was superseded is discarded, never applied
    - Starting a round stops the previous round's timer before the new one starts
    - Correct answer: score via compute_score with seconds remaining at submission time
      and the streak before this answer; streak +1; timer stopped
    - Skip: no score change, streak unchanged; timeout: streak reset to 0
    - letters / not-a-word rejections reset the streak and the round keeps playing;
      too-short / invalid-characters leave the streak alone
    - remote-only supply failure ends the session with an error; the only other automatic
      end is max_idle_timeouts consecutive timeouts with no player action in between
    - Every state change is pushed to subscribers as a JSON-safe snapshot

Design Decisions:
    - Generation counter instead of cancelling the supplier coroutine: the fetch is
      bounded by its own timeout, its stale result is simply dropped
    - Display windows (round_complete / timeout_reveal) are asyncio tasks owned here,
      cancelled by next_round() and end_session()
    - Subscriber exceptions are logged and skipped
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable

from scramble.core.answer_check import ValidationResult
from scramble.core.domain_types import (
    ROUND_DURATION_SECONDS, RoundOutcome, SessionStatus, SupplyMode, TelemetryEvent,
    ValidationErrorKind, is_valid_tier,
)
from scramble.core.errors import InvalidTierError, InvalidTransitionError, PuzzleSupplyError
from scramble.core.repository_protocols import EventSink
from scramble.core.score_engine import ScoreBreakdown, compute_score
from scramble.core.session_state import SessionState
from scramble.core.session_stats import compute_session_stats
from scramble.infrastructure.observability import safe_emit
from scramble.services.puzzle_supplier import PuzzleSupplier
from scramble.services.round_timer import RoundTimer
from scramble.services.solution_validator import SolutionValidator

logger = logging.getLogger(__name__)

StateListener = Callable[[dict], None]

_STREAK_BREAKING = {ValidationErrorKind.LETTERS, ValidationErrorKind.NOT_A_WORD}
_ADVANCEABLE = {SessionStatus.ROUND_COMPLETE, SessionStatus.TIMEOUT_REVEAL}


@dataclass
class SubmissionResult:
    """What happened to one submitted answer."""
    accepted: bool
    validation: ValidationResult
    breakdown: ScoreBreakdown | None
    state: dict
    stale: bool = False

    def to_snapshot(self) -> dict:
        return {
            "accepted": self.accepted,
            "stale": self.stale,
            "validation": self.validation.to_snapshot(),
            "breakdown": self.breakdown.to_snapshot() if self.breakdown else None,
            "state": self.state,
        }


class SessionController:
    """Owns one SessionState and drives it through the round lifecycle."""

    def __init__(
        self,
        supplier: PuzzleSupplier,
        validator: SolutionValidator,
        timer: RoundTimer | None = None,
        event_sink: EventSink | None = None,
        round_duration_seconds: int = ROUND_DURATION_SECONDS,
        round_complete_display_seconds: float = 2.0,
        timeout_reveal_seconds: float = 5.0,
        max_idle_timeouts: int = 3,
    ):
        self.supplier = supplier
        self.validator = validator
        self.timer = timer or RoundTimer()
        self.event_sink = event_sink
        self.round_duration_seconds = round_duration_seconds
        self.round_complete_display_seconds = round_complete_display_seconds
        self.timeout_reveal_seconds = timeout_reveal_seconds
        self.max_idle_timeouts = max_idle_timeouts

        self.state = SessionState(mode=supplier.mode)
        self._listeners: list[StateListener] = []
        self._generation = 0
        self._advance_task: asyncio.Task | None = None
        self._round_started_at: float | None = None
        self._idle_timeouts = 0

    @property
    def session_id(self) -> str:
        return self.state.session_id

    # -- Subscription ------------------------------------------------------

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register for a snapshot on every change. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def snapshot(self) -> dict:
        return self.state.to_snapshot()

    def stats(self) -> dict:
        return compute_session_stats(self.state)

    def _notify(self) -> None:
        snapshot = self.state.to_snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception(
                    "Session subscriber failed", extra={"session_id": self.session_id},
                )

    # -- Public surface ----------------------------------------------------

    async def start_session(
        self, initial_tier: int, mode: SupplyMode | str | None = None,
    ) -> dict:
        if self.state.status != SessionStatus.IDLE:
            raise InvalidTransitionError("start the session", self.state.status.value)
        if not is_valid_tier(initial_tier):
            raise InvalidTierError(initial_tier)
        if mode is not None:
            self.supplier.set_mode(mode)
        self.state.mode = self.supplier.mode
        self.state.difficulty_tier = initial_tier
        logger.info(
            f"Session started at tier {initial_tier}",
            extra={"session_id": self.session_id, "tier": initial_tier,
                   "mode": self.state.mode.value},
        )
        await self._load_round()
        return self.snapshot()

    async def next_round(self) -> dict:
        """Advance now instead of waiting out the display window."""
        if self.state.status not in _ADVANCEABLE:
            raise InvalidTransitionError("advance to the next round", self.state.status.value)
        self._idle_timeouts = 0
        self._cancel_advance()
        await self._load_round()
        return self.snapshot()

    async def submit_answer(self, text: str) -> SubmissionResult:
        if not self.state.is_playing:
            raise InvalidTransitionError("submit an answer", self.state.status.value)
        puzzle = self.state.active_puzzle
        generation = self._generation
        seconds_at_submission = self.state.seconds_remaining
        self._idle_timeouts = 0

        result = await self.validator.validate_solution(puzzle, text)

        if generation != self._generation or not self.state.is_playing:
            logger.info(
                "Discarding submission for a round that already finished",
                extra={"session_id": self.session_id, "puzzle_id": puzzle.id},
            )
            return SubmissionResult(
                accepted=False, validation=result, breakdown=None,
                state=self.snapshot(), stale=True,
            )

        self.state.last_validation = result
        if not result.valid:
            if result.error_kind in _STREAK_BREAKING:
                self.state.record_incorrect()
            self._notify()
            return SubmissionResult(
                accepted=False, validation=result, breakdown=None, state=self.snapshot(),
            )

        self.timer.stop()
        breakdown = compute_score(
            puzzle.word_length, seconds_at_submission, self.state.streak_count,
        )
        self.state.record_correct(breakdown)
        self._emit_outcome(RoundOutcome.CORRECT, breakdown.final_score)
        self._notify()
        self._schedule_advance(self.round_complete_display_seconds)
        return SubmissionResult(
            accepted=True, validation=result, breakdown=breakdown, state=self.snapshot(),
        )

    def check_structure(self, text: str) -> dict:
        """Instant as-you-type letter feedback for the active puzzle."""
        if not self.state.is_playing:
            raise InvalidTransitionError("check an answer", self.state.status.value)
        puzzle = self.state.active_puzzle
        diff = self.validator.letter_diff(puzzle, text)
        return {
            "matches": self.validator.validate_structure(puzzle, text),
            "extra_letters": diff.extra,
            "missing_letters": diff.missing,
        }

    def skip(self) -> dict:
        if not self.state.is_playing:
            raise InvalidTransitionError("skip", self.state.status.value)
        self._idle_timeouts = 0
        self.timer.stop()
        self.state.record_skip()
        self._emit_outcome(RoundOutcome.SKIP, 0)
        self._notify()
        self._schedule_advance(self.round_complete_display_seconds)
        return self.snapshot()

    def set_difficulty(self, tier: int) -> dict:
        """Takes effect from the next round."""
        if not is_valid_tier(tier):
            raise InvalidTierError(tier)
        if self.state.is_ended:
            raise InvalidTransitionError("change difficulty", self.state.status.value)
        self.state.difficulty_tier = tier
        self._idle_timeouts = 0
        self._notify()
        return self.snapshot()

    def set_mode(self, mode: SupplyMode | str) -> dict:
        """Takes effect from the next round."""
        if self.state.is_ended:
            raise InvalidTransitionError("change mode", self.state.status.value)
        self._idle_timeouts = 0
        self.supplier.set_mode(mode)
        self.state.mode = self.supplier.mode
        self._notify()
        return self.snapshot()

    def end_session(self, error: str | None = None) -> dict:
        """Tear down timer and pending work. Idempotent."""
        if self.state.is_ended:
            return self.snapshot()
        self._generation += 1
        self.timer.stop()
        self._cancel_advance()
        self.state.end(error)
        logger.info(
            "Session ended",
            extra={"session_id": self.session_id, "payload": self.stats()},
        )
        self._notify()
        return self.snapshot()

    # -- Round lifecycle ---------------------------------------------------

    async def _load_round(self) -> None:
        self.timer.stop()
        self._generation += 1
        generation = self._generation
        self.state.status = SessionStatus.LOADING
        self.state.active_puzzle = None
        self._notify()

        try:
            puzzle = await self.supplier.get_puzzle(
                self.state.difficulty_tier,
                exclude_ids=frozenset(self.state.used_puzzle_ids),
                session_id=self.session_id,
            )
        except PuzzleSupplyError as e:
            if generation != self._generation:
                return
            logger.error(
                f"Session ending, no puzzle available: {e.message}",
                extra={"session_id": self.session_id, "error_code": e.code},
            )
            self.end_session(error=e.message)
            return

        if generation != self._generation or self.state.is_ended:
            logger.info(
                "Discarding puzzle resolved for a superseded round",
                extra={"session_id": self.session_id, "puzzle_id": puzzle.id},
            )
            return

        self.state.begin_round(puzzle, self.round_duration_seconds)
        self._round_started_at = time.monotonic()
        self.timer.start(
            self.round_duration_seconds,
            on_tick=lambda remaining: self._handle_tick(generation, remaining),
            on_expire=lambda: self._handle_expire(generation),
        )
        self._notify()

    def _handle_tick(self, generation: int, remaining: int) -> None:
        if generation != self._generation or not self.state.is_playing:
            return
        self.state.seconds_remaining = remaining
        self._notify()

    def _handle_expire(self, generation: int) -> None:
        if generation != self._generation or not self.state.is_playing:
            return
        self.state.record_timeout()
        self._emit_outcome(RoundOutcome.TIMEOUT, 0)
        self._notify()
        self._idle_timeouts += 1
        if self.max_idle_timeouts and self._idle_timeouts >= self.max_idle_timeouts:
            logger.info(
                f"Ending idle session after {self._idle_timeouts} unanswered rounds",
                extra={"session_id": self.session_id},
            )
            self.end_session()
            return
        self._schedule_advance(self.timeout_reveal_seconds)

    def _schedule_advance(self, delay: float) -> None:
        self._cancel_advance()
        self._advance_task = asyncio.get_running_loop().create_task(
            self._advance_after(delay, self._generation),
        )

    async def _advance_after(self, delay: float, generation: int) -> None:
        await asyncio.sleep(delay)
        if generation != self._generation or self.state.status not in _ADVANCEABLE:
            return
        await self._load_round()

    def _cancel_advance(self) -> None:
        task, self._advance_task = self._advance_task, None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    # -- Telemetry ---------------------------------------------------------

    def _emit_outcome(self, outcome: RoundOutcome, points: int) -> None:
        self.state.last_outcome = outcome
        puzzle = self.state.active_puzzle
        elapsed_ms = None
        if self._round_started_at is not None:
            elapsed_ms = round((time.monotonic() - self._round_started_at) * 1000)
        safe_emit(self.event_sink, TelemetryEvent.ROUND_OUTCOME.value, {
            "outcome": outcome.value,
            "session_id": self.session_id,
            "puzzle_id": puzzle.id if puzzle else None,
            "tier": puzzle.difficulty_tier if puzzle else self.state.difficulty_tier,
            "origin": puzzle.origin.value if puzzle else None,
            "seconds_remaining": self.state.seconds_remaining,
            "elapsed_ms": elapsed_ms,
            "points": points,
            "streak": self.state.streak_count,
        })
