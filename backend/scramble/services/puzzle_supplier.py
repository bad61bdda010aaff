"""Puzzle Supplier: mode-driven cascade from cache to remote generation to curated table.

Invariants:
    - Every returned Puzzle has scrambled letters that permute the solution, and differ
      from it for words longer than 2 letters (enforced by Puzzle itself)
    - curated: static table only, never touches cache or network
    - hybrid: cache -> remote -> curated; remote failures are absorbed silently
    - remote-only: cache -> remote; a remote failure raises PuzzleSupplyError
    - A cache hit returns without awaiting anything
    - Remotely generated puzzles are written to the cache before being returned
    - Exactly one puzzle_source_used event per returned puzzle; one
      remote_generation_failed event per absorbed or propagated remote failure

Design Decisions:
    - SupplyMode is an explicit tagged value consumed by one branch in get_puzzle(),
      not subclasses per mode: the fallback cascade stays auditable in one place
    - Remote words are trusted without a dictionary check (latency over strictness)
    - Only UnscramblableWordError triggers another remote fetch; any WordSourceError
      ends the remote attempt immediately
"""

import logging
import random

from scramble.core.curated_puzzles import select_curated
from scramble.core.domain_types import PuzzleOrigin, SupplyMode, TelemetryEvent, is_valid_tier
from scramble.core.errors import (
    InvalidModeError, InvalidTierError, PuzzleSupplyError, RemoteEmptyError, RemoteError,
    UnscramblableWordError, WordSourceError,
)
from scramble.core.puzzle import GENERATED_CATEGORY, Puzzle, new_generated_id
from scramble.core.repository_protocols import EventSink, WordSource
from scramble.core.word_scrambler import WordScrambler
from scramble.infrastructure.observability import safe_emit
from scramble.infrastructure.puzzle_cache import PuzzleCache

logger = logging.getLogger(__name__)


def parse_mode(mode: SupplyMode | str) -> SupplyMode:
    """Coerce a wire value to SupplyMode. Raises InvalidModeError."""
    try:
        return SupplyMode(mode)
    except ValueError:
        raise InvalidModeError(mode)


class PuzzleSupplier:
    """Supplies one puzzle per round according to the current SupplyMode."""

    def __init__(
        self,
        cache: PuzzleCache,
        word_source: WordSource | None,
        scrambler: WordScrambler | None = None,
        mode: SupplyMode | str = SupplyMode.HYBRID,
        event_sink: EventSink | None = None,
        max_attempts: int = 3,
        rng: random.Random | None = None,
    ):
        self.cache = cache
        self.word_source = word_source
        self._rng = rng or random.Random()
        self.scrambler = scrambler or WordScrambler(rng=self._rng)
        self._mode = parse_mode(mode)
        self.event_sink = event_sink
        self.max_attempts = max(1, max_attempts)

    @property
    def mode(self) -> SupplyMode:
        return self._mode

    def set_mode(self, mode: SupplyMode | str) -> None:
        self._mode = parse_mode(mode)
        logger.info(f"Supply mode set to {self._mode.value}", extra={"mode": self._mode.value})

    async def get_puzzle(
        self,
        tier: int,
        exclude_ids: set[str] | frozenset[str] = frozenset(),
        session_id: str | None = None,
    ) -> Puzzle:
        if not is_valid_tier(tier):
            raise InvalidTierError(tier)
        mode = self._mode

        if mode == SupplyMode.CURATED:
            return self._curated(tier, exclude_ids, session_id)

        cached = self.cache.get(tier, exclude_ids)
        if cached is not None:
            self._emit_source(cached, session_id)
            return cached

        try:
            puzzle = await self._generate(tier)
        except WordSourceError as e:
            self._emit_failure(tier, e, mode, session_id)
            if mode == SupplyMode.REMOTE_ONLY:
                raise PuzzleSupplyError(
                    f"Remote puzzle generation failed for tier {tier}: {e.message}",
                    cause=e,
                )
            return self._curated(tier, exclude_ids, session_id)

        self.cache.put(tier, puzzle)
        self._emit_source(puzzle, session_id)
        return puzzle

    # -- Sources -----------------------------------------------------------

    def _curated(
        self, tier: int, exclude_ids: set[str] | frozenset[str], session_id: str | None,
    ) -> Puzzle:
        puzzle = select_curated(tier, exclude_ids, rng=self._rng)
        self._emit_source(puzzle, session_id)
        return puzzle

    async def _generate(self, tier: int) -> Puzzle:
        """Fetch + scramble. Raises WordSourceError on any remote failure."""
        if self.word_source is None:
            raise RemoteError("No word source configured", reason="unconfigured")
        for attempt in range(1, self.max_attempts + 1):
            try:
                word = await self.word_source.fetch_random_word(tier)
            except WordSourceError:
                raise
            except Exception as e:
                logger.exception(
                    "Word source raised an unexpected error",
                    extra={"tier": tier, "attempt": attempt},
                )
                raise RemoteError(f"Unexpected word source failure: {e}", reason="unexpected")
            try:
                scrambled = self.scrambler.scramble(word)
            except UnscramblableWordError:
                logger.info(
                    f"Discarding unscramblable word {word!r}",
                    extra={"tier": tier, "attempt": attempt},
                )
                continue
            return Puzzle(
                id=new_generated_id(word),
                scrambled_letters=scrambled,
                solution_word=word,
                difficulty_tier=tier,
                origin=PuzzleOrigin.REMOTE,
                category=GENERATED_CATEGORY,
            )
        raise RemoteEmptyError(
            f"No scramblable word after {self.max_attempts} attempts",
        )

    # -- Telemetry ---------------------------------------------------------

    def _emit_source(self, puzzle: Puzzle, session_id: str | None) -> None:
        safe_emit(self.event_sink, TelemetryEvent.PUZZLE_SOURCE_USED.value, {
            "source": puzzle.origin.value,
            "puzzle_id": puzzle.id,
            "tier": puzzle.difficulty_tier,
            "mode": self._mode.value,
            "session_id": session_id,
        })

    def _emit_failure(
        self, tier: int, error: WordSourceError, mode: SupplyMode, session_id: str | None,
    ) -> None:
        logger.warning(
            f"Remote generation failed ({error.reason}): {error.message}",
            extra={"tier": tier, "reason": error.reason, "mode": mode.value},
        )
        safe_emit(self.event_sink, TelemetryEvent.REMOTE_GENERATION_FAILED.value, {
            "reason": error.reason,
            "message": error.message,
            "tier": tier,
            "mode": mode.value,
            "fallback": mode == SupplyMode.HYBRID,
            "session_id": session_id,
        })
