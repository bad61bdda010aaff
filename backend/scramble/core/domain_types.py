"""Domain Types: rich types that replace bare primitives across the codebase.

Invariants:
    - Tier is bounded 1–5 (MIN_TIER..MAX_TIER)
    - All valid states encoded as Enums, no raw string matching
    - Enum values are the wire names used by telemetry and the HTTP layer

Design Decisions:
    - str Enums serialize to JSON without custom encoders
"""

from enum import Enum


# ─── Tier Bounds ─────────────────────────────────────────────────

MIN_TIER = 1
MAX_TIER = 5
ALL_TIERS: tuple[int, ...] = tuple(range(MIN_TIER, MAX_TIER + 1))

ROUND_DURATION_SECONDS = 60


def is_valid_tier(value: object) -> bool:
    """True for ints 1–5 (bools rejected even though they are ints)."""
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and MIN_TIER <= value <= MAX_TIER
    )


# ─── Enums ───────────────────────────────────────────────────────

class PuzzleOrigin(str, Enum):
    """Provenance tag on a puzzle."""
    STATIC = "static"
    CACHE = "cache"
    REMOTE = "remote"


class SupplyMode(str, Enum):
    """PuzzleSupplier policy, consumed by a single branch in the supplier."""
    CURATED = "curated"
    HYBRID = "hybrid"
    REMOTE_ONLY = "remote-only"


class SessionStatus(str, Enum):
    """Session lifecycle states. ENDED is terminal."""
    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
    TIMEOUT_REVEAL = "timeout_reveal"
    ROUND_COMPLETE = "round_complete"
    ENDED = "ended"


class RoundOutcome(str, Enum):
    """How a round finished; reported in round_outcome telemetry."""
    CORRECT = "correct"
    SKIP = "skip"
    TIMEOUT = "timeout"


class ValidationErrorKind(str, Enum):
    """Player-facing rejection kinds. Values, never exceptions."""
    LETTERS = "letters"
    NOT_A_WORD = "not-a-word"
    TOO_SHORT = "too-short"
    INVALID_CHARACTERS = "invalid-characters"


class TimerStatus(str, Enum):
    """RoundTimer lifecycle."""
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    FINISHED = "finished"


class TelemetryEvent(str, Enum):
    """Observability events emitted by the engine."""
    PUZZLE_SOURCE_USED = "puzzle_source_used"
    REMOTE_GENERATION_FAILED = "remote_generation_failed"
    ROUND_OUTCOME = "round_outcome"
