"""Error Hierarchy: typed, categorized exceptions for all engine failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are caller mistakes; infrastructure errors (500-level) are
      absorbed by the component owning the dependency, except PuzzleSupplyError
    - Player input problems are NOT exceptions (see ValidationErrorKind)
    - to_response() produces REST envelope; to_sse_event() produces SSE envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with ScrambleError base: FastAPI global handler catches all (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - WordSourceError subclasses carry a short machine-readable `reason` for telemetry
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"
    CONFLICT = "conflict"
    TIMEOUT = "timeout"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    session_id: str | None = None
    puzzle_id: str | None = None
    tier: int | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class ScrambleError(Exception):
    """Base exception for all engine errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.context.user_message or self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "session_id": self.context.session_id,
                    "puzzle_id": self.context.puzzle_id,
                    "tier": self.context.tier,
                },
            }
        }

    def to_sse_event(self) -> dict:
        """Convert to SSE error event."""
        return {
            "type": "error",
            "data": {
                "code": self.code,
                "message": self.context.user_message or self.message,
                "severity": self.severity.value,
                "recoverable": self.severity in (
                    ErrorSeverity.INFO, ErrorSeverity.WARNING,
                ),
            },
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class InvalidTierError(ScrambleError):
    """Difficulty tier outside 1–5."""
    def __init__(self, tier: object, context: ErrorContext | None = None):
        super().__init__(
            f"Difficulty tier must be an integer 1-5, got {tier!r}",
            "INVALID_TIER", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.tier = tier


class InvalidModeError(ScrambleError):
    """Unknown supply mode name."""
    def __init__(self, mode: object, context: ErrorContext | None = None):
        super().__init__(
            f"Unknown word mode {mode!r} (expected curated, hybrid or remote-only)",
            "INVALID_MODE", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.mode = mode


class InvalidTransitionError(ScrambleError):
    """Action not allowed in the session's current status."""
    def __init__(self, action: str, status: str, context: ErrorContext | None = None):
        super().__init__(
            f"Cannot {action} while session is {status}",
            "INVALID_TRANSITION", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )
        self.action = action
        self.status = status


class ResourceNotFoundError(ScrambleError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class UnscramblableWordError(ScrambleError):
    """Word has no letter permutation that differs from itself."""
    def __init__(self, word: str, context: ErrorContext | None = None):
        super().__init__(
            f"Cannot scramble {word!r}: no permutation differs from the original",
            "UNSCRAMBLABLE_WORD", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.word = word


# ─── Infrastructure Errors (500-level) ──────────────────────────

class WordSourceError(ScrambleError):
    """Remote word source failed. Recoverable by fallback outside remote-only mode."""
    reason = "error"

    def __init__(
        self,
        message: str,
        code: str = "REMOTE_ERROR",
        category: ErrorCategory = ErrorCategory.EXTERNAL_API,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, category, ErrorSeverity.WARNING, context, 503,
        )


class RemoteTimeoutError(WordSourceError):
    """Remote word fetch exceeded its hard timeout."""
    reason = "timeout"

    def __init__(self, timeout_ms: int, context: ErrorContext | None = None):
        super().__init__(
            f"Word source request timed out ({timeout_ms}ms)",
            "REMOTE_TIMEOUT", ErrorCategory.TIMEOUT, context,
        )
        self.timeout_ms = timeout_ms


class RemoteError(WordSourceError):
    """Transport, HTTP status, or payload parse failure."""

    def __init__(
        self, message: str, reason: str = "error", context: ErrorContext | None = None,
    ):
        super().__init__(message, "REMOTE_ERROR", ErrorCategory.EXTERNAL_API, context)
        self.reason = reason


class RemoteEmptyError(WordSourceError):
    """No candidate word survived filtering."""
    reason = "empty"

    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(message, "REMOTE_EMPTY", ErrorCategory.EXTERNAL_API, context)


class CacheCorruptionError(ScrambleError):
    """Persisted cache snapshot could not be decoded. Recovered by full reset."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Cache snapshot unreadable: {message}",
            "CACHE_CORRUPTION", ErrorCategory.INTERNAL,
            ErrorSeverity.WARNING, context, 500,
        )


class ValidationServiceUnavailableError(ScrambleError):
    """Dictionary collaborator unreachable or erroring. Recovered by manual accept."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Dictionary service unavailable: {message}",
            "VALIDATION_SERVICE_UNAVAILABLE", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.WARNING, context, 503,
        )


class DatabaseError(ScrambleError):
    """Key-value store operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class PuzzleSupplyError(ScrambleError):
    """No puzzle could be produced. Terminal for the round (remote-only mode)."""
    def __init__(
        self, message: str, cause: Exception | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "PUZZLE_SUPPLY_FAILED", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.cause = cause
