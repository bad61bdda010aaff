"""Structured Logging and Telemetry: JSON log formatter plus the engine's event sinks.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (session_id, puzzle_id, tier, origin, event, reason, ...) surfaced when present
    - JSON format in production, human-readable in development
    - Event sinks never raise into the engine: a failing sink is logged and skipped

Design Decisions:
    - JSONFormatter over third-party libs: zero dependencies, full control
    - setup_logging called once on startup via lifespan
    - LoggingEventSink writes telemetry as structured log lines; an external collector
      owns storage/display
"""

import logging
import json
from datetime import datetime, timezone

from scramble.core.repository_protocols import EventSink

logger = logging.getLogger(__name__)

_EXTRA_FIELDS = (
    "session_id", "puzzle_id", "tier", "origin", "event", "reason",
    "outcome", "error_code", "attempt", "mode", "payload",
)


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json"):
    """Configure logging for the application."""
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))


# ─── Telemetry Sinks ────────────────────────────────────────────

class LoggingEventSink:
    """Default sink: one INFO log line per event."""

    def __init__(self, logger_name: str = "scramble.telemetry"):
        self._logger = logging.getLogger(logger_name)

    def emit(self, event: str, payload: dict) -> None:
        self._logger.info(
            f"telemetry {event}",
            extra={
                "event": event,
                "payload": payload,
                "session_id": payload.get("session_id"),
                "puzzle_id": payload.get("puzzle_id"),
                "tier": payload.get("tier"),
            },
        )


class RecordingEventSink:
    """Keeps events in memory (tests, diagnostics endpoints)."""

    def __init__(self):
        self.events: list[tuple[str, dict]] = []

    def emit(self, event: str, payload: dict) -> None:
        self.events.append((event, dict(payload)))

    def of_type(self, event: str) -> list[dict]:
        return [p for e, p in self.events if e == event]


def safe_emit(sink: EventSink | None, event: str, payload: dict) -> None:
    """Emit without letting a sink failure escape into game flow."""
    if sink is None:
        return
    try:
        sink.emit(event, payload)
    except Exception as e:
        logger.warning(f"Event sink failed for {event}: {e}", exc_info=True)
