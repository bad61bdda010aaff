"""Session Stream: Server-Sent Events feed of session state.

Invariants:
    - One `state` event per SessionState change, starting with the current state
    - The stream closes after the `ended` state has been sent

Design Decisions:
    - StreamingResponse for SSE: event_generator yields formatted SSE lines
"""

import logging

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from scramble.api.routes.session_helpers import (
    SSE_HEADERS, get_controller_or_404, sse_line, state_events,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/sessions", tags=["sessions"])


@router.get("/{session_id}/stream")
async def stream_session(session_id: str):
    controller = get_controller_or_404(session_id)

    async def event_generator():
        async for event in state_events(controller):
            yield sse_line(event)
        logger.debug("Session stream closed", extra={"session_id": session_id})

    return StreamingResponse(
        event_generator(), media_type="text/event-stream", headers=SSE_HEADERS,
    )
