"""Session Lifecycle: create, inspect, play and end game sessions.

Invariants:
    - One SessionController per session id, held in the session_helpers registry
    - Request bodies validated by Pydantic before reaching a handler
    - Illegal actions for the current status -> 409 (InvalidTransitionError)
    - DELETE ends the session and drops it from the registry

Design Decisions:
    - Handlers only translate HTTP to SessionController calls; snapshots are returned as-is
"""

import logging

from fastapi import APIRouter, Depends, status

from scramble.api.routes.session_helpers import (
    drop_controller, get_controller_or_404, register_controller,
)
from scramble.core.errors import ScrambleError
from scramble.schemas.session import (
    AnswerSubmit, DifficultyUpdate, ModeUpdate, SessionCreate, SessionStateResponse,
    SessionStatsResponse, StructureCheckResponse, SubmissionResponse,
)
from scramble.services.engine_factory import Engine, get_engine

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/sessions", tags=["sessions"])


@router.post(
    "", response_model=SessionStateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_session(
    body: SessionCreate, engine: Engine = Depends(get_engine),
):
    """Create a session and load its first round."""
    controller = engine.build_session_controller(body.mode)
    register_controller(controller)
    try:
        initial_tier = body.initial_tier
        if initial_tier is None:
            initial_tier = engine.settings.default_tier
        return await controller.start_session(initial_tier)
    except ScrambleError:
        controller.end_session()
        drop_controller(controller.session_id)
        raise


@router.get("/{session_id}", response_model=SessionStateResponse)
async def get_session(session_id: str):
    return get_controller_or_404(session_id).snapshot()


@router.get("/{session_id}/stats", response_model=SessionStatsResponse)
async def get_session_stats(session_id: str):
    return get_controller_or_404(session_id).stats()


@router.post("/{session_id}/answers", response_model=SubmissionResponse)
async def submit_answer(session_id: str, body: AnswerSubmit):
    """Validate an answer; a correct one scores and completes the round."""
    controller = get_controller_or_404(session_id)
    result = await controller.submit_answer(body.text)
    return result.to_snapshot()


@router.post("/{session_id}/structure-check", response_model=StructureCheckResponse)
async def check_structure(session_id: str, body: AnswerSubmit):
    """Instant letter check, no dictionary lookup."""
    return get_controller_or_404(session_id).check_structure(body.text)


@router.post("/{session_id}/skip", response_model=SessionStateResponse)
async def skip_round(session_id: str):
    return get_controller_or_404(session_id).skip()


@router.post("/{session_id}/next", response_model=SessionStateResponse)
async def next_round(session_id: str):
    """Start the next round without waiting for the display window."""
    return await get_controller_or_404(session_id).next_round()


@router.put("/{session_id}/difficulty", response_model=SessionStateResponse)
async def set_difficulty(session_id: str, body: DifficultyUpdate):
    return get_controller_or_404(session_id).set_difficulty(body.tier)


@router.put("/{session_id}/mode", response_model=SessionStateResponse)
async def set_mode(session_id: str, body: ModeUpdate):
    return get_controller_or_404(session_id).set_mode(body.mode)


@router.delete("/{session_id}", response_model=SessionStateResponse)
async def end_session(session_id: str):
    """End the session and release it."""
    controller = get_controller_or_404(session_id)
    final_state = controller.end_session()
    drop_controller(session_id)
    logger.info("Session deleted", extra={"session_id": session_id})
    return final_state
