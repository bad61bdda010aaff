"""Session Helpers: controller registry and SSE wiring shared by the session routes.

Invariants:
    - _controllers is the single source for live sessions in this process
    - state_events yields the current snapshot first, then one event per change,
      and stops after the session reaches `ended`
    - A stream's subscription is always removed when the stream closes
    - Ended sessions stay readable until the next session is registered

Design Decisions:
    - _controllers as module-level dict: deliberate exception to no-global-state rule
      (single-process uvicorn, no multi-worker, sessions lost on restart)
    - Subscriber pushes into an asyncio.Queue: controller callbacks stay synchronous
"""

import asyncio
import json
import logging
from typing import AsyncIterator

from scramble.core.domain_types import SessionStatus
from scramble.core.errors import ResourceNotFoundError
from scramble.services.session_controller import SessionController

logger = logging.getLogger(__name__)

# SSE headers prevent proxy/browser buffering of streamed events.
SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
    "Connection": "keep-alive",
}

_controllers: dict[str, SessionController] = {}


def register_controller(controller: SessionController) -> None:
    """Add a live session, releasing sessions that ended on their own since the last one."""
    for session_id, existing in list(_controllers.items()):
        if existing.state.is_ended:
            del _controllers[session_id]
    _controllers[controller.session_id] = controller


def drop_controller(session_id: str) -> None:
    _controllers.pop(session_id, None)


def get_controller_or_404(session_id: str) -> SessionController:
    controller = _controllers.get(session_id)
    if controller is None:
        raise ResourceNotFoundError("Session", session_id)
    return controller


def end_all_sessions() -> None:
    """Shutdown hook: stop every timer and pending round."""
    for controller in list(_controllers.values()):
        controller.end_session()
    _controllers.clear()


def sse_line(event: dict) -> str:
    """Format event as SSE data line."""
    return f"data: {json.dumps(event, ensure_ascii=False)}\n\n"


async def state_events(controller: SessionController) -> AsyncIterator[dict]:
    """Stream {"type": "state", "data": snapshot} events until the session ends."""
    queue: asyncio.Queue[dict] = asyncio.Queue()
    unsubscribe = controller.subscribe(queue.put_nowait)
    try:
        snapshot = controller.snapshot()
        while True:
            yield {"type": "state", "data": snapshot}
            if snapshot["status"] == SessionStatus.ENDED.value:
                return
            snapshot = await queue.get()
    finally:
        unsubscribe()
