"""Session Schemas: request validation at the API boundary."""

import pytest
from pydantic import ValidationError

from scramble.core.domain_types import SupplyMode
from scramble.schemas.session import (
    AnswerSubmit, DifficultyUpdate, ModeUpdate, SessionCreate, SessionStateResponse,
)
from scramble.core.session_state import SessionState


def test_session_create_defaults():
    body = SessionCreate()
    assert body.initial_tier is None
    assert body.mode is None


def test_session_create_accepts_wire_mode():
    assert SessionCreate(initial_tier=5, mode="remote-only").mode == SupplyMode.REMOTE_ONLY


@pytest.mark.parametrize("tier", [0, 6, "3", True, 2.5])
def test_tier_must_be_a_strict_int_in_range(tier):
    with pytest.raises(ValidationError):
        SessionCreate(initial_tier=tier)
    with pytest.raises(ValidationError):
        DifficultyUpdate(tier=tier)


def test_unknown_mode_rejected():
    with pytest.raises(ValidationError):
        ModeUpdate(mode="offline")


def test_answer_length_bounds():
    with pytest.raises(ValidationError):
        AnswerSubmit(text="")
    with pytest.raises(ValidationError):
        AnswerSubmit(text="a" * 65)
    assert AnswerSubmit(text="x").text == "x"


def test_state_response_accepts_a_session_snapshot():
    response = SessionStateResponse.model_validate(SessionState().to_snapshot())
    assert response.status.value == "idle"
    assert response.active_puzzle is None
