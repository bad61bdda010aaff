"""Tests for compute_session_stats: pure stats from SessionState, no IO."""

from scramble.core.score_engine import compute_score
from scramble.core.session_state import SessionState
from scramble.core.session_stats import compute_session_stats

from tests.fakes import make_puzzle


def test_empty_state_returns_zero_stats():
    stats = compute_session_stats(SessionState())
    assert stats == {
        "rounds_played": 0,
        "score": 0,
        "current_streak": 0,
        "best_streak": 0,
        "correct_answers": 0,
        "total_answers": 0,
        "accuracy": 0.0,
        "average_score": 0.0,
    }


def test_accuracy_and_average_score():
    state = SessionState()
    state.begin_round(make_puzzle("silent", "litens"), 60)
    state.record_correct(compute_score(6, 50, 0))      # 80
    state.begin_round(make_puzzle("tiger", "regit"), 60)
    state.record_incorrect()
    state.record_skip()
    state.begin_round(make_puzzle("lamp", "pmal"), 60)
    state.record_correct(compute_score(4, 10, 0))      # 10

    stats = compute_session_stats(state)
    assert stats["rounds_played"] == 3
    assert stats["score"] == 90
    assert stats["correct_answers"] == 2
    assert stats["total_answers"] == 4
    assert stats["accuracy"] == 50.0
    assert stats["average_score"] == 45.0
    assert stats["best_streak"] == 1
