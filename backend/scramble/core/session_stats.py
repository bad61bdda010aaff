"""Session Stats: pure computation of summary statistics from SessionState.

Invariants:
    - All inputs come from SessionState fields (no IO)
    - Never raises: empty sessions report zeros
"""

from scramble.core.session_state import SessionState


def compute_session_stats(state: SessionState) -> dict:
    """Compute summary statistics from SessionState. Pure, no IO."""
    correct = state.correct_answers
    total = state.total_answers
    return {
        "rounds_played": state.round_number,
        "score": state.score,
        "current_streak": state.streak_count,
        "best_streak": state.best_streak,
        "correct_answers": correct,
        "total_answers": total,
        "accuracy": round(correct / total * 100, 1) if total else 0.0,
        "average_score": round(state.score / correct, 1) if correct else 0.0,
    }
