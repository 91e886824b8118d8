from __future__ import annotations

from dataclasses import dataclass

from app.game.challenges.constants import (
    WIN_CONDITION_SCORE,
    WIN_CONDITION_TIE,
    WIN_CONDITION_TIME,
)


@dataclass(frozen=True, slots=True)
class WinnerDecision:
    winner_user_id: int | None
    win_condition: str


def determine_winner(
    *,
    first_user_id: int,
    first_score: int,
    first_time_spent_seconds: int,
    second_user_id: int,
    second_score: int,
    second_time_spent_seconds: int,
) -> WinnerDecision:
    """Higher score wins; equal scores go to the lower cumulative time; otherwise a tie."""
    if first_score != second_score:
        winner = first_user_id if first_score > second_score else second_user_id
        return WinnerDecision(winner_user_id=winner, win_condition=WIN_CONDITION_SCORE)
    if first_time_spent_seconds != second_time_spent_seconds:
        winner = (
            first_user_id
            if first_time_spent_seconds < second_time_spent_seconds
            else second_user_id
        )
        return WinnerDecision(winner_user_id=winner, win_condition=WIN_CONDITION_TIME)
    return WinnerDecision(winner_user_id=None, win_condition=WIN_CONDITION_TIE)
