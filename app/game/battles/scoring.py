from __future__ import annotations

from dataclasses import dataclass

from app.game.battles.constants import (
    BASE_POINTS_BY_DIFFICULTY,
    BASE_POINTS_DEFAULT,
    RAINDROP_BANDS_BY_DIFFICULTY,
    RAINDROP_BANDS_DEFAULT,
    TIME_BONUS_POINTS_PER_SECOND,
)
from app.game.questions.types import BattleQuestion


@dataclass(frozen=True, slots=True)
class ScoredAnswer:
    is_correct: bool
    time_spent_seconds: int
    points: int
    raindrops: int


def clamp_time_spent(time_spent_seconds: int, *, allowed_seconds: int) -> int:
    return min(max(0, int(time_spent_seconds)), allowed_seconds)


def base_points(difficulty: str) -> int:
    return BASE_POINTS_BY_DIFFICULTY.get(difficulty, BASE_POINTS_DEFAULT)


def time_bonus(time_spent_seconds: int, *, allowed_seconds: int) -> int:
    return max(0, (allowed_seconds - time_spent_seconds) * TIME_BONUS_POINTS_PER_SECOND)


def raindrops_for_answer(difficulty: str, time_spent_seconds: int, *, allowed_seconds: int) -> int:
    fast, medium, slow = RAINDROP_BANDS_BY_DIFFICULTY.get(difficulty, RAINDROP_BANDS_DEFAULT)
    # Thirds of the window, compared without division.
    if time_spent_seconds * 3 <= allowed_seconds:
        return fast
    if time_spent_seconds * 3 <= allowed_seconds * 2:
        return medium
    return slow


def score_answer(
    question: BattleQuestion,
    *,
    selected_answer: str,
    time_spent_seconds: int,
    allowed_seconds: int,
) -> ScoredAnswer:
    clamped = clamp_time_spent(time_spent_seconds, allowed_seconds=allowed_seconds)
    is_correct = selected_answer == question.correct_answer
    if not is_correct:
        return ScoredAnswer(is_correct=False, time_spent_seconds=clamped, points=0, raindrops=0)
    return ScoredAnswer(
        is_correct=True,
        time_spent_seconds=clamped,
        points=base_points(question.difficulty)
        + time_bonus(clamped, allowed_seconds=allowed_seconds),
        raindrops=raindrops_for_answer(
            question.difficulty,
            clamped,
            allowed_seconds=allowed_seconds,
        ),
    )
