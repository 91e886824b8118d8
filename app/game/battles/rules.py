from __future__ import annotations

from collections.abc import Iterable, Mapping, Set
from typing import Protocol

from app.game.battles.types import LiveAggregate


class ScoredAnswerRow(Protocol):
    is_correct: bool
    time_spent_seconds: int
    points: int
    raindrops: int


def fold_answers(answers: Iterable[ScoredAnswerRow]) -> LiveAggregate:
    score = 0
    raindrops = 0
    correct = 0
    answered = 0
    time_spent = 0
    for answer in answers:
        score += answer.points
        raindrops += answer.raindrops
        correct += 1 if answer.is_correct else 0
        answered += 1
        time_spent += answer.time_spent_seconds
    return LiveAggregate(
        score=score,
        raindrops=raindrops,
        correct_answers=correct,
        answered_count=answered,
        time_spent_seconds=time_spent,
        average_time_seconds=round(time_spent / answered, 2) if answered else 0.0,
    )


def is_valid_question_order(question_order: int, *, total_questions: int) -> bool:
    return 1 <= question_order <= total_questions


def next_question_index(
    *,
    current_index: int,
    total_questions: int,
    answered_orders: Mapping[str, Set[int]],
) -> int:
    """Moves the cursor past every question both sides have answered; never moves back."""
    index = current_index
    while index < total_questions and all(
        (index + 1) in orders for orders in answered_orders.values()
    ):
        index += 1
    return index


def all_questions_answered(*, total_questions: int, answered_orders: Mapping[str, Set[int]]) -> bool:
    required = set(range(1, total_questions + 1))
    return all(required <= set(orders) for orders in answered_orders.values())
