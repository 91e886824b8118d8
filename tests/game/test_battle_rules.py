from __future__ import annotations

from dataclasses import dataclass

from app.game.battles.rules import (
    all_questions_answered,
    fold_answers,
    is_valid_question_order,
    next_question_index,
)


@dataclass
class _Answer:
    is_correct: bool
    time_spent_seconds: int
    points: int
    raindrops: int


def test_fold_answers_aggregates_ledger() -> None:
    aggregate = fold_answers(
        [
            _Answer(is_correct=True, time_spent_seconds=4, points=132, raindrops=4),
            _Answer(is_correct=False, time_spent_seconds=9, points=0, raindrops=0),
            _Answer(is_correct=True, time_spent_seconds=20, points=100, raindrops=2),
        ]
    )

    assert aggregate.score == 232
    assert aggregate.raindrops == 6
    assert aggregate.correct_answers == 2
    assert aggregate.answered_count == 3
    assert aggregate.time_spent_seconds == 33
    assert aggregate.average_time_seconds == 11.0


def test_fold_answers_on_empty_ledger() -> None:
    aggregate = fold_answers([])

    assert aggregate.score == 0
    assert aggregate.answered_count == 0
    assert aggregate.average_time_seconds == 0.0


def test_fold_answers_is_order_independent() -> None:
    answers = [
        _Answer(is_correct=True, time_spent_seconds=3, points=134, raindrops=4),
        _Answer(is_correct=True, time_spent_seconds=7, points=126, raindrops=4),
    ]

    assert fold_answers(answers) == fold_answers(list(reversed(answers)))


def test_is_valid_question_order_is_one_based() -> None:
    assert is_valid_question_order(1, total_questions=5) is True
    assert is_valid_question_order(5, total_questions=5) is True
    assert is_valid_question_order(0, total_questions=5) is False
    assert is_valid_question_order(6, total_questions=5) is False


def test_next_question_index_waits_for_both_sides() -> None:
    index = next_question_index(
        current_index=0,
        total_questions=5,
        answered_orders={"challenger": {1, 2}, "challenged": set()},
    )

    assert index == 0


def test_next_question_index_advances_past_common_answers() -> None:
    index = next_question_index(
        current_index=0,
        total_questions=5,
        answered_orders={"challenger": {1, 2, 3}, "challenged": {1, 2}},
    )

    assert index == 2


def test_next_question_index_never_moves_back() -> None:
    index = next_question_index(
        current_index=3,
        total_questions=5,
        answered_orders={"challenger": {1}, "challenged": {1}},
    )

    assert index == 3


def test_next_question_index_stops_at_total() -> None:
    everything = {1, 2, 3}
    index = next_question_index(
        current_index=1,
        total_questions=3,
        answered_orders={"challenger": everything, "challenged": everything},
    )

    assert index == 3


def test_all_questions_answered_requires_both_sides() -> None:
    assert all_questions_answered(
        total_questions=2,
        answered_orders={"challenger": {1, 2}, "challenged": {1, 2}},
    )
    assert not all_questions_answered(
        total_questions=2,
        answered_orders={"challenger": {1, 2}, "challenged": {2}},
    )
