from __future__ import annotations

from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.battle_answers import BattleAnswer
from app.db.repo.battle_answers_repo import BattleAnswersRepo
from app.db.repo.challenges_repo import ChallengesRepo
from app.game.battles import transitions
from app.game.battles.constants import (
    BATTLE_EVENT_ANSWER_SUBMITTED,
    BATTLE_EVENT_QUESTION_ADVANCE,
    BATTLE_ROLES,
)
from app.game.battles.errors import (
    AlreadyAnsweredError,
    BattleNotFoundError,
    InvalidQuestionOrderError,
)
from app.game.battles.rules import (
    all_questions_answered,
    fold_answers,
    is_valid_question_order,
    next_question_index,
)
from app.game.battles.scoring import score_answer
from app.game.battles.service.completion import complete_battle
from app.game.battles.service.internal import (
    _append_event,
    _apply_aggregate,
    _build_battle_results,
    _load_battle_for_update,
    _opponent_role,
    _participant_progress,
    _participant_user_id,
    _publish_battle_event,
    _require_participant,
)
from app.game.battles.types import SubmitAnswerResult
from app.game.challenges.rules import determine_winner
from app.game.notifications import BattleNotifier
from app.game.questions.source import QuestionSource

logger = structlog.get_logger(__name__)


async def submit_answer(
    session: AsyncSession,
    *,
    battle_id: UUID,
    user_id: int,
    question_order: int,
    selected_answer: str,
    time_spent_seconds: int,
    now_utc: datetime,
    question_source: QuestionSource,
    notifier: BattleNotifier,
) -> SubmitAnswerResult:
    battle = await _load_battle_for_update(session, battle_id)
    role = _require_participant(battle, user_id)
    transitions.ANSWER.ensure_allowed(battle.status)
    if not is_valid_question_order(question_order, total_questions=battle.total_questions):
        raise InvalidQuestionOrderError(
            question_order=question_order,
            total_questions=battle.total_questions,
        )
    existing = await BattleAnswersRepo.get_for_slot(
        session,
        battle_id=battle.id,
        user_id=user_id,
        question_order=question_order,
    )
    if existing is not None:
        raise AlreadyAnsweredError

    question_id = str(battle.question_ids[question_order - 1])
    questions = await question_source.get_questions(session, question_ids=(question_id,))
    question = questions.get(question_id)
    if question is None:
        raise InvalidQuestionOrderError(
            question_order=question_order,
            total_questions=battle.total_questions,
        )

    scored = score_answer(
        question,
        selected_answer=selected_answer,
        time_spent_seconds=time_spent_seconds,
        allowed_seconds=battle.seconds_per_question,
    )
    try:
        await BattleAnswersRepo.create(
            session,
            answer=BattleAnswer(
                battle_id=battle.id,
                user_id=user_id,
                question_order=question_order,
                question_id=question_id,
                selected_answer=selected_answer,
                is_correct=scored.is_correct,
                time_spent_seconds=scored.time_spent_seconds,
                points=scored.points,
                raindrops=scored.raindrops,
                submitted_at=now_utc,
            ),
        )
    except IntegrityError as exc:
        raise AlreadyAnsweredError from exc

    answers = await BattleAnswersRepo.list_for_battle(session, battle_id=battle.id)
    answers_by_role = {
        participant_role: [
            answer
            for answer in answers
            if answer.user_id == _participant_user_id(battle, participant_role)
        ]
        for participant_role in BATTLE_ROLES
    }
    _apply_aggregate(battle, role, fold_answers(answers_by_role[role]))
    battle.updated_at = now_utc

    await _append_event(
        session,
        battle=battle,
        event_type=BATTLE_EVENT_ANSWER_SUBMITTED,
        user_id=user_id,
        happened_at=now_utc,
        payload={
            "question_order": question_order,
            "is_correct": scored.is_correct,
            "points": scored.points,
            "raindrops": scored.raindrops,
        },
    )

    answered_orders = {
        participant_role: {answer.question_order for answer in role_answers}
        for participant_role, role_answers in answers_by_role.items()
    }
    advanced_index = next_question_index(
        current_index=battle.current_question_index,
        total_questions=battle.total_questions,
        answered_orders=answered_orders,
    )
    if advanced_index > battle.current_question_index:
        battle.current_question_index = advanced_index
        if advanced_index < battle.total_questions:
            battle.question_started_at = now_utc
            await _append_event(
                session,
                battle=battle,
                event_type=BATTLE_EVENT_QUESTION_ADVANCE,
                user_id=None,
                happened_at=now_utc,
                payload={"current_question_index": advanced_index},
            )

    battle_completed = all_questions_answered(
        total_questions=battle.total_questions,
        answered_orders=answered_orders,
    )
    if battle_completed:
        challenge = await ChallengesRepo.get_by_id_for_update(session, battle.challenge_id)
        if challenge is None:
            raise BattleNotFoundError
        decision = determine_winner(
            first_user_id=battle.challenger_user_id,
            first_score=battle.challenger_score,
            first_time_spent_seconds=battle.challenger_time_spent_seconds,
            second_user_id=battle.challenged_user_id,
            second_score=battle.challenged_score,
            second_time_spent_seconds=battle.challenged_time_spent_seconds,
        )
        await complete_battle(
            session,
            battle=battle,
            challenge=challenge,
            transition=transitions.COMPLETE,
            winner_user_id=decision.winner_user_id,
            win_reason=decision.win_condition,
            forfeited_by_user_id=None,
            answers=answers,
            now_utc=now_utc,
            notifier=notifier,
        )
    else:
        await _publish_battle_event(
            session,
            notifier=notifier,
            battle=battle,
            event_type="battle_progress",
            payload={
                "user_id": user_id,
                "question_order": question_order,
                "current_question_index": battle.current_question_index,
            },
        )

    logger.info(
        "battle_answer_submitted",
        battle_id=str(battle.id),
        user_id=user_id,
        question_order=question_order,
        is_correct=scored.is_correct,
        points=scored.points,
    )
    return SubmitAnswerResult(
        battle_id=battle.id,
        question_order=question_order,
        is_correct=scored.is_correct,
        points=scored.points,
        raindrops=scored.raindrops,
        explanation=question.explanation,
        status=battle.status,
        current_question_index=battle.current_question_index,
        my_progress=_participant_progress(battle, role),
        opponent_progress=_participant_progress(battle, _opponent_role(role)),
        battle_completed=battle_completed,
        results=_build_battle_results(battle),
    )
