from __future__ import annotations

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repo.battle_answers_repo import BattleAnswersRepo
from app.db.repo.battle_events_repo import BattleEventsRepo
from app.db.repo.battles_repo import BattlesRepo
from app.game.battles.errors import BattleNotFoundError
from app.game.battles.service.internal import (
    _build_battle_results,
    _build_battle_snapshot,
    _opponent_role,
    _participant_progress,
    _require_participant,
)
from app.game.battles.types import (
    BattleAnswerView,
    BattleDetails,
    BattleEventView,
    BattleQuestionView,
    LiveStatus,
)
from app.game.questions.source import QuestionSource


async def get_battle_details(
    session: AsyncSession,
    *,
    battle_id: UUID,
    user_id: int,
    question_source: QuestionSource,
) -> BattleDetails:
    battle = await BattlesRepo.get_by_id(session, battle_id)
    if battle is None:
        raise BattleNotFoundError
    _require_participant(battle, user_id)

    question_ids = [str(question_id) for question_id in battle.question_ids]
    questions = await question_source.get_questions(session, question_ids=question_ids)
    question_views = [
        BattleQuestionView(
            order=order,
            question_id=question_id,
            text=questions[question_id].text,
            options=questions[question_id].options,
            difficulty=questions[question_id].difficulty,
        )
        for order, question_id in enumerate(question_ids, start=1)
        if question_id in questions
    ]
    answers = await BattleAnswersRepo.list_for_battle(session, battle_id=battle.id)
    events = await BattleEventsRepo.list_for_battle(session, battle_id=battle.id)
    return BattleDetails(
        snapshot=_build_battle_snapshot(battle),
        questions=question_views,
        my_answers=[
            BattleAnswerView(
                question_order=answer.question_order,
                question_id=answer.question_id,
                selected_answer=answer.selected_answer,
                is_correct=answer.is_correct,
                time_spent_seconds=answer.time_spent_seconds,
                points=answer.points,
                raindrops=answer.raindrops,
                submitted_at=answer.submitted_at,
            )
            for answer in answers
            if answer.user_id == user_id
        ],
        events=[
            BattleEventView(
                event_type=event.event_type,
                user_id=event.user_id,
                payload=dict(event.payload or {}),
                happened_at=event.happened_at,
            )
            for event in events
        ],
    )


async def get_live_status(
    session: AsyncSession,
    *,
    battle_id: UUID,
    user_id: int,
) -> LiveStatus:
    battle = await BattlesRepo.get_by_id(session, battle_id)
    if battle is None:
        raise BattleNotFoundError
    role = _require_participant(battle, user_id)
    return LiveStatus(
        battle_id=battle.id,
        status=battle.status,
        current_question_index=battle.current_question_index,
        total_questions=battle.total_questions,
        question_started_at=battle.question_started_at,
        me=_participant_progress(battle, role),
        opponent=_participant_progress(battle, _opponent_role(role)),
        results=_build_battle_results(battle),
    )
