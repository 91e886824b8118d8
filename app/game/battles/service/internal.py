from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.db.models.battles import Battle
from app.db.models.challenges import Challenge
from app.db.repo.battle_events_repo import BattleEventsRepo
from app.db.repo.battles_repo import BattlesRepo
from app.game.battles.constants import (
    BATTLE_STATUS_COMPLETED,
    BATTLE_STATUS_WAITING,
    ROLE_CHALLENGED,
    ROLE_CHALLENGER,
)
from app.game.battles.errors import BattleNotFoundError, NotParticipantError
from app.game.battles.types import (
    BattleResults,
    BattleSnapshot,
    LiveAggregate,
    ParticipantProgress,
)
from app.game.notifications import AGGREGATE_BATTLE, BattleNotifier


def _participant_role(battle: Battle, user_id: int) -> str | None:
    if battle.challenger_user_id == user_id:
        return ROLE_CHALLENGER
    if battle.challenged_user_id == user_id:
        return ROLE_CHALLENGED
    return None


def _require_participant(battle: Battle, user_id: int) -> str:
    role = _participant_role(battle, user_id)
    if role is None:
        raise NotParticipantError
    return role


def _opponent_role(role: str) -> str:
    return ROLE_CHALLENGED if role == ROLE_CHALLENGER else ROLE_CHALLENGER


def _participant_user_id(battle: Battle, role: str) -> int:
    return int(getattr(battle, f"{role}_user_id"))


def _participant_progress(battle: Battle, role: str) -> ParticipantProgress:
    return ParticipantProgress(
        user_id=_participant_user_id(battle, role),
        role=role,
        ready=bool(getattr(battle, f"{role}_ready")),
        connected=bool(getattr(battle, f"{role}_connected")),
        score=int(getattr(battle, f"{role}_score")),
        raindrops=int(getattr(battle, f"{role}_raindrops")),
        correct_answers=int(getattr(battle, f"{role}_correct_answers")),
        answered_count=int(getattr(battle, f"{role}_answered_count")),
        time_spent_seconds=int(getattr(battle, f"{role}_time_spent_seconds")),
        average_time_seconds=float(getattr(battle, f"{role}_average_time_seconds")),
    )


def _apply_aggregate(battle: Battle, role: str, aggregate: LiveAggregate) -> None:
    setattr(battle, f"{role}_score", aggregate.score)
    setattr(battle, f"{role}_raindrops", aggregate.raindrops)
    setattr(battle, f"{role}_correct_answers", aggregate.correct_answers)
    setattr(battle, f"{role}_answered_count", aggregate.answered_count)
    setattr(battle, f"{role}_time_spent_seconds", aggregate.time_spent_seconds)
    setattr(battle, f"{role}_average_time_seconds", aggregate.average_time_seconds)


def _build_battle_results(battle: Battle) -> BattleResults | None:
    if battle.status != BATTLE_STATUS_COMPLETED or battle.win_reason is None:
        return None
    return BattleResults(
        winner_user_id=battle.winner_user_id,
        win_reason=battle.win_reason,
        challenger_score=battle.challenger_score,
        challenged_score=battle.challenged_score,
        challenger_raindrops=battle.challenger_raindrops,
        challenged_raindrops=battle.challenged_raindrops,
        duration_seconds=int(battle.duration_seconds or 0),
        forfeited_by_user_id=battle.forfeited_by_user_id,
    )


def _build_battle_snapshot(battle: Battle) -> BattleSnapshot:
    return BattleSnapshot(
        battle_id=battle.id,
        challenge_id=battle.challenge_id,
        status=battle.status,
        difficulty=battle.difficulty,
        total_questions=battle.total_questions,
        seconds_per_question=battle.seconds_per_question,
        current_question_index=battle.current_question_index,
        question_started_at=battle.question_started_at,
        challenger=_participant_progress(battle, ROLE_CHALLENGER),
        challenged=_participant_progress(battle, ROLE_CHALLENGED),
        started_at=battle.started_at,
        completed_at=battle.completed_at,
        results=_build_battle_results(battle),
    )


async def _load_battle_for_update(session: AsyncSession, battle_id: UUID) -> Battle:
    battle = await BattlesRepo.get_by_id_for_update(session, battle_id)
    if battle is None:
        raise BattleNotFoundError
    return battle


async def _create_battle_row(
    session: AsyncSession,
    *,
    challenge: Challenge,
    now_utc: datetime,
) -> Battle:
    question_ids = [str(question_id) for question_id in challenge.question_ids]
    return await BattlesRepo.create(
        session,
        battle=Battle(
            id=uuid4(),
            challenge_id=challenge.id,
            status=BATTLE_STATUS_WAITING,
            difficulty=challenge.difficulty,
            question_ids=question_ids,
            total_questions=len(question_ids),
            seconds_per_question=get_settings().battle_seconds_per_question,
            current_question_index=0,
            question_started_at=None,
            challenger_user_id=challenge.challenger_user_id,
            challenger_ready=False,
            challenger_connected=False,
            challenger_score=0,
            challenger_raindrops=0,
            challenger_correct_answers=0,
            challenger_answered_count=0,
            challenger_time_spent_seconds=0,
            challenger_average_time_seconds=0.0,
            challenged_user_id=challenge.challenged_user_id,
            challenged_ready=False,
            challenged_connected=False,
            challenged_score=0,
            challenged_raindrops=0,
            challenged_correct_answers=0,
            challenged_answered_count=0,
            challenged_time_spent_seconds=0,
            challenged_average_time_seconds=0.0,
            created_at=now_utc,
            updated_at=now_utc,
        ),
    )


async def _append_event(
    session: AsyncSession,
    *,
    battle: Battle,
    event_type: str,
    user_id: int | None,
    happened_at: datetime,
    payload: dict[str, object] | None = None,
) -> None:
    await BattleEventsRepo.create(
        session,
        battle_id=battle.id,
        event_type=event_type,
        user_id=user_id,
        payload=payload or {},
        happened_at=happened_at,
    )


async def _publish_battle_event(
    session: AsyncSession,
    *,
    notifier: BattleNotifier,
    battle: Battle,
    event_type: str,
    payload: dict[str, object] | None = None,
) -> None:
    await notifier.publish(
        session,
        event_type=event_type,
        aggregate_type=AGGREGATE_BATTLE,
        aggregate_id=str(battle.id),
        recipient_user_ids=(battle.challenger_user_id, battle.challenged_user_id),
        payload={
            "battle_id": str(battle.id),
            "challenge_id": str(battle.challenge_id),
            "status": battle.status,
            **(payload or {}),
        },
    )
