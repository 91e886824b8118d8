from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.battle_answers import BattleAnswer
from app.db.models.battles import Battle
from app.db.models.challenges import Challenge
from app.game.battles.constants import BATTLE_EVENT_COMPLETED, BATTLE_ROLES
from app.game.battles.service.internal import (
    _append_event,
    _participant_user_id,
    _publish_battle_event,
)
from app.game.challenges import transitions as challenge_transitions
from app.game.notifications import BattleNotifier
from app.game.state_machine import StatusTransition, apply_transition

logger = structlog.get_logger(__name__)


def _answer_log(answers: Sequence[BattleAnswer], *, user_id: int) -> list[dict[str, object]]:
    return [
        {
            "question_order": answer.question_order,
            "question_id": answer.question_id,
            "selected_answer": answer.selected_answer,
            "is_correct": answer.is_correct,
            "time_spent_seconds": answer.time_spent_seconds,
            "points": answer.points,
            "raindrops": answer.raindrops,
        }
        for answer in sorted(answers, key=lambda item: item.question_order)
        if answer.user_id == user_id
    ]


def _write_results_to_challenge(
    *,
    battle: Battle,
    challenge: Challenge,
    answers: Sequence[BattleAnswer],
    now_utc: datetime,
) -> None:
    apply_transition(challenge, challenge_transitions.COMPLETE, now_utc=now_utc)
    challenge.winner_user_id = battle.winner_user_id
    challenge.win_condition = battle.win_reason
    challenge.completed_at = now_utc
    for role in BATTLE_ROLES:
        user_id = _participant_user_id(battle, role)
        setattr(challenge, f"{role}_score", getattr(battle, f"{role}_score"))
        setattr(challenge, f"{role}_raindrops", getattr(battle, f"{role}_raindrops"))
        setattr(
            challenge,
            f"{role}_time_spent_seconds",
            getattr(battle, f"{role}_time_spent_seconds"),
        )
        setattr(challenge, f"{role}_answers", _answer_log(answers, user_id=user_id))


async def complete_battle(
    session: AsyncSession,
    *,
    battle: Battle,
    challenge: Challenge,
    transition: StatusTransition,
    winner_user_id: int | None,
    win_reason: str,
    forfeited_by_user_id: int | None,
    answers: Sequence[BattleAnswer],
    now_utc: datetime,
    notifier: BattleNotifier,
) -> None:
    """Finishes the battle and copies the outcome onto its challenge in the same transaction."""
    apply_transition(battle, transition, now_utc=now_utc)
    started_at = battle.started_at or battle.created_at
    battle.completed_at = now_utc
    battle.duration_seconds = max(0, int((now_utc - started_at).total_seconds()))
    battle.winner_user_id = winner_user_id
    battle.win_reason = win_reason
    battle.forfeited_by_user_id = forfeited_by_user_id

    _write_results_to_challenge(
        battle=battle,
        challenge=challenge,
        answers=answers,
        now_utc=now_utc,
    )

    await _append_event(
        session,
        battle=battle,
        event_type=BATTLE_EVENT_COMPLETED,
        user_id=None,
        happened_at=now_utc,
        payload={
            "winner_user_id": winner_user_id,
            "win_reason": win_reason,
            "challenger_score": battle.challenger_score,
            "challenged_score": battle.challenged_score,
        },
    )
    await _publish_battle_event(
        session,
        notifier=notifier,
        battle=battle,
        event_type="battle_completed",
        payload={
            "winner_user_id": winner_user_id,
            "win_reason": win_reason,
        },
    )
    logger.info(
        "battle_completed",
        battle_id=str(battle.id),
        challenge_id=str(challenge.id),
        winner_user_id=winner_user_id,
        win_reason=win_reason,
        duration_seconds=battle.duration_seconds,
    )
