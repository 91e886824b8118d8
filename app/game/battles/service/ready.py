from __future__ import annotations

from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repo.challenges_repo import ChallengesRepo
from app.game.battles import transitions
from app.game.battles.constants import BATTLE_EVENT_JOIN, BATTLE_EVENT_START
from app.game.battles.errors import BattleNotFoundError
from app.game.battles.service.internal import (
    _append_event,
    _build_battle_snapshot,
    _load_battle_for_update,
    _publish_battle_event,
    _require_participant,
)
from app.game.battles.types import MarkReadyResult
from app.game.challenges import transitions as challenge_transitions
from app.game.notifications import BattleNotifier
from app.game.state_machine import apply_transition

logger = structlog.get_logger(__name__)


async def mark_ready(
    session: AsyncSession,
    *,
    battle_id: UUID,
    user_id: int,
    now_utc: datetime,
    notifier: BattleNotifier,
) -> MarkReadyResult:
    battle = await _load_battle_for_update(session, battle_id)
    role = _require_participant(battle, user_id)
    if getattr(battle, f"{role}_ready"):
        return MarkReadyResult(snapshot=_build_battle_snapshot(battle), idempotent_replay=True)

    transitions.START.ensure_allowed(battle.status)
    setattr(battle, f"{role}_ready", True)
    setattr(battle, f"{role}_connected", True)
    battle.updated_at = now_utc
    await _append_event(
        session,
        battle=battle,
        event_type=BATTLE_EVENT_JOIN,
        user_id=user_id,
        happened_at=now_utc,
        payload={"role": role},
    )

    if not (battle.challenger_ready and battle.challenged_ready):
        await _publish_battle_event(
            session,
            notifier=notifier,
            battle=battle,
            event_type="battle_participant_ready",
            payload={"user_id": user_id},
        )
        return MarkReadyResult(snapshot=_build_battle_snapshot(battle))

    challenge = await ChallengesRepo.get_by_id_for_update(session, battle.challenge_id)
    if challenge is None:
        raise BattleNotFoundError

    apply_transition(battle, transitions.START, now_utc=now_utc)
    battle.started_at = now_utc
    battle.current_question_index = 0
    battle.question_started_at = now_utc
    apply_transition(challenge, challenge_transitions.START, now_utc=now_utc)
    challenge.started_at = now_utc

    await _append_event(
        session,
        battle=battle,
        event_type=BATTLE_EVENT_START,
        user_id=None,
        happened_at=now_utc,
        payload={"total_questions": battle.total_questions},
    )
    await _publish_battle_event(
        session,
        notifier=notifier,
        battle=battle,
        event_type="battle_started",
    )
    logger.info(
        "battle_started",
        battle_id=str(battle.id),
        challenge_id=str(challenge.id),
    )
    return MarkReadyResult(snapshot=_build_battle_snapshot(battle), started_now=True)
