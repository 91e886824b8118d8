from __future__ import annotations

from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repo.battle_answers_repo import BattleAnswersRepo
from app.db.repo.challenges_repo import ChallengesRepo
from app.game.battles import transitions
from app.game.battles.constants import BATTLE_EVENT_FORFEITED
from app.game.battles.errors import BattleNotFoundError
from app.game.battles.service.completion import complete_battle
from app.game.battles.service.internal import (
    _append_event,
    _build_battle_snapshot,
    _load_battle_for_update,
    _opponent_role,
    _participant_user_id,
    _require_participant,
)
from app.game.battles.types import ForfeitResult
from app.game.challenges.constants import WIN_CONDITION_FORFEIT
from app.game.notifications import BattleNotifier

logger = structlog.get_logger(__name__)


async def forfeit_battle(
    session: AsyncSession,
    *,
    battle_id: UUID,
    user_id: int,
    now_utc: datetime,
    notifier: BattleNotifier,
) -> ForfeitResult:
    battle = await _load_battle_for_update(session, battle_id)
    role = _require_participant(battle, user_id)
    transitions.FORFEIT.ensure_allowed(battle.status)

    challenge = await ChallengesRepo.get_by_id_for_update(session, battle.challenge_id)
    if challenge is None:
        raise BattleNotFoundError

    winner_user_id = _participant_user_id(battle, _opponent_role(role))
    answers = await BattleAnswersRepo.list_for_battle(session, battle_id=battle.id)
    await _append_event(
        session,
        battle=battle,
        event_type=BATTLE_EVENT_FORFEITED,
        user_id=user_id,
        happened_at=now_utc,
        payload={"previous_status": battle.status},
    )
    await complete_battle(
        session,
        battle=battle,
        challenge=challenge,
        transition=transitions.FORFEIT,
        winner_user_id=winner_user_id,
        win_reason=WIN_CONDITION_FORFEIT,
        forfeited_by_user_id=user_id,
        answers=answers,
        now_utc=now_utc,
        notifier=notifier,
    )
    logger.info(
        "battle_forfeited",
        battle_id=str(battle.id),
        forfeited_by_user_id=user_id,
        winner_user_id=winner_user_id,
    )
    return ForfeitResult(snapshot=_build_battle_snapshot(battle), winner_user_id=winner_user_id)
