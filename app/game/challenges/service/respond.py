from __future__ import annotations

from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repo.challenges_repo import ChallengesRepo
from app.economy.raindrops.service import RaindropService
from app.game.battles.service.internal import _create_battle_row
from app.game.challenges import transitions
from app.game.challenges.errors import (
    ChallengeExpiredError,
    InsufficientRaindropsError,
    NotChallengedPartyError,
    NotChallengerPartyError,
)
from app.game.challenges.types import AcceptChallengeResult, ChallengeSnapshot
from app.game.notifications import BattleNotifier
from app.game.state_machine import apply_transition

from .internal import (
    _build_challenge_snapshot,
    _expire_and_publish_if_due,
    _load_challenge_for_update,
    _publish_challenge_event,
)

logger = structlog.get_logger(__name__)


async def accept_challenge(
    session: AsyncSession,
    *,
    challenge_id: UUID,
    user_id: int,
    now_utc: datetime,
    notifier: BattleNotifier,
) -> AcceptChallengeResult:
    challenge = await _load_challenge_for_update(session, challenge_id)
    if challenge.challenged_user_id != user_id:
        raise NotChallengedPartyError
    if await _expire_and_publish_if_due(
        session,
        notifier=notifier,
        challenge=challenge,
        now_utc=now_utc,
    ):
        raise ChallengeExpiredError
    transitions.ACCEPT.ensure_allowed(challenge.status)

    balance = await RaindropService.total_raindrops(session, student_user_id=user_id)
    if balance < challenge.wager_raindrops:
        raise InsufficientRaindropsError(balance=balance, required=challenge.wager_raindrops)

    apply_transition(challenge, transitions.ACCEPT, now_utc=now_utc)
    challenge.accepted_at = now_utc
    battle = await _create_battle_row(session, challenge=challenge, now_utc=now_utc)

    await _publish_challenge_event(
        session,
        notifier=notifier,
        challenge=challenge,
        event_type="challenge_accepted",
        payload={"battle_id": str(battle.id)},
    )
    logger.info(
        "challenge_accepted",
        challenge_id=str(challenge.id),
        battle_id=str(battle.id),
        challenged_user_id=user_id,
    )
    return AcceptChallengeResult(
        challenge=_build_challenge_snapshot(challenge, battle_id=battle.id),
        battle_id=battle.id,
    )


async def decline_challenge(
    session: AsyncSession,
    *,
    challenge_id: UUID,
    user_id: int,
    now_utc: datetime,
    notifier: BattleNotifier,
) -> ChallengeSnapshot:
    challenge = await _load_challenge_for_update(session, challenge_id)
    if challenge.challenged_user_id != user_id:
        raise NotChallengedPartyError
    if await _expire_and_publish_if_due(
        session,
        notifier=notifier,
        challenge=challenge,
        now_utc=now_utc,
    ):
        raise ChallengeExpiredError

    apply_transition(challenge, transitions.DECLINE, now_utc=now_utc)
    await _publish_challenge_event(
        session,
        notifier=notifier,
        challenge=challenge,
        event_type="challenge_declined",
    )
    logger.info("challenge_declined", challenge_id=str(challenge.id), challenged_user_id=user_id)
    return _build_challenge_snapshot(challenge)


async def cancel_challenge(
    session: AsyncSession,
    *,
    challenge_id: UUID,
    user_id: int,
    now_utc: datetime,
    notifier: BattleNotifier,
) -> ChallengeSnapshot:
    challenge = await _load_challenge_for_update(session, challenge_id)
    if challenge.challenger_user_id != user_id:
        raise NotChallengerPartyError
    if await _expire_and_publish_if_due(
        session,
        notifier=notifier,
        challenge=challenge,
        now_utc=now_utc,
    ):
        raise ChallengeExpiredError

    apply_transition(challenge, transitions.CANCEL, now_utc=now_utc)
    snapshot = _build_challenge_snapshot(challenge)
    await _publish_challenge_event(
        session,
        notifier=notifier,
        challenge=challenge,
        event_type="challenge_canceled",
    )
    await ChallengesRepo.delete(session, challenge=challenge)
    logger.info("challenge_canceled", challenge_id=str(challenge_id), challenger_user_id=user_id)
    return snapshot

