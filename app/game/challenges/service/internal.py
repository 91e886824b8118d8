from __future__ import annotations

from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.db.models.challenges import Challenge
from app.db.models.users import User
from app.db.repo.challenges_repo import ChallengesRepo
from app.game.challenges import transitions
from app.game.challenges.constants import (
    CHALLENGE_STATUS_COMPLETED,
    USER_ROLE_STUDENT,
    USER_STATUS_ACTIVE,
)
from app.game.challenges.errors import ChallengeNotFoundError
from app.game.challenges.types import ChallengePartyResult, ChallengeSnapshot
from app.game.notifications import AGGREGATE_CHALLENGE, BattleNotifier
from app.game.state_machine import apply_transition


def _challenge_expires_at(*, now_utc: datetime) -> datetime:
    return now_utc + timedelta(seconds=get_settings().challenge_pending_ttl_seconds)


def _is_active_student(user: User) -> bool:
    return user.role == USER_ROLE_STUDENT and user.status == USER_STATUS_ACTIVE


def _expire_challenge_if_due(*, challenge: Challenge, now_utc: datetime) -> bool:
    if not transitions.EXPIRE.allows(challenge.status):
        return False
    if challenge.expires_at > now_utc:
        return False
    apply_transition(challenge, transitions.EXPIRE, now_utc=now_utc)
    challenge.winner_user_id = None
    return True


def _party_result(challenge: Challenge, role: str) -> ChallengePartyResult:
    return ChallengePartyResult(
        score=int(getattr(challenge, f"{role}_score")),
        raindrops=int(getattr(challenge, f"{role}_raindrops")),
        time_spent_seconds=int(getattr(challenge, f"{role}_time_spent_seconds")),
        answers=list(getattr(challenge, f"{role}_answers") or []),
    )


def _build_challenge_snapshot(
    challenge: Challenge,
    *,
    battle_id: UUID | None = None,
) -> ChallengeSnapshot:
    completed = challenge.status == CHALLENGE_STATUS_COMPLETED
    return ChallengeSnapshot(
        challenge_id=challenge.id,
        challenger_user_id=challenge.challenger_user_id,
        challenged_user_id=challenge.challenged_user_id,
        grade=challenge.grade,
        subject=challenge.subject,
        difficulty=challenge.difficulty,
        question_ids=tuple(str(question_id) for question_id in challenge.question_ids),
        wager_raindrops=challenge.wager_raindrops,
        message=challenge.message,
        time_limit_seconds=challenge.time_limit_seconds,
        status=challenge.status,
        expires_at=challenge.expires_at,
        created_at=challenge.created_at,
        accepted_at=challenge.accepted_at,
        started_at=challenge.started_at,
        completed_at=challenge.completed_at,
        winner_user_id=challenge.winner_user_id,
        win_condition=challenge.win_condition,
        challenger_result=_party_result(challenge, "challenger") if completed else None,
        challenged_result=_party_result(challenge, "challenged") if completed else None,
        battle_id=battle_id,
    )


async def _load_challenge_for_update(session: AsyncSession, challenge_id: UUID) -> Challenge:
    challenge = await ChallengesRepo.get_by_id_for_update(session, challenge_id)
    if challenge is None:
        raise ChallengeNotFoundError
    return challenge


async def _publish_challenge_event(
    session: AsyncSession,
    *,
    notifier: BattleNotifier,
    challenge: Challenge,
    event_type: str,
    payload: dict[str, object] | None = None,
) -> None:
    await notifier.publish(
        session,
        event_type=event_type,
        aggregate_type=AGGREGATE_CHALLENGE,
        aggregate_id=str(challenge.id),
        recipient_user_ids=(challenge.challenger_user_id, challenge.challenged_user_id),
        payload={
            "challenge_id": str(challenge.id),
            "status": challenge.status,
            "challenger_user_id": challenge.challenger_user_id,
            "challenged_user_id": challenge.challenged_user_id,
            **(payload or {}),
        },
    )


async def _expire_and_publish_if_due(
    session: AsyncSession,
    *,
    notifier: BattleNotifier,
    challenge: Challenge,
    now_utc: datetime,
) -> bool:
    if not _expire_challenge_if_due(challenge=challenge, now_utc=now_utc):
        return False
    await _publish_challenge_event(
        session,
        notifier=notifier,
        challenge=challenge,
        event_type="challenge_expired",
        payload={"expires_at": challenge.expires_at.isoformat()},
    )
    return True
