from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.challenges import Challenge
from app.db.repo.battles_repo import BattlesRepo
from app.db.repo.challenges_repo import ChallengesRepo
from app.db.repo.users_repo import UsersRepo
from app.economy.raindrops.rules import available_tiers
from app.economy.raindrops.service import RaindropService
from app.game.challenges.constants import (
    CHALLENGE_ACTIVE_STATUSES,
    CHALLENGE_HISTORY_STATUSES,
    CHALLENGE_STATUS_COMPLETED,
    CHALLENGE_STATUS_DECLINED,
    CHALLENGE_STATUS_EXPIRED,
    CHALLENGE_STATUS_PENDING,
    USER_ROLE_STUDENT,
)
from app.game.challenges.errors import ChallengeAccessError, InvalidPartyError
from app.game.challenges.types import (
    AvailableOpponentsResult,
    BattleStats,
    ChallengeHistoryPage,
    ChallengeHistoryStats,
    ChallengeSnapshot,
    OpponentView,
    PendingChallengesResult,
)
from app.game.notifications import BattleNotifier

from .internal import (
    _build_challenge_snapshot,
    _expire_and_publish_if_due,
    _load_challenge_for_update,
)


def _is_party(challenge: Challenge, user_id: int) -> bool:
    return user_id in (challenge.challenger_user_id, challenge.challenged_user_id)


async def _expire_overdue_for_user(
    session: AsyncSession,
    *,
    user_id: int,
    now_utc: datetime,
    notifier: BattleNotifier,
) -> int:
    overdue = await ChallengesRepo.list_due_for_user_for_update(
        session,
        user_id=user_id,
        status=CHALLENGE_STATUS_PENDING,
        now_utc=now_utc,
    )
    expired = 0
    for challenge in overdue:
        if await _expire_and_publish_if_due(
            session,
            notifier=notifier,
            challenge=challenge,
            now_utc=now_utc,
        ):
            expired += 1
    return expired


async def get_challenge_for_user(
    session: AsyncSession,
    *,
    challenge_id: UUID,
    user_id: int,
    now_utc: datetime,
    notifier: BattleNotifier,
) -> ChallengeSnapshot:
    challenge = await _load_challenge_for_update(session, challenge_id)
    if not _is_party(challenge, user_id):
        raise ChallengeAccessError
    await _expire_and_publish_if_due(
        session,
        notifier=notifier,
        challenge=challenge,
        now_utc=now_utc,
    )
    battle = await BattlesRepo.get_by_challenge_id(session, challenge.id)
    return _build_challenge_snapshot(challenge, battle_id=battle.id if battle is not None else None)


async def list_available_opponents(
    session: AsyncSession,
    *,
    user_id: int,
    subject: str,
    now_utc: datetime,
    notifier: BattleNotifier,
) -> AvailableOpponentsResult:
    requester = await UsersRepo.get_by_id(session, user_id)
    if requester is None or requester.grade is None:
        raise InvalidPartyError

    await _expire_overdue_for_user(session, user_id=user_id, now_utc=now_utc, notifier=notifier)

    busy_user_ids = await ChallengesRepo.list_partner_user_ids(
        session,
        user_id=user_id,
        statuses=tuple(CHALLENGE_ACTIVE_STATUSES),
    )
    candidates = await UsersRepo.list_active_by_role_and_grade(
        session,
        role=USER_ROLE_STUDENT,
        grade=requester.grade,
        exclude_user_ids=(user_id, *sorted(busy_user_ids)),
    )
    candidate_ids = [candidate.id for candidate in candidates]
    balances = await RaindropService.totals_for_students(
        session,
        student_user_ids=(user_id, *candidate_ids),
    )

    stats: dict[int, BattleStats] = {candidate_id: BattleStats() for candidate_id in candidate_ids}
    completed_rows = await ChallengesRepo.list_completed_results_for_users(
        session,
        user_ids=candidate_ids,
        status=CHALLENGE_STATUS_COMPLETED,
    )
    for challenger_user_id, challenged_user_id, winner_user_id in completed_rows:
        for party_id in (challenger_user_id, challenged_user_id):
            party_stats = stats.get(party_id)
            if party_stats is None:
                continue
            party_stats.total += 1
            if winner_user_id == party_id:
                party_stats.wins += 1
            elif winner_user_id is not None:
                party_stats.losses += 1

    requester_balance = balances.get(user_id, 0)
    return AvailableOpponentsResult(
        subject=subject,
        opponents=[
            OpponentView(
                user_id=candidate.id,
                username=candidate.username,
                first_name=candidate.first_name,
                last_name=candidate.last_name,
                grade=requester.grade,
                battle_stats=stats[candidate.id],
                raindrops=balances.get(candidate.id, 0),
            )
            for candidate in candidates
        ],
        raindrops=requester_balance,
        tiers=available_tiers(requester_balance),
    )


async def list_pending_challenges(
    session: AsyncSession,
    *,
    user_id: int,
    now_utc: datetime,
) -> PendingChallengesResult:
    sent = await ChallengesRepo.list_sent_by_status(
        session,
        challenger_user_id=user_id,
        status=CHALLENGE_STATUS_PENDING,
    )
    received = await ChallengesRepo.list_received_by_status(
        session,
        challenged_user_id=user_id,
        status=CHALLENGE_STATUS_PENDING,
    )
    return PendingChallengesResult(
        sent=[_build_challenge_snapshot(item) for item in sent if item.expires_at > now_utc],
        received=[
            _build_challenge_snapshot(item) for item in received if item.expires_at > now_utc
        ],
    )


async def get_challenge_history(
    session: AsyncSession,
    *,
    user_id: int,
    page: int,
    limit: int,
    now_utc: datetime,
    notifier: BattleNotifier,
) -> ChallengeHistoryPage:
    await _expire_overdue_for_user(session, user_id=user_id, now_utc=now_utc, notifier=notifier)

    resolved_page = max(1, int(page))
    resolved_limit = max(1, int(limit))

    stats = ChallengeHistoryStats()
    outcomes = await ChallengesRepo.list_outcome_rows_for_user(
        session,
        user_id=user_id,
        statuses=CHALLENGE_HISTORY_STATUSES,
    )
    for status, winner_user_id in outcomes:
        stats.total += 1
        if status == CHALLENGE_STATUS_DECLINED:
            stats.declined += 1
        elif status == CHALLENGE_STATUS_EXPIRED:
            stats.expired += 1
        elif winner_user_id is None:
            stats.ties += 1
        elif winner_user_id == user_id:
            stats.wins += 1
        else:
            stats.losses += 1

    items = await ChallengesRepo.list_for_user_by_statuses(
        session,
        user_id=user_id,
        statuses=CHALLENGE_HISTORY_STATUSES,
        offset=(resolved_page - 1) * resolved_limit,
        limit=resolved_limit,
    )
    battle_ids = await BattlesRepo.list_ids_by_challenge_ids(
        session,
        [item.id for item in items],
    )
    return ChallengeHistoryPage(
        items=[
            _build_challenge_snapshot(item, battle_id=battle_ids.get(item.id)) for item in items
        ],
        stats=stats,
        page=resolved_page,
        limit=resolved_limit,
        total=stats.total,
        pages=(stats.total + resolved_limit - 1) // resolved_limit,
    )
