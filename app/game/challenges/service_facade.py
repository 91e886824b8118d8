from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.economy.raindrops.rules import available_tiers
from app.economy.raindrops.service import RaindropService
from app.economy.raindrops.types import UnlockTierStatus
from app.game.challenges.service import (
    accept_challenge,
    cancel_challenge,
    create_challenge,
    decline_challenge,
    get_challenge_for_user,
    get_challenge_history,
    list_available_opponents,
    list_pending_challenges,
)
from app.game.challenges.types import (
    AcceptChallengeResult,
    AvailableOpponentsResult,
    ChallengeHistoryPage,
    ChallengeSnapshot,
    PendingChallengesResult,
)
from app.game.notifications import BattleNotifier, OutboxBattleNotifier
from app.game.questions.source import DbQuestionSource, QuestionSource


class ChallengeLedger:
    """Lifecycle of 1v1 challenge invitations between students of one grade."""

    def __init__(
        self,
        *,
        question_source: QuestionSource | None = None,
        notifier: BattleNotifier | None = None,
    ) -> None:
        self.question_source = question_source or DbQuestionSource()
        self.notifier = notifier or OutboxBattleNotifier()

    async def create_challenge(
        self,
        session: AsyncSession,
        *,
        challenger_user_id: int,
        challenged_user_id: int,
        subject: str,
        difficulty: str,
        wager_raindrops: int,
        message: str | None,
        now_utc: datetime,
    ) -> ChallengeSnapshot:
        return await create_challenge(
            session,
            challenger_user_id=challenger_user_id,
            challenged_user_id=challenged_user_id,
            subject=subject,
            difficulty=difficulty,
            wager_raindrops=wager_raindrops,
            message=message,
            now_utc=now_utc,
            question_source=self.question_source,
            notifier=self.notifier,
        )

    async def accept_challenge(
        self,
        session: AsyncSession,
        *,
        challenge_id: UUID,
        user_id: int,
        now_utc: datetime,
    ) -> AcceptChallengeResult:
        return await accept_challenge(
            session,
            challenge_id=challenge_id,
            user_id=user_id,
            now_utc=now_utc,
            notifier=self.notifier,
        )

    async def decline_challenge(
        self,
        session: AsyncSession,
        *,
        challenge_id: UUID,
        user_id: int,
        now_utc: datetime,
    ) -> ChallengeSnapshot:
        return await decline_challenge(
            session,
            challenge_id=challenge_id,
            user_id=user_id,
            now_utc=now_utc,
            notifier=self.notifier,
        )

    async def cancel_challenge(
        self,
        session: AsyncSession,
        *,
        challenge_id: UUID,
        user_id: int,
        now_utc: datetime,
    ) -> ChallengeSnapshot:
        return await cancel_challenge(
            session,
            challenge_id=challenge_id,
            user_id=user_id,
            now_utc=now_utc,
            notifier=self.notifier,
        )

    async def get_challenge(
        self,
        session: AsyncSession,
        *,
        challenge_id: UUID,
        user_id: int,
        now_utc: datetime,
    ) -> ChallengeSnapshot:
        return await get_challenge_for_user(
            session,
            challenge_id=challenge_id,
            user_id=user_id,
            now_utc=now_utc,
            notifier=self.notifier,
        )

    async def list_available_opponents(
        self,
        session: AsyncSession,
        *,
        user_id: int,
        subject: str,
        now_utc: datetime,
    ) -> AvailableOpponentsResult:
        return await list_available_opponents(
            session,
            user_id=user_id,
            subject=subject,
            now_utc=now_utc,
            notifier=self.notifier,
        )

    async def list_pending(
        self,
        session: AsyncSession,
        *,
        user_id: int,
        now_utc: datetime,
    ) -> PendingChallengesResult:
        return await list_pending_challenges(session, user_id=user_id, now_utc=now_utc)

    async def get_history(
        self,
        session: AsyncSession,
        *,
        user_id: int,
        page: int,
        limit: int,
        now_utc: datetime,
    ) -> ChallengeHistoryPage:
        return await get_challenge_history(
            session,
            user_id=user_id,
            page=page,
            limit=limit,
            now_utc=now_utc,
            notifier=self.notifier,
        )

    @staticmethod
    async def get_unlock_status(
        session: AsyncSession,
        *,
        user_id: int,
    ) -> tuple[int, dict[str, UnlockTierStatus]]:
        balance = await RaindropService.total_raindrops(session, student_user_id=user_id)
        return balance, available_tiers(balance)
