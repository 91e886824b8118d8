from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.game.battles.service import (
    forfeit_battle,
    get_battle_details,
    get_live_status,
    mark_ready,
    set_presence,
    submit_answer,
)
from app.game.battles.types import (
    BattleDetails,
    BattleSnapshot,
    ForfeitResult,
    LiveStatus,
    MarkReadyResult,
    SubmitAnswerResult,
)
from app.game.notifications import BattleNotifier, OutboxBattleNotifier
from app.game.questions.source import DbQuestionSource, QuestionSource


class BattleSessionService:
    """Live head-to-head play for an accepted challenge."""

    def __init__(
        self,
        *,
        question_source: QuestionSource | None = None,
        notifier: BattleNotifier | None = None,
    ) -> None:
        self.question_source = question_source or DbQuestionSource()
        self.notifier = notifier or OutboxBattleNotifier()

    async def mark_ready(
        self,
        session: AsyncSession,
        *,
        battle_id: UUID,
        user_id: int,
        now_utc: datetime,
    ) -> MarkReadyResult:
        return await mark_ready(
            session,
            battle_id=battle_id,
            user_id=user_id,
            now_utc=now_utc,
            notifier=self.notifier,
        )

    async def submit_answer(
        self,
        session: AsyncSession,
        *,
        battle_id: UUID,
        user_id: int,
        question_order: int,
        selected_answer: str,
        time_spent_seconds: int,
        now_utc: datetime,
    ) -> SubmitAnswerResult:
        return await submit_answer(
            session,
            battle_id=battle_id,
            user_id=user_id,
            question_order=question_order,
            selected_answer=selected_answer,
            time_spent_seconds=time_spent_seconds,
            now_utc=now_utc,
            question_source=self.question_source,
            notifier=self.notifier,
        )

    async def forfeit(
        self,
        session: AsyncSession,
        *,
        battle_id: UUID,
        user_id: int,
        now_utc: datetime,
    ) -> ForfeitResult:
        return await forfeit_battle(
            session,
            battle_id=battle_id,
            user_id=user_id,
            now_utc=now_utc,
            notifier=self.notifier,
        )

    async def set_presence(
        self,
        session: AsyncSession,
        *,
        battle_id: UUID,
        user_id: int,
        connected: bool,
        now_utc: datetime,
    ) -> BattleSnapshot:
        return await set_presence(
            session,
            battle_id=battle_id,
            user_id=user_id,
            connected=connected,
            now_utc=now_utc,
            notifier=self.notifier,
        )

    async def get_battle(
        self,
        session: AsyncSession,
        *,
        battle_id: UUID,
        user_id: int,
    ) -> BattleDetails:
        return await get_battle_details(
            session,
            battle_id=battle_id,
            user_id=user_id,
            question_source=self.question_source,
        )

    async def get_live_status(
        self,
        session: AsyncSession,
        *,
        battle_id: UUID,
        user_id: int,
    ) -> LiveStatus:
        return await get_live_status(session, battle_id=battle_id, user_id=user_id)
