from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.battle_answers import BattleAnswer


class BattleAnswersRepo:
    @staticmethod
    async def create(session: AsyncSession, *, answer: BattleAnswer) -> BattleAnswer:
        session.add(answer)
        await session.flush()
        return answer

    @staticmethod
    async def get_for_slot(
        session: AsyncSession,
        *,
        battle_id: UUID,
        user_id: int,
        question_order: int,
    ) -> BattleAnswer | None:
        stmt = select(BattleAnswer).where(
            BattleAnswer.battle_id == battle_id,
            BattleAnswer.user_id == user_id,
            BattleAnswer.question_order == question_order,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_for_battle(session: AsyncSession, *, battle_id: UUID) -> list[BattleAnswer]:
        stmt = (
            select(BattleAnswer)
            .where(BattleAnswer.battle_id == battle_id)
            .order_by(BattleAnswer.question_order.asc(), BattleAnswer.id.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
