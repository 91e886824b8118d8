from __future__ import annotations

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.battles import Battle


class BattlesRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, battle_id: UUID) -> Battle | None:
        return await session.get(Battle, battle_id)

    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, battle_id: UUID) -> Battle | None:
        stmt = select(Battle).where(Battle.id == battle_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_challenge_id(session: AsyncSession, challenge_id: UUID) -> Battle | None:
        stmt = select(Battle).where(Battle.challenge_id == challenge_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_ids_by_challenge_ids(
        session: AsyncSession,
        challenge_ids: Sequence[UUID],
    ) -> dict[UUID, UUID]:
        ids = tuple(set(challenge_ids))
        if not ids:
            return {}
        stmt = select(Battle.challenge_id, Battle.id).where(Battle.challenge_id.in_(ids))
        result = await session.execute(stmt)
        return {challenge_id: battle_id for challenge_id, battle_id in result.all()}

    @staticmethod
    async def create(session: AsyncSession, *, battle: Battle) -> Battle:
        session.add(battle)
        await session.flush()
        return battle

    @staticmethod
    async def sum_raindrops_by_user(
        session: AsyncSession,
        *,
        user_ids: Sequence[int],
        status: str,
    ) -> dict[int, int]:
        ids = tuple({int(user_id) for user_id in user_ids})
        if not ids:
            return {}
        totals: dict[int, int] = {}
        for user_column, raindrops_column in (
            (Battle.challenger_user_id, Battle.challenger_raindrops),
            (Battle.challenged_user_id, Battle.challenged_raindrops),
        ):
            stmt = (
                select(user_column, func.coalesce(func.sum(raindrops_column), 0))
                .where(user_column.in_(ids), Battle.status == status)
                .group_by(user_column)
            )
            result = await session.execute(stmt)
            for user_id, total in result.all():
                totals[int(user_id)] = totals.get(int(user_id), 0) + int(total)
        return totals
