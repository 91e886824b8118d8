from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.battle_events import BattleEvent


class BattleEventsRepo:
    @staticmethod
    async def create(
        session: AsyncSession,
        *,
        battle_id: UUID,
        event_type: str,
        user_id: int | None,
        payload: dict[str, object],
        happened_at: datetime,
    ) -> BattleEvent:
        event = BattleEvent(
            battle_id=battle_id,
            event_type=event_type,
            user_id=user_id,
            payload=payload,
            happened_at=happened_at,
        )
        session.add(event)
        await session.flush()
        return event

    @staticmethod
    async def list_for_battle(session: AsyncSession, *, battle_id: UUID) -> list[BattleEvent]:
        stmt = (
            select(BattleEvent)
            .where(BattleEvent.battle_id == battle_id)
            .order_by(BattleEvent.happened_at.asc(), BattleEvent.id.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
