from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repo.outbox_events_repo import OutboxEventsRepo

AGGREGATE_CHALLENGE = "CHALLENGE"
AGGREGATE_BATTLE = "BATTLE"

OUTBOX_STATUS_NEW = "NEW"


class BattleNotifier(Protocol):
    async def publish(
        self,
        session: AsyncSession,
        *,
        event_type: str,
        aggregate_type: str,
        aggregate_id: str,
        recipient_user_ids: Sequence[int],
        payload: dict[str, object],
    ) -> None: ...


class OutboxBattleNotifier:
    """Queues state changes in the outbox inside the caller's transaction."""

    async def publish(
        self,
        session: AsyncSession,
        *,
        event_type: str,
        aggregate_type: str,
        aggregate_id: str,
        recipient_user_ids: Sequence[int],
        payload: dict[str, object],
    ) -> None:
        await OutboxEventsRepo.create(
            session,
            event_type=event_type,
            aggregate_type=aggregate_type,
            aggregate_id=aggregate_id,
            recipient_user_ids=recipient_user_ids,
            payload=payload,
            status=OUTBOX_STATUS_NEW,
        )
