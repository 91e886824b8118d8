from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.game.battles.constants import BATTLE_EVENT_DISCONNECT, BATTLE_EVENT_RECONNECT
from app.game.battles.service.internal import (
    _append_event,
    _build_battle_snapshot,
    _load_battle_for_update,
    _publish_battle_event,
    _require_participant,
)
from app.game.battles.types import BattleSnapshot
from app.game.notifications import BattleNotifier


async def set_presence(
    session: AsyncSession,
    *,
    battle_id: UUID,
    user_id: int,
    connected: bool,
    now_utc: datetime,
    notifier: BattleNotifier,
) -> BattleSnapshot:
    battle = await _load_battle_for_update(session, battle_id)
    role = _require_participant(battle, user_id)
    if bool(getattr(battle, f"{role}_connected")) == connected:
        return _build_battle_snapshot(battle)

    setattr(battle, f"{role}_connected", connected)
    battle.updated_at = now_utc
    event_type = BATTLE_EVENT_RECONNECT if connected else BATTLE_EVENT_DISCONNECT
    await _append_event(
        session,
        battle=battle,
        event_type=event_type,
        user_id=user_id,
        happened_at=now_utc,
        payload={"role": role},
    )
    await _publish_battle_event(
        session,
        notifier=notifier,
        battle=battle,
        event_type=f"battle_participant_{event_type}",
        payload={"user_id": user_id},
    )
    return _build_battle_snapshot(battle)
