from __future__ import annotations

from app.game.battles.constants import (
    BATTLE_FORFEITABLE_STATUSES,
    BATTLE_STATUS_COMPLETED,
    BATTLE_STATUS_IN_PROGRESS,
    BATTLE_STATUS_WAITING,
)
from app.game.battles.errors import (
    BattleNotForfeitableError,
    BattleNotWaitingError,
    SessionNotInProgressError,
)
from app.game.state_machine import StatusTransition

START = StatusTransition(
    name="start",
    from_statuses=frozenset({BATTLE_STATUS_WAITING}),
    to_status=BATTLE_STATUS_IN_PROGRESS,
    error=BattleNotWaitingError,
)
ANSWER = StatusTransition(
    name="answer in",
    from_statuses=frozenset({BATTLE_STATUS_IN_PROGRESS}),
    to_status=BATTLE_STATUS_IN_PROGRESS,
    error=SessionNotInProgressError,
)
COMPLETE = StatusTransition(
    name="complete",
    from_statuses=frozenset({BATTLE_STATUS_IN_PROGRESS}),
    to_status=BATTLE_STATUS_COMPLETED,
    error=SessionNotInProgressError,
)
FORFEIT = StatusTransition(
    name="forfeit",
    from_statuses=BATTLE_FORFEITABLE_STATUSES,
    to_status=BATTLE_STATUS_COMPLETED,
    error=BattleNotForfeitableError,
)
