from __future__ import annotations

from .completion import complete_battle
from .forfeit import forfeit_battle
from .internal import _create_battle_row
from .presence import set_presence
from .queries import get_battle_details, get_live_status
from .ready import mark_ready
from .submit import submit_answer

__all__ = [
    "_create_battle_row",
    "complete_battle",
    "forfeit_battle",
    "get_battle_details",
    "get_live_status",
    "mark_ready",
    "set_presence",
    "submit_answer",
]
