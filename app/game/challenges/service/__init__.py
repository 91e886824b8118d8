from __future__ import annotations

from .create import create_challenge
from .internal import (
    _build_challenge_snapshot,
    _challenge_expires_at,
    _expire_challenge_if_due,
)
from .queries import (
    get_challenge_for_user,
    get_challenge_history,
    list_available_opponents,
    list_pending_challenges,
)
from .respond import accept_challenge, cancel_challenge, decline_challenge

__all__ = [
    "_build_challenge_snapshot",
    "_challenge_expires_at",
    "_expire_challenge_if_due",
    "accept_challenge",
    "cancel_challenge",
    "create_challenge",
    "decline_challenge",
    "get_challenge_for_user",
    "get_challenge_history",
    "list_available_opponents",
    "list_pending_challenges",
]
