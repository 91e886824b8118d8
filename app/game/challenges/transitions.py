from __future__ import annotations

from app.game.challenges.constants import (
    CHALLENGE_STATUS_ACCEPTED,
    CHALLENGE_STATUS_CANCELED,
    CHALLENGE_STATUS_COMPLETED,
    CHALLENGE_STATUS_DECLINED,
    CHALLENGE_STATUS_EXPIRED,
    CHALLENGE_STATUS_IN_PROGRESS,
    CHALLENGE_STATUS_PENDING,
)
from app.game.challenges.errors import ChallengeNotPendingError, ChallengeStateError
from app.game.state_machine import StatusTransition

ACCEPT = StatusTransition(
    name="accept",
    from_statuses=frozenset({CHALLENGE_STATUS_PENDING}),
    to_status=CHALLENGE_STATUS_ACCEPTED,
    error=ChallengeNotPendingError,
)
DECLINE = StatusTransition(
    name="decline",
    from_statuses=frozenset({CHALLENGE_STATUS_PENDING}),
    to_status=CHALLENGE_STATUS_DECLINED,
    error=ChallengeNotPendingError,
)
# Canceled rows are deleted right after the transition is checked.
CANCEL = StatusTransition(
    name="cancel",
    from_statuses=frozenset({CHALLENGE_STATUS_PENDING}),
    to_status=CHALLENGE_STATUS_CANCELED,
    error=ChallengeNotPendingError,
)
EXPIRE = StatusTransition(
    name="expire",
    from_statuses=frozenset({CHALLENGE_STATUS_PENDING}),
    to_status=CHALLENGE_STATUS_EXPIRED,
    error=ChallengeNotPendingError,
)
START = StatusTransition(
    name="start",
    from_statuses=frozenset({CHALLENGE_STATUS_ACCEPTED}),
    to_status=CHALLENGE_STATUS_IN_PROGRESS,
    error=ChallengeStateError,
)
COMPLETE = StatusTransition(
    name="complete",
    from_statuses=frozenset({CHALLENGE_STATUS_ACCEPTED, CHALLENGE_STATUS_IN_PROGRESS}),
    to_status=CHALLENGE_STATUS_COMPLETED,
    error=ChallengeStateError,
)
