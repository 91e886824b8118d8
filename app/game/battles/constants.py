from __future__ import annotations

BATTLE_STATUS_WAITING = "WAITING"
BATTLE_STATUS_IN_PROGRESS = "IN_PROGRESS"
BATTLE_STATUS_COMPLETED = "COMPLETED"

BATTLE_FORFEITABLE_STATUSES: frozenset[str] = frozenset(
    {BATTLE_STATUS_WAITING, BATTLE_STATUS_IN_PROGRESS}
)

ROLE_CHALLENGER = "challenger"
ROLE_CHALLENGED = "challenged"
BATTLE_ROLES: tuple[str, str] = (ROLE_CHALLENGER, ROLE_CHALLENGED)

BATTLE_EVENT_JOIN = "join"
BATTLE_EVENT_DISCONNECT = "disconnect"
BATTLE_EVENT_RECONNECT = "reconnect"
BATTLE_EVENT_START = "battle_start"
BATTLE_EVENT_ANSWER_SUBMITTED = "answer_submitted"
BATTLE_EVENT_QUESTION_ADVANCE = "question_advance"
BATTLE_EVENT_COMPLETED = "battle_completed"
BATTLE_EVENT_FORFEITED = "battle_forfeited"

BASE_POINTS_BY_DIFFICULTY: dict[str, int] = {
    "EXPERT": 100,
    "ADVANCED": 80,
}
BASE_POINTS_DEFAULT = 60
TIME_BONUS_POINTS_PER_SECOND = 2

# Raindrops for (fastest third, middle third, slowest) correct answers.
RAINDROP_BANDS_BY_DIFFICULTY: dict[str, tuple[int, int, int]] = {
    "EXPERT": (5, 4, 3),
    "ADVANCED": (4, 3, 2),
}
RAINDROP_BANDS_DEFAULT: tuple[int, int, int] = (3, 2, 1)
