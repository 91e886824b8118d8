from __future__ import annotations

CHALLENGE_STATUS_PENDING = "PENDING"
CHALLENGE_STATUS_ACCEPTED = "ACCEPTED"
CHALLENGE_STATUS_IN_PROGRESS = "IN_PROGRESS"
CHALLENGE_STATUS_COMPLETED = "COMPLETED"
CHALLENGE_STATUS_DECLINED = "DECLINED"
CHALLENGE_STATUS_EXPIRED = "EXPIRED"
CHALLENGE_STATUS_CANCELED = "CANCELED"

CHALLENGE_ACTIVE_STATUSES: frozenset[str] = frozenset(
    {
        CHALLENGE_STATUS_PENDING,
        CHALLENGE_STATUS_ACCEPTED,
        CHALLENGE_STATUS_IN_PROGRESS,
    }
)

CHALLENGE_HISTORY_STATUSES: tuple[str, ...] = (
    CHALLENGE_STATUS_COMPLETED,
    CHALLENGE_STATUS_DECLINED,
    CHALLENGE_STATUS_EXPIRED,
)

DIFFICULTY_ADVANCED = "ADVANCED"
DIFFICULTY_EXPERT = "EXPERT"

CHALLENGE_DIFFICULTIES: tuple[str, ...] = (DIFFICULTY_ADVANCED, DIFFICULTY_EXPERT)

# Question difficulties admitted into a challenge of the given tier.
DIFFICULTY_QUESTION_POOLS: dict[str, tuple[str, ...]] = {
    DIFFICULTY_ADVANCED: (DIFFICULTY_ADVANCED, DIFFICULTY_EXPERT),
    DIFFICULTY_EXPERT: (DIFFICULTY_EXPERT,),
}

WIN_CONDITION_SCORE = "SCORE"
WIN_CONDITION_TIME = "TIME"
WIN_CONDITION_TIE = "TIE"
WIN_CONDITION_FORFEIT = "FORFEIT"

SUBJECTS: tuple[str, ...] = (
    "Math",
    "Science",
    "English",
    "History",
    "Geography",
    "Art",
    "Music",
    "PE",
)

CHALLENGE_QUESTION_COUNT = 5
CHALLENGE_TIME_LIMIT_SECONDS = 300
CHALLENGE_WAGER_MIN = 1
CHALLENGE_WAGER_MAX = 50
CHALLENGE_WAGER_DEFAULT = 5
CHALLENGE_MESSAGE_MAX_LENGTH = 200
CHALLENGE_DEFAULT_MESSAGE = "I challenge you to a battle!"

USER_ROLE_STUDENT = "STUDENT"
USER_STATUS_ACTIVE = "ACTIVE"


def is_challenge_active_status(status: str) -> bool:
    return status in CHALLENGE_ACTIVE_STATUSES


def build_pair_key(first_user_id: int, second_user_id: int) -> str:
    low, high = sorted((int(first_user_id), int(second_user_id)))
    return f"{low}:{high}"
