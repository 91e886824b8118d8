from __future__ import annotations

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.game.challenges.constants import (
    CHALLENGE_MESSAGE_MAX_LENGTH,
    CHALLENGE_WAGER_DEFAULT,
    CHALLENGE_WAGER_MAX,
    CHALLENGE_WAGER_MIN,
)

SubjectName = Literal["Math", "Science", "English", "History", "Geography", "Art", "Music", "PE"]
ChallengeDifficulty = Literal["ADVANCED", "EXPERT"]


class CreateChallengeRequest(BaseModel):
    challenged_user_id: int = Field(gt=0)
    subject: SubjectName
    difficulty: ChallengeDifficulty = "ADVANCED"
    wager_raindrops: int = Field(
        default=CHALLENGE_WAGER_DEFAULT,
        ge=CHALLENGE_WAGER_MIN,
        le=CHALLENGE_WAGER_MAX,
    )
    message: str | None = Field(default=None, max_length=CHALLENGE_MESSAGE_MAX_LENGTH)

    @field_validator("difficulty", mode="before")
    @classmethod
    def _normalize_difficulty(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value


class UnlockTierResponse(BaseModel):
    tier: str
    name: str
    description: str
    unlocked: bool
    required: int = Field(ge=0)
    missing: int = Field(ge=0)


class UnlockStatusResponse(BaseModel):
    raindrops: int = Field(ge=0)
    tiers: dict[str, UnlockTierResponse]


class BattleStatsResponse(BaseModel):
    total: int = Field(ge=0)
    wins: int = Field(ge=0)
    losses: int = Field(ge=0)
    win_rate: int = Field(ge=0, le=100)


class OpponentResponse(BaseModel):
    user_id: int
    username: str
    first_name: str | None = None
    last_name: str | None = None
    grade: str
    battle_stats: BattleStatsResponse
    raindrops: int = Field(ge=0)


class AvailableOpponentsResponse(BaseModel):
    subject: str
    opponents: list[OpponentResponse]
    count: int = Field(ge=0)
    raindrops: int = Field(ge=0)
    tiers: dict[str, UnlockTierResponse]


class ChallengePartyResultResponse(BaseModel):
    score: int
    raindrops: int
    time_spent_seconds: int
    answers: list[dict[str, Any]]


class ChallengeResponse(BaseModel):
    challenge_id: UUID
    challenger_user_id: int
    challenged_user_id: int
    grade: str
    subject: str
    difficulty: str
    question_ids: list[str]
    wager_raindrops: int
    message: str
    time_limit_seconds: int
    status: str
    expires_at: datetime
    created_at: datetime
    accepted_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    winner_user_id: int | None = None
    win_condition: str | None = None
    challenger_result: ChallengePartyResultResponse | None = None
    challenged_result: ChallengePartyResultResponse | None = None
    battle_id: UUID | None = None


class AcceptChallengeResponse(BaseModel):
    challenge: ChallengeResponse
    battle_id: UUID


class PendingChallengesResponse(BaseModel):
    sent: list[ChallengeResponse]
    received: list[ChallengeResponse]
    total: int = Field(ge=0)


class ChallengeHistoryStatsResponse(BaseModel):
    total: int = Field(ge=0)
    wins: int = Field(ge=0)
    losses: int = Field(ge=0)
    ties: int = Field(ge=0)
    declined: int = Field(ge=0)
    expired: int = Field(ge=0)


class PaginationResponse(BaseModel):
    page: int = Field(ge=1)
    limit: int = Field(ge=1)
    total: int = Field(ge=0)
    pages: int = Field(ge=0)


class ChallengeHistoryResponse(BaseModel):
    challenges: list[ChallengeResponse]
    stats: ChallengeHistoryStatsResponse
    pagination: PaginationResponse


class ChallengeCanceledResponse(BaseModel):
    challenge_id: UUID
    status: str


class RaindropBalanceResponse(BaseModel):
    total_raindrops: int = Field(ge=0)
    level: int = Field(ge=1)
    cups_filled: int = Field(ge=0)
    cup_progress: int = Field(ge=0, le=99)
    tiers: dict[str, UnlockTierResponse]
