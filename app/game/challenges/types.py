from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from app.economy.raindrops.types import UnlockTierStatus


@dataclass(slots=True)
class ChallengePartyResult:
    score: int
    raindrops: int
    time_spent_seconds: int
    answers: list[dict[str, object]] = field(default_factory=list)


@dataclass(slots=True)
class ChallengeSnapshot:
    challenge_id: UUID
    challenger_user_id: int
    challenged_user_id: int
    grade: str
    subject: str
    difficulty: str
    question_ids: tuple[str, ...]
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
    challenger_result: ChallengePartyResult | None = None
    challenged_result: ChallengePartyResult | None = None
    battle_id: UUID | None = None


@dataclass(slots=True)
class AcceptChallengeResult:
    challenge: ChallengeSnapshot
    battle_id: UUID


@dataclass(slots=True)
class BattleStats:
    total: int = 0
    wins: int = 0
    losses: int = 0

    @property
    def win_rate(self) -> int:
        if self.total <= 0:
            return 0
        return round(self.wins * 100 / self.total)


@dataclass(slots=True)
class OpponentView:
    user_id: int
    username: str
    first_name: str | None
    last_name: str | None
    grade: str
    battle_stats: BattleStats
    raindrops: int


@dataclass(slots=True)
class AvailableOpponentsResult:
    subject: str
    opponents: list[OpponentView]
    raindrops: int
    tiers: dict[str, UnlockTierStatus]


@dataclass(slots=True)
class PendingChallengesResult:
    sent: list[ChallengeSnapshot]
    received: list[ChallengeSnapshot]

    @property
    def total(self) -> int:
        return len(self.sent) + len(self.received)


@dataclass(slots=True)
class ChallengeHistoryStats:
    total: int = 0
    wins: int = 0
    losses: int = 0
    ties: int = 0
    declined: int = 0
    expired: int = 0


@dataclass(slots=True)
class ChallengeHistoryPage:
    items: list[ChallengeSnapshot]
    stats: ChallengeHistoryStats
    page: int
    limit: int
    total: int
    pages: int
