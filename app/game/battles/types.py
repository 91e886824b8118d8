from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class LiveAggregate:
    score: int = 0
    raindrops: int = 0
    correct_answers: int = 0
    answered_count: int = 0
    time_spent_seconds: int = 0
    average_time_seconds: float = 0.0


@dataclass(slots=True)
class ParticipantProgress:
    user_id: int
    role: str
    ready: bool
    connected: bool
    score: int
    raindrops: int
    correct_answers: int
    answered_count: int
    time_spent_seconds: int
    average_time_seconds: float


@dataclass(slots=True)
class BattleResults:
    winner_user_id: int | None
    win_reason: str
    challenger_score: int
    challenged_score: int
    challenger_raindrops: int
    challenged_raindrops: int
    duration_seconds: int
    forfeited_by_user_id: int | None = None


@dataclass(slots=True)
class BattleSnapshot:
    battle_id: UUID
    challenge_id: UUID
    status: str
    difficulty: str
    total_questions: int
    seconds_per_question: int
    current_question_index: int
    question_started_at: datetime | None
    challenger: ParticipantProgress
    challenged: ParticipantProgress
    started_at: datetime | None = None
    completed_at: datetime | None = None
    results: BattleResults | None = None


@dataclass(slots=True)
class BattleQuestionView:
    order: int
    question_id: str
    text: str
    options: tuple[str, ...]
    difficulty: str


@dataclass(slots=True)
class BattleAnswerView:
    question_order: int
    question_id: str
    selected_answer: str
    is_correct: bool
    time_spent_seconds: int
    points: int
    raindrops: int
    submitted_at: datetime


@dataclass(slots=True)
class BattleEventView:
    event_type: str
    user_id: int | None
    payload: dict[str, object]
    happened_at: datetime


@dataclass(slots=True)
class BattleDetails:
    snapshot: BattleSnapshot
    questions: list[BattleQuestionView]
    my_answers: list[BattleAnswerView]
    events: list[BattleEventView] = field(default_factory=list)


@dataclass(slots=True)
class MarkReadyResult:
    snapshot: BattleSnapshot
    started_now: bool = False
    idempotent_replay: bool = False


@dataclass(slots=True)
class SubmitAnswerResult:
    battle_id: UUID
    question_order: int
    is_correct: bool
    points: int
    raindrops: int
    explanation: str | None
    status: str
    current_question_index: int
    my_progress: ParticipantProgress
    opponent_progress: ParticipantProgress
    battle_completed: bool = False
    results: BattleResults | None = None


@dataclass(slots=True)
class LiveStatus:
    battle_id: UUID
    status: str
    current_question_index: int
    total_questions: int
    question_started_at: datetime | None
    me: ParticipantProgress
    opponent: ParticipantProgress
    results: BattleResults | None = None


@dataclass(slots=True)
class ForfeitResult:
    snapshot: BattleSnapshot
    winner_user_id: int
