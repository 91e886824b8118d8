from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class SubmitAnswerRequest(BaseModel):
    question_order: int = Field(ge=1)
    selected_answer: str = Field(min_length=1, max_length=500)
    time_spent_seconds: int = Field(ge=0)


class PresenceRequest(BaseModel):
    connected: bool


class ParticipantProgressResponse(BaseModel):
    user_id: int
    role: str
    ready: bool
    connected: bool
    score: int = Field(ge=0)
    raindrops: int = Field(ge=0)
    correct_answers: int = Field(ge=0)
    answered_count: int = Field(ge=0)
    time_spent_seconds: int = Field(ge=0)
    average_time_seconds: float = Field(ge=0.0)


class BattleResultsResponse(BaseModel):
    winner_user_id: int | None = None
    win_reason: str
    challenger_score: int
    challenged_score: int
    challenger_raindrops: int
    challenged_raindrops: int
    duration_seconds: int = Field(ge=0)
    forfeited_by_user_id: int | None = None


class BattleSnapshotResponse(BaseModel):
    battle_id: UUID
    challenge_id: UUID
    status: str
    difficulty: str
    total_questions: int
    seconds_per_question: int
    current_question_index: int
    question_started_at: datetime | None = None
    challenger: ParticipantProgressResponse
    challenged: ParticipantProgressResponse
    started_at: datetime | None = None
    completed_at: datetime | None = None
    results: BattleResultsResponse | None = None


class BattleQuestionResponse(BaseModel):
    order: int
    question_id: str
    text: str
    options: list[str]
    difficulty: str


class BattleAnswerResponse(BaseModel):
    question_order: int
    question_id: str
    selected_answer: str
    is_correct: bool
    time_spent_seconds: int
    points: int
    raindrops: int
    submitted_at: datetime


class BattleEventResponse(BaseModel):
    event_type: str
    user_id: int | None = None
    payload: dict[str, Any]
    happened_at: datetime


class BattleDetailsResponse(BaseModel):
    battle: BattleSnapshotResponse
    questions: list[BattleQuestionResponse]
    my_answers: list[BattleAnswerResponse]
    events: list[BattleEventResponse]


class MarkReadyResponse(BaseModel):
    battle: BattleSnapshotResponse
    started_now: bool
    idempotent_replay: bool


class SubmitAnswerResponse(BaseModel):
    battle_id: UUID
    question_order: int
    is_correct: bool
    points: int
    raindrops: int
    explanation: str | None = None
    status: str
    current_question_index: int
    my_progress: ParticipantProgressResponse
    opponent_progress: ParticipantProgressResponse
    battle_completed: bool
    results: BattleResultsResponse | None = None


class LiveStatusResponse(BaseModel):
    battle_id: UUID
    status: str
    current_question_index: int
    total_questions: int
    question_started_at: datetime | None = None
    me: ParticipantProgressResponse
    opponent: ParticipantProgressResponse
    results: BattleResultsResponse | None = None


class ForfeitResponse(BaseModel):
    battle: BattleSnapshotResponse
    winner_user_id: int
