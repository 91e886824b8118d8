from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base


class Battle(Base):
    __tablename__ = "battles"
    __table_args__ = (
        CheckConstraint(
            "status IN ('WAITING','IN_PROGRESS','COMPLETED','ABANDONED')",
            name="ck_battles_status",
        ),
        CheckConstraint(
            "win_reason IS NULL OR win_reason IN ('SCORE','TIME','TIE','FORFEIT')",
            name="ck_battles_win_reason",
        ),
        CheckConstraint(
            "current_question_index >= 0",
            name="ck_battles_current_question_index_non_negative",
        ),
        CheckConstraint("total_questions >= 1", name="ck_battles_total_questions_positive"),
        CheckConstraint(
            "seconds_per_question >= 1",
            name="ck_battles_seconds_per_question_positive",
        ),
        Index("idx_battles_challenger_status", "challenger_user_id", "status"),
        Index("idx_battles_challenged_status", "challenged_user_id", "status"),
    )

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    challenge_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("challenges.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    difficulty: Mapped[str] = mapped_column(String(16), nullable=False)
    question_ids: Mapped[list[str]] = mapped_column(JSONB, nullable=False)
    total_questions: Mapped[int] = mapped_column(Integer, nullable=False)
    seconds_per_question: Mapped[int] = mapped_column(Integer, nullable=False)
    current_question_index: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )
    question_started_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    challenger_user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id"), nullable=False
    )
    challenger_ready: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("false"))
    challenger_connected: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )
    challenger_score: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    challenger_raindrops: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )
    challenger_correct_answers: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )
    challenger_answered_count: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )
    challenger_time_spent_seconds: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )
    challenger_average_time_seconds: Mapped[float] = mapped_column(
        Float, nullable=False, server_default=text("0")
    )

    challenged_user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id"), nullable=False
    )
    challenged_ready: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("false"))
    challenged_connected: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )
    challenged_score: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    challenged_raindrops: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )
    challenged_correct_answers: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )
    challenged_answered_count: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )
    challenged_time_spent_seconds: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )
    challenged_average_time_seconds: Mapped[float] = mapped_column(
        Float, nullable=False, server_default=text("0")
    )

    winner_user_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("users.id"), nullable=True
    )
    win_reason: Mapped[str | None] = mapped_column(String(16), nullable=True)
    forfeited_by_user_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("users.id"), nullable=True
    )
    duration_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
