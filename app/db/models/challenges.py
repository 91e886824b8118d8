from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base


class Challenge(Base):
    __tablename__ = "challenges"
    __table_args__ = (
        CheckConstraint(
            (
                "status IN ("
                "'PENDING','ACCEPTED','IN_PROGRESS','COMPLETED','DECLINED','EXPIRED','CANCELED'"
                ")"
            ),
            name="ck_challenges_status",
        ),
        CheckConstraint(
            "difficulty IN ('ADVANCED','EXPERT')",
            name="ck_challenges_difficulty",
        ),
        CheckConstraint(
            "win_condition IS NULL OR win_condition IN ('SCORE','TIME','TIE','FORFEIT')",
            name="ck_challenges_win_condition",
        ),
        CheckConstraint(
            "challenger_user_id <> challenged_user_id",
            name="ck_challenges_distinct_parties",
        ),
        CheckConstraint(
            "wager_raindrops >= 1 AND wager_raindrops <= 50",
            name="ck_challenges_wager_range",
        ),
        CheckConstraint(
            "challenger_score >= 0",
            name="ck_challenges_challenger_score_non_negative",
        ),
        CheckConstraint(
            "challenged_score >= 0",
            name="ck_challenges_challenged_score_non_negative",
        ),
        Index("idx_challenges_challenger_created", "challenger_user_id", "created_at"),
        Index("idx_challenges_challenged_created", "challenged_user_id", "created_at"),
        Index("idx_challenges_status_expires", "status", "expires_at"),
        Index(
            "uq_challenges_active_pair",
            "pair_key",
            unique=True,
            postgresql_where=text("status IN ('PENDING','ACCEPTED','IN_PROGRESS')"),
        ),
    )

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    challenger_user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id"), nullable=False
    )
    challenged_user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id"), nullable=False
    )
    pair_key: Mapped[str] = mapped_column(String(64), nullable=False)
    grade: Mapped[str] = mapped_column(String(2), nullable=False)
    subject: Mapped[str] = mapped_column(String(32), nullable=False)
    difficulty: Mapped[str] = mapped_column(String(16), nullable=False)
    question_ids: Mapped[list[str]] = mapped_column(JSONB, nullable=False)
    wager_raindrops: Mapped[int] = mapped_column(Integer, nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    time_limit_seconds: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    challenger_score: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    challenged_score: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    challenger_raindrops: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )
    challenged_raindrops: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )
    challenger_time_spent_seconds: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )
    challenged_time_spent_seconds: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )
    challenger_answers: Mapped[list[dict[str, object]] | None] = mapped_column(JSONB, nullable=True)
    challenged_answers: Mapped[list[dict[str, object]] | None] = mapped_column(JSONB, nullable=True)
    winner_user_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("users.id"), nullable=True
    )
    win_condition: Mapped[str | None] = mapped_column(String(16), nullable=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    accepted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
