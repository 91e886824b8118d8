"""raindrop_battle_core_schema

Revision ID: 0a1b2c3d4e5f
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "0a1b2c3d4e5f"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("username", sa.String(length=64), nullable=False),
        sa.Column("first_name", sa.Text(), nullable=True),
        sa.Column("last_name", sa.Text(), nullable=True),
        sa.Column("role", sa.String(length=16), nullable=False),
        sa.Column("grade", sa.String(length=2), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False, server_default=sa.text("'ACTIVE'")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("status IN ('ACTIVE','BLOCKED','DELETED')", name="ck_users_status"),
        sa.CheckConstraint("role IN ('ADMIN','TEACHER','STUDENT')", name="ck_users_role"),
        sa.UniqueConstraint("username", name="uq_users_username"),
    )
    op.create_index("idx_users_role_grade", "users", ["role", "grade"])
    op.create_index("idx_users_created_at", "users", ["created_at"])

    op.create_table(
        "quiz_questions",
        sa.Column("question_id", sa.String(length=64), primary_key=True),
        sa.Column("grade", sa.String(length=2), nullable=False),
        sa.Column("subject", sa.String(length=32), nullable=False),
        sa.Column("difficulty", sa.String(length=16), nullable=False),
        sa.Column("question_text", sa.Text(), nullable=False),
        sa.Column("options", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("correct_answer", sa.Text(), nullable=False),
        sa.Column("explanation", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("status IN ('ACTIVE','DISABLED')", name="ck_quiz_questions_status"),
        sa.CheckConstraint(
            "difficulty IN ('BEGINNER','ADVANCED','EXPERT')",
            name="ck_quiz_questions_difficulty",
        ),
    )
    op.create_index(
        "idx_quiz_questions_pool",
        "quiz_questions",
        ["grade", "subject", "difficulty", "status"],
    )

    op.create_table(
        "test_attempts",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("student_user_id", sa.BigInteger(), nullable=False),
        sa.Column("test_id", sa.String(length=64), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("raindrops_earned", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint(
            "status IN ('IN_PROGRESS','COMPLETED','ABANDONED')",
            name="ck_test_attempts_status",
        ),
        sa.CheckConstraint("raindrops_earned >= 0", name="ck_test_attempts_raindrops_non_negative"),
        sa.ForeignKeyConstraint(["student_user_id"], ["users.id"]),
    )
    op.create_index(
        "idx_test_attempts_student_status",
        "test_attempts",
        ["student_user_id", "status"],
    )

    op.create_table(
        "challenges",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("challenger_user_id", sa.BigInteger(), nullable=False),
        sa.Column("challenged_user_id", sa.BigInteger(), nullable=False),
        sa.Column("pair_key", sa.String(length=64), nullable=False),
        sa.Column("grade", sa.String(length=2), nullable=False),
        sa.Column("subject", sa.String(length=32), nullable=False),
        sa.Column("difficulty", sa.String(length=16), nullable=False),
        sa.Column("question_ids", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("wager_raindrops", sa.Integer(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("time_limit_seconds", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("challenger_score", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("challenged_score", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("challenger_raindrops", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("challenged_raindrops", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column(
            "challenger_time_spent_seconds",
            sa.Integer(),
            nullable=False,
            server_default=sa.text("0"),
        ),
        sa.Column(
            "challenged_time_spent_seconds",
            sa.Integer(),
            nullable=False,
            server_default=sa.text("0"),
        ),
        sa.Column("challenger_answers", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("challenged_answers", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("winner_user_id", sa.BigInteger(), nullable=True),
        sa.Column("win_condition", sa.String(length=16), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("accepted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "status IN ('PENDING','ACCEPTED','IN_PROGRESS','COMPLETED','DECLINED','EXPIRED','CANCELED')",
            name="ck_challenges_status",
        ),
        sa.CheckConstraint("difficulty IN ('ADVANCED','EXPERT')", name="ck_challenges_difficulty"),
        sa.CheckConstraint(
            "win_condition IS NULL OR win_condition IN ('SCORE','TIME','TIE','FORFEIT')",
            name="ck_challenges_win_condition",
        ),
        sa.CheckConstraint(
            "challenger_user_id <> challenged_user_id",
            name="ck_challenges_distinct_parties",
        ),
        sa.CheckConstraint(
            "wager_raindrops >= 1 AND wager_raindrops <= 50",
            name="ck_challenges_wager_range",
        ),
        sa.CheckConstraint("challenger_score >= 0", name="ck_challenges_challenger_score_non_negative"),
        sa.CheckConstraint("challenged_score >= 0", name="ck_challenges_challenged_score_non_negative"),
        sa.ForeignKeyConstraint(["challenger_user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["challenged_user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["winner_user_id"], ["users.id"]),
    )
    op.create_index(
        "idx_challenges_challenger_created",
        "challenges",
        ["challenger_user_id", "created_at"],
    )
    op.create_index(
        "idx_challenges_challenged_created",
        "challenges",
        ["challenged_user_id", "created_at"],
    )
    op.create_index("idx_challenges_status_expires", "challenges", ["status", "expires_at"])
    op.create_index(
        "uq_challenges_active_pair",
        "challenges",
        ["pair_key"],
        unique=True,
        postgresql_where=sa.text("status IN ('PENDING','ACCEPTED','IN_PROGRESS')"),
    )

    participant_columns: list[sa.Column] = []
    for role in ("challenger", "challenged"):
        participant_columns.extend(
            [
                sa.Column(f"{role}_user_id", sa.BigInteger(), nullable=False),
                sa.Column(f"{role}_ready", sa.Boolean(), nullable=False, server_default=sa.text("false")),
                sa.Column(
                    f"{role}_connected",
                    sa.Boolean(),
                    nullable=False,
                    server_default=sa.text("false"),
                ),
                sa.Column(f"{role}_score", sa.Integer(), nullable=False, server_default=sa.text("0")),
                sa.Column(f"{role}_raindrops", sa.Integer(), nullable=False, server_default=sa.text("0")),
                sa.Column(
                    f"{role}_correct_answers",
                    sa.Integer(),
                    nullable=False,
                    server_default=sa.text("0"),
                ),
                sa.Column(
                    f"{role}_answered_count",
                    sa.Integer(),
                    nullable=False,
                    server_default=sa.text("0"),
                ),
                sa.Column(
                    f"{role}_time_spent_seconds",
                    sa.Integer(),
                    nullable=False,
                    server_default=sa.text("0"),
                ),
                sa.Column(
                    f"{role}_average_time_seconds",
                    sa.Float(),
                    nullable=False,
                    server_default=sa.text("0"),
                ),
            ]
        )

    op.create_table(
        "battles",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("challenge_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("difficulty", sa.String(length=16), nullable=False),
        sa.Column("question_ids", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("total_questions", sa.Integer(), nullable=False),
        sa.Column("seconds_per_question", sa.Integer(), nullable=False),
        sa.Column("current_question_index", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("question_started_at", sa.DateTime(timezone=True), nullable=True),
        *participant_columns,
        sa.Column("winner_user_id", sa.BigInteger(), nullable=True),
        sa.Column("win_reason", sa.String(length=16), nullable=True),
        sa.Column("forfeited_by_user_id", sa.BigInteger(), nullable=True),
        sa.Column("duration_seconds", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "status IN ('WAITING','IN_PROGRESS','COMPLETED','ABANDONED')",
            name="ck_battles_status",
        ),
        sa.CheckConstraint(
            "win_reason IS NULL OR win_reason IN ('SCORE','TIME','TIE','FORFEIT')",
            name="ck_battles_win_reason",
        ),
        sa.CheckConstraint(
            "current_question_index >= 0",
            name="ck_battles_current_question_index_non_negative",
        ),
        sa.CheckConstraint("total_questions >= 1", name="ck_battles_total_questions_positive"),
        sa.CheckConstraint(
            "seconds_per_question >= 1",
            name="ck_battles_seconds_per_question_positive",
        ),
        sa.ForeignKeyConstraint(["challenge_id"], ["challenges.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["challenger_user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["challenged_user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["winner_user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["forfeited_by_user_id"], ["users.id"]),
        sa.UniqueConstraint("challenge_id", name="uq_battles_challenge_id"),
    )
    op.create_index("idx_battles_challenger_status", "battles", ["challenger_user_id", "status"])
    op.create_index("idx_battles_challenged_status", "battles", ["challenged_user_id", "status"])

    op.create_table(
        "battle_answers",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("battle_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("question_order", sa.Integer(), nullable=False),
        sa.Column("question_id", sa.String(length=64), nullable=False),
        sa.Column("selected_answer", sa.Text(), nullable=False),
        sa.Column("is_correct", sa.Boolean(), nullable=False),
        sa.Column("time_spent_seconds", sa.Integer(), nullable=False),
        sa.Column("points", sa.Integer(), nullable=False),
        sa.Column("raindrops", sa.Integer(), nullable=False),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("question_order >= 1", name="ck_battle_answers_question_order_positive"),
        sa.CheckConstraint("time_spent_seconds >= 0", name="ck_battle_answers_time_spent_non_negative"),
        sa.CheckConstraint("points >= 0", name="ck_battle_answers_points_non_negative"),
        sa.CheckConstraint("raindrops >= 0", name="ck_battle_answers_raindrops_non_negative"),
        sa.ForeignKeyConstraint(["battle_id"], ["battles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
    )
    op.create_index(
        "uq_battle_answers_slot",
        "battle_answers",
        ["battle_id", "user_id", "question_order"],
        unique=True,
    )

    op.create_table(
        "battle_events",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("battle_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("event_type", sa.String(length=32), nullable=False),
        sa.Column("user_id", sa.BigInteger(), nullable=True),
        sa.Column("payload", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("happened_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["battle_id"], ["battles.id"], ondelete="CASCADE"),
    )
    op.create_index(
        "idx_battle_events_battle_happened",
        "battle_events",
        ["battle_id", "happened_at", "id"],
    )

    op.create_table(
        "outbox_events",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("event_type", sa.String(length=64), nullable=False),
        sa.Column("aggregate_type", sa.String(length=16), nullable=False),
        sa.Column("aggregate_id", sa.String(length=64), nullable=False),
        sa.Column("recipient_user_ids", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("payload", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("idx_outbox_events_status_created", "outbox_events", ["status", "created_at"])
    op.create_index(
        "idx_outbox_events_aggregate",
        "outbox_events",
        ["aggregate_type", "aggregate_id"],
    )


def downgrade() -> None:
    op.drop_index("idx_outbox_events_aggregate", table_name="outbox_events")
    op.drop_index("idx_outbox_events_status_created", table_name="outbox_events")
    op.drop_table("outbox_events")
    op.drop_index("idx_battle_events_battle_happened", table_name="battle_events")
    op.drop_table("battle_events")
    op.drop_index("uq_battle_answers_slot", table_name="battle_answers")
    op.drop_table("battle_answers")
    op.drop_index("idx_battles_challenged_status", table_name="battles")
    op.drop_index("idx_battles_challenger_status", table_name="battles")
    op.drop_table("battles")
    op.drop_index("uq_challenges_active_pair", table_name="challenges")
    op.drop_index("idx_challenges_status_expires", table_name="challenges")
    op.drop_index("idx_challenges_challenged_created", table_name="challenges")
    op.drop_index("idx_challenges_challenger_created", table_name="challenges")
    op.drop_table("challenges")
    op.drop_index("idx_test_attempts_student_status", table_name="test_attempts")
    op.drop_table("test_attempts")
    op.drop_index("idx_quiz_questions_pool", table_name="quiz_questions")
    op.drop_table("quiz_questions")
    op.drop_index("idx_users_created_at", table_name="users")
    op.drop_index("idx_users_role_grade", table_name="users")
    op.drop_table("users")
