from __future__ import annotations

import pytest
from sqlalchemy import text

from app.db.models import Base
from app.db.scratch import ScratchDatabase
from app.db.session import engine

TRUNCATE_TABLES = (
    "battle_events",
    "battle_answers",
    "battles",
    "challenges",
    "outbox_events",
    "test_attempts",
    "quiz_questions",
    "users",
)

TRUNCATE_SQL = f"TRUNCATE TABLE {', '.join(TRUNCATE_TABLES)} RESTART IDENTITY CASCADE"


@pytest.fixture(autouse=True)
async def cleanup_db() -> None:
    # Dispose pooled connections between tests to avoid cross-event-loop asyncpg reuse.
    await engine.dispose()

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as exc:  # pragma: no cover - environment-dependent
        pytest.skip(f"Postgres is required for integration tests: {exc}")

    ScratchDatabase.from_url(engine.url).ensure_disposable(action="truncate")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await conn.execute(text(TRUNCATE_SQL))

    yield

    await engine.dispose()
