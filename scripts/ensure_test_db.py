from __future__ import annotations

import argparse
import asyncio

import asyncpg
from sqlalchemy.ext.asyncio import create_async_engine

from app.core.config import get_settings
from app.db.models import Base
from app.db.scratch import ScratchDatabase


async def _create_database(target: ScratchDatabase) -> bool:
    if target.url.username is None:
        raise RuntimeError("DATABASE_URL username is required.")

    conn = await asyncpg.connect(
        host=target.host,
        port=target.port,
        user=target.url.username,
        password=target.url.password,
        database="postgres",
    )
    try:
        exists = await conn.fetchval("SELECT 1 FROM pg_database WHERE datname = $1", target.name)
        if exists:
            return False
        # Name already matched the lowercase identifier pattern.
        await conn.execute(f'CREATE DATABASE "{target.name}"')
        return True
    finally:
        await conn.close()


async def _create_schema(target: ScratchDatabase) -> None:
    engine = create_async_engine(target.url)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    finally:
        await engine.dispose()


async def _ensure_test_database(target: ScratchDatabase, *, with_schema: bool) -> None:
    target.ensure_disposable(action="create")

    created = await _create_database(target)
    state = "created" if created else "exists"
    print(f"ensure_test_db: {state} db={target.name} host={target.host}")  # noqa: T201
    if with_schema:
        await _create_schema(target)
        print(f"ensure_test_db: schema ready db={target.name}")  # noqa: T201


def main() -> int:
    parser = argparse.ArgumentParser(description="Create the local integration-test database.")
    parser.add_argument(
        "--with-schema",
        action="store_true",
        help="also create every table from the ORM metadata",
    )
    args = parser.parse_args()
    target = ScratchDatabase.from_url(get_settings().database_url)
    asyncio.run(_ensure_test_database(target, with_schema=args.with_schema))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
