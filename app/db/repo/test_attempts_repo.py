from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.test_attempts import TestAttempt


class TestAttemptsRepo:
    @staticmethod
    async def sum_raindrops_by_student(
        session: AsyncSession,
        *,
        student_user_ids: Sequence[int],
        status: str,
    ) -> dict[int, int]:
        ids = tuple({int(user_id) for user_id in student_user_ids})
        if not ids:
            return {}
        stmt = (
            select(
                TestAttempt.student_user_id,
                func.coalesce(func.sum(TestAttempt.raindrops_earned), 0),
            )
            .where(
                TestAttempt.student_user_id.in_(ids),
                TestAttempt.status == status,
            )
            .group_by(TestAttempt.student_user_id)
        )
        result = await session.execute(stmt)
        return {int(user_id): int(total) for user_id, total in result.all()}
