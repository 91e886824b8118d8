from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repo.battles_repo import BattlesRepo
from app.db.repo.test_attempts_repo import TestAttemptsRepo
from app.economy.raindrops.constants import TEST_ATTEMPT_STATUS_COMPLETED
from app.economy.raindrops.rules import build_raindrop_progress
from app.economy.raindrops.types import RaindropProgress
from app.game.battles.constants import BATTLE_STATUS_COMPLETED


class RaindropService:
    """Derived raindrop balance: completed test attempts plus completed battles."""

    @staticmethod
    async def totals_for_students(
        session: AsyncSession,
        *,
        student_user_ids: Sequence[int],
    ) -> dict[int, int]:
        ids = tuple({int(user_id) for user_id in student_user_ids})
        if not ids:
            return {}
        from_tests = await TestAttemptsRepo.sum_raindrops_by_student(
            session,
            student_user_ids=ids,
            status=TEST_ATTEMPT_STATUS_COMPLETED,
        )
        from_battles = await BattlesRepo.sum_raindrops_by_user(
            session,
            user_ids=ids,
            status=BATTLE_STATUS_COMPLETED,
        )
        return {
            user_id: max(0, from_tests.get(user_id, 0) + from_battles.get(user_id, 0))
            for user_id in ids
        }

    @staticmethod
    async def total_raindrops(session: AsyncSession, *, student_user_id: int) -> int:
        totals = await RaindropService.totals_for_students(
            session,
            student_user_ids=(student_user_id,),
        )
        return totals.get(int(student_user_id), 0)

    @staticmethod
    async def get_progress(session: AsyncSession, *, student_user_id: int) -> RaindropProgress:
        total = await RaindropService.total_raindrops(session, student_user_id=student_user_id)
        return build_raindrop_progress(total)
