from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.quiz_questions import QuizQuestion


class QuizQuestionsRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, question_id: str) -> QuizQuestion | None:
        return await session.get(QuizQuestion, question_id)

    @staticmethod
    async def list_by_ids(
        session: AsyncSession,
        question_ids: Sequence[str],
    ) -> list[QuizQuestion]:
        ids = tuple(dict.fromkeys(str(question_id) for question_id in question_ids))
        if not ids:
            return []
        stmt = select(QuizQuestion).where(QuizQuestion.question_id.in_(ids))
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_active_question_ids(
        session: AsyncSession,
        *,
        grade: str,
        subject: str,
        difficulties: Sequence[str],
    ) -> list[str]:
        stmt = (
            select(QuizQuestion.question_id)
            .where(
                QuizQuestion.grade == grade,
                QuizQuestion.subject == subject,
                QuizQuestion.difficulty.in_(tuple(difficulties)),
                QuizQuestion.status == "ACTIVE",
            )
            .order_by(QuizQuestion.question_id.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
