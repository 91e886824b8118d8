from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.quiz_questions import QuizQuestion
from app.db.repo.quiz_questions_repo import QuizQuestionsRepo
from app.game.questions.types import BattleQuestion


class QuestionSource(Protocol):
    async def list_candidate_ids(
        self,
        session: AsyncSession,
        *,
        grade: str,
        subject: str,
        difficulties: Sequence[str],
    ) -> list[str]: ...

    async def get_questions(
        self,
        session: AsyncSession,
        *,
        question_ids: Sequence[str],
    ) -> dict[str, BattleQuestion]: ...


def to_battle_question(record: QuizQuestion) -> BattleQuestion:
    return BattleQuestion(
        question_id=record.question_id,
        text=record.question_text,
        options=tuple(str(option) for option in record.options),
        correct_answer=record.correct_answer,
        difficulty=record.difficulty,
        explanation=record.explanation,
    )


class DbQuestionSource:
    """Reads the shared question bank; only ACTIVE questions are candidates."""

    async def list_candidate_ids(
        self,
        session: AsyncSession,
        *,
        grade: str,
        subject: str,
        difficulties: Sequence[str],
    ) -> list[str]:
        return await QuizQuestionsRepo.list_active_question_ids(
            session,
            grade=grade,
            subject=subject,
            difficulties=difficulties,
        )

    async def get_questions(
        self,
        session: AsyncSession,
        *,
        question_ids: Sequence[str],
    ) -> dict[str, BattleQuestion]:
        records = await QuizQuestionsRepo.list_by_ids(session, question_ids)
        return {record.question_id: to_battle_question(record) for record in records}
