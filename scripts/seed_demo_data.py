from __future__ import annotations

import argparse
import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import select

from app.core.config import get_settings
from app.db.models.quiz_questions import QuizQuestion
from app.db.models.test_attempts import TestAttempt as TestAttemptModel
from app.db.models.users import User
from app.db.scratch import PRODUCTION_ENVS
from app.db.session import SessionLocal
from app.game.challenges.constants import (
    DIFFICULTY_ADVANCED,
    DIFFICULTY_EXPERT,
    SUBJECTS,
)


@dataclass(frozen=True, slots=True)
class DemoStudent:
    user_id: int
    username: str
    first_name: str
    raindrops: int


DEMO_STUDENTS: tuple[DemoStudent, ...] = (
    DemoStudent(user_id=1001, username="demo_rain", first_name="Rain", raindrops=10),
    DemoStudent(user_id=1002, username="demo_storm", first_name="Storm", raindrops=30),
    DemoStudent(user_id=1003, username="demo_cloud", first_name="Cloud", raindrops=60),
    DemoStudent(user_id=1004, username="demo_thunder", first_name="Thunder", raindrops=90),
)


def _validate_seed_target(*, app_env: str) -> None:
    if app_env.strip().lower() in PRODUCTION_ENVS:
        raise RuntimeError("Refusing to seed demo data into a production environment.")


def _build_demo_questions(
    *,
    grade: str,
    per_difficulty: int,
    now_utc: datetime,
) -> list[QuizQuestion]:
    records: list[QuizQuestion] = []
    for subject in SUBJECTS:
        for difficulty in (DIFFICULTY_ADVANCED, DIFFICULTY_EXPERT):
            multiplier = 3 if difficulty == DIFFICULTY_EXPERT else 2
            for idx in range(1, per_difficulty + 1):
                answer = idx * multiplier
                records.append(
                    QuizQuestion(
                        question_id=f"demo_g{grade}_{subject.lower()}_{difficulty.lower()}_{idx:03d}",
                        grade=grade,
                        subject=subject,
                        difficulty=difficulty,
                        question_text=f"{subject}: what is {idx} x {multiplier}?",
                        options=[str(answer), str(answer + 1), str(answer + 2), str(answer + 5)],
                        correct_answer=str(answer),
                        explanation=f"{idx} x {multiplier} = {answer}",
                        status="ACTIVE",
                        created_at=now_utc,
                        updated_at=now_utc,
                    )
                )
    return records


def _build_demo_attempts(
    students: tuple[DemoStudent, ...],
    *,
    now_utc: datetime,
) -> list[TestAttemptModel]:
    return [
        TestAttemptModel(
            id=uuid4(),
            student_user_id=student.user_id,
            test_id=f"demo-placement-{student.username}",
            status="COMPLETED",
            raindrops_earned=student.raindrops,
            submitted_at=now_utc,
        )
        for student in students
        if student.raindrops > 0
    ]


async def _seed(*, grade: str, per_difficulty: int) -> None:
    now_utc = datetime.now(timezone.utc)
    async with SessionLocal.begin() as session:
        existing = await session.execute(
            select(User.id).where(User.id.in_([student.user_id for student in DEMO_STUDENTS]))
        )
        if existing.first() is not None:
            print("seed_demo_data: demo students already present, skipping")  # noqa: T201
            return

        session.add_all(
            User(
                id=student.user_id,
                username=student.username,
                first_name=student.first_name,
                role="STUDENT",
                grade=grade,
                status="ACTIVE",
            )
            for student in DEMO_STUDENTS
        )
        await session.flush()
        session.add_all(_build_demo_attempts(DEMO_STUDENTS, now_utc=now_utc))
        questions = _build_demo_questions(
            grade=grade,
            per_difficulty=per_difficulty,
            now_utc=now_utc,
        )
        session.add_all(questions)
        await session.flush()

    print(  # noqa: T201
        f"seed_demo_data: students={len(DEMO_STUDENTS)} questions={len(questions)} grade={grade}"
    )


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed demo students and battle questions")
    parser.add_argument("--grade", default="5")
    parser.add_argument("--per-difficulty", type=int, default=6)
    return parser.parse_args()


def main() -> int:
    args = _parse_args()
    _validate_seed_target(app_env=get_settings().app_env)
    asyncio.run(_seed(grade=args.grade, per_difficulty=args.per_difficulty))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
