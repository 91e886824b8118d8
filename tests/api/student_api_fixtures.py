from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from uuid import UUID, uuid4

import pytest

from app.core.config import get_settings
from app.db.repo.users_repo import UsersRepo
from app.game.challenges.types import ChallengeSnapshot
from app.services.student_auth import STUDENT_TOKEN_HEADER, build_student_token

STUDENT_ID = 101
TEACHER_ID = 555
FAKE_SESSION = object()


class FakeSessionFactory:
    def __init__(self) -> None:
        self.commits = 0
        self.rollbacks = 0

    @asynccontextmanager
    async def begin(self):  # noqa: ANN201
        try:
            yield FAKE_SESSION
        except Exception:
            self.rollbacks += 1
            raise
        self.commits += 1


def auth_headers(user_id: int = STUDENT_ID) -> dict[str, str]:
    token = build_student_token(user_id=user_id, secret=get_settings().auth_token_secret)
    return {STUDENT_TOKEN_HEADER: token}


def install_users(monkeypatch: pytest.MonkeyPatch) -> None:
    users = {
        STUDENT_ID: SimpleNamespace(id=STUDENT_ID, role="STUDENT", status="ACTIVE"),
        TEACHER_ID: SimpleNamespace(id=TEACHER_ID, role="TEACHER", status="ACTIVE"),
    }

    async def _get_by_id(session, user_id):  # noqa: ANN001
        del session
        return users.get(int(user_id))

    monkeypatch.setattr(UsersRepo, "get_by_id", _get_by_id)


def install_session(monkeypatch: pytest.MonkeyPatch, *route_modules) -> FakeSessionFactory:  # noqa: ANN002
    factory = FakeSessionFactory()
    for module in route_modules:
        monkeypatch.setattr(module, "SessionLocal", factory)
    install_users(monkeypatch)
    return factory


def build_snapshot(*, challenge_id: UUID | None = None, status: str = "PENDING") -> ChallengeSnapshot:
    created_at = datetime(2026, 3, 2, 15, 0, tzinfo=timezone.utc)
    return ChallengeSnapshot(
        challenge_id=challenge_id or uuid4(),
        challenger_user_id=STUDENT_ID,
        challenged_user_id=202,
        grade="5",
        subject="Math",
        difficulty="ADVANCED",
        question_ids=("q1", "q2", "q3", "q4", "q5"),
        wager_raindrops=5,
        message="I challenge you to a battle!",
        time_limit_seconds=150,
        status=status,
        expires_at=created_at + timedelta(hours=24),
        created_at=created_at,
    )
