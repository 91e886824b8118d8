from __future__ import annotations

from fastapi import HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.db.repo.users_repo import UsersRepo
from app.game.challenges.constants import USER_ROLE_STUDENT, USER_STATUS_ACTIVE
from app.services.student_auth import STUDENT_TOKEN_HEADER, parse_student_token


def _resolve_student_id(request: Request) -> int:
    user_id = parse_student_token(
        token=request.headers.get(STUDENT_TOKEN_HEADER),
        secret=get_settings().auth_token_secret,
    )
    if user_id is None:
        raise HTTPException(status_code=401, detail={"code": "E_UNAUTHORIZED"})
    return user_id


async def _ensure_student(session: AsyncSession, *, user_id: int) -> None:
    user = await UsersRepo.get_by_id(session, user_id)
    if user is None or user.status != USER_STATUS_ACTIVE:
        raise HTTPException(status_code=401, detail={"code": "E_UNAUTHORIZED"})
    if user.role != USER_ROLE_STUDENT:
        raise HTTPException(
            status_code=403,
            detail={"code": "E_STUDENTS_ONLY", "message": "Access denied. Students only."},
        )
