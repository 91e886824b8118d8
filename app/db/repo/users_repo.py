from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.users import User


class UsersRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, user_id: int) -> User | None:
        return await session.get(User, user_id)

    @staticmethod
    async def list_by_ids(
        session: AsyncSession,
        user_ids: Sequence[int],
    ) -> list[User]:
        ids = tuple({int(user_id) for user_id in user_ids})
        if not ids:
            return []
        stmt = select(User).where(User.id.in_(ids))
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_active_by_role_and_grade(
        session: AsyncSession,
        *,
        role: str,
        grade: str,
        exclude_user_ids: Sequence[int] = (),
    ) -> list[User]:
        stmt = (
            select(User)
            .where(
                User.role == role,
                User.grade == grade,
                User.status == "ACTIVE",
            )
            .order_by(User.first_name.asc(), User.id.asc())
        )
        if exclude_user_ids:
            stmt = stmt.where(User.id.not_in(tuple(exclude_user_ids)))
        result = await session.execute(stmt)
        return list(result.scalars().all())
