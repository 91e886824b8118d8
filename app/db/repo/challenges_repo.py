from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.challenges import Challenge


class ChallengesRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, challenge_id: UUID) -> Challenge | None:
        return await session.get(Challenge, challenge_id)

    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, challenge_id: UUID) -> Challenge | None:
        stmt = select(Challenge).where(Challenge.id == challenge_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create(session: AsyncSession, *, challenge: Challenge) -> Challenge:
        session.add(challenge)
        await session.flush()
        return challenge

    @staticmethod
    async def delete(session: AsyncSession, *, challenge: Challenge) -> None:
        await session.delete(challenge)
        await session.flush()

    @staticmethod
    async def list_by_pair_key_for_update(
        session: AsyncSession,
        *,
        pair_key: str,
        statuses: Sequence[str],
    ) -> list[Challenge]:
        stmt = (
            select(Challenge)
            .where(
                Challenge.pair_key == pair_key,
                Challenge.status.in_(tuple(statuses)),
            )
            .order_by(Challenge.created_at.asc())
            .with_for_update()
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_due_for_user_for_update(
        session: AsyncSession,
        *,
        user_id: int,
        status: str,
        now_utc: datetime,
    ) -> list[Challenge]:
        stmt = (
            select(Challenge)
            .where(
                or_(
                    Challenge.challenger_user_id == user_id,
                    Challenge.challenged_user_id == user_id,
                ),
                Challenge.status == status,
                Challenge.expires_at <= now_utc,
            )
            .order_by(Challenge.created_at.asc())
            .with_for_update()
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_partner_user_ids(
        session: AsyncSession,
        *,
        user_id: int,
        statuses: Sequence[str],
    ) -> set[int]:
        stmt = select(Challenge.challenger_user_id, Challenge.challenged_user_id).where(
            or_(
                Challenge.challenger_user_id == user_id,
                Challenge.challenged_user_id == user_id,
            ),
            Challenge.status.in_(tuple(statuses)),
        )
        result = await session.execute(stmt)
        partners: set[int] = set()
        for challenger_user_id, challenged_user_id in result.all():
            partners.add(
                int(challenged_user_id)
                if int(challenger_user_id) == user_id
                else int(challenger_user_id)
            )
        return partners

    @staticmethod
    async def list_sent_by_status(
        session: AsyncSession,
        *,
        challenger_user_id: int,
        status: str,
    ) -> list[Challenge]:
        stmt = (
            select(Challenge)
            .where(
                Challenge.challenger_user_id == challenger_user_id,
                Challenge.status == status,
            )
            .order_by(Challenge.created_at.desc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_received_by_status(
        session: AsyncSession,
        *,
        challenged_user_id: int,
        status: str,
    ) -> list[Challenge]:
        stmt = (
            select(Challenge)
            .where(
                Challenge.challenged_user_id == challenged_user_id,
                Challenge.status == status,
            )
            .order_by(Challenge.created_at.desc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_for_user_by_statuses(
        session: AsyncSession,
        *,
        user_id: int,
        statuses: Sequence[str],
        offset: int,
        limit: int,
    ) -> list[Challenge]:
        resolved_limit = max(1, int(limit))
        stmt = (
            select(Challenge)
            .where(
                or_(
                    Challenge.challenger_user_id == user_id,
                    Challenge.challenged_user_id == user_id,
                ),
                Challenge.status.in_(tuple(statuses)),
            )
            .order_by(Challenge.created_at.desc(), Challenge.id.desc())
            .offset(max(0, int(offset)))
            .limit(resolved_limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_outcome_rows_for_user(
        session: AsyncSession,
        *,
        user_id: int,
        statuses: Sequence[str],
    ) -> list[tuple[str, int | None]]:
        stmt = select(Challenge.status, Challenge.winner_user_id).where(
            or_(
                Challenge.challenger_user_id == user_id,
                Challenge.challenged_user_id == user_id,
            ),
            Challenge.status.in_(tuple(statuses)),
        )
        result = await session.execute(stmt)
        return [
            (str(status), int(winner_user_id) if winner_user_id is not None else None)
            for status, winner_user_id in result.all()
        ]

    @staticmethod
    async def list_completed_results_for_users(
        session: AsyncSession,
        *,
        user_ids: Sequence[int],
        status: str,
    ) -> list[tuple[int, int, int | None]]:
        ids = tuple({int(user_id) for user_id in user_ids})
        if not ids:
            return []
        stmt = select(
            Challenge.challenger_user_id,
            Challenge.challenged_user_id,
            Challenge.winner_user_id,
        ).where(
            or_(
                Challenge.challenger_user_id.in_(ids),
                Challenge.challenged_user_id.in_(ids),
            ),
            Challenge.status == status,
        )
        result = await session.execute(stmt)
        return [
            (
                int(challenger_user_id),
                int(challenged_user_id),
                int(winner_user_id) if winner_user_id is not None else None,
            )
            for challenger_user_id, challenged_user_id, winner_user_id in result.all()
        ]

