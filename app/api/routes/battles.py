from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

import structlog
from fastapi import APIRouter, Request

from app.db.session import SessionLocal
from app.game.battles.errors import BattleError
from app.game.battles.service_facade import BattleSessionService

from .battles_helpers import (
    _battle_http_error,
    _details_as_response,
    _live_status_as_response,
    _snapshot_as_response,
    _submit_as_response,
)
from .battles_models import (
    BattleDetailsResponse,
    BattleSnapshotResponse,
    ForfeitResponse,
    LiveStatusResponse,
    MarkReadyResponse,
    PresenceRequest,
    SubmitAnswerRequest,
    SubmitAnswerResponse,
)
from .student_helpers import _ensure_student, _resolve_student_id

router = APIRouter(prefix="/api/battles", tags=["battles"])
logger = structlog.get_logger(__name__)
battle_sessions = BattleSessionService()


@router.get("/{battle_id}", response_model=BattleDetailsResponse)
async def get_battle(battle_id: UUID, request: Request) -> BattleDetailsResponse:
    user_id = _resolve_student_id(request)
    try:
        async with SessionLocal.begin() as session:
            await _ensure_student(session, user_id=user_id)
            details = await battle_sessions.get_battle(
                session,
                battle_id=battle_id,
                user_id=user_id,
            )
    except BattleError as exc:
        raise _battle_http_error(exc) from exc
    return _details_as_response(details)


@router.post("/{battle_id}/ready", response_model=MarkReadyResponse)
async def mark_ready(battle_id: UUID, request: Request) -> MarkReadyResponse:
    user_id = _resolve_student_id(request)
    now_utc = datetime.now(timezone.utc)
    try:
        async with SessionLocal.begin() as session:
            await _ensure_student(session, user_id=user_id)
            result = await battle_sessions.mark_ready(
                session,
                battle_id=battle_id,
                user_id=user_id,
                now_utc=now_utc,
            )
    except BattleError as exc:
        raise _battle_http_error(exc) from exc
    return MarkReadyResponse(
        battle=_snapshot_as_response(result.snapshot),
        started_now=result.started_now,
        idempotent_replay=result.idempotent_replay,
    )


@router.post("/{battle_id}/answers", response_model=SubmitAnswerResponse)
async def submit_answer(
    battle_id: UUID,
    payload: SubmitAnswerRequest,
    request: Request,
) -> SubmitAnswerResponse:
    user_id = _resolve_student_id(request)
    now_utc = datetime.now(timezone.utc)
    try:
        async with SessionLocal.begin() as session:
            await _ensure_student(session, user_id=user_id)
            result = await battle_sessions.submit_answer(
                session,
                battle_id=battle_id,
                user_id=user_id,
                question_order=payload.question_order,
                selected_answer=payload.selected_answer,
                time_spent_seconds=payload.time_spent_seconds,
                now_utc=now_utc,
            )
    except BattleError as exc:
        logger.info(
            "battle_answer_rejected",
            battle_id=str(battle_id),
            user_id=user_id,
            question_order=payload.question_order,
            reason=type(exc).__name__,
        )
        raise _battle_http_error(exc) from exc
    return _submit_as_response(result)


@router.get("/{battle_id}/status", response_model=LiveStatusResponse)
async def get_live_status(battle_id: UUID, request: Request) -> LiveStatusResponse:
    user_id = _resolve_student_id(request)
    try:
        async with SessionLocal.begin() as session:
            await _ensure_student(session, user_id=user_id)
            status = await battle_sessions.get_live_status(
                session,
                battle_id=battle_id,
                user_id=user_id,
            )
    except BattleError as exc:
        raise _battle_http_error(exc) from exc
    return _live_status_as_response(status)


@router.post("/{battle_id}/presence", response_model=BattleSnapshotResponse)
async def set_presence(
    battle_id: UUID,
    payload: PresenceRequest,
    request: Request,
) -> BattleSnapshotResponse:
    user_id = _resolve_student_id(request)
    now_utc = datetime.now(timezone.utc)
    try:
        async with SessionLocal.begin() as session:
            await _ensure_student(session, user_id=user_id)
            snapshot = await battle_sessions.set_presence(
                session,
                battle_id=battle_id,
                user_id=user_id,
                connected=payload.connected,
                now_utc=now_utc,
            )
    except BattleError as exc:
        raise _battle_http_error(exc) from exc
    return _snapshot_as_response(snapshot)


@router.post("/{battle_id}/forfeit", response_model=ForfeitResponse)
async def forfeit_battle(battle_id: UUID, request: Request) -> ForfeitResponse:
    user_id = _resolve_student_id(request)
    now_utc = datetime.now(timezone.utc)
    try:
        async with SessionLocal.begin() as session:
            await _ensure_student(session, user_id=user_id)
            result = await battle_sessions.forfeit(
                session,
                battle_id=battle_id,
                user_id=user_id,
                now_utc=now_utc,
            )
    except BattleError as exc:
        raise _battle_http_error(exc) from exc
    return ForfeitResponse(
        battle=_snapshot_as_response(result.snapshot),
        winner_user_id=result.winner_user_id,
    )
