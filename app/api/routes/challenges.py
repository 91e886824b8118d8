from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

import structlog
from fastapi import APIRouter, HTTPException, Query, Request

from app.db.session import SessionLocal
from app.game.challenges.errors import ChallengeError, ChallengeExpiredError
from app.game.challenges.service_facade import ChallengeLedger

from .challenges_helpers import (
    _challenge_as_response,
    _challenge_http_error,
    _history_as_response,
    _opponents_as_response,
    _tiers_as_response,
)
from .challenges_models import (
    AcceptChallengeResponse,
    AvailableOpponentsResponse,
    ChallengeCanceledResponse,
    ChallengeHistoryResponse,
    ChallengeResponse,
    CreateChallengeRequest,
    PendingChallengesResponse,
    SubjectName,
    UnlockStatusResponse,
)
from .student_helpers import _ensure_student, _resolve_student_id

router = APIRouter(prefix="/api/challenges", tags=["challenges"])
logger = structlog.get_logger(__name__)
challenge_ledger = ChallengeLedger()


def _validation_error(exc: ValueError) -> HTTPException:
    return HTTPException(status_code=422, detail={"code": "E_VALIDATION", "message": str(exc)})


@router.get("/unlock-status", response_model=UnlockStatusResponse)
async def get_unlock_status(request: Request) -> UnlockStatusResponse:
    user_id = _resolve_student_id(request)
    async with SessionLocal.begin() as session:
        await _ensure_student(session, user_id=user_id)
        balance, tiers = await challenge_ledger.get_unlock_status(session, user_id=user_id)
    return UnlockStatusResponse(raindrops=balance, tiers=_tiers_as_response(tiers))


@router.get("/available-opponents", response_model=AvailableOpponentsResponse)
async def get_available_opponents(
    request: Request,
    subject: SubjectName = Query(),
) -> AvailableOpponentsResponse:
    user_id = _resolve_student_id(request)
    now_utc = datetime.now(timezone.utc)
    try:
        async with SessionLocal.begin() as session:
            await _ensure_student(session, user_id=user_id)
            result = await challenge_ledger.list_available_opponents(
                session,
                user_id=user_id,
                subject=subject,
                now_utc=now_utc,
            )
    except ChallengeError as exc:
        raise _challenge_http_error(exc) from exc
    return _opponents_as_response(result)


@router.post("", response_model=ChallengeResponse, status_code=201)
async def create_challenge(
    payload: CreateChallengeRequest,
    request: Request,
) -> ChallengeResponse:
    user_id = _resolve_student_id(request)
    now_utc = datetime.now(timezone.utc)
    try:
        async with SessionLocal.begin() as session:
            await _ensure_student(session, user_id=user_id)
            snapshot = await challenge_ledger.create_challenge(
                session,
                challenger_user_id=user_id,
                challenged_user_id=payload.challenged_user_id,
                subject=payload.subject,
                difficulty=payload.difficulty,
                wager_raindrops=payload.wager_raindrops,
                message=payload.message,
                now_utc=now_utc,
            )
    except ChallengeError as exc:
        logger.info(
            "challenge_create_rejected",
            challenger_user_id=user_id,
            challenged_user_id=payload.challenged_user_id,
            reason=type(exc).__name__,
        )
        raise _challenge_http_error(exc) from exc
    except ValueError as exc:
        raise _validation_error(exc) from exc
    return _challenge_as_response(snapshot)


@router.get("/pending", response_model=PendingChallengesResponse)
async def get_pending_challenges(request: Request) -> PendingChallengesResponse:
    user_id = _resolve_student_id(request)
    now_utc = datetime.now(timezone.utc)
    async with SessionLocal.begin() as session:
        await _ensure_student(session, user_id=user_id)
        result = await challenge_ledger.list_pending(session, user_id=user_id, now_utc=now_utc)
    return PendingChallengesResponse(
        sent=[_challenge_as_response(item) for item in result.sent],
        received=[_challenge_as_response(item) for item in result.received],
        total=result.total,
    )


@router.get("/history", response_model=ChallengeHistoryResponse)
async def get_challenge_history(
    request: Request,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
) -> ChallengeHistoryResponse:
    user_id = _resolve_student_id(request)
    now_utc = datetime.now(timezone.utc)
    async with SessionLocal.begin() as session:
        await _ensure_student(session, user_id=user_id)
        result = await challenge_ledger.get_history(
            session,
            user_id=user_id,
            page=page,
            limit=limit,
            now_utc=now_utc,
        )
    return _history_as_response(result)


@router.get("/{challenge_id}", response_model=ChallengeResponse)
async def get_challenge(challenge_id: UUID, request: Request) -> ChallengeResponse:
    user_id = _resolve_student_id(request)
    now_utc = datetime.now(timezone.utc)
    try:
        async with SessionLocal.begin() as session:
            await _ensure_student(session, user_id=user_id)
            snapshot = await challenge_ledger.get_challenge(
                session,
                challenge_id=challenge_id,
                user_id=user_id,
                now_utc=now_utc,
            )
    except ChallengeError as exc:
        raise _challenge_http_error(exc) from exc
    return _challenge_as_response(snapshot)


@router.post("/{challenge_id}/accept", response_model=AcceptChallengeResponse)
async def accept_challenge(challenge_id: UUID, request: Request) -> AcceptChallengeResponse:
    user_id = _resolve_student_id(request)
    now_utc = datetime.now(timezone.utc)
    expired_error: ChallengeExpiredError | None = None
    try:
        async with SessionLocal.begin() as session:
            await _ensure_student(session, user_id=user_id)
            try:
                result = await challenge_ledger.accept_challenge(
                    session,
                    challenge_id=challenge_id,
                    user_id=user_id,
                    now_utc=now_utc,
                )
            except ChallengeExpiredError as exc:
                expired_error = exc
    except ChallengeError as exc:
        raise _challenge_http_error(exc) from exc
    if expired_error is not None:
        raise _challenge_http_error(expired_error) from expired_error
    return AcceptChallengeResponse(
        challenge=_challenge_as_response(result.challenge),
        battle_id=result.battle_id,
    )


@router.post("/{challenge_id}/decline", response_model=ChallengeResponse)
async def decline_challenge(challenge_id: UUID, request: Request) -> ChallengeResponse:
    user_id = _resolve_student_id(request)
    now_utc = datetime.now(timezone.utc)
    expired_error: ChallengeExpiredError | None = None
    try:
        async with SessionLocal.begin() as session:
            await _ensure_student(session, user_id=user_id)
            try:
                snapshot = await challenge_ledger.decline_challenge(
                    session,
                    challenge_id=challenge_id,
                    user_id=user_id,
                    now_utc=now_utc,
                )
            except ChallengeExpiredError as exc:
                expired_error = exc
    except ChallengeError as exc:
        raise _challenge_http_error(exc) from exc
    if expired_error is not None:
        raise _challenge_http_error(expired_error) from expired_error
    return _challenge_as_response(snapshot)


@router.delete("/{challenge_id}", response_model=ChallengeCanceledResponse)
async def cancel_challenge(challenge_id: UUID, request: Request) -> ChallengeCanceledResponse:
    user_id = _resolve_student_id(request)
    now_utc = datetime.now(timezone.utc)
    expired_error: ChallengeExpiredError | None = None
    try:
        async with SessionLocal.begin() as session:
            await _ensure_student(session, user_id=user_id)
            try:
                snapshot = await challenge_ledger.cancel_challenge(
                    session,
                    challenge_id=challenge_id,
                    user_id=user_id,
                    now_utc=now_utc,
                )
            except ChallengeExpiredError as exc:
                expired_error = exc
    except ChallengeError as exc:
        raise _challenge_http_error(exc) from exc
    if expired_error is not None:
        raise _challenge_http_error(expired_error) from expired_error
    return ChallengeCanceledResponse(challenge_id=snapshot.challenge_id, status=snapshot.status)
