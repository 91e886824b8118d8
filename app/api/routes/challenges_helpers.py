from __future__ import annotations

from fastapi import HTTPException

from app.economy.raindrops.types import UnlockTierStatus
from app.game.challenges.errors import (
    ChallengeAccessError,
    ChallengeError,
    ChallengeExpiredError,
    ChallengeNotFoundError,
    ChallengeStateError,
    DifficultyLockedError,
    DuplicateChallengeError,
    GradeMismatchError,
    InsufficientQuestionPoolError,
    InsufficientRaindropsError,
    InvalidPartyError,
    NotChallengedPartyError,
    NotChallengerPartyError,
)
from app.game.challenges.types import (
    AvailableOpponentsResult,
    ChallengeHistoryPage,
    ChallengePartyResult,
    ChallengeSnapshot,
    OpponentView,
)

from .challenges_models import (
    AvailableOpponentsResponse,
    BattleStatsResponse,
    ChallengeHistoryResponse,
    ChallengeHistoryStatsResponse,
    ChallengePartyResultResponse,
    ChallengeResponse,
    OpponentResponse,
    PaginationResponse,
    UnlockTierResponse,
)


def _tiers_as_response(tiers: dict[str, UnlockTierStatus]) -> dict[str, UnlockTierResponse]:
    return {
        tier: UnlockTierResponse(
            tier=status.tier,
            name=status.name,
            description=status.description,
            unlocked=status.unlocked,
            required=status.required,
            missing=status.missing,
        )
        for tier, status in tiers.items()
    }


def _party_result_as_response(
    result: ChallengePartyResult | None,
) -> ChallengePartyResultResponse | None:
    if result is None:
        return None
    return ChallengePartyResultResponse(
        score=result.score,
        raindrops=result.raindrops,
        time_spent_seconds=result.time_spent_seconds,
        answers=list(result.answers),
    )


def _challenge_as_response(snapshot: ChallengeSnapshot) -> ChallengeResponse:
    return ChallengeResponse(
        challenge_id=snapshot.challenge_id,
        challenger_user_id=snapshot.challenger_user_id,
        challenged_user_id=snapshot.challenged_user_id,
        grade=snapshot.grade,
        subject=snapshot.subject,
        difficulty=snapshot.difficulty,
        question_ids=list(snapshot.question_ids),
        wager_raindrops=snapshot.wager_raindrops,
        message=snapshot.message,
        time_limit_seconds=snapshot.time_limit_seconds,
        status=snapshot.status,
        expires_at=snapshot.expires_at,
        created_at=snapshot.created_at,
        accepted_at=snapshot.accepted_at,
        started_at=snapshot.started_at,
        completed_at=snapshot.completed_at,
        winner_user_id=snapshot.winner_user_id,
        win_condition=snapshot.win_condition,
        challenger_result=_party_result_as_response(snapshot.challenger_result),
        challenged_result=_party_result_as_response(snapshot.challenged_result),
        battle_id=snapshot.battle_id,
    )


def _opponent_as_response(opponent: OpponentView) -> OpponentResponse:
    return OpponentResponse(
        user_id=opponent.user_id,
        username=opponent.username,
        first_name=opponent.first_name,
        last_name=opponent.last_name,
        grade=opponent.grade,
        battle_stats=BattleStatsResponse(
            total=opponent.battle_stats.total,
            wins=opponent.battle_stats.wins,
            losses=opponent.battle_stats.losses,
            win_rate=opponent.battle_stats.win_rate,
        ),
        raindrops=opponent.raindrops,
    )


def _opponents_as_response(result: AvailableOpponentsResult) -> AvailableOpponentsResponse:
    return AvailableOpponentsResponse(
        subject=result.subject,
        opponents=[_opponent_as_response(opponent) for opponent in result.opponents],
        count=len(result.opponents),
        raindrops=result.raindrops,
        tiers=_tiers_as_response(result.tiers),
    )


def _history_as_response(page: ChallengeHistoryPage) -> ChallengeHistoryResponse:
    return ChallengeHistoryResponse(
        challenges=[_challenge_as_response(item) for item in page.items],
        stats=ChallengeHistoryStatsResponse(
            total=page.stats.total,
            wins=page.stats.wins,
            losses=page.stats.losses,
            ties=page.stats.ties,
            declined=page.stats.declined,
            expired=page.stats.expired,
        ),
        pagination=PaginationResponse(
            page=page.page,
            limit=page.limit,
            total=page.total,
            pages=page.pages,
        ),
    )


def _challenge_http_error(exc: ChallengeError) -> HTTPException:
    if isinstance(exc, ChallengeNotFoundError):
        return HTTPException(status_code=404, detail={"code": "E_CHALLENGE_NOT_FOUND"})
    if isinstance(exc, ChallengeExpiredError):
        return HTTPException(
            status_code=410,
            detail={"code": "E_CHALLENGE_EXPIRED", "message": "This challenge has expired"},
        )
    if isinstance(exc, DifficultyLockedError):
        return HTTPException(
            status_code=403,
            detail={
                "code": "E_DIFFICULTY_LOCKED",
                "message": str(exc),
                "difficulty": exc.difficulty,
                "required": exc.required,
                "balance": exc.balance,
                "missing": exc.missing,
            },
        )
    if isinstance(exc, InsufficientRaindropsError):
        return HTTPException(
            status_code=422,
            detail={
                "code": "E_INSUFFICIENT_RAINDROPS",
                "message": str(exc),
                "balance": exc.balance,
                "required": exc.required,
                "missing": exc.missing,
            },
        )
    if isinstance(exc, InsufficientQuestionPoolError):
        return HTTPException(
            status_code=422,
            detail={
                "code": "E_INSUFFICIENT_QUESTION_POOL",
                "message": str(exc),
                "available": exc.available,
                "required": exc.required,
            },
        )
    if isinstance(exc, DuplicateChallengeError):
        return HTTPException(
            status_code=409,
            detail={
                "code": "E_DUPLICATE_CHALLENGE",
                "message": "You already have an active challenge with this student",
            },
        )
    if isinstance(exc, GradeMismatchError):
        return HTTPException(
            status_code=400,
            detail={
                "code": "E_GRADE_MISMATCH",
                "message": "Can only challenge students in the same grade",
            },
        )
    if isinstance(exc, InvalidPartyError):
        return HTTPException(
            status_code=400,
            detail={"code": "E_INVALID_PARTY", "message": "Invalid challenged student"},
        )
    if isinstance(exc, NotChallengedPartyError):
        return HTTPException(status_code=403, detail={"code": "E_NOT_CHALLENGED_PARTY"})
    if isinstance(exc, NotChallengerPartyError):
        return HTTPException(status_code=403, detail={"code": "E_NOT_CHALLENGER"})
    if isinstance(exc, ChallengeAccessError):
        return HTTPException(status_code=403, detail={"code": "E_NOT_CHALLENGE_PARTY"})
    if isinstance(exc, ChallengeStateError):
        return HTTPException(
            status_code=400,
            detail={"code": "E_NOT_PENDING", "message": str(exc), "status": exc.status},
        )
    return HTTPException(status_code=400, detail={"code": "E_CHALLENGE_ERROR"})
