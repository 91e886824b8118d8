from __future__ import annotations

from fastapi import HTTPException

from app.game.battles.errors import (
    AlreadyAnsweredError,
    BattleError,
    BattleNotForfeitableError,
    BattleNotFoundError,
    BattleNotWaitingError,
    BattleStateError,
    InvalidQuestionOrderError,
    NotParticipantError,
    SessionNotInProgressError,
)
from app.game.battles.types import (
    BattleDetails,
    BattleResults,
    BattleSnapshot,
    LiveStatus,
    ParticipantProgress,
    SubmitAnswerResult,
)

from .battles_models import (
    BattleAnswerResponse,
    BattleDetailsResponse,
    BattleEventResponse,
    BattleQuestionResponse,
    BattleResultsResponse,
    BattleSnapshotResponse,
    LiveStatusResponse,
    ParticipantProgressResponse,
    SubmitAnswerResponse,
)


def _progress_as_response(progress: ParticipantProgress) -> ParticipantProgressResponse:
    return ParticipantProgressResponse(
        user_id=progress.user_id,
        role=progress.role,
        ready=progress.ready,
        connected=progress.connected,
        score=progress.score,
        raindrops=progress.raindrops,
        correct_answers=progress.correct_answers,
        answered_count=progress.answered_count,
        time_spent_seconds=progress.time_spent_seconds,
        average_time_seconds=progress.average_time_seconds,
    )


def _results_as_response(results: BattleResults | None) -> BattleResultsResponse | None:
    if results is None:
        return None
    return BattleResultsResponse(
        winner_user_id=results.winner_user_id,
        win_reason=results.win_reason,
        challenger_score=results.challenger_score,
        challenged_score=results.challenged_score,
        challenger_raindrops=results.challenger_raindrops,
        challenged_raindrops=results.challenged_raindrops,
        duration_seconds=results.duration_seconds,
        forfeited_by_user_id=results.forfeited_by_user_id,
    )


def _snapshot_as_response(snapshot: BattleSnapshot) -> BattleSnapshotResponse:
    return BattleSnapshotResponse(
        battle_id=snapshot.battle_id,
        challenge_id=snapshot.challenge_id,
        status=snapshot.status,
        difficulty=snapshot.difficulty,
        total_questions=snapshot.total_questions,
        seconds_per_question=snapshot.seconds_per_question,
        current_question_index=snapshot.current_question_index,
        question_started_at=snapshot.question_started_at,
        challenger=_progress_as_response(snapshot.challenger),
        challenged=_progress_as_response(snapshot.challenged),
        started_at=snapshot.started_at,
        completed_at=snapshot.completed_at,
        results=_results_as_response(snapshot.results),
    )


def _details_as_response(details: BattleDetails) -> BattleDetailsResponse:
    return BattleDetailsResponse(
        battle=_snapshot_as_response(details.snapshot),
        questions=[
            BattleQuestionResponse(
                order=question.order,
                question_id=question.question_id,
                text=question.text,
                options=list(question.options),
                difficulty=question.difficulty,
            )
            for question in details.questions
        ],
        my_answers=[
            BattleAnswerResponse(
                question_order=answer.question_order,
                question_id=answer.question_id,
                selected_answer=answer.selected_answer,
                is_correct=answer.is_correct,
                time_spent_seconds=answer.time_spent_seconds,
                points=answer.points,
                raindrops=answer.raindrops,
                submitted_at=answer.submitted_at,
            )
            for answer in details.my_answers
        ],
        events=[
            BattleEventResponse(
                event_type=event.event_type,
                user_id=event.user_id,
                payload=dict(event.payload),
                happened_at=event.happened_at,
            )
            for event in details.events
        ],
    )


def _submit_as_response(result: SubmitAnswerResult) -> SubmitAnswerResponse:
    return SubmitAnswerResponse(
        battle_id=result.battle_id,
        question_order=result.question_order,
        is_correct=result.is_correct,
        points=result.points,
        raindrops=result.raindrops,
        explanation=result.explanation,
        status=result.status,
        current_question_index=result.current_question_index,
        my_progress=_progress_as_response(result.my_progress),
        opponent_progress=_progress_as_response(result.opponent_progress),
        battle_completed=result.battle_completed,
        results=_results_as_response(result.results),
    )


def _live_status_as_response(status: LiveStatus) -> LiveStatusResponse:
    return LiveStatusResponse(
        battle_id=status.battle_id,
        status=status.status,
        current_question_index=status.current_question_index,
        total_questions=status.total_questions,
        question_started_at=status.question_started_at,
        me=_progress_as_response(status.me),
        opponent=_progress_as_response(status.opponent),
        results=_results_as_response(status.results),
    )


def _battle_http_error(exc: BattleError) -> HTTPException:
    if isinstance(exc, BattleNotFoundError):
        return HTTPException(status_code=404, detail={"code": "E_BATTLE_NOT_FOUND"})
    if isinstance(exc, NotParticipantError):
        return HTTPException(
            status_code=403,
            detail={"code": "E_NOT_PARTICIPANT", "message": "You are not part of this battle"},
        )
    if isinstance(exc, AlreadyAnsweredError):
        return HTTPException(
            status_code=409,
            detail={"code": "E_ALREADY_ANSWERED", "message": "Question already answered"},
        )
    if isinstance(exc, InvalidQuestionOrderError):
        return HTTPException(
            status_code=400,
            detail={
                "code": "E_INVALID_QUESTION_ORDER",
                "message": str(exc),
                "total_questions": exc.total_questions,
            },
        )
    if isinstance(exc, BattleNotWaitingError):
        return HTTPException(
            status_code=400,
            detail={"code": "E_BATTLE_NOT_WAITING", "message": str(exc), "status": exc.status},
        )
    if isinstance(exc, SessionNotInProgressError):
        return HTTPException(
            status_code=400,
            detail={
                "code": "E_SESSION_NOT_IN_PROGRESS",
                "message": str(exc),
                "status": exc.status,
            },
        )
    if isinstance(exc, BattleNotForfeitableError):
        return HTTPException(
            status_code=400,
            detail={
                "code": "E_BATTLE_NOT_FORFEITABLE",
                "message": str(exc),
                "status": exc.status,
            },
        )
    if isinstance(exc, BattleStateError):
        return HTTPException(
            status_code=400,
            detail={"code": "E_BATTLE_STATE", "message": str(exc), "status": exc.status},
        )
    return HTTPException(status_code=400, detail={"code": "E_BATTLE_ERROR"})
