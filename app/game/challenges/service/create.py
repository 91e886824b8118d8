from __future__ import annotations

from datetime import datetime
from uuid import uuid4

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.challenges import Challenge
from app.db.repo.challenges_repo import ChallengesRepo
from app.db.repo.users_repo import UsersRepo
from app.economy.raindrops.rules import can_access_difficulty, required_raindrops
from app.economy.raindrops.service import RaindropService
from app.game.challenges.constants import (
    CHALLENGE_ACTIVE_STATUSES,
    CHALLENGE_DEFAULT_MESSAGE,
    CHALLENGE_DIFFICULTIES,
    CHALLENGE_MESSAGE_MAX_LENGTH,
    CHALLENGE_QUESTION_COUNT,
    CHALLENGE_STATUS_PENDING,
    CHALLENGE_TIME_LIMIT_SECONDS,
    CHALLENGE_WAGER_MAX,
    CHALLENGE_WAGER_MIN,
    DIFFICULTY_QUESTION_POOLS,
    build_pair_key,
)
from app.game.challenges.errors import (
    DifficultyLockedError,
    DuplicateChallengeError,
    GradeMismatchError,
    InsufficientQuestionPoolError,
    InsufficientRaindropsError,
    InvalidPartyError,
)
from app.game.challenges.types import ChallengeSnapshot
from app.game.notifications import BattleNotifier
from app.game.questions.selection import select_question_ids
from app.game.questions.source import QuestionSource

from .internal import (
    _build_challenge_snapshot,
    _challenge_expires_at,
    _expire_and_publish_if_due,
    _is_active_student,
    _publish_challenge_event,
)

logger = structlog.get_logger(__name__)


async def create_challenge(
    session: AsyncSession,
    *,
    challenger_user_id: int,
    challenged_user_id: int,
    subject: str,
    difficulty: str,
    wager_raindrops: int,
    message: str | None,
    now_utc: datetime,
    question_source: QuestionSource,
    notifier: BattleNotifier,
) -> ChallengeSnapshot:
    if difficulty not in CHALLENGE_DIFFICULTIES:
        raise ValueError(f"unsupported challenge difficulty: {difficulty}")
    if not CHALLENGE_WAGER_MIN <= wager_raindrops <= CHALLENGE_WAGER_MAX:
        raise ValueError(f"wager must be within {CHALLENGE_WAGER_MIN}..{CHALLENGE_WAGER_MAX}")
    resolved_message = (message or "").strip() or CHALLENGE_DEFAULT_MESSAGE
    if len(resolved_message) > CHALLENGE_MESSAGE_MAX_LENGTH:
        raise ValueError(f"message exceeds {CHALLENGE_MESSAGE_MAX_LENGTH} characters")

    if challenger_user_id == challenged_user_id:
        raise InvalidPartyError
    challenger = await UsersRepo.get_by_id(session, challenger_user_id)
    challenged = await UsersRepo.get_by_id(session, challenged_user_id)
    if challenger is None or challenged is None:
        raise InvalidPartyError
    if not _is_active_student(challenger) or not _is_active_student(challenged):
        raise InvalidPartyError
    if challenger.grade is None or challenger.grade != challenged.grade:
        raise GradeMismatchError

    balance = await RaindropService.total_raindrops(session, student_user_id=challenger_user_id)
    if not can_access_difficulty(balance, difficulty):
        raise DifficultyLockedError(
            difficulty=difficulty,
            required=required_raindrops(difficulty) or 0,
            balance=balance,
        )
    if balance < wager_raindrops:
        raise InsufficientRaindropsError(balance=balance, required=wager_raindrops)

    pair_key = build_pair_key(challenger_user_id, challenged_user_id)
    open_challenges = await ChallengesRepo.list_by_pair_key_for_update(
        session,
        pair_key=pair_key,
        statuses=tuple(CHALLENGE_ACTIVE_STATUSES),
    )
    for open_challenge in open_challenges:
        if await _expire_and_publish_if_due(
            session,
            notifier=notifier,
            challenge=open_challenge,
            now_utc=now_utc,
        ):
            continue
        raise DuplicateChallengeError

    candidate_ids = await question_source.list_candidate_ids(
        session,
        grade=challenger.grade,
        subject=subject,
        difficulties=DIFFICULTY_QUESTION_POOLS[difficulty],
    )
    if len(candidate_ids) < CHALLENGE_QUESTION_COUNT:
        raise InsufficientQuestionPoolError(
            available=len(candidate_ids),
            required=CHALLENGE_QUESTION_COUNT,
        )

    challenge_id = uuid4()
    question_ids = select_question_ids(
        candidate_ids,
        count=CHALLENGE_QUESTION_COUNT,
        selection_seed=str(challenge_id),
    )
    challenge = Challenge(
        id=challenge_id,
        challenger_user_id=challenger_user_id,
        challenged_user_id=challenged_user_id,
        pair_key=pair_key,
        grade=challenger.grade,
        subject=subject,
        difficulty=difficulty,
        question_ids=question_ids,
        wager_raindrops=wager_raindrops,
        message=resolved_message,
        time_limit_seconds=CHALLENGE_TIME_LIMIT_SECONDS,
        status=CHALLENGE_STATUS_PENDING,
        challenger_score=0,
        challenged_score=0,
        challenger_raindrops=0,
        challenged_raindrops=0,
        challenger_time_spent_seconds=0,
        challenged_time_spent_seconds=0,
        expires_at=_challenge_expires_at(now_utc=now_utc),
        created_at=now_utc,
        updated_at=now_utc,
    )
    try:
        await ChallengesRepo.create(session, challenge=challenge)
    except IntegrityError as exc:
        raise DuplicateChallengeError from exc

    await _publish_challenge_event(
        session,
        notifier=notifier,
        challenge=challenge,
        event_type="challenge_created",
        payload={"difficulty": difficulty, "wager_raindrops": wager_raindrops},
    )
    logger.info(
        "challenge_created",
        challenge_id=str(challenge.id),
        challenger_user_id=challenger_user_id,
        challenged_user_id=challenged_user_id,
        subject=subject,
        difficulty=difficulty,
        wager_raindrops=wager_raindrops,
    )
    return _build_challenge_snapshot(challenge)
