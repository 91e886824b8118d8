from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from app.db.repo.battle_events_repo import BattleEventsRepo
from app.db.repo.challenges_repo import ChallengesRepo
from app.db.repo.outbox_events_repo import OutboxEventsRepo
from app.db.session import SessionLocal
from app.economy.raindrops.service import RaindropService
from app.game.battles.service_facade import BattleSessionService
from app.game.challenges.errors import DuplicateChallengeError
from app.game.challenges.service_facade import ChallengeLedger
from app.game.notifications import AGGREGATE_BATTLE
from app.game.questions.source import DbQuestionSource
from tests.integration.raindrop_battle_fixtures import _create_student, _seed_battle_questions

UTC = timezone.utc


@pytest.mark.asyncio
async def test_challenge_to_completed_battle_end_to_end() -> None:
    now_utc = datetime.now(UTC)
    alice = await _create_student(9101, username="alice", raindrops=30)
    bob = await _create_student(9202, username="bob", raindrops=40)
    await _seed_battle_questions(now_utc)
    ledger = ChallengeLedger()
    sessions = BattleSessionService()

    async with SessionLocal.begin() as session:
        created = await ledger.create_challenge(
            session,
            challenger_user_id=alice,
            challenged_user_id=bob,
            subject="Math",
            difficulty="ADVANCED",
            wager_raindrops=5,
            message=None,
            now_utc=now_utc,
        )
    async with SessionLocal.begin() as session:
        accepted = await ledger.accept_challenge(
            session,
            challenge_id=created.challenge_id,
            user_id=bob,
            now_utc=now_utc + timedelta(seconds=5),
        )
    battle_id = accepted.battle_id

    started_at = now_utc + timedelta(seconds=10)
    for user_id in (alice, bob):
        async with SessionLocal.begin() as session:
            ready = await sessions.mark_ready(
                session,
                battle_id=battle_id,
                user_id=user_id,
                now_utc=started_at,
            )
    assert ready.started_now is True

    async with SessionLocal.begin() as session:
        questions = await DbQuestionSource().get_questions(
            session,
            question_ids=created.question_ids,
        )

    result = None
    for order, question_id in enumerate(created.question_ids, start=1):
        question = questions[question_id]
        wrong = next(option for option in question.options if option != question.correct_answer)
        for user_id, answer in ((alice, question.correct_answer), (bob, wrong)):
            async with SessionLocal.begin() as session:
                result = await sessions.submit_answer(
                    session,
                    battle_id=battle_id,
                    user_id=user_id,
                    question_order=order,
                    selected_answer=answer,
                    time_spent_seconds=8,
                    now_utc=started_at + timedelta(seconds=order * 10),
                )

    assert result is not None
    assert result.battle_completed is True
    assert result.results is not None
    assert result.results.winner_user_id == alice
    assert result.results.win_reason == "SCORE"
    assert result.results.challenger_score == 5 * (80 + 44)

    async with SessionLocal.begin() as session:
        challenge = await ChallengesRepo.get_by_id(session, created.challenge_id)
        events = await BattleEventsRepo.list_for_battle(session, battle_id=battle_id)
        outbox = await OutboxEventsRepo.list_for_aggregate(
            session,
            aggregate_type=AGGREGATE_BATTLE,
            aggregate_id=str(battle_id),
        )
        alice_total = await RaindropService.total_raindrops(session, student_user_id=alice)
        bob_total = await RaindropService.total_raindrops(session, student_user_id=bob)

    assert challenge is not None
    assert challenge.status == "COMPLETED"
    assert challenge.winner_user_id == alice
    assert challenge.win_condition == "SCORE"
    assert len(challenge.challenger_answers) == 5
    assert events[-1].event_type == "battle_completed"
    assert outbox[-1].event_type == "battle_completed"
    assert alice_total == 30 + 5 * 4
    assert bob_total == 40


@pytest.mark.asyncio
async def test_active_pair_is_unique_in_both_directions() -> None:
    now_utc = datetime.now(UTC)
    alice = await _create_student(9301, username="carol", raindrops=30)
    bob = await _create_student(9402, username="dave", raindrops=30)
    await _seed_battle_questions(now_utc)
    ledger = ChallengeLedger()

    async with SessionLocal.begin() as session:
        await ledger.create_challenge(
            session,
            challenger_user_id=alice,
            challenged_user_id=bob,
            subject="Math",
            difficulty="ADVANCED",
            wager_raindrops=5,
            message="Rematch?",
            now_utc=now_utc,
        )

    with pytest.raises(DuplicateChallengeError):
        async with SessionLocal.begin() as session:
            await ledger.create_challenge(
                session,
                challenger_user_id=bob,
                challenged_user_id=alice,
                subject="Math",
                difficulty="ADVANCED",
                wager_raindrops=5,
                message=None,
                now_utc=now_utc + timedelta(seconds=1),
            )
