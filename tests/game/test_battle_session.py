from __future__ import annotations

from datetime import timedelta
from uuid import UUID, uuid4

import pytest

from app.economy.raindrops.service import RaindropService
from app.game.battles.errors import (
    AlreadyAnsweredError,
    BattleNotForfeitableError,
    BattleNotFoundError,
    InvalidQuestionOrderError,
    NotParticipantError,
    SessionNotInProgressError,
)
from tests.game.battle_fixtures import NOW_UTC, SESSION, BattleWorld, build_world

ALICE = 101
BOB = 202
MALLORY = 909


async def _accepted_battle(monkeypatch: pytest.MonkeyPatch) -> tuple[BattleWorld, UUID]:
    world = build_world(monkeypatch)
    world.store.add_student(ALICE, grade="5", raindrops=30)
    world.store.add_student(BOB, grade="5", raindrops=40)
    world.store.add_student(MALLORY, grade="5", raindrops=40)
    created = await world.ledger.create_challenge(
        SESSION,
        challenger_user_id=ALICE,
        challenged_user_id=BOB,
        subject="Math",
        difficulty="ADVANCED",
        wager_raindrops=5,
        message="Ready for a rematch?",
        now_utc=NOW_UTC,
    )
    accepted = await world.ledger.accept_challenge(
        SESSION,
        challenge_id=created.challenge_id,
        user_id=BOB,
        now_utc=NOW_UTC + timedelta(minutes=1),
    )
    return world, accepted.battle_id


async def _started_battle(monkeypatch: pytest.MonkeyPatch) -> tuple[BattleWorld, UUID]:
    world, battle_id = await _accepted_battle(monkeypatch)
    start_at = NOW_UTC + timedelta(minutes=2)
    await world.sessions.mark_ready(SESSION, battle_id=battle_id, user_id=ALICE, now_utc=start_at)
    await world.sessions.mark_ready(SESSION, battle_id=battle_id, user_id=BOB, now_utc=start_at)
    return world, battle_id


def _answer_for(world: BattleWorld, battle_id: UUID, question_order: int, *, correct: bool) -> str:
    battle = world.store.battles[battle_id]
    question = world.questions.questions[battle.question_ids[question_order - 1]]
    if correct:
        return question.correct_answer
    return next(option for option in question.options if option != question.correct_answer)


async def _submit(
    world: BattleWorld,
    battle_id: UUID,
    *,
    user_id: int,
    question_order: int,
    correct: bool,
    time_spent_seconds: int,
    seconds_after_start: int = 10,
):  # noqa: ANN202
    return await world.sessions.submit_answer(
        SESSION,
        battle_id=battle_id,
        user_id=user_id,
        question_order=question_order,
        selected_answer=_answer_for(world, battle_id, question_order, correct=correct),
        time_spent_seconds=time_spent_seconds,
        now_utc=NOW_UTC + timedelta(minutes=2, seconds=seconds_after_start),
    )


@pytest.mark.asyncio
async def test_first_ready_keeps_battle_waiting(monkeypatch: pytest.MonkeyPatch) -> None:
    world, battle_id = await _accepted_battle(monkeypatch)

    result = await world.sessions.mark_ready(
        SESSION,
        battle_id=battle_id,
        user_id=ALICE,
        now_utc=NOW_UTC + timedelta(minutes=2),
    )

    assert result.started_now is False
    assert result.snapshot.status == "WAITING"
    assert result.snapshot.challenger.ready is True
    assert result.snapshot.challenger.connected is True
    assert result.snapshot.challenged.ready is False
    assert world.store.events_for(battle_id) == ["join"]


@pytest.mark.asyncio
async def test_second_ready_starts_battle_and_challenge(monkeypatch: pytest.MonkeyPatch) -> None:
    world, battle_id = await _accepted_battle(monkeypatch)
    start_at = NOW_UTC + timedelta(minutes=2)
    await world.sessions.mark_ready(SESSION, battle_id=battle_id, user_id=BOB, now_utc=start_at)

    result = await world.sessions.mark_ready(
        SESSION,
        battle_id=battle_id,
        user_id=ALICE,
        now_utc=start_at,
    )

    assert result.started_now is True
    assert result.snapshot.status == "IN_PROGRESS"
    assert result.snapshot.current_question_index == 0
    assert result.snapshot.question_started_at == start_at
    assert result.snapshot.started_at == start_at
    challenge = world.store.challenges[result.snapshot.challenge_id]
    assert challenge.status == "IN_PROGRESS"
    assert challenge.started_at == start_at
    assert world.store.events_for(battle_id) == ["join", "join", "battle_start"]
    assert "battle_started" in world.notifier.event_types()


@pytest.mark.asyncio
async def test_repeated_ready_is_idempotent(monkeypatch: pytest.MonkeyPatch) -> None:
    world, battle_id = await _started_battle(monkeypatch)

    replay = await world.sessions.mark_ready(
        SESSION,
        battle_id=battle_id,
        user_id=ALICE,
        now_utc=NOW_UTC + timedelta(minutes=3),
    )

    assert replay.idempotent_replay is True
    assert replay.started_now is False
    assert replay.snapshot.status == "IN_PROGRESS"
    assert world.store.events_for(battle_id).count("battle_start") == 1


@pytest.mark.asyncio
async def test_outsider_cannot_touch_battle(monkeypatch: pytest.MonkeyPatch) -> None:
    world, battle_id = await _accepted_battle(monkeypatch)

    with pytest.raises(NotParticipantError):
        await world.sessions.mark_ready(
            SESSION,
            battle_id=battle_id,
            user_id=MALLORY,
            now_utc=NOW_UTC,
        )
    with pytest.raises(NotParticipantError):
        await world.sessions.get_live_status(SESSION, battle_id=battle_id, user_id=MALLORY)


@pytest.mark.asyncio
async def test_unknown_battle(monkeypatch: pytest.MonkeyPatch) -> None:
    world, _ = await _accepted_battle(monkeypatch)

    with pytest.raises(BattleNotFoundError):
        await world.sessions.mark_ready(SESSION, battle_id=uuid4(), user_id=ALICE, now_utc=NOW_UTC)


@pytest.mark.asyncio
async def test_answers_rejected_before_start(monkeypatch: pytest.MonkeyPatch) -> None:
    world, battle_id = await _accepted_battle(monkeypatch)

    with pytest.raises(SessionNotInProgressError):
        await _submit(world, battle_id, user_id=ALICE, question_order=1, correct=True, time_spent_seconds=5)


@pytest.mark.asyncio
@pytest.mark.parametrize("question_order", [0, 6])
async def test_question_order_must_be_within_battle(
    monkeypatch: pytest.MonkeyPatch,
    question_order: int,
) -> None:
    world, battle_id = await _started_battle(monkeypatch)

    with pytest.raises(InvalidQuestionOrderError):
        await world.sessions.submit_answer(
            SESSION,
            battle_id=battle_id,
            user_id=ALICE,
            question_order=question_order,
            selected_answer="2",
            time_spent_seconds=5,
            now_utc=NOW_UTC + timedelta(minutes=3),
        )


@pytest.mark.asyncio
async def test_correct_answer_is_scored_and_folded(monkeypatch: pytest.MonkeyPatch) -> None:
    world, battle_id = await _started_battle(monkeypatch)

    result = await _submit(world, battle_id, user_id=ALICE, question_order=1, correct=True, time_spent_seconds=8)

    assert result.is_correct is True
    assert result.points == 80 + 44
    assert result.raindrops == 4
    assert result.explanation is not None
    assert result.my_progress.score == 124
    assert result.my_progress.answered_count == 1
    assert result.my_progress.average_time_seconds == 8.0
    assert result.opponent_progress.score == 0
    assert result.current_question_index == 0
    assert result.battle_completed is False
    assert world.notifier.event_types()[-1] == "battle_progress"


@pytest.mark.asyncio
async def test_reported_time_is_clamped(monkeypatch: pytest.MonkeyPatch) -> None:
    world, battle_id = await _started_battle(monkeypatch)

    result = await _submit(world, battle_id, user_id=ALICE, question_order=1, correct=True, time_spent_seconds=600)

    assert result.points == 80
    assert result.raindrops == 2
    assert result.my_progress.time_spent_seconds == 30


@pytest.mark.asyncio
async def test_duplicate_answer_is_rejected_without_double_counting(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    world, battle_id = await _started_battle(monkeypatch)
    await _submit(world, battle_id, user_id=ALICE, question_order=1, correct=True, time_spent_seconds=8)

    with pytest.raises(AlreadyAnsweredError):
        await _submit(world, battle_id, user_id=ALICE, question_order=1, correct=True, time_spent_seconds=2)

    battle = world.store.battles[battle_id]
    assert battle.challenger_score == 124
    assert battle.challenger_answered_count == 1


@pytest.mark.asyncio
async def test_cursor_advances_once_both_answered(monkeypatch: pytest.MonkeyPatch) -> None:
    world, battle_id = await _started_battle(monkeypatch)
    await _submit(world, battle_id, user_id=ALICE, question_order=1, correct=True, time_spent_seconds=8)
    await _submit(world, battle_id, user_id=ALICE, question_order=2, correct=True, time_spent_seconds=8)

    result = await _submit(
        world,
        battle_id,
        user_id=BOB,
        question_order=1,
        correct=False,
        time_spent_seconds=12,
        seconds_after_start=20,
    )

    assert result.current_question_index == 1
    battle = world.store.battles[battle_id]
    assert battle.question_started_at == NOW_UTC + timedelta(minutes=2, seconds=20)
    assert world.store.events_for(battle_id).count("question_advance") == 1


@pytest.mark.asyncio
async def test_full_battle_completes_with_score_winner(monkeypatch: pytest.MonkeyPatch) -> None:
    world, battle_id = await _started_battle(monkeypatch)

    for question_order in range(1, 6):
        await _submit(
            world,
            battle_id,
            user_id=ALICE,
            question_order=question_order,
            correct=True,
            time_spent_seconds=8,
        )
    for question_order in range(1, 5):
        await _submit(
            world,
            battle_id,
            user_id=BOB,
            question_order=question_order,
            correct=False,
            time_spent_seconds=10,
        )
    final = await _submit(
        world,
        battle_id,
        user_id=BOB,
        question_order=5,
        correct=True,
        time_spent_seconds=29,
        seconds_after_start=90,
    )

    assert final.battle_completed is True
    assert final.status == "COMPLETED"
    assert final.current_question_index == 5
    assert final.results is not None
    assert final.results.winner_user_id == ALICE
    assert final.results.win_reason == "SCORE"
    assert final.results.challenger_score == 620
    assert final.results.challenged_score == 82
    assert final.results.duration_seconds == 90

    battle = world.store.battles[battle_id]
    challenge = world.store.challenges[battle.challenge_id]
    assert challenge.status == "COMPLETED"
    assert challenge.winner_user_id == ALICE
    assert challenge.win_condition == "SCORE"
    assert challenge.challenger_score == 620
    assert challenge.challenger_raindrops == 20
    assert challenge.challenged_time_spent_seconds == 69
    assert [entry["question_order"] for entry in challenge.challenger_answers] == [1, 2, 3, 4, 5]
    assert world.store.events_for(battle_id)[-1] == "battle_completed"
    assert world.notifier.event_types()[-1] == "battle_completed"

    assert await RaindropService.total_raindrops(SESSION, student_user_id=ALICE) == 50
    assert await RaindropService.total_raindrops(SESSION, student_user_id=BOB) == 42

    with pytest.raises(SessionNotInProgressError):
        await _submit(world, battle_id, user_id=ALICE, question_order=1, correct=True, time_spent_seconds=1)


@pytest.mark.asyncio
async def test_equal_scores_go_to_faster_player(monkeypatch: pytest.MonkeyPatch) -> None:
    world, battle_id = await _started_battle(monkeypatch)

    for question_order in range(1, 6):
        await _submit(
            world,
            battle_id,
            user_id=ALICE,
            question_order=question_order,
            correct=False,
            time_spent_seconds=12,
        )
        await _submit(
            world,
            battle_id,
            user_id=BOB,
            question_order=question_order,
            correct=False,
            time_spent_seconds=9,
        )

    live = await world.sessions.get_live_status(SESSION, battle_id=battle_id, user_id=ALICE)
    assert live.status == "COMPLETED"
    assert live.results is not None
    assert live.results.winner_user_id == BOB
    assert live.results.win_reason == "TIME"
    assert live.me.time_spent_seconds == 60
    assert live.opponent.time_spent_seconds == 45


@pytest.mark.asyncio
async def test_identical_play_is_a_tie(monkeypatch: pytest.MonkeyPatch) -> None:
    world, battle_id = await _started_battle(monkeypatch)

    for question_order in range(1, 6):
        for user_id in (ALICE, BOB):
            await _submit(
                world,
                battle_id,
                user_id=user_id,
                question_order=question_order,
                correct=True,
                time_spent_seconds=15,
            )

    challenge = world.store.challenges[world.store.battles[battle_id].challenge_id]
    assert challenge.status == "COMPLETED"
    assert challenge.winner_user_id is None
    assert challenge.win_condition == "TIE"


@pytest.mark.asyncio
async def test_forfeit_awards_opponent(monkeypatch: pytest.MonkeyPatch) -> None:
    world, battle_id = await _started_battle(monkeypatch)
    await _submit(world, battle_id, user_id=BOB, question_order=1, correct=True, time_spent_seconds=5)

    result = await world.sessions.forfeit(
        SESSION,
        battle_id=battle_id,
        user_id=BOB,
        now_utc=NOW_UTC + timedelta(minutes=4),
    )

    assert result.winner_user_id == ALICE
    assert result.snapshot.status == "COMPLETED"
    assert result.snapshot.results is not None
    assert result.snapshot.results.win_reason == "FORFEIT"
    assert result.snapshot.results.forfeited_by_user_id == BOB
    assert result.snapshot.results.challenged_score == 80 + 50
    challenge = world.store.challenges[result.snapshot.challenge_id]
    assert challenge.status == "COMPLETED"
    assert challenge.winner_user_id == ALICE
    assert challenge.win_condition == "FORFEIT"
    assert world.store.events_for(battle_id)[-2:] == ["battle_forfeited", "battle_completed"]

    with pytest.raises(BattleNotForfeitableError):
        await world.sessions.forfeit(
            SESSION,
            battle_id=battle_id,
            user_id=ALICE,
            now_utc=NOW_UTC + timedelta(minutes=5),
        )


@pytest.mark.asyncio
async def test_forfeit_while_waiting(monkeypatch: pytest.MonkeyPatch) -> None:
    world, battle_id = await _accepted_battle(monkeypatch)

    result = await world.sessions.forfeit(
        SESSION,
        battle_id=battle_id,
        user_id=ALICE,
        now_utc=NOW_UTC + timedelta(minutes=2),
    )

    assert result.winner_user_id == BOB
    assert world.store.challenges[result.snapshot.challenge_id].status == "COMPLETED"


@pytest.mark.asyncio
async def test_forfeit_in_progress_before_any_answer(monkeypatch: pytest.MonkeyPatch) -> None:
    world, battle_id = await _started_battle(monkeypatch)

    result = await world.sessions.forfeit(
        SESSION,
        battle_id=battle_id,
        user_id=ALICE,
        now_utc=NOW_UTC + timedelta(minutes=4),
    )

    assert result.winner_user_id == BOB
    results = result.snapshot.results
    assert results is not None
    assert results.win_reason == "FORFEIT"
    assert results.forfeited_by_user_id == ALICE
    assert (results.challenger_score, results.challenged_score) == (0, 0)
    assert (results.challenger_raindrops, results.challenged_raindrops) == (0, 0)
    assert results.duration_seconds == 120
    challenge = world.store.challenges[result.snapshot.challenge_id]
    assert challenge.status == "COMPLETED"
    assert challenge.winner_user_id == BOB
    assert challenge.win_condition == "FORFEIT"
    assert challenge.challenger_answers == []
    assert challenge.challenged_answers == []
    assert world.store.events_for(battle_id)[-2:] == ["battle_forfeited", "battle_completed"]


@pytest.mark.asyncio
async def test_presence_changes_are_logged_once(monkeypatch: pytest.MonkeyPatch) -> None:
    world, battle_id = await _started_battle(monkeypatch)

    snapshot = await world.sessions.set_presence(
        SESSION,
        battle_id=battle_id,
        user_id=ALICE,
        connected=False,
        now_utc=NOW_UTC + timedelta(minutes=3),
    )
    assert snapshot.challenger.connected is False
    await world.sessions.set_presence(
        SESSION,
        battle_id=battle_id,
        user_id=ALICE,
        connected=False,
        now_utc=NOW_UTC + timedelta(minutes=3),
    )
    await world.sessions.set_presence(
        SESSION,
        battle_id=battle_id,
        user_id=ALICE,
        connected=True,
        now_utc=NOW_UTC + timedelta(minutes=4),
    )

    events = world.store.events_for(battle_id)
    assert events.count("disconnect") == 1
    assert events.count("reconnect") == 1


@pytest.mark.asyncio
async def test_battle_details_show_only_own_answers(monkeypatch: pytest.MonkeyPatch) -> None:
    world, battle_id = await _started_battle(monkeypatch)
    await _submit(world, battle_id, user_id=ALICE, question_order=1, correct=True, time_spent_seconds=8)
    await _submit(world, battle_id, user_id=BOB, question_order=1, correct=False, time_spent_seconds=8)

    details = await world.sessions.get_battle(SESSION, battle_id=battle_id, user_id=BOB)

    assert [question.order for question in details.questions] == [1, 2, 3, 4, 5]
    assert [answer.is_correct for answer in details.my_answers] == [False]
    assert details.snapshot.current_question_index == 1
    assert [event.event_type for event in details.events][:3] == ["join", "join", "battle_start"]
