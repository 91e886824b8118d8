from __future__ import annotations

from datetime import timedelta

import pytest

from app.game.challenges.errors import (
    ChallengeAccessError,
    ChallengeExpiredError,
    ChallengeNotFoundError,
    ChallengeNotPendingError,
    DifficultyLockedError,
    DuplicateChallengeError,
    GradeMismatchError,
    InsufficientQuestionPoolError,
    InsufficientRaindropsError,
    InvalidPartyError,
    NotChallengedPartyError,
    NotChallengerPartyError,
)
from tests.game.battle_fixtures import NOW_UTC, SESSION, BattleWorld, build_questions, build_world

ALICE = 101
BOB = 202
CARA = 303


def _world(monkeypatch: pytest.MonkeyPatch, **kwargs) -> BattleWorld:  # noqa: ANN003
    world = build_world(monkeypatch, **kwargs)
    world.store.add_student(ALICE, grade="5", raindrops=30)
    world.store.add_student(BOB, grade="5", raindrops=40)
    world.store.add_student(CARA, grade="5", raindrops=80)
    return world


async def _create(world: BattleWorld, **overrides):  # noqa: ANN003, ANN202
    params = {
        "challenger_user_id": ALICE,
        "challenged_user_id": BOB,
        "subject": "Math",
        "difficulty": "ADVANCED",
        "wager_raindrops": 5,
        "message": None,
        "now_utc": NOW_UTC,
    }
    params.update(overrides)
    return await world.ledger.create_challenge(SESSION, **params)


@pytest.mark.asyncio
async def test_create_challenge_persists_pending_challenge(monkeypatch: pytest.MonkeyPatch) -> None:
    world = _world(monkeypatch)

    snapshot = await _create(world)

    assert snapshot.status == "PENDING"
    assert snapshot.challenger_user_id == ALICE
    assert snapshot.challenged_user_id == BOB
    assert snapshot.grade == "5"
    assert snapshot.message == "I challenge you to a battle!"
    assert snapshot.time_limit_seconds == 300
    assert snapshot.expires_at == NOW_UTC + timedelta(hours=24)
    assert len(snapshot.question_ids) == 5
    assert len(set(snapshot.question_ids)) == 5
    assert snapshot.challenge_id in world.store.challenges
    assert world.notifier.event_types() == ["challenge_created"]
    assert world.notifier.published[0]["recipient_user_ids"] == (ALICE, BOB)
    assert world.questions.candidate_calls == [
        {"grade": "5", "subject": "Math", "difficulties": ("ADVANCED", "EXPERT")}
    ]


@pytest.mark.asyncio
async def test_create_expert_challenge_draws_only_expert_questions(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    world = _world(
        monkeypatch,
        questions=build_questions(3, difficulty="ADVANCED") + build_questions(6, difficulty="EXPERT"),
    )

    snapshot = await _create(world, challenger_user_id=CARA, difficulty="EXPERT")

    assert all(question_id.startswith("math-expert-") for question_id in snapshot.question_ids)


@pytest.mark.asyncio
async def test_create_rejects_self_challenge(monkeypatch: pytest.MonkeyPatch) -> None:
    world = _world(monkeypatch)

    with pytest.raises(InvalidPartyError):
        await _create(world, challenged_user_id=ALICE)


@pytest.mark.asyncio
async def test_create_rejects_non_student_opponent(monkeypatch: pytest.MonkeyPatch) -> None:
    world = _world(monkeypatch)
    world.store.add_student(404, grade="5", role="TEACHER")

    with pytest.raises(InvalidPartyError):
        await _create(world, challenged_user_id=404)


@pytest.mark.asyncio
async def test_create_rejects_unknown_opponent(monkeypatch: pytest.MonkeyPatch) -> None:
    world = _world(monkeypatch)

    with pytest.raises(InvalidPartyError):
        await _create(world, challenged_user_id=999)


@pytest.mark.asyncio
async def test_grade_mismatch_is_reported_before_locked_difficulty(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    world = _world(monkeypatch)
    world.store.add_student(505, grade="6", raindrops=0)
    world.store.test_raindrops[ALICE] = 0

    with pytest.raises(GradeMismatchError):
        await _create(world, challenged_user_id=505)


@pytest.mark.asyncio
async def test_create_rejects_locked_difficulty(monkeypatch: pytest.MonkeyPatch) -> None:
    world = _world(monkeypatch)

    with pytest.raises(DifficultyLockedError) as exc_info:
        await _create(world, difficulty="EXPERT")

    assert exc_info.value.required == 75
    assert exc_info.value.balance == 30
    assert exc_info.value.missing == 45
    assert world.store.challenges == {}


@pytest.mark.asyncio
async def test_locked_difficulty_is_reported_before_insufficient_raindrops(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    world = _world(monkeypatch)
    world.store.test_raindrops[ALICE] = 10

    with pytest.raises(DifficultyLockedError):
        await _create(world, wager_raindrops=50)


@pytest.mark.asyncio
async def test_create_rejects_unaffordable_wager(monkeypatch: pytest.MonkeyPatch) -> None:
    world = _world(monkeypatch)

    with pytest.raises(InsufficientRaindropsError) as exc_info:
        await _create(world, wager_raindrops=31)

    assert str(exc_info.value) == "Insufficient raindrops. You have 30, need 31"


@pytest.mark.asyncio
async def test_create_rejects_duplicate_in_either_direction(monkeypatch: pytest.MonkeyPatch) -> None:
    world = _world(monkeypatch)
    await _create(world)

    with pytest.raises(DuplicateChallengeError):
        await _create(world)
    with pytest.raises(DuplicateChallengeError):
        await _create(world, challenger_user_id=BOB, challenged_user_id=ALICE)

    assert len(world.store.challenges) == 1


@pytest.mark.asyncio
async def test_expired_pending_challenge_does_not_block_new_one(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    world = _world(monkeypatch)
    stale = await _create(world)

    fresh = await _create(world, now_utc=NOW_UTC + timedelta(hours=25))

    assert world.store.challenges[stale.challenge_id].status == "EXPIRED"
    assert fresh.status == "PENDING"
    assert "challenge_expired" in world.notifier.event_types()


@pytest.mark.asyncio
async def test_create_rejects_small_question_pool(monkeypatch: pytest.MonkeyPatch) -> None:
    world = _world(monkeypatch, questions=build_questions(4))

    with pytest.raises(InsufficientQuestionPoolError) as exc_info:
        await _create(world)

    assert exc_info.value.available == 4
    assert exc_info.value.required == 5
    assert world.store.challenges == {}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [{"wager_raindrops": 0}, {"wager_raindrops": 51}, {"difficulty": "BEGINNER"}, {"message": "x" * 201}],
)
async def test_create_rejects_malformed_input(monkeypatch: pytest.MonkeyPatch, overrides) -> None:  # noqa: ANN001
    world = _world(monkeypatch)

    with pytest.raises(ValueError):
        await _create(world, **overrides)


@pytest.mark.asyncio
async def test_accept_creates_waiting_battle(monkeypatch: pytest.MonkeyPatch) -> None:
    world = _world(monkeypatch)
    created = await _create(world)

    result = await world.ledger.accept_challenge(
        SESSION,
        challenge_id=created.challenge_id,
        user_id=BOB,
        now_utc=NOW_UTC + timedelta(minutes=5),
    )

    assert result.challenge.status == "ACCEPTED"
    assert result.challenge.accepted_at == NOW_UTC + timedelta(minutes=5)
    battle = world.store.battles[result.battle_id]
    assert battle.status == "WAITING"
    assert battle.challenge_id == created.challenge_id
    assert battle.question_ids == list(created.question_ids)
    assert battle.total_questions == 5
    assert battle.seconds_per_question == 30
    assert world.notifier.event_types()[-1] == "challenge_accepted"


@pytest.mark.asyncio
async def test_only_challenged_party_can_accept(monkeypatch: pytest.MonkeyPatch) -> None:
    world = _world(monkeypatch)
    created = await _create(world)

    with pytest.raises(NotChallengedPartyError):
        await world.ledger.accept_challenge(
            SESSION,
            challenge_id=created.challenge_id,
            user_id=ALICE,
            now_utc=NOW_UTC,
        )


@pytest.mark.asyncio
async def test_accept_twice_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    world = _world(monkeypatch)
    created = await _create(world)
    await world.ledger.accept_challenge(
        SESSION,
        challenge_id=created.challenge_id,
        user_id=BOB,
        now_utc=NOW_UTC,
    )

    with pytest.raises(ChallengeNotPendingError):
        await world.ledger.accept_challenge(
            SESSION,
            challenge_id=created.challenge_id,
            user_id=BOB,
            now_utc=NOW_UTC,
        )
    assert len(world.store.battles) == 1


@pytest.mark.asyncio
async def test_accept_after_expiry_marks_challenge_expired(monkeypatch: pytest.MonkeyPatch) -> None:
    world = _world(monkeypatch)
    created = await _create(world)

    with pytest.raises(ChallengeExpiredError):
        await world.ledger.accept_challenge(
            SESSION,
            challenge_id=created.challenge_id,
            user_id=BOB,
            now_utc=NOW_UTC + timedelta(hours=24),
        )

    assert world.store.challenges[created.challenge_id].status == "EXPIRED"
    assert world.store.battles == {}


@pytest.mark.asyncio
async def test_accept_requires_affordable_wager(monkeypatch: pytest.MonkeyPatch) -> None:
    world = _world(monkeypatch)
    created = await _create(world, wager_raindrops=20)
    world.store.test_raindrops[BOB] = 19

    with pytest.raises(InsufficientRaindropsError):
        await world.ledger.accept_challenge(
            SESSION,
            challenge_id=created.challenge_id,
            user_id=BOB,
            now_utc=NOW_UTC,
        )

    assert world.store.challenges[created.challenge_id].status == "PENDING"


@pytest.mark.asyncio
async def test_decline_marks_challenge_declined(monkeypatch: pytest.MonkeyPatch) -> None:
    world = _world(monkeypatch)
    created = await _create(world)

    with pytest.raises(NotChallengedPartyError):
        await world.ledger.decline_challenge(
            SESSION,
            challenge_id=created.challenge_id,
            user_id=ALICE,
            now_utc=NOW_UTC,
        )
    snapshot = await world.ledger.decline_challenge(
        SESSION,
        challenge_id=created.challenge_id,
        user_id=BOB,
        now_utc=NOW_UTC,
    )

    assert snapshot.status == "DECLINED"
    assert world.notifier.event_types()[-1] == "challenge_declined"


@pytest.mark.asyncio
async def test_cancel_removes_challenge(monkeypatch: pytest.MonkeyPatch) -> None:
    world = _world(monkeypatch)
    created = await _create(world)

    with pytest.raises(NotChallengerPartyError):
        await world.ledger.cancel_challenge(
            SESSION,
            challenge_id=created.challenge_id,
            user_id=BOB,
            now_utc=NOW_UTC,
        )
    snapshot = await world.ledger.cancel_challenge(
        SESSION,
        challenge_id=created.challenge_id,
        user_id=ALICE,
        now_utc=NOW_UTC,
    )

    assert snapshot.status == "CANCELED"
    assert created.challenge_id not in world.store.challenges
    assert world.notifier.event_types()[-1] == "challenge_canceled"

    recreated = await _create(world)
    assert recreated.status == "PENDING"


@pytest.mark.asyncio
async def test_cancel_accepted_challenge_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    world = _world(monkeypatch)
    created = await _create(world)
    await world.ledger.accept_challenge(
        SESSION,
        challenge_id=created.challenge_id,
        user_id=BOB,
        now_utc=NOW_UTC,
    )

    with pytest.raises(ChallengeNotPendingError):
        await world.ledger.cancel_challenge(
            SESSION,
            challenge_id=created.challenge_id,
            user_id=ALICE,
            now_utc=NOW_UTC,
        )


@pytest.mark.asyncio
async def test_get_challenge_checks_membership_and_expiry(monkeypatch: pytest.MonkeyPatch) -> None:
    world = _world(monkeypatch)
    created = await _create(world)

    with pytest.raises(ChallengeAccessError):
        await world.ledger.get_challenge(
            SESSION,
            challenge_id=created.challenge_id,
            user_id=CARA,
            now_utc=NOW_UTC,
        )

    snapshot = await world.ledger.get_challenge(
        SESSION,
        challenge_id=created.challenge_id,
        user_id=ALICE,
        now_utc=NOW_UTC + timedelta(days=2),
    )
    assert snapshot.status == "EXPIRED"


@pytest.mark.asyncio
async def test_get_unknown_challenge(monkeypatch: pytest.MonkeyPatch) -> None:
    world = _world(monkeypatch)
    created = await _create(world)
    world.store.challenges.clear()

    with pytest.raises(ChallengeNotFoundError):
        await world.ledger.get_challenge(
            SESSION,
            challenge_id=created.challenge_id,
            user_id=ALICE,
            now_utc=NOW_UTC,
        )


@pytest.mark.asyncio
async def test_pending_lists_split_by_direction_and_hide_expired(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    world = _world(monkeypatch)
    sent = await _create(world)
    received = await _create(
        world,
        challenger_user_id=CARA,
        challenged_user_id=ALICE,
        now_utc=NOW_UTC - timedelta(hours=23),
    )

    pending = await world.ledger.list_pending(SESSION, user_id=ALICE, now_utc=NOW_UTC)
    assert [item.challenge_id for item in pending.sent] == [sent.challenge_id]
    assert [item.challenge_id for item in pending.received] == [received.challenge_id]
    assert pending.total == 2

    later = await world.ledger.list_pending(
        SESSION,
        user_id=ALICE,
        now_utc=NOW_UTC + timedelta(hours=2),
    )
    assert [item.challenge_id for item in later.sent] == [sent.challenge_id]
    assert later.received == []


@pytest.mark.asyncio
async def test_available_opponents_exclude_busy_and_other_grades(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    world = _world(monkeypatch)
    world.store.add_student(606, grade="6", raindrops=10)
    world.store.add_student(707, grade="5", raindrops=5, status="BLOCKED")
    await _create(world)

    result = await world.ledger.list_available_opponents(
        SESSION,
        user_id=ALICE,
        subject="Math",
        now_utc=NOW_UTC,
    )

    assert [opponent.user_id for opponent in result.opponents] == [CARA]
    assert result.opponents[0].raindrops == 80
    assert result.opponents[0].battle_stats.total == 0
    assert result.raindrops == 30
    assert result.tiers["ADVANCED"].unlocked is True
    assert result.tiers["EXPERT"].unlocked is False


@pytest.mark.asyncio
async def test_unlock_status_reports_balance(monkeypatch: pytest.MonkeyPatch) -> None:
    world = _world(monkeypatch)

    balance, tiers = await world.ledger.get_unlock_status(SESSION, user_id=CARA)

    assert balance == 80
    assert tiers["EXPERT"].unlocked is True
    assert tiers["EXPERT"].missing == 0


@pytest.mark.asyncio
async def test_history_counts_outcomes(monkeypatch: pytest.MonkeyPatch) -> None:
    world = _world(monkeypatch)
    declined = await _create(world)
    await world.ledger.decline_challenge(
        SESSION,
        challenge_id=declined.challenge_id,
        user_id=BOB,
        now_utc=NOW_UTC,
    )
    await _create(world, challenged_user_id=CARA, now_utc=NOW_UTC - timedelta(days=3))
    for challenge in world.store.challenges.values():
        if challenge.challenged_user_id == CARA:
            challenge.status = "EXPIRED"

    page = await world.ledger.get_history(
        SESSION,
        user_id=ALICE,
        page=1,
        limit=1,
        now_utc=NOW_UTC,
    )

    assert page.stats.total == 2
    assert page.stats.declined == 1
    assert page.stats.expired == 1
    assert page.total == 2
    assert page.pages == 2
    assert len(page.items) == 1
    assert page.items[0].status == "DECLINED"


@pytest.mark.asyncio
async def test_overdue_challenge_frees_opponent_on_listing(monkeypatch: pytest.MonkeyPatch) -> None:
    world = _world(monkeypatch)
    stale = await _create(world, now_utc=NOW_UTC - timedelta(hours=25))

    result = await world.ledger.list_available_opponents(
        SESSION,
        user_id=ALICE,
        subject="Math",
        now_utc=NOW_UTC,
    )

    assert [opponent.user_id for opponent in result.opponents] == [BOB, CARA]
    assert world.store.challenges[stale.challenge_id].status == "EXPIRED"
    assert world.notifier.event_types() == ["challenge_created", "challenge_expired"]


@pytest.mark.asyncio
async def test_history_counts_overdue_pending_as_expired(monkeypatch: pytest.MonkeyPatch) -> None:
    world = _world(monkeypatch)
    stale = await _create(world, now_utc=NOW_UTC - timedelta(hours=25))
    await _create(world, challenged_user_id=CARA)

    page = await world.ledger.get_history(
        SESSION,
        user_id=BOB,
        page=1,
        limit=10,
        now_utc=NOW_UTC,
    )

    assert page.stats.total == 1
    assert page.stats.expired == 1
    assert [item.challenge_id for item in page.items] == [stale.challenge_id]
    assert page.items[0].status == "EXPIRED"
    assert world.store.challenges[stale.challenge_id].status == "EXPIRED"
