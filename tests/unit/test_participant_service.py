from __future__ import annotations

import uuid

import pytest
from sqlalchemy import func, select

from scorehub.core.activities.service import ActivityService
from scorehub.core.participants.service import ParticipantService
from scorehub.core.scores.service import ScoreService
from scorehub.db.models.score_record import ScoreRecord
from scorehub.utils.exceptions import DuplicateError, NotFoundError
from tests.conftest import create_user


async def _activity(db_session, name="Quiz"):
    owner = await create_user(db_session)
    return await ActivityService(db_session).create_activity(name, None, owner.id)


@pytest.mark.asyncio
async def test_duplicate_participant_name_rejected_case_insensitively(db_session):
    activity = await _activity(db_session)
    service = ParticipantService(db_session)
    await service.create_participant("Alice", activity.id)

    with pytest.raises(DuplicateError) as exc_info:
        await service.create_participant(" alice ", activity.id)
    assert exc_info.value.details["field"] == "name"

    names = [p.name for p in await service.list_participants(activity.id)]
    assert names == ["Alice"]


@pytest.mark.asyncio
async def test_same_name_allowed_in_other_activity(db_session):
    activity = await _activity(db_session)
    other = await ActivityService(db_session).create_activity("Relay", None, activity.owner_id)
    service = ParticipantService(db_session)

    await service.create_participant("Alice", activity.id)
    await service.create_participant("Alice", other.id)


@pytest.mark.asyncio
async def test_create_participant_requires_activity(db_session):
    with pytest.raises(NotFoundError):
        await ParticipantService(db_session).create_participant("Alice", uuid.uuid4())


@pytest.mark.asyncio
async def test_batch_skips_existing_and_repeated_names(db_session):
    activity = await _activity(db_session)
    service = ParticipantService(db_session)
    await service.create_participant("Alice", activity.id)

    created = await service.create_participants_batch(["Bob", "alice", "  ", "Carol", "BOB"], activity.id)

    assert [p.name for p in created] == ["Bob", "Carol"]
    assert [p.name for p in await service.list_participants(activity.id)] == ["Alice", "Bob", "Carol"]


@pytest.mark.asyncio
async def test_batch_with_only_known_names_creates_nothing(db_session):
    activity = await _activity(db_session)
    service = ParticipantService(db_session)
    await service.create_participant("Alice", activity.id)

    assert await service.create_participants_batch(["ALICE", ""], activity.id) == []


@pytest.mark.asyncio
async def test_batch_skips_overlong_name_and_keeps_the_rest(db_session):
    activity = await _activity(db_session)
    service = ParticipantService(db_session)
    names = ["Bob", "x" * 500, "Carol"]

    created = await service.create_participants_batch(names, activity.id)

    assert [p.name for p in created] == ["Bob", "Carol"]
    assert len(names) - len(created) == 1
    assert [p.name for p in await service.list_participants(activity.id)] == ["Bob", "Carol"]


@pytest.mark.asyncio
async def test_rename_to_own_name_with_different_case(db_session):
    activity = await _activity(db_session)
    service = ParticipantService(db_session)
    alice = await service.create_participant("alice", activity.id)
    await service.create_participant("Bob", activity.id)

    renamed = await service.update_participant(alice.id, "Alice")
    assert renamed.name == "Alice"

    with pytest.raises(DuplicateError):
        await service.update_participant(alice.id, "bob")


@pytest.mark.asyncio
async def test_delete_participant_cascades_only_its_scores(db_session):
    activity = await _activity(db_session)
    participants = ParticipantService(db_session)
    scores = ScoreService(db_session)
    alice = await participants.create_participant("Alice", activity.id)
    bob = await participants.create_participant("Bob", activity.id)

    for points in (3, 4):
        await scores.add_score(alice.id, activity.id, points, "answer")
    kept = await scores.add_score(bob.id, activity.id, 7, "answer")

    await participants.delete_participant(alice.id)

    with pytest.raises(NotFoundError):
        await participants.get_participant(alice.id)

    remaining = (await db_session.execute(select(ScoreRecord.id))).scalars().all()
    assert remaining == [kept.id]

    orphan_count = (
        await db_session.execute(
            select(func.count()).select_from(ScoreRecord).where(ScoreRecord.participant_id == alice.id)
        )
    ).scalar_one()
    assert orphan_count == 0


@pytest.mark.asyncio
async def test_delete_missing_participant(db_session):
    with pytest.raises(NotFoundError):
        await ParticipantService(db_session).delete_participant(uuid.uuid4())
