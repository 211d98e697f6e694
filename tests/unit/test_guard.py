from __future__ import annotations

import uuid

import pytest

from scorehub.core.activities.service import ActivityService
from scorehub.core.guard import ensure_can_view, ensure_owner, is_member, load_owned_activity
from scorehub.utils.exceptions import AuthorizationError, NotFoundError
from tests.conftest import create_user


@pytest.mark.asyncio
async def test_owner_checks(db_session):
    owner = await create_user(db_session)
    stranger = await create_user(db_session, "Stranger")
    activity = await ActivityService(db_session).create_activity("Quiz", None, owner.id)

    ensure_owner(activity, owner.id)
    with pytest.raises(AuthorizationError):
        ensure_owner(activity, stranger.id)

    assert (await load_owned_activity(db_session, activity.id, owner.id)).id == activity.id
    with pytest.raises(NotFoundError):
        await load_owned_activity(db_session, uuid.uuid4(), owner.id)


@pytest.mark.asyncio
async def test_view_requires_owner_or_member(db_session):
    owner = await create_user(db_session)
    member = await create_user(db_session, "Member")
    stranger = await create_user(db_session, "Stranger")
    service = ActivityService(db_session)
    activity = await service.create_activity("Quiz", None, owner.id)
    await service.join_activity(member.id, activity.id)

    assert await is_member(db_session, activity.id, member.id)
    assert not await is_member(db_session, activity.id, stranger.id)

    await ensure_can_view(db_session, activity, owner.id)
    await ensure_can_view(db_session, activity, member.id)
    with pytest.raises(AuthorizationError):
        await ensure_can_view(db_session, activity, stranger.id)


@pytest.mark.asyncio
async def test_hidden_activity_visible_to_owner_only(db_session):
    owner = await create_user(db_session)
    member = await create_user(db_session, "Member")
    service = ActivityService(db_session)
    activity = await service.create_activity("Quiz", None, owner.id)
    await service.join_activity(member.id, activity.id)
    hidden = await service.hide_activity(activity.id, owner.id)

    await ensure_can_view(db_session, hidden, owner.id)
    with pytest.raises(AuthorizationError):
        await ensure_can_view(db_session, hidden, member.id)
