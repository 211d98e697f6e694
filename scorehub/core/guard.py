"""Owner/member checks for activities.

Every mutating activity operation resolves the activity and calls ``ensure_owner``
before writing. Reads require ownership or a membership link.

Participant and score mutations are deliberately *not* membership-gated: anyone
authenticated who can resolve an activity id may add participants and scores, so
the join PIN is the de facto contributor token. Keep this boundary unless it is
being hardened on purpose.
"""
from __future__ import annotations

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from scorehub.db.models.activity import Activity
from scorehub.db.models.user_activity import UserActivity
from scorehub.utils.exceptions import AuthorizationError, NotFoundError, TransportError

logger = logging.getLogger(__name__)


def ensure_owner(activity: Activity, user_id: uuid.UUID) -> None:
    if activity.owner_id != user_id:
        logger.warning("guard.denied activity=%s user=%s", activity.id, user_id)
        raise AuthorizationError()


async def load_owned_activity(session: AsyncSession, activity_id: uuid.UUID, user_id: uuid.UUID) -> Activity:
    try:
        activity = await session.get(Activity, activity_id)
    except DBAPIError as exc:
        raise TransportError() from exc
    if activity is None:
        raise NotFoundError("Activity not found")
    ensure_owner(activity, user_id)
    return activity


async def is_member(session: AsyncSession, activity_id: uuid.UUID, user_id: uuid.UUID) -> bool:
    try:
        result = await session.execute(
            select(UserActivity.id).where(
                UserActivity.activity_id == activity_id,
                UserActivity.user_id == user_id,
            )
        )
    except DBAPIError as exc:
        raise TransportError() from exc
    return result.first() is not None


async def ensure_can_view(session: AsyncSession, activity: Activity, user_id: uuid.UUID) -> None:
    if activity.owner_id == user_id:
        return
    if activity.deleted or not await is_member(session, activity.id, user_id):
        logger.warning("guard.view_denied activity=%s user=%s", activity.id, user_id)
        raise AuthorizationError()
