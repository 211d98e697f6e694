from __future__ import annotations

import logging
import uuid
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import DBAPIError, IntegrityError

from scorehub.config import settings
from scorehub.core.codes import allocate_code
from scorehub.core.guard import load_owned_activity
from scorehub.core.store import StoreService
from scorehub.db.models.activity import Activity
from scorehub.db.models.user import User
from scorehub.db.models.user_activity import UserActivity
from scorehub.utils.exceptions import DuplicateError, NotFoundError, TransportError
from scorehub.utils.validation import normalize_description, validate_code, validate_required_text

logger = logging.getLogger(__name__)

# PIN collisions that slip past the pre-check are retried with a fresh PIN.
_PIN_INSERT_ATTEMPTS = 3


class ActivityService(StoreService):
    async def create_activity(self, name: str, description: Optional[str], owner_id: uuid.UUID) -> Activity:
        name = validate_required_text(name, field="name", max_length=settings.ACTIVITY_NAME_MAX_LENGTH)
        description = normalize_description(description)

        owner = await self._get(User, owner_id)
        if owner is None:
            raise NotFoundError("Owner not found")

        if await self._find_visible_twin(owner_id, name, description) is not None:
            raise DuplicateError("An activity with this name and description already exists", field="name")

        for _ in range(_PIN_INSERT_ATTEMPTS):
            pin = await allocate_code(self._pin_taken, namespace="activity_pin")
            activity = Activity(
                name=name,
                description=description,
                pin=pin,
                owner_id=owner_id,
                deleted=False,
            )
            self.session.add(activity)
            try:
                await self.session.commit()
            except IntegrityError:
                await self.session.rollback()
                if await self._find_visible_twin(owner_id, name, description) is not None:
                    raise DuplicateError(
                        "An activity with this name and description already exists", field="name"
                    )
                logger.warning("activity.pin_race owner=%s pin=%s", owner_id, pin)
                continue
            except DBAPIError as exc:
                await self._rollback_quietly()
                raise TransportError() from exc

            await self.session.refresh(activity)
            logger.info("activity.created id=%s owner=%s", activity.id, owner_id)
            return activity

        raise DuplicateError("Could not reserve a unique PIN", field="pin")

    async def get_activity(self, activity_id: uuid.UUID) -> Activity:
        activity = await self._get(Activity, activity_id)
        if activity is None:
            raise NotFoundError("Activity not found")
        return activity

    async def get_activity_by_pin(self, pin: str) -> Activity:
        pin = validate_code(pin, field="pin")
        result = await self._execute(select(Activity).where(Activity.pin == pin))
        activity = result.scalar_one_or_none()
        if activity is None:
            raise NotFoundError("Activity not found")
        return activity

    async def list_owned_activities(self, owner_id: uuid.UUID, *, include_hidden: bool = False) -> List[Activity]:
        stmt = select(Activity).where(Activity.owner_id == owner_id)
        if not include_hidden:
            stmt = stmt.where(Activity.deleted.is_(False))
        stmt = stmt.order_by(Activity.created_at.desc(), Activity.id)
        result = await self._execute(stmt)
        return list(result.scalars().all())

    async def list_joined_activities(self, user_id: uuid.UUID) -> List[Activity]:
        stmt = (
            select(Activity)
            .join(UserActivity, UserActivity.activity_id == Activity.id)
            .where(UserActivity.user_id == user_id, Activity.deleted.is_(False))
            .order_by(UserActivity.joined_at.desc(), Activity.id)
        )
        result = await self._execute(stmt)
        return list(result.scalars().all())

    async def update_activity(
        self,
        activity_id: uuid.UUID,
        name: str,
        description: Optional[str],
        owner_id: uuid.UUID,
    ) -> Activity:
        activity = await load_owned_activity(self.session, activity_id, owner_id)

        name = validate_required_text(name, field="name", max_length=settings.ACTIVITY_NAME_MAX_LENGTH)
        description = normalize_description(description)

        if not activity.deleted:
            twin = await self._find_visible_twin(owner_id, name, description, exclude_id=activity.id)
            if twin is not None:
                raise DuplicateError("An activity with this name and description already exists", field="name")

        # PIN and owner are immutable after creation.
        activity.name = name
        activity.description = description
        await self._commit(
            conflict=DuplicateError("An activity with this name and description already exists", field="name")
        )
        await self.session.refresh(activity)
        logger.info("activity.updated id=%s owner=%s", activity.id, owner_id)
        return activity

    async def hide_activity(self, activity_id: uuid.UUID, owner_id: uuid.UUID) -> Activity:
        activity = await load_owned_activity(self.session, activity_id, owner_id)
        if activity.deleted:
            return activity

        activity.deleted = True
        await self._commit()
        await self.session.refresh(activity)
        logger.info("activity.hidden id=%s owner=%s", activity.id, owner_id)
        return activity

    async def restore_activity(self, activity_id: uuid.UUID, owner_id: uuid.UUID) -> Activity:
        activity = await load_owned_activity(self.session, activity_id, owner_id)
        if not activity.deleted:
            return activity

        # A visible twin may have been created while this one was hidden.
        twin = await self._find_visible_twin(owner_id, activity.name, activity.description, exclude_id=activity.id)
        if twin is not None:
            raise DuplicateError("An activity with this name and description already exists", field="name")

        activity.deleted = False
        await self._commit(
            conflict=DuplicateError("An activity with this name and description already exists", field="name")
        )
        await self.session.refresh(activity)
        logger.info("activity.restored id=%s owner=%s", activity.id, owner_id)
        return activity

    async def join_activity(self, user_id: uuid.UUID, activity_id: uuid.UUID) -> Optional[UserActivity]:
        """Link ``user_id`` to the activity; joining twice returns the existing link.

        Owners already have access, so an owner joining gets ``None`` and no link.
        """
        activity = await self.get_activity(activity_id)
        if activity.owner_id == user_id:
            return None

        existing = await self._find_link(user_id, activity_id)
        if existing is not None:
            return existing

        link = UserActivity(user_id=user_id, activity_id=activity_id)
        self.session.add(link)
        try:
            await self.session.commit()
        except IntegrityError:
            # Lost a race against a concurrent join of the same pair: same outcome.
            await self.session.rollback()
            existing = await self._find_link(user_id, activity_id)
            if existing is None:
                raise TransportError("Store rejected the write")
            return existing
        except DBAPIError as exc:
            await self._rollback_quietly()
            raise TransportError() from exc

        await self.session.refresh(link)
        logger.info("activity.joined id=%s user=%s", activity_id, user_id)
        return link

    async def join_by_pin(self, user_id: uuid.UUID, pin: str) -> Activity:
        """Resolve a PIN and attach the caller.

        A hidden activity is only reachable by its owner, for whom re-entering the
        PIN restores it.
        """
        activity = await self.get_activity_by_pin(pin)
        if activity.deleted:
            if activity.owner_id != user_id:
                raise NotFoundError("Activity not found")
            return await self.restore_activity(activity.id, user_id)

        await self.join_activity(user_id, activity.id)
        return activity

    async def _pin_taken(self, pin: str) -> bool:
        result = await self._execute(select(Activity.id).where(Activity.pin == pin))
        return result.first() is not None

    async def _find_link(self, user_id: uuid.UUID, activity_id: uuid.UUID) -> Optional[UserActivity]:
        result = await self._execute(
            select(UserActivity).where(
                UserActivity.user_id == user_id,
                UserActivity.activity_id == activity_id,
            )
        )
        return result.scalar_one_or_none()

    async def _find_visible_twin(
        self,
        owner_id: uuid.UUID,
        name: str,
        description: Optional[str],
        *,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> Optional[Activity]:
        stmt = select(Activity).where(
            Activity.owner_id == owner_id,
            Activity.name == name,
            func.coalesce(Activity.description, "") == (description or ""),
            Activity.deleted.is_(False),
        )
        if exclude_id is not None:
            stmt = stmt.where(Activity.id != exclude_id)
        result = await self._execute(stmt.limit(1))
        return result.scalar_one_or_none()
