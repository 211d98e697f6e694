from __future__ import annotations

import logging
import uuid
from datetime import timedelta
from typing import Iterable, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import DBAPIError

from scorehub.config import settings
from scorehub.core.store import StoreService
from scorehub.db.models.activity import Activity
from scorehub.db.models.participant import Participant
from scorehub.db.models.score_record import ScoreRecord
from scorehub.utils.exceptions import DuplicateError, NotFoundError, TransportError
from scorehub.utils.observability import log_duration
from scorehub.utils.timefmt import utcnow
from scorehub.utils.validation import name_key, validate_required_text

logger = logging.getLogger(__name__)


def _duplicate_name() -> DuplicateError:
    return DuplicateError("A participant with this name already exists in the activity", field="name")


class ParticipantService(StoreService):
    async def create_participant(self, name: str, activity_id: uuid.UUID) -> Participant:
        name = validate_required_text(name, field="name", max_length=settings.PARTICIPANT_NAME_MAX_LENGTH)
        await self._require_activity(activity_id)

        key = name_key(name)
        if await self._find_by_key(activity_id, key) is not None:
            raise _duplicate_name()

        participant = Participant(activity_id=activity_id, name=name, name_key=key)
        self.session.add(participant)
        await self._commit(conflict=_duplicate_name())
        await self.session.refresh(participant)
        logger.info("participant.created id=%s activity=%s", participant.id, activity_id)
        return participant

    async def create_participants_batch(self, names: Iterable[str], activity_id: uuid.UUID) -> List[Participant]:
        """Insert every new, usable name; return exactly the created participants.

        Blank and over-long names are skipped, never fatal to the batch. Names are
        compared trimmed and case-insensitively against the activity and against
        earlier names in the same batch (first occurrence wins).
        """
        limit = settings.PARTICIPANT_NAME_MAX_LENGTH
        usable: List[str] = []
        for raw in names:
            if not isinstance(raw, str) or not raw.strip():
                continue
            name = raw.strip()
            if len(name) > limit:
                logger.warning(
                    "participant.batch_name_too_long activity=%s length=%d max=%d",
                    activity_id,
                    len(name),
                    limit,
                )
                continue
            usable.append(name)

        await self._require_activity(activity_id)

        result = await self._execute(select(Participant.name_key).where(Participant.activity_id == activity_id))
        seen = set(result.scalars().all())

        base_time = utcnow()
        created: List[Participant] = []
        for name in usable:
            key = name_key(name)
            if key in seen:
                continue
            seen.add(key)
            # Strictly increasing timestamps keep input order for equal-score ties.
            created.append(
                Participant(
                    activity_id=activity_id,
                    name=name,
                    name_key=key,
                    created_at=base_time + timedelta(microseconds=len(created)),
                )
            )

        if not created:
            return []

        self.session.add_all(created)
        with log_duration(logger, "participant.batch_commit", activity=activity_id, count=len(created)):
            await self._commit(conflict=_duplicate_name())

        logger.info(
            "participant.batch_created activity=%s created=%d submitted=%d",
            activity_id,
            len(created),
            len(usable),
        )
        return created

    async def get_participant(self, participant_id: uuid.UUID) -> Participant:
        participant = await self._get(Participant, participant_id)
        if participant is None:
            raise NotFoundError("Participant not found")
        return participant

    async def list_participants(self, activity_id: uuid.UUID) -> List[Participant]:
        stmt = (
            select(Participant)
            .where(Participant.activity_id == activity_id)
            .order_by(Participant.created_at.asc(), Participant.name.asc())
        )
        result = await self._execute(stmt)
        return list(result.scalars().all())

    async def update_participant(self, participant_id: uuid.UUID, name: str) -> Participant:
        participant = await self.get_participant(participant_id)
        name = validate_required_text(name, field="name", max_length=settings.PARTICIPANT_NAME_MAX_LENGTH)

        key = name_key(name)
        twin = await self._find_by_key(participant.activity_id, key)
        if twin is not None and twin.id != participant.id:
            raise _duplicate_name()

        participant.name = name
        participant.name_key = key
        await self._commit(conflict=_duplicate_name())
        await self.session.refresh(participant)
        logger.info("participant.updated id=%s", participant.id)
        return participant

    async def delete_participant(self, participant_id: uuid.UUID) -> None:
        """Delete the participant and all of its score records in one transaction."""
        participant = await self.get_participant(participant_id)

        try:
            removed = await self.session.execute(
                delete(ScoreRecord).where(ScoreRecord.participant_id == participant.id)
            )
            await self.session.delete(participant)
            await self.session.commit()
        except DBAPIError as exc:
            # Nothing is committed unless both deletes succeed.
            await self._rollback_quietly()
            logger.error("participant.delete_failed id=%s error=%s", participant_id, type(exc).__name__)
            raise TransportError() from exc

        logger.info("participant.deleted id=%s scores_removed=%s", participant_id, removed.rowcount)

    async def _require_activity(self, activity_id: uuid.UUID) -> Activity:
        activity = await self._get(Activity, activity_id)
        if activity is None:
            raise NotFoundError("Activity not found")
        return activity

    async def _find_by_key(self, activity_id: uuid.UUID, key: str) -> Optional[Participant]:
        result = await self._execute(
            select(Participant).where(
                Participant.activity_id == activity_id,
                Participant.name_key == key,
            )
        )
        return result.scalar_one_or_none()
