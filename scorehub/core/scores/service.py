from __future__ import annotations

import logging
import uuid
from datetime import timedelta
from typing import Iterable, List

from sqlalchemy import select

from scorehub.config import settings
from scorehub.core.store import StoreService
from scorehub.db.models.participant import Participant
from scorehub.db.models.score_record import ScoreRecord
from scorehub.utils.exceptions import NotFoundError, ValidationError
from scorehub.utils.metrics import SCORE_EVENTS_TOTAL
from scorehub.utils.observability import log_duration
from scorehub.utils.timefmt import utcnow
from scorehub.utils.validation import validate_points, validate_required_text

logger = logging.getLogger(__name__)


class ScoreService(StoreService):
    async def add_score(
        self,
        participant_id: uuid.UUID,
        activity_id: uuid.UUID,
        points: int,
        reason: str,
    ) -> ScoreRecord:
        points = validate_points(points)
        reason = validate_required_text(reason, field="reason", max_length=settings.SCORE_REASON_MAX_LENGTH)

        participant = await self._get(Participant, participant_id)
        if participant is None:
            raise NotFoundError("Participant not found")
        # activity_id is denormalized from the participant and must agree with it.
        if participant.activity_id != activity_id:
            raise ValidationError("Participant does not belong to this activity", field="activity_id")

        record = ScoreRecord(
            participant_id=participant.id,
            activity_id=participant.activity_id,
            points=points,
            reason=reason,
        )
        self.session.add(record)
        await self._commit()
        await self.session.refresh(record)
        SCORE_EVENTS_TOTAL.labels(event="added").inc()
        logger.info(
            "score.added id=%s participant=%s activity=%s points=%d",
            record.id,
            participant.id,
            participant.activity_id,
            points,
        )
        return record

    async def add_scores_batch(
        self,
        participant_ids: Iterable[uuid.UUID],
        activity_id: uuid.UUID,
        points: int,
        reason: str,
    ) -> List[ScoreRecord]:
        """Record the same points and reason for every selected participant.

        All participants must belong to ``activity_id``; otherwise nothing is written.
        """
        points = validate_points(points)
        reason = validate_required_text(reason, field="reason", max_length=settings.SCORE_REASON_MAX_LENGTH)

        ids = list(dict.fromkeys(participant_ids))
        if not ids:
            raise ValidationError("Select at least one participant", field="participant_ids")

        result = await self._execute(select(Participant).where(Participant.id.in_(ids)))
        found = {p.id: p for p in result.scalars().all()}

        missing = [pid for pid in ids if pid not in found]
        if missing:
            raise NotFoundError("Participant not found", details={"missing": [str(pid) for pid in missing]})
        foreign = [pid for pid in ids if found[pid].activity_id != activity_id]
        if foreign:
            raise ValidationError(
                "Participant does not belong to this activity",
                field="participant_ids",
                details={"foreign": [str(pid) for pid in foreign]},
            )

        base_time = utcnow()
        records = [
            ScoreRecord(
                participant_id=pid,
                activity_id=activity_id,
                points=points,
                reason=reason,
                # Selection order is kept for the time-sequence report.
                created_at=base_time + timedelta(microseconds=index),
            )
            for index, pid in enumerate(ids)
        ]
        self.session.add_all(records)
        with log_duration(logger, "score.batch_commit", activity=activity_id, count=len(records)):
            await self._commit()

        SCORE_EVENTS_TOTAL.labels(event="added").inc(len(records))
        logger.info(
            "score.batch_added activity=%s count=%d points=%d",
            activity_id,
            len(records),
            points,
        )
        return records

    async def get_score(self, score_id: uuid.UUID) -> ScoreRecord:
        record = await self._get(ScoreRecord, score_id)
        if record is None:
            raise NotFoundError("Score record not found")
        return record

    async def update_score(self, score_id: uuid.UUID, points: int, reason: str) -> ScoreRecord:
        """Overwrite points and reason in place; created_at is left untouched."""
        points = validate_points(points)
        reason = validate_required_text(reason, field="reason", max_length=settings.SCORE_REASON_MAX_LENGTH)

        record = await self.get_score(score_id)
        record.points = points
        record.reason = reason
        await self._commit()
        await self.session.refresh(record)
        SCORE_EVENTS_TOTAL.labels(event="edited").inc()
        logger.info("score.updated id=%s points=%d", record.id, points)
        return record

    async def list_scores_by_participant(self, participant_id: uuid.UUID) -> List[ScoreRecord]:
        stmt = (
            select(ScoreRecord)
            .where(ScoreRecord.participant_id == participant_id)
            .order_by(ScoreRecord.created_at.desc())
        )
        result = await self._execute(stmt)
        return list(result.scalars().all())

    async def list_scores_by_activity(self, activity_id: uuid.UUID) -> List[ScoreRecord]:
        """Bulk read of every score in the activity, oldest first."""
        stmt = (
            select(ScoreRecord)
            .where(ScoreRecord.activity_id == activity_id)
            .order_by(ScoreRecord.created_at.asc())
        )
        result = await self._execute(stmt)
        return list(result.scalars().all())
