"""Score totals computed on read.

Activity-wide totals come from exactly two reads, participants and every score
record of the activity, issued concurrently on separate sessions and folded in one
pass. There is no per-participant query on this path.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Dict, List

from sqlalchemy import func, select
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from scorehub.core.participants.service import ParticipantService
from scorehub.core.scores.service import ScoreService
from scorehub.db.models.participant import Participant
from scorehub.db.models.score_record import ScoreRecord
from scorehub.utils.exceptions import TransportError
from scorehub.utils.observability import log_duration

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParticipantTotal:
    participant: Participant
    total: int


@dataclass(frozen=True)
class ActivitySnapshot:
    """Participants (creation order) and score records (oldest first) of one activity."""

    participants: List[Participant]
    scores: List[ScoreRecord]


def fold_totals(scores: List[ScoreRecord]) -> Dict[uuid.UUID, int]:
    totals: Dict[uuid.UUID, int] = {}
    for record in scores:
        totals[record.participant_id] = totals.get(record.participant_id, 0) + record.points
    return totals


def merge_totals(participants: List[Participant], scores: List[ScoreRecord]) -> List[ParticipantTotal]:
    totals = fold_totals(scores)
    return [ParticipantTotal(participant=p, total=totals.get(p.id, 0)) for p in participants]


def group_scores(scores: List[ScoreRecord]) -> Dict[uuid.UUID, List[ScoreRecord]]:
    """Group records by participant, newest first within each group."""
    grouped: Dict[uuid.UUID, List[ScoreRecord]] = {}
    for record in sorted(scores, key=lambda r: r.created_at, reverse=True):
        grouped.setdefault(record.participant_id, []).append(record)
    return grouped


class ScoreAggregator:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def total_for_participant(self, participant_id: uuid.UUID) -> int:
        async with self.session_factory() as session:
            try:
                total = (
                    await session.execute(
                        select(func.coalesce(func.sum(ScoreRecord.points), 0)).where(
                            ScoreRecord.participant_id == participant_id
                        )
                    )
                ).scalar_one()
            except DBAPIError as exc:
                raise TransportError() from exc
        return int(total or 0)

    async def load_snapshot(self, activity_id: uuid.UUID) -> ActivitySnapshot:
        with log_duration(logger, "aggregator.load_snapshot", activity=activity_id):
            participants, scores = await asyncio.gather(
                self._participants(activity_id),
                self._scores(activity_id),
            )
        return ActivitySnapshot(participants=participants, scores=scores)

    async def totals_for_activity(self, activity_id: uuid.UUID) -> List[ParticipantTotal]:
        snapshot = await self.load_snapshot(activity_id)
        return merge_totals(snapshot.participants, snapshot.scores)

    async def scores_grouped_by_participant(self, activity_id: uuid.UUID) -> Dict[uuid.UUID, List[ScoreRecord]]:
        async with self.session_factory() as session:
            scores = await ScoreService(session).list_scores_by_activity(activity_id)
        return group_scores(scores)

    async def _participants(self, activity_id: uuid.UUID) -> List[Participant]:
        async with self.session_factory() as session:
            return await ParticipantService(session).list_participants(activity_id)

    async def _scores(self, activity_id: uuid.UUID) -> List[ScoreRecord]:
        async with self.session_factory() as session:
            return await ScoreService(session).list_scores_by_activity(activity_id)
