from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from scorehub.core.activities.service import ActivityService
from scorehub.core.guard import ensure_can_view
from scorehub.core.participants.service import ParticipantService
from scorehub.core.reports.csv_export import (
    NamedTotal,
    ReportType,
    export_filename,
    participant_detail_csv,
    rows_from_records,
    score_list_csv,
    time_sequence_csv,
    with_bom,
)
from scorehub.core.reports.csv_import import parse_participant_names, validate_csv_filename
from scorehub.core.scores.aggregator import ScoreAggregator, group_scores, merge_totals
from scorehub.db.models.participant import Participant
from scorehub.utils.exceptions import ValidationError
from scorehub.utils.metrics import CSV_ROWS_TOTAL
from scorehub.utils.timefmt import utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportResult:
    created: List[Participant]
    skipped: int


@dataclass(frozen=True)
class ExportFile:
    filename: str
    content: bytes
    rows: int


class ReportService:
    def __init__(self, session: AsyncSession, session_factory: async_sessionmaker[AsyncSession]):
        self.session = session
        self.aggregator = ScoreAggregator(session_factory)

    async def import_participants_csv(
        self,
        text: str,
        activity_id: uuid.UUID,
        *,
        filename: Optional[str] = None,
    ) -> ImportResult:
        if filename is not None:
            validate_csv_filename(filename)

        names = parse_participant_names(text)
        if not names:
            raise ValidationError("No participant names found in the CSV file", field="content")

        created = await ParticipantService(self.session).create_participants_batch(names, activity_id)
        skipped = len(names) - len(created)
        CSV_ROWS_TOTAL.labels(direction="import", report="participants").inc(len(created))
        logger.info("report.imported activity=%s created=%d skipped=%d", activity_id, len(created), skipped)
        return ImportResult(created=created, skipped=skipped)

    async def export(
        self,
        activity_id: uuid.UUID,
        report_type: ReportType,
        user_id: uuid.UUID,
        *,
        participant_ids: Optional[Sequence[uuid.UUID]] = None,
    ) -> ExportFile:
        activity = await ActivityService(self.session).get_activity(activity_id)
        await ensure_can_view(self.session, activity, user_id)

        snapshot = await self.aggregator.load_snapshot(activity_id)

        if report_type is ReportType.score_list:
            totals = merge_totals(snapshot.participants, snapshot.scores)
            content = score_list_csv([NamedTotal(name=t.participant.name, total=t.total) for t in totals])
            rows = len(totals)
        elif report_type is ReportType.participant_detail:
            chosen = _select_participants(snapshot.participants, participant_ids)
            grouped = {pid: rows_from_records(records) for pid, records in group_scores(snapshot.scores).items()}
            content = participant_detail_csv([(p.id, p.name) for p in chosen], grouped)
            rows = sum(max(1, len(grouped.get(p.id, []))) for p in chosen)
        else:
            names = {p.id: p.name for p in snapshot.participants}
            content = time_sequence_csv(rows_from_records(snapshot.scores), names)
            rows = len(snapshot.scores)

        CSV_ROWS_TOTAL.labels(direction="export", report=report_type.value).inc(rows)
        logger.info("report.exported activity=%s type=%s rows=%d", activity_id, report_type.value, rows)
        return ExportFile(
            filename=export_filename(activity.name, report_type, utcnow()),
            content=with_bom(content),
            rows=rows,
        )


def _select_participants(
    participants: List[Participant],
    participant_ids: Optional[Sequence[uuid.UUID]],
) -> List[Participant]:
    if not participant_ids:
        return list(participants)

    wanted = set(participant_ids)
    known = {p.id for p in participants}
    unknown = wanted - known
    if unknown:
        raise ValidationError(
            "Participant does not belong to this activity",
            field="participant_ids",
            details={"unknown": sorted(str(u) for u in unknown)},
        )
    return [p for p in participants if p.id in wanted]
