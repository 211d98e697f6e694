"""CSV report formatters.

Three report types share one quoting policy: free-text reasons and timestamps are
always quoted, names are quoted only when they would otherwise break the row, and
numbers are never quoted. Embedded quotes are doubled so every report re-imports
cleanly. Rows are joined with ``\\n``; ``with_bom`` prepares the download body.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Mapping, Optional, Sequence

from scorehub.utils.timefmt import ensure_aware, format_datetime

DELIMITER = ","
BOM = "\ufeff"

NO_RECORDS_REASON = "尚無分數記錄"
UNKNOWN_PARTICIPANT = "未知"

SCORE_LIST_HEADERS = ("參加者", "總分")
PARTICIPANT_DETAIL_HEADERS = ("參加者", "時間", "分數", "原因")
TIME_SEQUENCE_HEADERS = ("時間", "參加者", "分數", "原因")


class ReportType(str, Enum):
    score_list = "score-list"
    participant_detail = "participant-detail"
    time_sequence = "time-sequence"

    @property
    def label(self) -> str:
        return REPORT_LABELS[self]


REPORT_LABELS = {
    ReportType.score_list: "分數名單表",
    ReportType.participant_detail: "個人明細表",
    ReportType.time_sequence: "時間序計分表",
}


@dataclass(frozen=True)
class NamedTotal:
    name: str
    total: int


@dataclass(frozen=True)
class ScoreRow:
    participant_id: uuid.UUID
    points: int
    reason: str
    created_at: datetime


def quote_always(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def quote_if_needed(value: str, delimiter: str = DELIMITER) -> str:
    if any(ch in value for ch in (delimiter, '"', "\n", "\r")):
        return quote_always(value)
    return value


def _join(fields: Iterable[str], delimiter: str = DELIMITER) -> str:
    return delimiter.join(fields)


def _header(headers: Sequence[str]) -> str:
    return _join(headers)


def score_list_csv(participants: Sequence[NamedTotal]) -> str:
    """One row per participant, highest total first; ties keep input order."""
    ordered = sorted(participants, key=lambda p: p.total, reverse=True)
    lines = [_header(SCORE_LIST_HEADERS)]
    lines.extend(_join([quote_if_needed(p.name), str(p.total)]) for p in ordered)
    return "\n".join(lines)


def participant_detail_csv(
    participants: Sequence[tuple[uuid.UUID, str]],
    scores_by_participant: Mapping[uuid.UUID, Sequence[ScoreRow]],
    *,
    tz_name: Optional[str] = None,
) -> str:
    """One row per score record of each chosen participant.

    A participant without records still gets exactly one placeholder row.
    """
    lines = [_header(PARTICIPANT_DETAIL_HEADERS)]
    for participant_id, name in participants:
        records = scores_by_participant.get(participant_id) or []
        if not records:
            lines.append(
                _join([quote_if_needed(name), quote_always(""), "0", quote_always(NO_RECORDS_REASON)])
            )
            continue
        for record in records:
            lines.append(
                _join(
                    [
                        quote_if_needed(name),
                        quote_always(format_datetime(record.created_at, tz_name=tz_name)),
                        str(record.points),
                        quote_always(record.reason),
                    ]
                )
            )
    return "\n".join(lines)


def time_sequence_csv(
    scores: Sequence[ScoreRow],
    names_by_id: Mapping[uuid.UUID, str],
    *,
    tz_name: Optional[str] = None,
) -> str:
    """Every record of the activity, oldest first (stable on equal timestamps)."""
    ordered = sorted(scores, key=lambda r: ensure_aware(r.created_at))
    lines = [_header(TIME_SEQUENCE_HEADERS)]
    for record in ordered:
        name = names_by_id.get(record.participant_id) or UNKNOWN_PARTICIPANT
        lines.append(
            _join(
                [
                    quote_always(format_datetime(record.created_at, tz_name=tz_name)),
                    quote_if_needed(name),
                    str(record.points),
                    quote_always(record.reason),
                ]
            )
        )
    return "\n".join(lines)


def with_bom(content: str) -> bytes:
    """UTF-8 bytes with a byte-order mark, for spreadsheet compatibility."""
    return (BOM + content).encode("utf-8")


_FILENAME_FORBIDDEN = set('\\/:*?"<>|\r\n\t')


def export_filename(activity_name: str, report_type: ReportType, when: datetime) -> str:
    safe_name = "".join("_" if ch in _FILENAME_FORBIDDEN else ch for ch in activity_name).strip() or "activity"
    return f"{safe_name}_{report_type.label}_{ensure_aware(when).date().isoformat()}.csv"


def rows_from_records(records: Iterable) -> List[ScoreRow]:
    return [
        ScoreRow(
            participant_id=r.participant_id,
            points=r.points,
            reason=r.reason,
            created_at=r.created_at,
        )
        for r in records
    ]
