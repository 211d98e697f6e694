import uuid
from datetime import datetime, timezone

from scorehub.core.reports.csv_export import (
    NO_RECORDS_REASON,
    NamedTotal,
    ReportType,
    ScoreRow,
    export_filename,
    participant_detail_csv,
    quote_if_needed,
    score_list_csv,
    time_sequence_csv,
    with_bom,
)
from scorehub.core.reports.csv_import import parse_participant_names

TZ = "Asia/Taipei"


def _row(pid, points, reason, hour, minute=0):
    return ScoreRow(
        participant_id=pid,
        points=points,
        reason=reason,
        created_at=datetime(2024, 5, 1, hour, minute, tzinfo=timezone.utc),
    )


def test_score_list_orders_by_total_with_stable_ties():
    content = score_list_csv(
        [NamedTotal("A", 10), NamedTotal("B", 20), NamedTotal("C", 10)]
    )
    assert content.split("\n") == ["參加者,總分", "B,20", "A,10", "C,10"]


def test_names_quoted_only_when_needed():
    assert quote_if_needed("Ann") == "Ann"
    assert quote_if_needed("Lee, Ann") == '"Lee, Ann"'
    assert quote_if_needed('The "Ace"') == '"The ""Ace"""'


def test_participant_detail_uses_display_timezone_and_quotes_free_text():
    alice = uuid.uuid4()
    content = participant_detail_csv(
        [(alice, "Alice")],
        {alice: [_row(alice, 5, 'said "hi"', 1, 30)]},
        tz_name=TZ,
    )
    lines = content.split("\n")
    assert lines[0] == "參加者,時間,分數,原因"
    # 01:30 UTC is 09:30 in Taipei
    assert lines[1] == 'Alice,"2024年05月01日 09:30",5,"said ""hi"""'


def test_participant_without_records_gets_one_placeholder_row():
    bob = uuid.uuid4()
    content = participant_detail_csv([(bob, "Bob")], {}, tz_name=TZ)
    assert content.split("\n")[1:] == [f'Bob,"",0,"{NO_RECORDS_REASON}"']


def test_time_sequence_is_oldest_first_and_names_unknown_ids():
    alice, ghost = uuid.uuid4(), uuid.uuid4()
    rows = [
        _row(alice, 3, "late", 5),
        _row(ghost, -1, "early", 2),
    ]
    content = time_sequence_csv(rows, {alice: "Alice"}, tz_name=TZ)
    lines = content.split("\n")
    assert lines[0] == "時間,參加者,分數,原因"
    assert lines[1] == '"2024年05月01日 10:00",未知,-1,"early"'
    assert lines[2] == '"2024年05月01日 13:00",Alice,3,"late"'


def test_naive_timestamps_are_treated_as_utc():
    alice = uuid.uuid4()
    row = ScoreRow(participant_id=alice, points=1, reason="r", created_at=datetime(2024, 5, 1, 16, 5))
    content = time_sequence_csv([row], {alice: "Alice"}, tz_name=TZ)
    assert content.split("\n")[1].startswith('"2024年05月02日 00:05"')


def test_with_bom_prefixes_utf8_byte_order_mark():
    body = with_bom("參加者,總分")
    assert body.startswith(b"\xef\xbb\xbf")
    assert body[3:].decode("utf-8") == "參加者,總分"


def test_exported_names_reimport_unchanged():
    content = score_list_csv([NamedTotal('Lee, "Ace"', 1), NamedTotal("Bo", 0)])
    # Header line carries 參加者, which is not a header marker; skip it explicitly.
    body = "\n".join(content.split("\n")[1:])
    assert parse_participant_names(body) == ['Lee, "Ace"', "Bo"]


def test_export_filename_sanitizes_name_and_uses_report_label():
    when = datetime(2024, 5, 1, 23, 0, tzinfo=timezone.utc)
    assert export_filename("Day 1/2", ReportType.score_list, when) == "Day 1_2_分數名單表_2024-05-01.csv"
    assert export_filename("   ", ReportType.time_sequence, when) == "activity_時間序計分表_2024-05-01.csv"
