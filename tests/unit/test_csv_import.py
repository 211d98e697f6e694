import pytest

from scorehub.core.reports.csv_import import is_header_line, parse_participant_names, validate_csv_filename
from scorehub.utils.exceptions import ValidationError


def test_header_line_is_dropped_and_duplicates_kept():
    assert parse_participant_names("姓名\n張三\n李四\n張三\n") == ["張三", "李四", "張三"]


def test_first_column_only_and_quotes_stripped():
    text = 'name,score\n"Alice",10\n Bob , 3\n\n\'Carol\'\n'
    assert parse_participant_names(text) == ["Alice", "Bob", "Carol"]


def test_quoted_name_with_delimiter_is_one_field():
    assert parse_participant_names('"Lee, Ann",5\nBen\n') == ["Lee, Ann", "Ben"]


def test_byte_order_mark_and_crlf_are_tolerated():
    assert parse_participant_names("\ufeff名稱\r\nAmy\r\nBo\r\n") == ["Amy", "Bo"]


def test_header_only_detected_on_first_line():
    # "Nathan" contains no marker but "name" later in the file is a real participant.
    assert parse_participant_names("Nathan\nname\n") == ["Nathan", "name"]


def test_blank_input_yields_nothing():
    assert parse_participant_names("\n  \n") == []


def test_header_markers_are_case_insensitive():
    assert is_header_line("Name")
    assert not is_header_line("Alice")


@pytest.mark.parametrize("filename", ["roster.txt", "", None, "csv"])
def test_non_csv_filenames_rejected(filename):
    with pytest.raises(ValidationError) as exc_info:
        validate_csv_filename(filename)
    assert exc_info.value.details["field"] == "filename"


def test_csv_filename_accepted_case_insensitively():
    validate_csv_filename("Roster.CSV")
