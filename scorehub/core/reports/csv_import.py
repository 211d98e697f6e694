"""Participant-name import from CSV text.

The first column of each non-blank line is a participant name. A first line that
looks like a header is dropped. Duplicates are *not* removed here; that policy
belongs to ``ParticipantService.create_participants_batch``.
"""
from __future__ import annotations

import csv
from typing import List

from scorehub.utils.exceptions import ValidationError

HEADER_MARKERS = ("name", "姓名", "名稱")

_QUOTE_CHARS = "\"'"


def is_header_line(line: str) -> bool:
    lowered = line.lower()
    return any(marker in lowered for marker in HEADER_MARKERS)


def _leading_field(line: str, delimiter: str) -> str:
    stripped = line.lstrip()
    if stripped.startswith('"'):
        # csv unquotes a properly quoted value, including embedded delimiters and "".
        try:
            row = next(csv.reader([stripped], delimiter=delimiter), [])
        except csv.Error:
            row = []
        if row:
            return row[0].strip()

    value = stripped.split(delimiter, 1)[0].strip()
    if value[:1] in _QUOTE_CHARS:
        value = value[1:]
    if value[-1:] in _QUOTE_CHARS:
        value = value[:-1]
    return value.strip()


def parse_participant_names(text: str, *, delimiter: str = ",") -> List[str]:
    """Return names in file order, blanks removed."""
    if text.startswith("\ufeff"):
        text = text[1:]

    lines = [line for line in text.splitlines() if line.strip()]
    if lines and is_header_line(lines[0]):
        lines = lines[1:]

    names: List[str] = []
    for line in lines:
        name = _leading_field(line, delimiter)
        if name:
            names.append(name)
    return names


def validate_csv_filename(filename: str | None) -> None:
    if not filename or not filename.lower().endswith(".csv"):
        raise ValidationError("Please upload a .csv file", field="filename")
