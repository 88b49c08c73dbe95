"""ITV (periodic technical inspection) normalizer.

Result rows look like ``PLATE<TAB>CERT<TAB>FROM<TAB>TO<TAB>RESULT<TAB>STATUS``.
When no row can be matched the first two dates anywhere in the page are
used as the validity window. That fallback can pick up unrelated dates
printed above the result table; it is kept for compatibility with the
upstream page layout.
"""

from __future__ import annotations

import re
from typing import Any

from perucheck.ingestion.normalize import as_mapping, find_dates, safe_str, split_columns, split_lines
from perucheck.models._base import RecordDate
from perucheck.models.records import InspectionRecord

_CENTER_RE = re.compile(r"CENTRO DE INSPECC?ION[^,\n]+", re.IGNORECASE)

START_COLUMN = 2
END_COLUMN = 3
RESULT_COLUMN = 4
STATUS_COLUMN = 5

VALID_LABEL = "Vigente"
EXPIRED_LABEL = "Vencido"


def _column(tokens: list[str], index: int) -> str | None:
    return tokens[index] if len(tokens) > index else None


def _find_row(lines: list[str], plate: str) -> list[str]:
    for line in lines:
        if (plate and plate in line) or (not plate and find_dates(line)):
            return split_columns(line)
    return []


def infer_validity(flag: Any, textual_status: str | None) -> str | None:
    """Map the upstream ``vigente`` flag to a label, else keep the text."""
    if flag is True:
        return VALID_LABEL
    if flag is False:
        return EXPIRED_LABEL
    return textual_status


def normalize_inspection(raw_text: str, payload: Any = None) -> InspectionRecord | None:
    """Parse the ITV result; ``None`` when nothing at all was extracted."""
    doc = as_mapping(payload)
    plate = (safe_str(doc.get("placa")) or "").upper()

    lines = split_lines(raw_text)
    tokens = _find_row(lines, plate)
    start = _column(tokens, START_COLUMN)
    end = _column(tokens, END_COLUMN)
    status = _column(tokens, STATUS_COLUMN) or _column(tokens, RESULT_COLUMN)

    dates = find_dates(raw_text)
    fallback_start, fallback_end = (dates[0], dates[1]) if len(dates) >= 2 else (None, None)

    center_match = _CENTER_RE.search(raw_text or "")
    validity = infer_validity(doc.get("vigente"), status)

    if not (start or end or fallback_start or fallback_end or status or validity or center_match):
        return None

    return InspectionRecord(
        start=RecordDate.from_text(start or fallback_start),
        end=RecordDate.from_text(end or fallback_end),
        status=status or validity,
        validity=validity,
        center=center_match.group(0).strip() if center_match else None,
    )
