"""SOAT (mandatory accident insurance) normalizer.

The upstream returns the insurer registry's result page as tab-separated
text::

    Compañía Aseguradora  Clase  Uso  ...  Inicio      Fin
    RIMAC SEGUROS         AUTO   PART ...  01/01/2024  01/01/2025
    Información actualizada al: 10/03/2024
"""

from __future__ import annotations

from typing import Any

from perucheck.ingestion.normalize import find_labelled_value, find_table_row, split_lines
from perucheck.models._base import RecordDate
from perucheck.models.records import InsuranceRecord

HEADER_KEYWORD = "compañía aseguradora"
UPDATED_INFO_LABEL = "información actualizada"

# A line needs this many cells to be considered a data row at all...
ROW_MIN_COLUMNS = 5
# ...and this many for every insurance column to be present.
ROW_REQUIRED_COLUMNS = 8

COLUMNS: tuple[str, ...] = (
    "insurer",
    "vehicle_class",
    "usage",
    "accident_coverage",
    "policy_number",
    "certificate_number",
    "start",
    "end",
)


def normalize_insurance(raw_text: str, payload: Any = None) -> InsuranceRecord | None:
    """Parse the SOAT coverage table; ``None`` when no complete row exists."""
    lines = split_lines(raw_text)
    row = find_table_row(lines, HEADER_KEYWORD, ROW_MIN_COLUMNS)
    if row is None or len(row) < ROW_REQUIRED_COLUMNS:
        return None

    values: dict[str, Any] = dict(zip(COLUMNS, row, strict=False))
    values["start"] = RecordDate.from_text(values["start"])
    values["end"] = RecordDate.from_text(values["end"])
    values["updated_info"] = find_labelled_value(lines, UPDATED_INFO_LABEL)
    return InsuranceRecord(**values)
