"""Normalization helpers.

Centralizes defensive parsing shared by the per-service normalizers:
tolerant tab-separated table extraction, date token handling and
ordered-candidate field resolution over loosely shaped JSON documents.
None of these helpers raise on malformed input.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from datetime import date
from typing import Any

from perucheck._constants import DATA_KEY, RAW_TEXT_KEY

_LINE_SPLIT_RE = re.compile(r"\r?\n")
_COLUMN_SPLIT_RE = re.compile(r"\t+")
_DATE_TOKEN_RE = re.compile(r"\d{2}/\d{2}/\d{4}")
_DATE_PARTS_RE = re.compile(r"[/\-]")
_NON_DIGIT_RE = re.compile(r"\D")


def safe_str(value: Any) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text if text else None


def safe_int(value: Any) -> int | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None


def is_meaningful(value: Any) -> bool:
    """Return True if the value counts as present for candidate resolution."""

    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() not in {"", "--"}
    if value == {}:
        return False
    return bool(value != [])


# ---------------------------------------------------------------------------
# Raw text tables
# ---------------------------------------------------------------------------


def split_lines(text: str | None) -> list[str]:
    """Split on newlines, strip each line and drop blank ones."""
    if not text:
        return []
    return [line.strip() for line in _LINE_SPLIT_RE.split(text) if line.strip()]


def split_columns(line: str) -> list[str]:
    """Split a tab-delimited line, dropping empty cells."""
    return [cell.strip() for cell in _COLUMN_SPLIT_RE.split(line) if cell.strip()]


def find_table_row(lines: Sequence[str], header_keyword: str, min_columns: int) -> list[str] | None:
    """Locate the first data row of a loosely formatted table.

    The header is found by case-insensitive keyword match; the row is the
    first later line with at least ``min_columns`` cells. Without a header
    (or without a qualifying row below it) every line is scanned instead.
    """
    keyword = header_keyword.lower()
    header_idx = next((idx for idx, line in enumerate(lines) if keyword in line.lower()), None)

    if header_idx is not None:
        for line in lines[header_idx + 1 :]:
            columns = split_columns(line)
            if len(columns) >= min_columns:
                return columns

    for line in lines:
        columns = split_columns(line)
        if len(columns) >= min_columns:
            return columns
    return None


def find_labelled_value(lines: Iterable[str], label: str) -> str | None:
    """Return the text after the first ``:`` on the line containing ``label``."""
    needle = label.lower()
    for line in lines:
        if needle in line.lower():
            _, sep, rest = line.partition(":")
            if not sep:
                return None
            return rest.strip() or None
    return None


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------


def find_dates(text: str | None) -> list[str]:
    """Every ``DD/MM/YYYY`` token in ``text``, in order of appearance."""
    if not text:
        return []
    return _DATE_TOKEN_RE.findall(text)


def parse_date(text: str | None) -> date | None:
    """Best-effort ``DD/MM/YYYY`` (or ``DD-MM-YYYY``) parse."""
    if not text:
        return None
    parts = _DATE_PARTS_RE.split(text.strip())
    if len(parts) != 3:
        return None
    day, month, year = (safe_int(part) for part in parts)
    if not day or not month or not year:
        return None
    try:
        return date(year, month, day)
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# JSON documents
# ---------------------------------------------------------------------------


def raw_text_of(payload: Any) -> str:
    """Return the captured page text of an upstream payload (or ``""``)."""
    if isinstance(payload, Mapping):
        value = payload.get(RAW_TEXT_KEY)
        if isinstance(value, str):
            return value
    return ""


def unwrap_data(payload: Any) -> Mapping[str, Any]:
    """Return the nested ``datos`` document when present, else the payload itself."""
    if not isinstance(payload, Mapping):
        return {}
    nested = payload.get(DATA_KEY)
    if isinstance(nested, Mapping) and nested:
        return nested
    return payload


def as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def first_present(doc: Any, candidates: Sequence[str]) -> Any:
    """Return the first present, non-empty value among ``candidates``.

    Candidates are alternative key names for the same logical field, in
    order of preference.
    """
    if not isinstance(doc, Mapping):
        return None
    for key in candidates:
        value = doc.get(key)
        if is_meaningful(value):
            return value
    return None


def first_text(docs: Sequence[Any], candidates: Sequence[str]) -> str | None:
    """Resolve ``candidates`` against each document in turn, as text."""
    for doc in docs:
        text = safe_str(first_present(doc, candidates))
        if text is not None:
            return text
    return None


def as_list(value: Any) -> list[Any]:
    """Accept both the list shape and the single scalar string shape."""
    if isinstance(value, list):
        return value
    if isinstance(value, str) and value.strip():
        return [value.strip()]
    return []


def join_name(*parts: Any) -> str:
    """Join the non-blank name parts with single spaces."""
    return " ".join(text for text in (safe_str(part) for part in parts) if text)


def digits_only(value: Any) -> str:
    if value is None:
        return ""
    return _NON_DIGIT_RE.sub("", str(value))
