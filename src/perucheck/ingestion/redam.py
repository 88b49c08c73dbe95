"""REDAM (delinquent alimony debtors registry) normalizer."""

from __future__ import annotations

from typing import Any

from perucheck.ingestion.normalize import unwrap_data
from perucheck.models.records import DebtRecord

ENTRY_LIST_KEYS: tuple[str, ...] = ("registros", "resultados")
DETAIL_LIMIT = 3


def normalize_debt(raw_text: str, payload: Any = None) -> DebtRecord | None:
    """Count registry entries.

    An empty list is a real answer ("no records"); only a payload without
    any entry list yields ``None``.
    """
    data = unwrap_data(payload)
    for key in ENTRY_LIST_KEYS:
        entries = data.get(key)
        if isinstance(entries, list):
            return DebtRecord(total=len(entries), details=entries[:DETAIL_LIMIT])
    return None
