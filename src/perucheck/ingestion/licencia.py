"""MTC driver licence normalizer.

Licence fields live under ``datos`` while the points summary lives under
``resumen``; a few fields (expiry, holder name, restrictions) can appear
in either.
"""

from __future__ import annotations

from typing import Any

from perucheck.ingestion.normalize import as_list, as_mapping, first_text, unwrap_data
from perucheck.models.records import LicenseRecord

DATA_FIELDS: dict[str, tuple[str, ...]] = {
    "number": ("licencia", "numero"),
    "license_class": ("clase", "categoria"),
    "restrictions": ("restricciones",),
    "status": ("estado",),
    "expires": ("fecha_revalidacion", "vencimiento"),
    "holder_name": ("nombres", "nombre_completo"),
}

SUMMARY_FIELDS: dict[str, tuple[str, ...]] = {
    "restrictions": ("restricciones",),
    "status": ("estado_licencia",),
    "expires": ("vigente_hasta", "vencimiento"),
    "holder_name": ("administrado",),
    "firm_points": ("puntos_firmes", "puntosFirmes"),
    "infractions": ("infracciones_acumuladas", "infracciones"),
    "serious": ("graves",),
    "very_serious": ("muy_graves",),
}

PROCEDURES_KEY = "tabla_tramites"
BONUSES_KEY = "tabla_bonificacion"


def _resolve(name: str, data: Any, summary: Any) -> str | None:
    """First non-empty value for ``name``, looking in ``datos`` before ``resumen``."""
    for doc, table in ((data, DATA_FIELDS), (summary, SUMMARY_FIELDS)):
        keys = table.get(name)
        if keys:
            text = first_text([doc], keys)
            if text is not None:
                return text
    return None


def normalize_license(raw_text: str, payload: Any = None) -> LicenseRecord | None:
    """Merge licence data and points summary; ``None`` when both are empty."""
    full = as_mapping(payload)
    data = unwrap_data(payload)
    summary = as_mapping(full.get("resumen"))

    fields = {name: _resolve(name, data, summary) for name in (*DATA_FIELDS, *SUMMARY_FIELDS)}
    procedures = as_list(full.get(PROCEDURES_KEY))
    bonuses = as_list(full.get(BONUSES_KEY))

    if not any(fields.values()) and not procedures and not bonuses:
        return None
    return LicenseRecord(procedures=procedures, bonuses=bonuses, **fields)
