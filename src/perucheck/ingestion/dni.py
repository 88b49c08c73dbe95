"""RENIEC identity (DNI) normalizer."""

from __future__ import annotations

from typing import Any

from perucheck.ingestion.normalize import first_text, unwrap_data
from perucheck.models.records import IdentityRecord

IDENTITY_FIELDS: dict[str, tuple[str, ...]] = {
    "given_names": ("nombres", "nombre_completo"),
    "paternal_surname": ("apellido_paterno", "ap_paterno"),
    "maternal_surname": ("apellido_materno", "ap_materno"),
    "verification_code": ("codigo_verificacion",),
    "address": ("direccion",),
    "document_id": ("dni", "numero"),
}


def normalize_identity(raw_text: str, payload: Any = None) -> IdentityRecord | None:
    data = unwrap_data(payload)
    fields = {name: first_text([data], keys) for name, keys in IDENTITY_FIELDS.items()}
    if not any(fields.values()):
        return None
    return IdentityRecord(**fields)
