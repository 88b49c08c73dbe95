"""SUNARP vehicle registry (ownership) normalizer.

The scraper's JSON is not stable across registry offices: owner lists
show up under several keys, sometimes as a single string, and owner
entries use a different vocabulary depending on whether the holder is a
person or a company. Every alternative is declared below as an ordered
candidate list, so a new spelling only needs a new entry here.
"""

from __future__ import annotations

import re
from typing import Any

from perucheck.ingestion.normalize import (
    as_list,
    as_mapping,
    first_present,
    first_text,
    join_name,
    safe_str,
    split_lines,
    unwrap_data,
)
from perucheck.models.records import Owner, OwnershipRecord

OWNER_LIST_KEYS: tuple[str, ...] = ("propietarios", "titulares", "propietario", "titular")
OWNER_DETAIL_KEYS: tuple[str, ...] = ("propietarios_detalle", "propietariosDetalles")
MATCH_LIST_KEYS: tuple[str, ...] = ("dni_propietario_coincidentes", "propietarios_coincidentes")
SEARCH_KEY = "dni_propietario_buscar"

OWNER_FIELDS: dict[str, tuple[str, ...]] = {
    "name": ("nombre", "nombres", "propietario", "razon_social"),
    "document_id": ("documento", "dni", "ruc", "doc"),
    "share_percent": ("porcentaje", "participacion"),
    "condition": ("condicion", "calidad"),
}

VEHICLE_FIELDS: dict[str, tuple[str, ...]] = {
    "plate": ("placa", "placa_rodaje"),
    "vin": ("vin", "vin_vehicular", "numero_vin"),
    "registry_entry": ("partida", "nro_partida"),
    "office": ("oficina", "zona", "zona_registral"),
}

# Name parts in display order, per list shape.
DETAIL_NAME_PARTS: tuple[str, ...] = ("ap_paterno", "ap_materno", "nombres")
MATCH_NAME_PARTS: tuple[str, ...] = ("nombres", "ap_paterno", "ap_materno", "texto")
SEARCH_NAME_PARTS: tuple[str, ...] = ("nombres", "ap_paterno", "ap_materno")
MATCH_DOCUMENT_KEYS: tuple[str, ...] = ("dni", "documento")

RAW_OWNER_LINE_LIMIT = 3
_RAW_OWNER_RE = re.compile(r"propietario", re.IGNORECASE)
_RAW_OWNER_LABEL_RE = re.compile(r"propietario:?\s*", re.IGNORECASE)


def _names(entry: dict[str, Any], parts: tuple[str, ...]) -> str:
    return join_name(*(entry.get(part) for part in parts))


def _listed_owners(data: Any) -> list[Owner]:
    owners: list[Owner] = []
    for entry in as_list(first_present(data, OWNER_LIST_KEYS)):
        if isinstance(entry, str):
            owners.append(Owner(name=entry))
            continue
        if not isinstance(entry, dict):
            continue
        fields = {name: first_text([entry], keys) for name, keys in OWNER_FIELDS.items()}
        if fields["name"] or fields["document_id"]:
            owners.append(Owner(**fields))
    return owners


def _detailed_owners(data: Any) -> list[Owner]:
    owners: list[Owner] = []
    for entry in as_list(first_present(data, OWNER_DETAIL_KEYS)):
        if not isinstance(entry, dict):
            continue
        name = _names(entry, DETAIL_NAME_PARTS) or safe_str(entry.get("texto"))
        if name:
            owners.append(
                Owner(
                    name=name,
                    document_id=safe_str(entry.get("documento")),
                    condition=safe_str(entry.get("condicion")),
                )
            )
    return owners


def _matches(data: Any) -> list[Owner]:
    matches: list[Owner] = []
    for entry in as_list(first_present(data, MATCH_LIST_KEYS)):
        if not isinstance(entry, dict):
            continue
        name = _names(entry, MATCH_NAME_PARTS)
        document = first_text([entry], MATCH_DOCUMENT_KEYS)
        if name or document:
            matches.append(Owner(name=name or None, document_id=document))

    search = as_mapping(as_mapping(data).get(SEARCH_KEY))
    for entry in as_list(search.get("resultados")):
        if not isinstance(entry, dict):
            continue
        name = _names(entry, SEARCH_NAME_PARTS)
        document = safe_str(entry.get("dni"))
        if name or document:
            matches.append(Owner(name=name or None, document_id=document))
    return matches


def _raw_text_owners(raw_text: str) -> list[Owner]:
    owners: list[Owner] = []
    lines = [line for line in split_lines(raw_text) if _RAW_OWNER_RE.search(line)]
    for line in lines[:RAW_OWNER_LINE_LIMIT]:
        cleaned = _RAW_OWNER_LABEL_RE.sub("", line, count=1).strip()
        if cleaned:
            owners.append(Owner(name=cleaned))
    return owners


def _lookup_owner_name(data: Any) -> str | None:
    used = first_present(data, ("propietario_usado_para_dni",))
    if not isinstance(used, dict):
        return None
    return _names(used, SEARCH_NAME_PARTS) or None


def _captcha_valid(*values: Any) -> bool:
    for value in values:
        if value is not None:
            return value is True or value == "true"
    return False


def normalize_ownership(raw_text: str, payload: Any = None) -> OwnershipRecord | None:
    """Build the ownership record; ``None`` when neither owners nor vehicle data exist."""
    full = as_mapping(payload)
    data = unwrap_data(payload)

    owners = _listed_owners(data) + _detailed_owners(data)
    matches = _matches(data)
    if not owners:
        owners = _raw_text_owners(raw_text)

    vehicle = {name: first_text([data], keys) for name, keys in VEHICLE_FIELDS.items()}

    if not owners and not matches and not any(vehicle.values()):
        return None

    return OwnershipRecord(
        owners=owners,
        matches=matches,
        owner_document=safe_str(data.get("dni_propietario")),
        owner_used_for_lookup=_lookup_owner_name(data),
        captcha_detected=first_text([data, full], ("captcha_detectado",)),
        captcha_valid=_captcha_valid(data.get("captcha_valido"), full.get("captcha_valido")),
        result_image=first_text([data, full], ("imagen_resultado_src",)),
        **vehicle,
    )
