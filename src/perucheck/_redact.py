"""Masking of personal data in trace logs.

Lookup payloads carry national ids, names, addresses and captured page
images. :func:`redact_for_log` returns a copy with those fields replaced
so request and response bodies can be logged at DEBUG level.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

MASK = "<redacted>"
MAX_DEPTH = 20

PERSONAL_DATA_KEYS: frozenset[str] = frozenset(
    {
        # Identifiers
        "dni",
        "documento",
        "dni_propietario",
        "codigo_verificacion",
        # Names
        "nombre",
        "nombres",
        "nombre_completo",
        "apellido_paterno",
        "apellido_materno",
        "ap_paterno",
        "ap_materno",
        "propietario",
        "administrado",
        # Contact
        "direccion",
        # Captured page images
        "imagen_resultado_src",
    }
)


def _clip(text: str, limit: int) -> str:
    return text if len(text) <= limit else f"{text[:limit]}…<truncated>"


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a copy of *value* with personal fields masked and long strings clipped."""
    if _depth > MAX_DEPTH:
        return "<max-depth>"
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return _clip(value, max_string)
    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"
    if isinstance(value, Mapping):
        return {
            str(key): MASK
            if str(key).lower() in PERSONAL_DATA_KEYS
            else redact_for_log(item, max_string=max_string, _depth=_depth + 1)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [redact_for_log(item, max_string=max_string, _depth=_depth + 1) for item in value]
    return repr(value)
