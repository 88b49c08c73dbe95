from __future__ import annotations

from perucheck._redact import redact_for_log


def test_redact_for_log_masks_identifiers_and_names() -> None:
    payload = {
        "placa": "ABC123",
        "dni": "12345678",
        "datos": {
            "nombres": "ANA",
            "apellido_paterno": "LOPEZ",
            "ap_materno": "RUIZ",
            "direccion": "AV. SIEMPRE VIVA 742",
            "codigo_verificacion": "7",
            "propietarios": [{"nombre": "ANA LOPEZ", "documento": "12345678", "porcentaje": "100%"}],
            "propietario": "JUAN PEREZ",
        },
        "imagen_resultado_src": "data:image/png;base64,AAAA",
    }

    redacted = redact_for_log(payload)

    assert redacted["placa"] == "ABC123"
    assert redacted["dni"] == "<redacted>"
    assert redacted["imagen_resultado_src"] == "<redacted>"
    datos = redacted["datos"]
    assert datos["nombres"] == "<redacted>"
    assert datos["apellido_paterno"] == "<redacted>"
    assert datos["ap_materno"] == "<redacted>"
    assert datos["direccion"] == "<redacted>"
    assert datos["codigo_verificacion"] == "<redacted>"
    assert datos["propietario"] == "<redacted>"
    assert datos["propietarios"][0] == {"nombre": "<redacted>", "documento": "<redacted>", "porcentaje": "100%"}
    assert payload["dni"] == "12345678"


def test_redact_for_log_keeps_non_personal_values() -> None:
    redacted = redact_for_log({"vigente": True, "registros": 3, "captcha_valido": None, "raw": b"\x00\x01"})

    assert redacted == {"vigente": True, "registros": 3, "captcha_valido": None, "raw": "<bytes:2b>"}


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"resultado_crudo": long_value}, max_string=10)
    assert redacted["resultado_crudo"].startswith("x" * 10)
    assert "<truncated>" in redacted["resultado_crudo"]
