from __future__ import annotations

from datetime import date
from typing import Any

import pytest

from perucheck.ingestion.dni import normalize_identity
from perucheck.ingestion.itv import infer_validity, normalize_inspection
from perucheck.ingestion.licencia import normalize_license
from perucheck.ingestion.redam import normalize_debt
from perucheck.ingestion.soat import normalize_insurance
from perucheck.ingestion.sunarp import normalize_ownership
from perucheck.models import (
    DebtRecord,
    IdentityRecord,
    InspectionRecord,
    InsuranceRecord,
    LicenseRecord,
    OwnershipRecord,
)

SOAT_PAGE = (
    "Consulta de SOAT\n"
    "Compañía Aseguradora\tClase\tUso\tAccidentes\tPóliza\tCertificado\tInicio\tFin\n"
    "RIMAC SEGUROS\tAUTOMOVIL\tPARTICULAR\tSI\t12345\t67890\t01/03/2024\t01/03/2025\n"
)


# ---------------------------------------------------------------------------
# SOAT
# ---------------------------------------------------------------------------


def test_insurance_row_after_header() -> None:
    record = normalize_insurance(SOAT_PAGE)

    assert isinstance(record, InsuranceRecord)
    assert record.insurer == "RIMAC SEGUROS"
    assert record.vehicle_class == "AUTOMOVIL"
    assert record.usage == "PARTICULAR"
    assert record.accident_coverage == "SI"
    assert record.policy_number == "12345"
    assert record.certificate_number == "67890"
    assert record.start is not None and record.start.text == "01/03/2024"
    assert record.start.value == date(2024, 3, 1)
    assert record.end is not None and record.end.value == date(2025, 3, 1)
    assert record.updated_info is None


def test_insurance_reads_updated_info_line() -> None:
    page = SOAT_PAGE + "Información actualizada al: 10/03/2024 08:00\n"

    record = normalize_insurance(page)

    assert record is not None
    assert record.updated_info == "10/03/2024 08:00"


def test_insurance_without_header_uses_first_wide_row() -> None:
    page = "sin encabezado\nLA POSITIVA\tCAMIONETA\tPARTICULAR\tSI\t1\t2\t05/05/2023\t05/05/2024\n"

    record = normalize_insurance(page)

    assert record is not None
    assert record.insurer == "LA POSITIVA"
    assert record.end is not None and record.end.text == "05/05/2024"


def test_insurance_incomplete_row_is_absent() -> None:
    page = "Compañía Aseguradora\tClase\nRIMAC\tAUTO\tPART\tSI\t1\t2\n"

    assert normalize_insurance(page) is None
    assert normalize_insurance("") is None


# ---------------------------------------------------------------------------
# ITV
# ---------------------------------------------------------------------------


def test_inspection_falls_back_to_first_two_dates() -> None:
    raw = (
        "Resultado de búsqueda\n"
        "Certificado emitido 15/01/2024\n"
        "Vence 15/01/2025\n"
        "CENTRO DE INSPECCION TECNICA VEHICULAR LIMA SAC, Av. Argentina 123\n"
    )
    payload = {"placa": "ABC123", "vigente": True, "resultado_crudo": raw}

    record = normalize_inspection(raw, payload)

    assert isinstance(record, InspectionRecord)
    assert record.start is not None and record.start.text == "15/01/2024"
    assert record.end is not None and record.end.text == "15/01/2025"
    assert record.validity == "Vigente"
    assert record.status == "Vigente"
    assert record.center == "CENTRO DE INSPECCION TECNICA VEHICULAR LIMA SAC"


def test_inspection_reads_row_matching_plate() -> None:
    raw = (
        "Placa\tCertificado\tDesde\tHasta\tResultado\tEstado\n"
        "ABC123\tC-001\t10/02/2024\t10/02/2025\tAPROBADO\tVIGENTE\n"
    )

    record = normalize_inspection(raw, {"placa": "abc123", "vigente": False})

    assert record is not None
    assert record.start is not None and record.start.value == date(2024, 2, 10)
    assert record.end is not None and record.end.value == date(2025, 2, 10)
    assert record.status == "VIGENTE"
    assert record.validity == "Vencido"


def test_inspection_result_column_when_status_missing() -> None:
    raw = "ABC123\tC-001\t10/02/2024\t10/02/2025\tAPROBADO\n"

    record = normalize_inspection(raw, {"placa": "ABC123"})

    assert record is not None
    assert record.status == "APROBADO"
    assert record.validity == "APROBADO"


def test_inspection_nothing_found_is_absent() -> None:
    assert normalize_inspection("No se encontraron resultados", {"placa": "ABC123"}) is None


@pytest.mark.parametrize(
    ("flag", "text", "expected"),
    [
        (True, "VENCIDO", "Vigente"),
        (False, None, "Vencido"),
        (None, "EN TRAMITE", "EN TRAMITE"),
        ("true", None, None),
    ],
)
def test_infer_validity(flag: Any, text: str | None, expected: str | None) -> None:
    assert infer_validity(flag, text) == expected


# ---------------------------------------------------------------------------
# SUNARP
# ---------------------------------------------------------------------------


def test_ownership_owner_list_under_datos() -> None:
    payload = {
        "datos": {
            "propietarios": [{"nombre": "Ana Lopez", "documento": "12345678", "porcentaje": "100%"}],
            "placa": "ABC123",
            "partida": "52841234",
            "zona_registral": "LIMA",
        },
        "captcha_valido": True,
    }

    record = normalize_ownership("", payload)

    assert isinstance(record, OwnershipRecord)
    assert [owner.name for owner in record.owners] == ["Ana Lopez"]
    assert record.owners[0].document_id == "12345678"
    assert record.owners[0].share_percent == "100%"
    assert record.owners[0].identity is None
    assert record.plate == "ABC123"
    assert record.registry_entry == "52841234"
    assert record.office == "LIMA"
    assert record.captcha_valid is True


def test_ownership_company_holder_vocabulary() -> None:
    payload = {
        "titulares": [
            {"razon_social": "TRANSPORTES SAC", "ruc": "20123456789", "participacion": "50%", "calidad": "TITULAR"}
        ]
    }

    record = normalize_ownership("", payload)

    assert record is not None
    owner = record.owners[0]
    assert owner.name == "TRANSPORTES SAC"
    assert owner.document_id == "20123456789"
    assert owner.share_percent == "50%"
    assert owner.condition == "TITULAR"


def test_ownership_single_string_owner() -> None:
    record = normalize_ownership("", {"datos": {"propietario": "JUAN PEREZ"}})

    assert record is not None
    assert [owner.name for owner in record.owners] == ["JUAN PEREZ"]
    assert record.owners[0].document_id is None


def test_ownership_detail_entries_join_name_parts() -> None:
    payload = {
        "propietarios_detalle": [
            {"ap_paterno": "LOPEZ", "ap_materno": "RUIZ", "nombres": "ANA", "documento": "12345678"},
            {"texto": "COPROPIETARIO SIN NOMBRE"},
        ]
    }

    record = normalize_ownership("", payload)

    assert record is not None
    assert [owner.name for owner in record.owners] == ["LOPEZ RUIZ ANA", "COPROPIETARIO SIN NOMBRE"]


def test_ownership_matches_from_both_shapes() -> None:
    payload = {
        "dni_propietario": "12345678",
        "dni_propietario_coincidentes": [{"nombres": "ANA", "ap_paterno": "LOPEZ", "dni": "12345678"}],
        "dni_propietario_buscar": {"resultados": [{"nombres": "ANA MARIA", "ap_paterno": "LOPEZ", "dni": "87654321"}]},
        "propietario_usado_para_dni": {"nombres": "ANA", "ap_paterno": "LOPEZ"},
    }

    record = normalize_ownership("", payload)

    assert record is not None
    assert [(m.name, m.document_id) for m in record.matches] == [
        ("ANA LOPEZ", "12345678"),
        ("ANA MARIA LOPEZ", "87654321"),
    ]
    assert record.primary_owners() == record.matches
    assert record.owner_document == "12345678"
    assert record.owner_used_for_lookup == "ANA LOPEZ"


def test_ownership_raw_text_fallback_is_limited() -> None:
    raw = "\n".join(
        [
            "Datos del vehiculo",
            "PROPIETARIO: JUAN PEREZ",
            "Propietario: MARIA DIAZ",
            "propietario LUIS GOMEZ",
            "PROPIETARIO: CARLOS RUIZ",
        ]
    )

    record = normalize_ownership(raw, {})

    assert record is not None
    assert [owner.name for owner in record.owners] == ["JUAN PEREZ", "MARIA DIAZ", "LUIS GOMEZ"]


def test_ownership_nothing_found_is_absent() -> None:
    assert normalize_ownership("", {"datos": {}}) is None
    assert normalize_ownership("Sin resultados", None) is None


# ---------------------------------------------------------------------------
# Licence, identity, debt
# ---------------------------------------------------------------------------


def test_license_merges_data_and_summary() -> None:
    payload = {
        "datos": {"licencia": "Q12345678", "clase": "A-IIb", "estado": "VIGENTE"},
        "resumen": {
            "vigente_hasta": "01/01/2027",
            "administrado": "ANA LOPEZ RUIZ",
            "puntos_firmes": "0",
            "graves": "1",
            "muy_graves": "0",
        },
        "tabla_tramites": [{"tramite": "Revalidación"}],
    }

    record = normalize_license("", payload)

    assert isinstance(record, LicenseRecord)
    assert record.number == "Q12345678"
    assert record.license_class == "A-IIb"
    assert record.status == "VIGENTE"
    assert record.expires == "01/01/2027"
    assert record.holder_name == "ANA LOPEZ RUIZ"
    assert record.firm_points == "0"
    assert record.serious == "1"
    assert record.procedures == [{"tramite": "Revalidación"}]
    assert record.bonuses == []


def test_license_data_wins_over_summary() -> None:
    payload = {
        "datos": {"estado": "SUSPENDIDA", "fecha_revalidacion": "02/02/2026"},
        "resumen": {"estado_licencia": "VIGENTE", "vigente_hasta": "01/01/2027"},
    }

    record = normalize_license("", payload)

    assert record is not None
    assert record.status == "SUSPENDIDA"
    assert record.expires == "02/02/2026"


def test_license_empty_is_absent() -> None:
    assert normalize_license("", {}) is None
    assert normalize_license("", {"datos": {}, "resumen": {}}) is None


def test_identity_fields_and_full_name() -> None:
    payload = {
        "datos": {
            "nombres": "ANA",
            "apellido_paterno": "LOPEZ",
            "ap_materno": "RUIZ",
            "codigo_verificacion": "7",
            "direccion": "AV. SIEMPRE VIVA 742",
        }
    }

    record = normalize_identity("", payload)

    assert isinstance(record, IdentityRecord)
    assert record.full_name == "ANA LOPEZ RUIZ"
    assert record.verification_code == "7"
    assert record.address == "AV. SIEMPRE VIVA 742"


def test_identity_empty_is_absent() -> None:
    assert normalize_identity("", {}) is None
    assert normalize_identity("", {"nombres": "--"}) is None


def test_debt_counts_entries_and_keeps_first_three() -> None:
    record = normalize_debt("", {"registros": [{"n": 1}, {"n": 2}, {"n": 3}, {"n": 4}]})

    assert isinstance(record, DebtRecord)
    assert record.total == 4
    assert record.details == [{"n": 1}, {"n": 2}, {"n": 3}]


def test_debt_empty_list_means_no_records() -> None:
    record = normalize_debt("", {"datos": {"resultados": []}})

    assert record == DebtRecord(total=0, details=[])


def test_debt_without_entry_list_is_absent() -> None:
    assert normalize_debt("", {"mensaje": "error"}) is None


# ---------------------------------------------------------------------------
# Shared properties
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("normalizer", "raw", "payload"),
    [
        (normalize_insurance, SOAT_PAGE, None),
        (normalize_inspection, "ABC123\tC\t01/01/2024\t01/01/2025\tOK", {"placa": "ABC123"}),
        (normalize_ownership, "", {"propietarios": [{"nombre": "Ana", "documento": "12345678"}]}),
        (normalize_license, "", {"datos": {"licencia": "Q1"}}),
        (normalize_identity, "", {"nombres": "ANA"}),
        (normalize_debt, "", {"registros": [1]}),
    ],
)
def test_normalizers_are_pure(normalizer: Any, raw: str, payload: Any) -> None:
    first = normalizer(raw, payload)
    second = normalizer(raw, payload)

    assert first is not None
    assert first == second


@pytest.mark.parametrize(
    "normalizer",
    [
        normalize_insurance,
        normalize_inspection,
        normalize_ownership,
        normalize_license,
        normalize_identity,
        normalize_debt,
    ],
)
@pytest.mark.parametrize("payload", [None, "texto", 42, [], {"datos": "x"}])
def test_normalizers_tolerate_odd_payloads(normalizer: Any, payload: Any) -> None:
    assert normalizer("", payload) is None
