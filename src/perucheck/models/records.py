"""Normalized records, one variant per upstream service category.

Each variant carries only the fields that could be extracted from the
upstream response; anything missing stays ``None`` (or an empty list).
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import Field

from perucheck.ingestion.normalize import join_name
from perucheck.models._base import PerucheckBaseModel, RecordDate


class RecordKind(StrEnum):
    INSURANCE = "insurance"
    INSPECTION = "inspection"
    OWNERSHIP = "ownership"
    LICENSE = "license"
    IDENTITY = "identity"
    DEBT = "debt"


class InsuranceRecord(PerucheckBaseModel):
    """Mandatory traffic accident insurance (SOAT) coverage."""

    kind: Literal[RecordKind.INSURANCE] = RecordKind.INSURANCE

    insurer: str | None = None
    """Insurance company (``Compañía Aseguradora``)."""
    vehicle_class: str | None = None
    usage: str | None = None
    accident_coverage: str | None = None
    policy_number: str | None = None
    certificate_number: str | None = None
    start: RecordDate | None = None
    end: RecordDate | None = None
    updated_info: str | None = None
    """Freshness note printed by the insurer registry, if any."""


class InspectionRecord(PerucheckBaseModel):
    """Periodic technical inspection (ITV) status."""

    kind: Literal[RecordKind.INSPECTION] = RecordKind.INSPECTION

    start: RecordDate | None = None
    end: RecordDate | None = None
    status: str | None = None
    """Textual status from the result table, or the inferred validity."""
    validity: str | None = None
    """``"Vigente"``/``"Vencido"`` from the upstream flag, else the textual status."""
    center: str | None = None


class IdentityRecord(PerucheckBaseModel):
    """National identity (RENIEC) details for a DNI."""

    kind: Literal[RecordKind.IDENTITY] = RecordKind.IDENTITY

    given_names: str | None = None
    paternal_surname: str | None = None
    maternal_surname: str | None = None
    verification_code: str | None = None
    address: str | None = None
    document_id: str | None = None
    """DNI the record was looked up with, when known."""

    @property
    def full_name(self) -> str:
        """Given names followed by both surnames."""
        return join_name(self.given_names, self.paternal_surname, self.maternal_surname)


class Owner(PerucheckBaseModel):
    """A registered owner (or candidate match) of a vehicle."""

    name: str | None = None
    document_id: str | None = None
    share_percent: str | None = None
    condition: str | None = None
    identity: IdentityRecord | None = None
    """Filled in by the ownership enricher; ``None`` until then."""


class OwnershipRecord(PerucheckBaseModel):
    """Vehicle registry (SUNARP) ownership."""

    kind: Literal[RecordKind.OWNERSHIP] = RecordKind.OWNERSHIP

    owners: list[Owner] = Field(default_factory=list)
    matches: list[Owner] = Field(default_factory=list)
    """People whose DNI matched an owner name, when the registry searched for them."""
    owner_document: str | None = None
    owner_used_for_lookup: str | None = None
    plate: str | None = None
    vin: str | None = None
    registry_entry: str | None = None
    """Registry entry number (``partida``)."""
    office: str | None = None
    captcha_detected: str | None = None
    captcha_valid: bool = False
    result_image: str | None = None

    def primary_owners(self) -> list[Owner]:
        """Matches when the registry found any, otherwise the listed owners."""
        return list(self.matches) if self.matches else list(self.owners)


class LicenseRecord(PerucheckBaseModel):
    """Driver licence (MTC) status and points summary."""

    kind: Literal[RecordKind.LICENSE] = RecordKind.LICENSE

    number: str | None = None
    license_class: str | None = None
    restrictions: str | None = None
    status: str | None = None
    expires: str | None = None
    holder_name: str | None = None
    firm_points: str | None = None
    infractions: str | None = None
    serious: str | None = None
    very_serious: str | None = None
    procedures: list[Any] = Field(default_factory=list)
    bonuses: list[Any] = Field(default_factory=list)


class DebtRecord(PerucheckBaseModel):
    """Registry of delinquent alimony debtors (REDAM) summary."""

    kind: Literal[RecordKind.DEBT] = RecordKind.DEBT

    total: int = 0
    details: list[Any] = Field(default_factory=list)
    """First few registry entries, as received."""


NormalizedRecord = Annotated[
    InsuranceRecord | InspectionRecord | OwnershipRecord | LicenseRecord | IdentityRecord | DebtRecord,
    Field(discriminator="kind"),
]
"""Tagged union of every normalized record variant."""
