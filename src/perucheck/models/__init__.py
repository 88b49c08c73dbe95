"""Data models for perucheck records, requests and billing."""

from perucheck.models._base import PerucheckBaseModel, RecordDate
from perucheck.models.billing import LedgerEntry, UsageSnapshot
from perucheck.models.records import (
    DebtRecord,
    IdentityRecord,
    InspectionRecord,
    InsuranceRecord,
    LicenseRecord,
    NormalizedRecord,
    Owner,
    OwnershipRecord,
    RecordKind,
)
from perucheck.models.requests import (
    QueryField,
    QueryRequest,
    Scope,
    format_national_id,
    format_plate,
)

__all__ = [
    "DebtRecord",
    "IdentityRecord",
    "InspectionRecord",
    "InsuranceRecord",
    "LedgerEntry",
    "LicenseRecord",
    "NormalizedRecord",
    "Owner",
    "OwnershipRecord",
    "PerucheckBaseModel",
    "QueryField",
    "QueryRequest",
    "RecordDate",
    "RecordKind",
    "Scope",
    "UsageSnapshot",
    "format_national_id",
    "format_plate",
]
