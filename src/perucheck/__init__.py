"""perucheck - Async Python client for Peruvian vehicle and person registry lookups."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("perucheck")
except PackageNotFoundError:
    __version__ = "0+local"
from perucheck.billing import InMemoryLedger, UsageLedger, may_proceed
from perucheck.client import PerucheckClient
from perucheck.config import PerucheckConfig
from perucheck.exceptions import (
    LedgerError,
    PerucheckConfigError,
    PerucheckError,
    PerucheckTransportError,
    QueryValidationError,
    QuotaExhaustedError,
    ServiceNotFoundError,
)
from perucheck.models import (
    DebtRecord,
    IdentityRecord,
    InspectionRecord,
    InsuranceRecord,
    LedgerEntry,
    LicenseRecord,
    Owner,
    OwnershipRecord,
    QueryField,
    RecordDate,
    RecordKind,
    Scope,
    UsageSnapshot,
)
from perucheck.registry import ServiceDescriptor, ServiceRegistry, build_default_registry
from perucheck.state.query import QueryState, QueryStatus
from perucheck.state.store import QueryStateStore

__all__ = [
    "__version__",
    "DebtRecord",
    "IdentityRecord",
    "InMemoryLedger",
    "InspectionRecord",
    "InsuranceRecord",
    "LedgerEntry",
    "LedgerError",
    "LicenseRecord",
    "Owner",
    "OwnershipRecord",
    "PerucheckClient",
    "PerucheckConfig",
    "PerucheckConfigError",
    "PerucheckError",
    "PerucheckTransportError",
    "QueryField",
    "QueryState",
    "QueryStateStore",
    "QueryStatus",
    "QueryValidationError",
    "QuotaExhaustedError",
    "RecordDate",
    "RecordKind",
    "Scope",
    "ServiceDescriptor",
    "ServiceNotFoundError",
    "ServiceRegistry",
    "UsageLedger",
    "UsageSnapshot",
    "build_default_registry",
    "may_proceed",
]
