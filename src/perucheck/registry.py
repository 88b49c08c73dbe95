"""Static table of upstream lookup services."""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any

from perucheck._constants import IDENTITY_SERVICE_ID, OWNERSHIP_SERVICE_ID
from perucheck.config import PerucheckConfig
from perucheck.exceptions import PerucheckConfigError, ServiceNotFoundError
from perucheck.ingestion.dni import normalize_identity
from perucheck.ingestion.itv import normalize_inspection
from perucheck.ingestion.licencia import normalize_license
from perucheck.ingestion.redam import normalize_debt
from perucheck.ingestion.soat import normalize_insurance
from perucheck.ingestion.sunarp import normalize_ownership
from perucheck.models.requests import QueryField, Scope

Normalizer = Callable[[str, Any], Any]
"""``(raw_text, payload) -> record | None``; must be pure and never raise."""


@dataclasses.dataclass(frozen=True)
class ServiceDescriptor:
    """One upstream lookup service.

    Parameters
    ----------
    id : str
        Registry key (e.g. ``"soat"``).
    endpoint : str
        Path relative to ``config.base_url``.
    query_field : QueryField
        Value the service is queried with; also the JSON body key.
    scope : Scope
        Whether the service reports on a vehicle or a person.
    normalizer : Normalizer or None
        Response normalizer. Services without one keep only their raw payload.
    """

    id: str
    endpoint: str
    query_field: QueryField
    scope: Scope
    normalizer: Normalizer | None = None


class ServiceRegistry(Mapping[str, ServiceDescriptor]):
    """Read-only mapping of service id to descriptor, in registration order."""

    def __init__(self, services: Iterable[ServiceDescriptor]) -> None:
        entries: dict[str, ServiceDescriptor] = {}
        for service in services:
            if service.id in entries:
                raise PerucheckConfigError(f"Duplicate service id: {service.id!r}")
            entries[service.id] = service
        self._services = entries

    def __getitem__(self, service_id: str) -> ServiceDescriptor:
        return self._services[service_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._services)

    def __len__(self) -> int:
        return len(self._services)

    def lookup(self, service_id: str) -> ServiceDescriptor:
        """Return the descriptor for ``service_id``.

        Raises
        ------
        ServiceNotFoundError
            If the id was never registered.
        """
        service = self._services.get(service_id)
        if service is None:
            raise ServiceNotFoundError(service_id)
        return service

    def by_scope(self, scope: Scope) -> list[ServiceDescriptor]:
        return [service for service in self._services.values() if service.scope == scope]


DEFAULT_SERVICES: tuple[ServiceDescriptor, ...] = (
    ServiceDescriptor("soat", "/consulta-soat", QueryField.PLATE, Scope.VEHICLE, normalize_insurance),
    ServiceDescriptor("itv", "/consulta-itv", QueryField.PLATE, Scope.VEHICLE, normalize_inspection),
    ServiceDescriptor("satlima", "/consulta-sat", QueryField.PLATE, Scope.VEHICLE),
    ServiceDescriptor("satcallao", "/consulta-sat-callao", QueryField.PLATE, Scope.VEHICLE),
    ServiceDescriptor("sutran", "/consulta-sutran", QueryField.PLATE, Scope.VEHICLE),
    ServiceDescriptor(
        OWNERSHIP_SERVICE_ID, "/consulta-vehicular", QueryField.PLATE, Scope.VEHICLE, normalize_ownership
    ),
    ServiceDescriptor("licencia", "/consulta-licencia-dni", QueryField.NATIONAL_ID, Scope.PERSON, normalize_license),
    ServiceDescriptor(
        IDENTITY_SERVICE_ID, "/consulta-dni-peru", QueryField.NATIONAL_ID, Scope.PERSON, normalize_identity
    ),
    ServiceDescriptor("redam", "/consulta-redam-dni", QueryField.NATIONAL_ID, Scope.PERSON, normalize_debt),
)


def build_default_registry(config: PerucheckConfig | None = None) -> ServiceRegistry:
    """Build the standard registry, applying any endpoint overrides from ``config``."""
    overrides = dict(config.endpoint_overrides) if config is not None else {}
    unknown = sorted(set(overrides) - {service.id for service in DEFAULT_SERVICES})
    if unknown:
        raise PerucheckConfigError(f"Endpoint overrides for unknown services: {', '.join(unknown)}")
    return ServiceRegistry(
        dataclasses.replace(service, endpoint=overrides[service.id]) if service.id in overrides else service
        for service in DEFAULT_SERVICES
    )
