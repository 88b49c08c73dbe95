"""High-level async client for the Peruvian registry lookup services."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Mapping
from typing import Any

import aiohttp
from pydantic import ValidationError

from perucheck._constants import OWNERSHIP_SERVICE_ID
from perucheck._transport import HttpTransport, Transport
from perucheck.billing import InMemoryLedger, UsageLedger, may_proceed
from perucheck.config import PerucheckConfig
from perucheck.exceptions import (
    PerucheckError,
    QueryValidationError,
    QuotaExhaustedError,
)
from perucheck.ingestion.enrich import OwnershipEnricher
from perucheck.ingestion.normalize import raw_text_of
from perucheck.models.billing import LedgerEntry, UsageSnapshot
from perucheck.models.records import OwnershipRecord
from perucheck.models.requests import (
    QueryField,
    QueryRequest,
    Scope,
    display_query_value,
    format_national_id,
    format_plate,
)
from perucheck.registry import ServiceDescriptor, ServiceRegistry, build_default_registry
from perucheck.state.query import QueryState
from perucheck.state.store import QueryStateStore

_logger = logging.getLogger(__name__)


def _monotonic_ms() -> int:
    return int(time.monotonic() * 1000)


class PerucheckClient:
    """Async client that fans lookups out to the registry services.

    Usage::

        async with PerucheckClient(config, ledger=ledger) as client:
            states = await client.issue_all(Scope.VEHICLE, "ABC123")
            soat = client.get_state("soat")

    Every attempt that reaches the network is recorded in the usage
    ledger, successful or not. Validation and quota failures raise before
    any call is made and are never recorded.
    """

    def __init__(
        self,
        config: PerucheckConfig,
        *,
        ledger: UsageLedger | None = None,
        transport: Transport | None = None,
        session: aiohttp.ClientSession | None = None,
        registry: ServiceRegistry | None = None,
        store: QueryStateStore | None = None,
    ) -> None:
        self._config = config
        self._ledger: UsageLedger = ledger if ledger is not None else InMemoryLedger()
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self._owns_transport = transport is None
        self._registry = registry if registry is not None else build_default_registry(config)
        self.store = store if store is not None else QueryStateStore()
        self._usage: UsageSnapshot | None = None
        self._plate_input = ""
        self._national_id_input = ""

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> PerucheckClient:
        if self._owns_transport:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._config, self._http_session)
        await self.refresh_usage()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if self._owns_transport:
            self._transport = None

    # ------------------------------------------------------------------
    # Current input
    # ------------------------------------------------------------------

    @property
    def registry(self) -> ServiceRegistry:
        return self._registry

    @property
    def plate_input(self) -> str:
        return self._plate_input

    @property
    def national_id_input(self) -> str:
        return self._national_id_input

    def set_plate(self, value: str) -> str:
        """Store free-form plate input in display form (``ABC-123``)."""
        self._plate_input = format_plate(value)
        return self._plate_input

    def set_national_id(self, value: str) -> str:
        """Store free-form DNI input (digits only, eight at most)."""
        self._national_id_input = format_national_id(value)
        return self._national_id_input

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise PerucheckError("Client not initialized. Use 'async with PerucheckClient(...) as client:'")
        return self._transport

    def _current_input(self, field: QueryField) -> str:
        return self._plate_input if field == QueryField.PLATE else self._national_id_input

    def _validate(self, field: QueryField, value: str | None) -> QueryRequest:
        raw_value = value if value is not None else self._current_input(field)
        try:
            return QueryRequest(field=field, value=raw_value)
        except ValidationError as exc:
            label = "plate" if field == QueryField.PLATE else "DNI"
            raise QueryValidationError(
                f"Incomplete {label}: {raw_value!r}",
                field=field.value,
                value=raw_value,
            ) from exc

    def _guard_credits(self) -> None:
        if not may_proceed(self._usage):
            raise QuotaExhaustedError("No credits left on this plan. Buy a package to keep querying.")

    def _normalize(self, service: ServiceDescriptor, payload: Any) -> Any:
        """Run the service normalizer; parsing problems degrade to ``None``."""
        if service.normalizer is None:
            return None
        try:
            return service.normalizer(raw_text_of(payload), payload)
        except Exception:
            _logger.warning("Normalizer for %s failed; keeping raw payload only", service.id, exc_info=True)
            return None

    async def _record(self, entry: LedgerEntry) -> None:
        """Write a ledger entry; ledger failures never reach the caller."""
        try:
            await self._ledger.record_attempt(entry)
        except Exception:
            _logger.warning("Failed to record %s attempt in usage ledger", entry.service_id, exc_info=True)

    # ------------------------------------------------------------------
    # Usage
    # ------------------------------------------------------------------

    def get_usage_snapshot(self) -> UsageSnapshot | None:
        """Last usage snapshot loaded from the ledger (``None`` until loaded)."""
        return self._usage

    async def refresh_usage(self) -> UsageSnapshot | None:
        """Reload the usage snapshot, keeping the previous one on failure."""
        try:
            self._usage = await self._ledger.get_usage_snapshot(self._config.account_id)
        except Exception:
            _logger.warning("Failed to refresh usage snapshot", exc_info=True)
        return self._usage

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_state(self, service_id: str) -> QueryState:
        self._registry.lookup(service_id)
        return self.store.get(service_id)

    async def issue(self, service_id: str, value: str | None = None, *, force: bool = False) -> QueryState:
        """Query one service and return its settled state.

        Parameters
        ----------
        service_id
            Registry id (e.g. ``"soat"``).
        value
            Plate or DNI. Defaults to the current input for the service's field.
        force
            Re-query even when a successful result for the same value is stored.

        Raises
        ------
        ServiceNotFoundError
            Unknown ``service_id``.
        QueryValidationError
            The value does not have the shape the service expects.
        QuotaExhaustedError
            The account has no credits left.
        """
        service = self._registry.lookup(service_id)
        request = self._validate(service.query_field, value)
        self._guard_credits()
        return await self._issue(service, request, force=force)

    async def _issue(self, service: ServiceDescriptor, request: QueryRequest, *, force: bool) -> QueryState:
        if self.store.should_reuse(service.id, request.value, force=force):
            _logger.debug("Reusing cached %s result for the same query", service.id)
            return self.store.get(service.id)
        transport = self._require_transport()
        if not self.store.begin(service.id, request.value):
            return self.store.get(service.id)

        started = _monotonic_ms()
        payload: Any = None
        error: str | None = None

        try:
            payload = await transport.post_json(service.endpoint, request.payload)
            normalized = self._normalize(service, payload)
            if service.id == OWNERSHIP_SERVICE_ID and isinstance(normalized, OwnershipRecord):
                enricher = OwnershipEnricher(self._registry, transport)
                normalized = await enricher.enrich(normalized)
            state = self.store.resolve(service.id, normalized, payload)
        except PerucheckError as exc:
            error = str(exc) or type(exc).__name__
            _logger.info("Query to %s failed: %s", service.id, error)
            state = self.store.reject(service.id, error)
        except asyncio.CancelledError:
            error = "Query cancelled"
            self.store.reject(service.id, error)
            raise
        except Exception as exc:
            # Settle before propagating so the id does not stay in flight.
            error = f"Unexpected error: {exc!r}"
            self.store.reject(service.id, error)
            raise
        finally:
            await self._record(self._ledger_entry(service, request, payload, error, started))
            await self.refresh_usage()
        return state

    def _ledger_entry(
        self,
        service: ServiceDescriptor,
        request: QueryRequest,
        payload: Any,
        error: str | None,
        started_ms: int,
    ) -> LedgerEntry:
        is_plate = service.query_field == QueryField.PLATE
        return LedgerEntry(
            account_id=self._config.account_id,
            service_id=service.id,
            plate=request.value if is_plate else None,
            national_id=None if is_plate else request.value,
            request=request.payload,
            response=payload,
            summary=f"{service.id.upper()} {display_query_value(service.query_field, request.value)}",
            success=error is None,
            error_code=error,
            duration_ms=max(0, _monotonic_ms() - started_ms),
            endpoint=service.endpoint,
        )

    async def issue_all(self, scope: Scope | str, value: str) -> dict[str, QueryState]:
        """Force-query every service in ``scope`` concurrently.

        One service failing never cancels or fails the others; each
        failure lands in that service's state.
        """
        services = self._registry.by_scope(Scope(scope))
        requests = {service.id: self._validate(service.query_field, value) for service in services}
        self._guard_credits()

        results = await asyncio.gather(
            *(self._issue(service, requests[service.id], force=True) for service in services),
            return_exceptions=True,
        )
        states: dict[str, QueryState] = {}
        for service, result in zip(services, results, strict=True):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                _logger.error("Unexpected failure querying %s", service.id, exc_info=result)
            states[service.id] = self.store.get(service.id)
        return states

    def snapshot(self) -> Mapping[str, QueryState]:
        """States for every registered service, idle when never queried."""
        return {service_id: self.store.get(service_id) for service_id in self._registry}
