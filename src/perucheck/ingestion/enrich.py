"""Ownership enrichment.

Joins SUNARP owner entries with RENIEC identity data: every owner with a
usable DNI gets an identity lookup, all lookups run concurrently, and a
failed lookup leaves its owner untouched.
"""

from __future__ import annotations

import asyncio
import logging

from perucheck._constants import IDENTITY_SERVICE_ID, NATIONAL_ID_LENGTH
from perucheck._transport import Transport
from perucheck.ingestion.normalize import digits_only, raw_text_of
from perucheck.models.records import IdentityRecord, Owner, OwnershipRecord
from perucheck.registry import ServiceDescriptor, ServiceRegistry

_logger = logging.getLogger(__name__)


def usable_document(owner: Owner) -> str | None:
    """The owner's DNI with separators stripped, if it is exactly eight digits."""
    digits = digits_only(owner.document_id)
    return digits if len(digits) == NATIONAL_ID_LENGTH else None


class OwnershipEnricher:
    """Attach identity records to the owners of an ownership record."""

    def __init__(
        self,
        registry: ServiceRegistry,
        transport: Transport,
        *,
        identity_service_id: str = IDENTITY_SERVICE_ID,
    ) -> None:
        self._registry = registry
        self._transport = transport
        self._identity_service_id = identity_service_id

    async def enrich(self, record: OwnershipRecord | None) -> OwnershipRecord | None:
        """Return a copy of ``record`` with owner identities filled in.

        Owners keep their order; owners without a usable document, and
        owners whose lookup failed, are returned unchanged.
        """
        if record is None or not record.owners:
            return record
        service = self._registry.get(self._identity_service_id)
        if service is None or service.normalizer is None:
            return record

        owners = await asyncio.gather(*(self._enrich_owner(service, owner) for owner in record.owners))
        return record.model_copy(update={"owners": list(owners)})

    async def _enrich_owner(self, service: ServiceDescriptor, owner: Owner) -> Owner:
        dni = usable_document(owner)
        if dni is None:
            return owner
        try:
            payload = await self._transport.post_json(service.endpoint, {service.query_field.value: dni})
            identity = service.normalizer(raw_text_of(payload), payload) if service.normalizer else None
        except Exception:
            _logger.warning("Identity lookup failed for an owner of %s", service.id, exc_info=True)
            return owner

        if not isinstance(identity, IdentityRecord):
            return owner.model_copy(update={"identity": None})

        identity = identity.model_copy(update={"document_id": dni})
        update: dict[str, object] = {"identity": identity}
        if not owner.name and identity.full_name:
            update["name"] = identity.full_name
        return owner.model_copy(update=update)
