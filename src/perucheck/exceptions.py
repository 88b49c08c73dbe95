"""Custom exception hierarchy for perucheck."""

from __future__ import annotations


class PerucheckError(Exception):
    """Base exception for all perucheck errors."""


class PerucheckConfigError(PerucheckError):
    """Invalid or missing configuration."""


class ServiceNotFoundError(PerucheckError, LookupError):
    """Service id is not present in the registry.

    Callers only pass ids they registered themselves, so this signals a
    programming error rather than something to show an end user.
    """

    def __init__(self, service_id: str) -> None:
        self.service_id = service_id
        super().__init__(f"Unknown service id: {service_id!r}")


class QueryValidationError(PerucheckError, ValueError):
    """Query value does not match the shape its field requires.

    Raised before any state transition or network call; never ledgered.
    """

    def __init__(self, message: str, *, field: str = "", value: str | None = None) -> None:
        self.field = field
        self.value = value
        super().__init__(message)


class QuotaExhaustedError(PerucheckError):
    """The account has no credits left for metered queries.

    Raised by the credit gate before any network attempt; never ledgered.
    """


class PerucheckTransportError(PerucheckError):
    """HTTP-level failure (network, non-2xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class LedgerError(PerucheckError):
    """Usage ledger could not record an attempt or load a snapshot."""
