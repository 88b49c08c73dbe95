"""Credit gate and usage ledger interface.

The ledger's persistence lives outside this library; :class:`UsageLedger`
is the boundary. :class:`InMemoryLedger` is a reference implementation for
tests and local runs.
"""

from __future__ import annotations

import logging
from typing import Protocol

from perucheck.exceptions import LedgerError
from perucheck.models.billing import LedgerEntry, UsageSnapshot

_logger = logging.getLogger(__name__)


def may_proceed(snapshot: UsageSnapshot | None) -> bool:
    """Return True when a metered query may be attempted.

    A snapshot that has not been loaded yet, or one without a credit
    balance, is treated as unmetered.
    """
    if snapshot is None or snapshot.credits_remaining is None:
        return True
    return snapshot.credits_remaining > 0


class UsageLedger(Protocol):
    """Append-only log of query attempts plus the account's credit balance."""

    async def record_attempt(self, entry: LedgerEntry) -> None:
        ...

    async def get_usage_snapshot(self, account_id: str | None) -> UsageSnapshot:
        ...


class InMemoryLedger:
    """Keep ledger entries in memory and meter credits per successful attempt.

    Parameters
    ----------
    credits : int or None
        Starting balance; ``None`` for an unmetered plan.
    plan : str
        Plan name reported in snapshots.
    """

    def __init__(self, *, credits: int | None = None, plan: str = "free") -> None:
        self.entries: list[LedgerEntry] = []
        self.credits = credits
        self.plan = plan
        self.fail_writes = False
        self.fail_reads = False

    async def record_attempt(self, entry: LedgerEntry) -> None:
        if self.fail_writes:
            raise LedgerError(f"ledger unavailable, dropped {entry.service_id} attempt")
        self.entries.append(entry)
        if entry.success and self.credits is not None:
            self.credits = max(0, self.credits - 1)
        _logger.debug("Recorded %s attempt (success=%s)", entry.service_id, entry.success)

    async def get_usage_snapshot(self, account_id: str | None) -> UsageSnapshot:
        if self.fail_reads:
            raise LedgerError("ledger unavailable, cannot load usage snapshot")
        return UsageSnapshot(credits_remaining=self.credits, plan=self.plan)
