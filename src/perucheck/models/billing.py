"""Billing models exchanged with the usage ledger."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class UsageSnapshot(BaseModel):
    """Credit balance for an account.

    ``credits_remaining=None`` means the plan is unmetered.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    credits_remaining: int | None = None
    plan: str = "free"
    valid_until: datetime | None = None

    @property
    def is_unlimited(self) -> bool:
        return self.credits_remaining is None


class LedgerEntry(BaseModel):
    """Write-only record of one query attempt, successful or not."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    account_id: str | None
    service_id: str
    plate: str | None = None
    national_id: str | None = None
    request: dict[str, Any] = Field(default_factory=dict)
    response: Any = None
    summary: str
    success: bool
    error_code: str | None = None
    duration_ms: int = Field(ge=0)
    endpoint: str
