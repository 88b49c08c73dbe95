"""Per-service query state.

Only the state/store layer creates new :class:`QueryState` values; every
other component reads them.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from perucheck.models.records import NormalizedRecord


class QueryStatus(StrEnum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class QueryState(BaseModel):
    """Snapshot of one service's latest query.

    ``normalized=None`` on a ``success`` state means the upstream answered
    but nothing usable could be extracted from it.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    service_id: str
    status: QueryStatus = QueryStatus.IDLE
    error: str | None = None
    raw_result: Any = None
    normalized: NormalizedRecord | None = None
    last_query_value: str | None = None
    fetched_at: datetime | None = None

    @field_validator("fetched_at")
    @classmethod
    def _ensure_tz_aware(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @property
    def loading(self) -> bool:
        return self.status == QueryStatus.LOADING

    @property
    def has_usable_data(self) -> bool:
        return self.status == QueryStatus.SUCCESS and self.normalized is not None
