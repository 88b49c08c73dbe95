"""Deterministic in-memory query state store.

This is the only component allowed to transition per-service query state.
Transitions for one service id never interleave: ``begin`` refuses while a
call is in flight, and callers only settle a call they began. Since every
transition is synchronous, no lock is needed under asyncio.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from perucheck.state.policy import may_begin, should_reuse
from perucheck.state.query import QueryState, QueryStatus

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class QueryStateStore:
    """Per-service state machine: ``idle → loading → success | error``.

    Given the same sequence of transitions (and clock), the store produces
    the same snapshots.
    """

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._states: dict[str, QueryState] = {}

    def get(self, service_id: str) -> QueryState:
        """Latest settled or in-flight state; idle if never queried."""
        state = self._states.get(service_id)
        if state is None:
            return QueryState(service_id=service_id)
        return state

    def snapshot(self) -> dict[str, QueryState]:
        return dict(self._states)

    def should_reuse(self, service_id: str, query_value: str, *, force: bool = False) -> bool:
        return should_reuse(self.get(service_id), query_value, force=force)

    def begin(self, service_id: str, query_value: str) -> bool:
        """Move to ``loading`` for ``query_value``.

        Returns ``False`` (and changes nothing) while another call for the
        same id is in flight. The previous result stays visible until the
        new call settles.
        """
        current = self.get(service_id)
        if not may_begin(current):
            _logger.debug("Query for %s already in flight; ignoring new request", service_id)
            return False
        self._states[service_id] = current.model_copy(
            update={
                "status": QueryStatus.LOADING,
                "error": None,
                "last_query_value": query_value,
            }
        )
        return True

    def resolve(self, service_id: str, normalized: Any, raw: Any) -> QueryState:
        """Settle the in-flight call successfully."""
        state = QueryState(
            service_id=service_id,
            status=QueryStatus.SUCCESS,
            raw_result=raw,
            normalized=normalized,
            last_query_value=self.get(service_id).last_query_value,
            fetched_at=self._clock(),
        )
        self._states[service_id] = state
        return state

    def reject(self, service_id: str, message: str) -> QueryState:
        """Settle the in-flight call with an error, clearing any previous result."""
        state = QueryState(
            service_id=service_id,
            status=QueryStatus.ERROR,
            error=message,
            last_query_value=self.get(service_id).last_query_value,
            fetched_at=self._clock(),
        )
        self._states[service_id] = state
        return state

    def reset(self, service_id: str) -> None:
        self._states.pop(service_id, None)
