"""Deterministic cache reuse policy.

This module intentionally contains *no* state mutation; the store asks it
whether a new request can be answered from what it already holds.
"""

from __future__ import annotations

from perucheck.state.query import QueryState, QueryStatus


def should_reuse(state: QueryState, query_value: str, *, force: bool) -> bool:
    """Decide whether a request can be served from the stored result.

    Policy:
    - A forced request always re-executes.
    - Otherwise reuse only a successful result for the exact same value.
      Errors and in-flight calls are never reused.
    """
    if force:
        return False
    return state.status == QueryStatus.SUCCESS and state.last_query_value == query_value


def may_begin(state: QueryState) -> bool:
    """At most one in-flight call per service id."""
    return state.status != QueryStatus.LOADING
