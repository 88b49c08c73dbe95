"""Client configuration for perucheck."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from typing import Any

from perucheck._constants import BASE_URL, DEFAULT_REQUEST_TIMEOUT
from perucheck.exceptions import PerucheckConfigError

_ENDPOINT_ENV_PREFIX = "PERUCHECK_ENDPOINT_"


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_float(name: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise PerucheckConfigError(f"{name} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class PerucheckConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        Root URL of the backend exposing the ``/consulta-*`` lookup
        services. Defaults to a local development backend.
    account_id : str or None
        Account that every attempt is billed to. Passed to the usage
        ledger when recording attempts and loading the usage snapshot.
    request_timeout : float
        Total timeout in seconds for a single upstream request. Scrapers
        behind the backend can be slow, so the default is generous.
    endpoint_overrides : Mapping[str, str]
        Per-service path overrides keyed by service id (e.g.
        ``{"soat": "/v2/consulta-soat"}``).
    api_trace_enabled : bool
        Log redacted request/response bodies at DEBUG level.
    """

    base_url: str = BASE_URL
    account_id: str | None = None
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    endpoint_overrides: Mapping[str, str] = dataclasses.field(default_factory=dict)
    api_trace_enabled: bool = False

    def __post_init__(self) -> None:
        if not self.base_url:
            raise PerucheckConfigError("base_url must be non-empty")
        if self.request_timeout <= 0:
            raise PerucheckConfigError(f"request_timeout must be positive, got {self.request_timeout}")
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @classmethod
    def from_env(cls, **overrides: Any) -> PerucheckConfig:
        """Create configuration from environment variables.

        Reads ``PERUCHECK_BASE_URL``, ``PERUCHECK_ACCOUNT_ID``,
        ``PERUCHECK_REQUEST_TIMEOUT``, ``PERUCHECK_API_TRACE_ENABLED`` and
        any ``PERUCHECK_ENDPOINT_<SERVICE>`` path overrides. Explicit
        keyword arguments override environment values.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        base_url = env.get("PERUCHECK_BASE_URL")
        if base_url is not None:
            config_kwargs["base_url"] = base_url

        account_id = env.get("PERUCHECK_ACCOUNT_ID")
        if account_id is not None:
            config_kwargs["account_id"] = account_id

        timeout_env = env.get("PERUCHECK_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = _env_float("PERUCHECK_REQUEST_TIMEOUT", timeout_env)

        if "api_trace_enabled" not in overrides:
            config_kwargs["api_trace_enabled"] = _env_bool(env.get("PERUCHECK_API_TRACE_ENABLED"), False)

        endpoint_overrides = {
            key[len(_ENDPOINT_ENV_PREFIX) :].lower(): value
            for key, value in env.items()
            if key.startswith(_ENDPOINT_ENV_PREFIX) and value
        }
        explicit_endpoints = overrides.pop("endpoint_overrides", None)
        if isinstance(explicit_endpoints, Mapping):
            endpoint_overrides.update(explicit_endpoints)
        config_kwargs["endpoint_overrides"] = endpoint_overrides

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
