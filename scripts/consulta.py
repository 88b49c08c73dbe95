#!/usr/bin/env python3
"""Query every vehicle or person lookup service and print the results.

Examples::

    python scripts/consulta.py --plate ABC-123
    python scripts/consulta.py --dni 12345678 --service licencia
    PERUCHECK_BASE_URL=http://backend:8000 python scripts/consulta.py --plate ABC123 --raw

Reads configuration from ``PERUCHECK_*`` environment variables (see
:meth:`perucheck.config.PerucheckConfig.from_env`). Attempts are recorded in
an in-memory ledger that is discarded on exit.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from perucheck import (  # noqa: E402
    InMemoryLedger,
    PerucheckClient,
    PerucheckConfig,
    PerucheckError,
    QueryState,
    Scope,
)


def _state_to_json(state: QueryState, *, include_raw: bool) -> dict[str, Any]:
    exclude = set() if include_raw else {"raw_result"}
    return state.model_dump(mode="json", by_alias=True, exclude=exclude)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--plate", help="Vehicle plate (ABC-123 or ABC123)")
    target.add_argument("--dni", help="8-digit national id")
    parser.add_argument(
        "--service",
        action="append",
        default=[],
        help="Only query this service id (repeatable). Defaults to every service in scope.",
    )
    parser.add_argument("--base-url", help="Override PERUCHECK_BASE_URL")
    parser.add_argument("--raw", action="store_true", help="Include raw upstream payloads")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


async def _run(args: argparse.Namespace) -> int:
    overrides: dict[str, Any] = {}
    if args.base_url:
        overrides["base_url"] = args.base_url
    if args.verbose:
        overrides["api_trace_enabled"] = True
    config = PerucheckConfig.from_env(**overrides)

    scope = Scope.VEHICLE if args.plate else Scope.PERSON
    value = args.plate or args.dni

    async with PerucheckClient(config, ledger=InMemoryLedger()) as client:
        try:
            if args.service:
                states = {}
                for service_id in args.service:
                    states[service_id] = await client.issue(service_id, value, force=True)
            else:
                states = await client.issue_all(scope, value)
        except PerucheckError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 2

    output = {service_id: _state_to_json(state, include_raw=args.raw) for service_id, state in states.items()}
    print(json.dumps(output, indent=2, ensure_ascii=False))
    return 0 if all(state.error is None for state in states.values()) else 1


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
