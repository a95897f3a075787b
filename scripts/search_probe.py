#!/usr/bin/env python3
"""Run one search against a live JSON search endpoint.

Builds a session from ``PARAMETRON_*`` environment variables plus the
command line, fires once and prints the reconciled snapshot as JSON.

Example::

    scripts/search_probe.py https://api.example.com pm.product \
        --filter genre eq drama --filter year range 1990 2000 --per 10
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

import aiohttp  # noqa: E402

from parametron import HttpExecutor, Parametron, ParametronConfig, ParametronError  # noqa: E402


def _coerce(value: str) -> Any:
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("base_url")
    parser.add_argument("model", help="dotted model name, e.g. pm.product")
    parser.add_argument("--action", default="search")
    parser.add_argument(
        "--filter",
        nargs="+",
        action="append",
        default=[],
        metavar="ARG",
        help="attribute method [value1 [value2]]; repeatable",
    )
    parser.add_argument("--q", help="full-text query")
    parser.add_argument("--per", type=int)
    parser.add_argument("--page", type=int)
    parser.add_argument("--schema")
    parser.add_argument("--header", action="append", default=[], metavar="NAME=VALUE")
    parser.add_argument("--camelize", action="store_true", help="camel-case response keys")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


async def _run(args: argparse.Namespace) -> int:
    overrides: dict[str, Any] = {"immediate": False}
    if args.schema:
        overrides["schema"] = args.schema
    config = ParametronConfig.from_env(**overrides)

    headers = dict(item.split("=", 1) for item in args.header)

    async with aiohttp.ClientSession() as http:
        executor = HttpExecutor(
            args.base_url,
            args.model,
            session=http,
            action=args.action,
            headers=headers,
            camelize_response=args.camelize,
        )
        search = Parametron(executor, config)
        for spec in args.filter:
            if len(spec) < 2:
                print(f"--filter needs at least attribute and method: {spec}", file=sys.stderr)
                return 2
            attribute, method, *values = spec
            search.set_filter(attribute, method, *[_coerce(v) for v in values[:2]])
        if args.q:
            search.set_filter("_", "q", args.q)
        # None would unset the default, so only pass what was given
        search.set_params({key: value for key, value in (("per", args.per), ("page", args.page)) if value})

        try:
            snapshot = await search.fire()
        except ParametronError as exc:
            print(f"search failed: {exc}", file=sys.stderr)
            return 1

    print(json.dumps(snapshot.model_dump(mode="json", by_alias=True), indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
