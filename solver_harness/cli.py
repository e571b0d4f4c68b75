"""Command‑line interface around the loader registry and the differential tester."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

import numpy as np

from . import constants as C
from .errors import InvocationError, LoadError
from .libraries import SupportedLanguage, load, supported_languages
from .testing import random_tests, summarize

__all__ = ["main"]


def _language(value: str) -> SupportedLanguage:
    try:
        return SupportedLanguage.parse(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return number


def _parse_cli(argv: list[str] | None = None) -> argparse.Namespace:  # noqa: D401 – imperative mood
    parser = argparse.ArgumentParser(description="Differentially test foreign solver libraries")
    parser.add_argument(
        "--log-level",
        choices=["WARNING", "INFO", "DEBUG"],
        default="WARNING",
        help="Logging level for solver_harness",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    test = sub.add_parser("test", help="Load a library and run random tests against it")
    test.add_argument("language", type=_language, help="One of: " + ", ".join(supported_languages()))
    test.add_argument("path", help="Directory (C, Rust) or module path (Python) of the library")
    test.add_argument("--count", type=_positive_int, default=C.DEFAULT_TEST_COUNT, help="Number of random tests")
    test.add_argument("--seed", type=int, help="Seed for the argument generator")
    test.add_argument("--timeout", type=float, help="Seconds to wait for each candidate call")
    test.add_argument("--out", help="Write JSON outcomes to file")
    test.add_argument("--summary", action="store_true", help="Print only pass/fail counts")

    sub.add_parser("supported", help="List supported languages")

    serve = sub.add_parser("serve", help="Run the HTTP server")
    serve.add_argument("--host", help=f"Bind address (default ${C.HOST_ENV} or {C.DEFAULT_HOST})")
    serve.add_argument("--port", type=int, help=f"Port (default ${C.PORT_ENV} or {C.DEFAULT_PORT})")
    return parser.parse_args(argv)


def _configure_logging(level_name: str) -> None:
    level = getattr(logging, level_name)
    pkg_logger = logging.getLogger("solver_harness")
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(logging.BASIC_FORMAT))
    handler.setLevel(level)
    pkg_logger.addHandler(handler)
    pkg_logger.propagate = False
    pkg_logger.setLevel(level)


def _run_tests(ns: argparse.Namespace) -> int:
    rng = np.random.default_rng(ns.seed)
    try:
        library = load(ns.language, ns.path)
    except LoadError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    with library:
        try:
            outcomes = random_tests(library, ns.count, rng, timeout=ns.timeout)
        except InvocationError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 2

    stats = summarize(outcomes)
    json_out = json.dumps([o.to_dict() for o in outcomes], separators=(",", ":"))
    if ns.out:
        Path(ns.out).write_text(json_out, "utf-8")
        print(f"✔ Test outcomes written to {ns.out}")
    if ns.summary:
        print(json.dumps(stats, separators=(",", ":")))
    elif not ns.out:
        print(json_out)
    return 0 if stats["failed"] == 0 else 1


def main(argv: list[str] | None = None) -> int:  # noqa: D401 – imperative mood
    ns = _parse_cli(argv)
    _configure_logging(ns.log_level)

    if ns.command == "supported":
        print("\n".join(supported_languages()))
        return 0
    if ns.command == "serve":
        from .server import serve

        serve(ns.host, ns.port)
        return 0
    return _run_tests(ns)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
