#!/usr/bin/env python3
"""sdatabase CLI - run statements against SQLite or PostgreSQL from a shell."""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from .commands.health import run_health_check
from .commands.sql import coerce_arguments, run_exec, run_query, run_validate
from .config.settings import Settings, setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="sdatabase CLI")
    parser.add_argument(
        "--url", help="Database URL (default: SDB_DATABASE_URL or sqlite:///sdatabase.db)"
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (DEBUG, INFO, WARNING, ERROR, OFF)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    for name, help_text in (
        ("query", "Run a statement and print its rows"),
        ("exec", "Run a statement that returns no rows"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("statement", help="SQL with ? or $n placeholders")
        sub.add_argument("args", nargs="*", help="Placeholder values, in order")
        sub.add_argument(
            "--no-validate", action="store_true", help="Skip the statement check"
        )
        sub.add_argument(
            "--text", action="store_true", help="Bind every argument as text"
        )
        if name == "query":
            sub.add_argument("--json", action="store_true", help="Print rows as JSON")

    validate_parser = subparsers.add_parser("validate", help="Check a statement without running it")
    validate_parser.add_argument("statement", help="SQL statement to check")

    subparsers.add_parser("health", help="Database health check")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    Settings.refresh_from_env()
    setup_logging(args.log_level)

    if args.command in ("query", "exec"):
        values = coerce_arguments(args.args, as_text=args.text)
        validate = Settings.VALIDATE and not args.no_validate
        if args.command == "query":
            return run_query(args.url, args.statement, values, validate, as_json=args.json)
        return run_exec(args.url, args.statement, values, validate)

    if args.command == "validate":
        return run_validate(args.url, args.statement)

    if args.command == "health":
        return run_health_check(args.url)

    parser.print_help()
    return 1


def run() -> None:
    """Entry point for the console script."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
        sys.exit(130)


if __name__ == "__main__":
    run()
