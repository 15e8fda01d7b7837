"""
Command-line interface for the civic data engine.

Provides subcommands for the live multi-source run, the legacy
single-endpoint fetch, normalization of legacy files, and setup checks.

Exit codes: 0 on success (including runs where every source failed),
1 when the configuration is invalid or an artifact cannot be written.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from .errors import ConfigValidationError, WriteError
from .ingest.engine import run_live
from .ingest.legacy import fetch_legacy
from .logging_config import configure_logging
from .pipeline.normalize import normalize
from .verify import all_passed, run_checks

logger = logging.getLogger(__name__)


def cmd_fetch_live(args: argparse.Namespace) -> int:
    """Fetch all configured sources, reconcile and write the snapshot."""
    try:
        written = run_live(
            sources_path=Path(args.sources),
            schema_path=Path(args.schema),
            public_dir=Path(args.public_dir),
            data_dir=Path(args.data_dir),
            health_path=None if args.no_health else Path(args.health),
        )
        print(f"Wrote {written.latest_path}")
        print(f"Archived snapshot to {written.archive_path}")
        return 0

    except (ConfigValidationError, FileNotFoundError, json.JSONDecodeError) as e:
        logger.error(f"Invalid source configuration: {e}")
        return 1
    except WriteError as e:
        logger.error(f"Fatal error: {e}")
        return 1


def cmd_fetch_legacy(args: argparse.Namespace) -> int:
    """Fetch the legacy single endpoints with cache fallback."""
    try:
        index = fetch_legacy(data_dir=Path(args.data_dir))
    except WriteError as e:
        logger.error(f"Fatal: {e}")
        return 1

    if args.verbose:
        for key, ref in index["sources"].items():
            status = "fresh" if ref["ok"] else ("cached" if ref["file"] else "missing")
            print(f"  {key}: {status} {ref['file'] or ''}")
    return 0


def cmd_normalize(args: argparse.Namespace) -> int:
    """Normalize legacy per-source files into one artifact."""
    try:
        out_path = normalize(data_dir=Path(args.data_dir), public_dir=Path(args.public_dir))
    except WriteError as e:
        logger.error(f"Fatal: {e}")
        return 1
    print(f"Wrote {out_path}")
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    """Verify the live data setup."""
    results = run_checks(
        sources_path=Path(args.sources),
        schema_path=Path(args.schema),
        public_dir=Path(args.public_dir),
    )
    for result in results:
        mark = "PASS" if result.passed else "FAIL"
        print(f"[{mark}] {result.name}")
        if result.detail:
            print(f"  -> {result.detail}")

    passed = sum(1 for r in results if r.passed)
    print(f"\nChecks passed: {passed}/{len(results)}")
    return 0 if all_passed(results) else 1


def main(argv: Optional[list] = None) -> int:
    """Main CLI entrypoint."""
    parser = argparse.ArgumentParser(
        prog="civic-data",
        description="Civic data acquisition and reconciliation"
    )

    # Global options
    parser.add_argument(
        "--sources",
        default="config/sources.json",
        help="Path to source configuration"
    )
    parser.add_argument(
        "--schema",
        default="config/schemas/sources.schema.json",
        help="Path to source configuration schema"
    )
    parser.add_argument(
        "--data-dir",
        default="data",
        help="Directory for archives and cached source files"
    )
    parser.add_argument(
        "--public-dir",
        default="public",
        help="Directory for artifacts read by the site"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    live_parser = subparsers.add_parser("fetch-live", help="Fetch, reconcile and snapshot all data points")
    live_parser.add_argument("--health", default="data/_meta/sources_health.json",
                             help="Path to source health file")
    live_parser.add_argument("--no-health", action="store_true", help="Skip source health tracking")
    live_parser.set_defaults(func=cmd_fetch_live)

    legacy_parser = subparsers.add_parser("fetch-legacy", help="Fetch legacy single endpoints")
    legacy_parser.set_defaults(func=cmd_fetch_legacy)

    normalize_parser = subparsers.add_parser("normalize", help="Normalize legacy files")
    normalize_parser.set_defaults(func=cmd_normalize)

    verify_parser = subparsers.add_parser("verify", help="Verify live data setup")
    verify_parser.set_defaults(func=cmd_verify)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    configure_logging(logging.DEBUG if args.verbose else logging.INFO)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
