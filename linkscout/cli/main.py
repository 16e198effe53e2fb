"""Argument parsing and dispatch for ``python -m linkscout.cli``.

Usage::

    python -m linkscout.cli import-catalog --db data/linkscout.db catalog.json
    python -m linkscout.cli discover --db data/linkscout.db rel-1 rel-2
    python -m linkscout.cli discover --db data/linkscout.db rel-1 --storefront gb --json
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from linkscout.cli.discover import run_discover
from linkscout.cli.import_catalog import run_import
from linkscout.config.settings import Settings
from linkscout.models.providers import ProviderKey
from linkscout.utils.logging import configure_logging


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the LinkScout CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m linkscout.cli",
        description="Discover streaming-platform links for releases from their ISRCs.",
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL (DEBUG, INFO, ...)")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # -- import-catalog --
    import_parser = subparsers.add_parser("import-catalog", help="Load releases and tracks from JSON")
    import_parser.add_argument("--db", required=True, help="SQLite database path")
    import_parser.add_argument("file", help="Catalog JSON file")

    # -- discover --
    discover_parser = subparsers.add_parser("discover", help="Discover links for releases")
    discover_parser.add_argument("--db", required=True, help="SQLite database path")
    discover_parser.add_argument("release_ids", nargs="+", metavar="RELEASE_ID", help="Release ids")
    discover_parser.add_argument(
        "--existing",
        nargs="*",
        default=[],
        choices=[key.value for key in ProviderKey],
        metavar="PROVIDER",
        help="Providers the releases already have links for",
    )
    discover_parser.add_argument(
        "--no-skip-existing",
        action="store_false",
        dest="skip_existing",
        help="Rediscover providers that already have links",
    )
    discover_parser.add_argument("--storefront", default=None, help="Apple Music storefront (default: settings)")
    discover_parser.add_argument("--config", default="config/config.yaml", help="YAML config file")
    discover_parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Print results as JSON",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point.  Returns the process exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    app_settings = Settings()
    # Logs go to stderr so stdout carries only results.
    configure_logging(
        log_level=args.log_level or app_settings.log_level,
        json_output=(app_settings.app_env == "production"),
        stream=sys.stderr,
    )

    if args.command == "import-catalog":
        return asyncio.run(run_import(args))
    return asyncio.run(run_discover(args, app_settings))
