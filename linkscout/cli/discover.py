"""``discover``: run link discovery for releases stored in SQLite.

Existing providers for each release are the ones given with
``--existing`` plus every provider already stored for it, so a second run
only fills gaps unless ``--no-skip-existing`` is passed.
"""

from __future__ import annotations

import argparse
import json

from linkscout.config.loader import load_config
from linkscout.config.settings import Settings
from linkscout.main import build_discovery_service, build_http_client
from linkscout.models.links import DiscoveryJob, LinkQuality, ReleaseDiscoveryResult
from linkscout.providers.repository.sqlite_repository import SQLiteLinkRepository


def format_summary(results: list[ReleaseDiscoveryResult]) -> str:
    """Render batch results as a plain-text report."""
    lines: list[str] = []
    sep = "=" * 60
    for result in results:
        lines.append(sep)
        lines.append(
            f"Release {result.release_id}: {result.canonical_count} canonical, "
            f"{result.fallback_count} search fallback"
        )
        lines.append(sep)
        for link in result.discovered:
            marker = "*" if link.quality == LinkQuality.CANONICAL else "~"
            lines.append(f"  {marker} {link.provider.value:<14} {link.url}")
        for error in result.errors:
            lines.append(f"  ! {error}")
        lines.append("")
    lines.append("* canonical   ~ search fallback   ! error")
    return "\n".join(lines)


def format_json(results: list[ReleaseDiscoveryResult]) -> str:
    return json.dumps([r.model_dump(mode="json") for r in results], indent=2)


async def build_jobs(
    repository: SQLiteLinkRepository, release_ids: list[str], existing: list[str]
) -> list[DiscoveryJob]:
    jobs: list[DiscoveryJob] = []
    for release_id in release_ids:
        stored = [record.provider.value for record in await repository.get_provider_links(release_id)]
        merged = list(dict.fromkeys([*existing, *stored]))
        jobs.append(DiscoveryJob(release_id=release_id, existing_providers=merged))
    return jobs


async def run_discover(args: argparse.Namespace, app_settings: Settings | None = None) -> int:
    """Handle the ``discover`` subcommand.  Returns the exit code.

    Exit code is 1 when any release finished with errors and no links.
    """
    app_settings = app_settings or Settings()
    config = load_config(args.config, settings=app_settings)
    storefront = args.storefront or app_settings.default_storefront

    repository = SQLiteLinkRepository(args.db)
    await repository.initialize()
    jobs = await build_jobs(repository, args.release_ids, args.existing or [])

    async with build_http_client(app_settings) as http_client:
        pipeline = build_discovery_service(app_settings, http_client, repository, config=config)
        results = await pipeline.discover_links_for_releases(
            jobs,
            skip_existing=args.skip_existing,
            storefront=storefront,
        )

    print(format_json(results) if args.json_output else format_summary(results))
    failed = any(r.errors and not r.discovered for r in results)
    return 1 if failed else 0
