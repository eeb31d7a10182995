"""
Revenue-Cycle Reporting — end-to-end pipeline run.

Resolves one client (or every client in the registry) from the data root and
prints the KPI cards and chart series a dashboard would render.

Usage:
    python main.py [client_id] [--root PATH_OR_URL] [--previous-root PATH_OR_URL] [--json]
"""

import argparse
import asyncio
import json
import logging
import sys

from rcm_dashboard.config import DATA_ROOT
from rcm_dashboard.dashboard import ResolvedClient, resolve_client
from rcm_dashboard.errors import ReportingError
from rcm_dashboard.loaders import load_client_registry

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def print_client(resolved: ResolvedClient) -> None:
    config = resolved.config
    print("=" * 70)
    print(f"  {config.name} ({config.short_name})")
    print("=" * 70)

    if resolved.missing_sources:
        print(f"\n  Missing sources: {', '.join(resolved.missing_sources)}")

    print("\n[ KPIs ]")
    print("-" * 40)
    for kpi in resolved.kpis:
        arrow = "v" if kpi.down_better else "^"
        print(f"  {kpi.label:28s} {kpi.value:>10s}  change {kpi.change:>10s}  [{arrow} {kpi.status}]")

    print("\n[ CHARTS ]")
    print("-" * 40)
    for series, points in resolved.chart_data.items():
        print(f"\n  {series}:")
        if not points:
            print("    (no data)")
        for p in points:
            print(f"    {p['label']:20s} {p['value']:>12,.2f}")
    print()


async def run(client_ids: list[str] | None, root: str, previous_root: str | None, as_json: bool) -> int:
    if not client_ids:
        registry = await load_client_registry(root)
        client_ids = [c["id"] for c in registry]
        logger.info("Resolving %d clients from registry", len(client_ids))

    failures = 0
    for client_id in client_ids:
        try:
            resolved = await resolve_client(client_id, root, previous_root)
        except ReportingError as e:
            logger.error("Could not load client '%s': %s", client_id, e)
            failures += 1
            continue

        if as_json:
            print(json.dumps(resolved.to_dict(), indent=2))
        else:
            print_client(resolved)

    return 1 if failures else 0


def main() -> None:
    """Parse arguments and run the pipeline."""
    parser = argparse.ArgumentParser(description="Resolve client dashboards from CSV extracts.")
    parser.add_argument("client_id", nargs="*", help="Client ids (default: every client in the registry)")
    parser.add_argument("--root", default=DATA_ROOT, help="Data root directory or base URL")
    parser.add_argument("--previous-root", default=None, help="Data root for the prior period")
    parser.add_argument("--json", action="store_true", help="Print the resolved bundle as JSON")
    args = parser.parse_args()

    sys.exit(asyncio.run(run(args.client_id, args.root, args.previous_root, args.json)))


if __name__ == "__main__":
    main()
