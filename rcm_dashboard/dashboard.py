"""
Dashboard-ready output functions.

resolve_client() is the primary entry point for a front end: it loads a
client's config, fetches every declared extract concurrently, and returns a
ResolvedClient bundle (config + KPI results + chart series) whose to_dict()
is plain JSON-ready data.

DashboardNavigator wraps resolve_client() for interactive use, where a newer
navigation supersedes any load still in flight.
"""

import asyncio
import logging
from dataclasses import dataclass, field

import aiohttp

from .config import CSV_DELIMITER, DATA_ROOT, EXTRACTS_DIR, SECTIONS
from .datasets import DatasetCollection
from .formulas import FORMULAS
from .kpis import KpiResult, compute_kpis
from .loaders.client_config import ClientConfig, load_client_config
from .loaders.extracts import load_extract
from .loaders.sources import join_location, open_session
from .transforms import build_chart_data

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedClient:
    config: ClientConfig
    kpis: list[KpiResult]
    chart_data: dict[str, list[dict]]
    missing_sources: tuple[str, ...] = field(default=())

    def to_dict(self) -> dict:
        return {
            "config": self.config.to_dict(),
            "kpis": [k.to_dict() for k in self.kpis],
            "chartData": self.chart_data,
            "missingSources": list(self.missing_sources),
        }


def required_sources(config: ClientConfig) -> list[str]:
    """Datasets the client's KPIs and sections read, in first-use order."""
    names: list[str] = []
    for kpi in config.kpis:
        names.extend(FORMULAS[kpi.formula_key].requires)
    for section_id in config.sections:
        if SECTIONS[section_id] is not None:
            names.append(SECTIONS[section_id]["dataset"])
    return list(dict.fromkeys(names))


async def load_datasets(
    config: ClientConfig,
    root: str,
    session: aiohttp.ClientSession | None = None,
    delimiter: str = CSV_DELIMITER,
) -> DatasetCollection:
    """Fetch every data source of ``config`` concurrently.

    Waits for all fetches to settle before building the collection. A
    missing source becomes an empty dataset; the first other failure is
    raised once every fetch has finished. Datasets the KPIs or sections
    need but ``dataSources`` does not declare are flagged as missing.
    """
    locations = {
        name: join_location(root, EXTRACTS_DIR, config.client_id, filename)
        for name, filename in config.data_sources.items()
    }
    results = await asyncio.gather(
        *(load_extract(name, loc, session, delimiter) for name, loc in locations.items()),
        return_exceptions=True,
    )

    for result in results:
        if isinstance(result, BaseException):
            raise result

    undeclared = [name for name in required_sources(config) if name not in locations]
    if undeclared:
        logger.warning("Client '%s' declares no source for: %s", config.client_id, undeclared)

    return DatasetCollection.from_extracts(results, config.column_mapping, expected=undeclared)


async def _load_from_root(config: ClientConfig, root: str) -> DatasetCollection:
    async with open_session(root) as session:
        return await load_datasets(config, root, session)


async def resolve_client(
    client_id: str,
    root: str = DATA_ROOT,
    previous_root: str | None = None,
) -> ResolvedClient:
    """Load, compute and bundle everything a dashboard needs for one client.

    Parameters
    ----------
    client_id : Client identifier; selects configs/<client_id>.json.
    root : Data root (local directory or http(s) base URL).
    previous_root : Optional data root holding the prior period's extracts
                    for the same client. Enables KPI change values. Both
                    periods are fetched concurrently.

    Raises
    ------
    ConfigNotFound, ConfigInvalid : the config could not be used; nothing
        else is fetched.
    DataSourceFetchFailed : a config or extract read failed for a reason
        other than not-found.
    """
    async with open_session(root) as session:
        config = await load_client_config(client_id, root, session)

    roots = [root] if previous_root is None else [root, previous_root]
    loaded = await asyncio.gather(
        *(_load_from_root(config, r) for r in roots),
        return_exceptions=True,
    )
    for result in loaded:
        if isinstance(result, BaseException):
            raise result

    datasets = loaded[0]
    previous = loaded[1] if previous_root is not None else None

    kpis = compute_kpis(config.kpis, datasets, previous)
    chart_data = build_chart_data(config.sections, datasets)

    declared = [name for name in config.data_sources if datasets.is_missing(name)]
    undeclared = sorted(datasets.missing - set(config.data_sources))
    missing = tuple(declared + undeclared)
    if missing:
        logger.warning("Client '%s' rendered without sources: %s", client_id, list(missing))

    return ResolvedClient(
        config=config,
        kpis=kpis,
        chart_data=chart_data,
        missing_sources=missing,
    )


def get_client_overview(
    client_id: str,
    root: str = DATA_ROOT,
    previous_root: str | None = None,
) -> dict:
    """Synchronous wrapper returning ``resolve_client(...).to_dict()``."""
    return asyncio.run(resolve_client(client_id, root, previous_root)).to_dict()


class DashboardNavigator:
    """Tracks the currently displayed client.

    Each navigate() call supersedes the previous one: an in-flight load for
    an earlier client is cancelled, and any result or error it produces
    after being superseded is discarded.
    """

    def __init__(self, root: str = DATA_ROOT, previous_root: str | None = None):
        self.root = root
        self.previous_root = previous_root
        self.current: ResolvedClient | None = None
        self._generation = 0
        self._task: asyncio.Task | None = None

    async def navigate(self, client_id: str) -> ResolvedClient | None:
        """Load ``client_id`` and make it current.

        Returns None when a later navigation superseded this one.
        """
        self._generation += 1
        generation = self._generation

        if self._task is not None and not self._task.done():
            logger.info("Cancelling in-flight load; navigating to '%s'", client_id)
            self._task.cancel()

        task = asyncio.ensure_future(resolve_client(client_id, self.root, self.previous_root))
        self._task = task

        try:
            resolved = await task
        except (asyncio.CancelledError, Exception):
            if generation != self._generation:
                logger.info("Discarded superseded load for '%s'", client_id)
                return None
            raise

        if generation != self._generation:
            logger.info("Discarded stale result for '%s'", client_id)
            return None

        self.current = resolved
        return resolved
