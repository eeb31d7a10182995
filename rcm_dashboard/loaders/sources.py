"""
Document fetching from a data root.

A data root is either a local directory or an http(s) base URL. Both are
read asynchronously so the extracts of one client can be fetched
concurrently: local files through a worker thread, remote files through
a shared aiohttp session.

A document that does not exist raises DataSourceMissing. Any other
transport failure raises DataSourceFetchFailed.
"""

import asyncio
import contextlib
import logging
from pathlib import Path

import aiohttp

from ..config import HTTP_TIMEOUT_S
from ..errors import DataSourceFetchFailed, DataSourceMissing

logger = logging.getLogger(__name__)


def is_remote(root: str) -> bool:
    return str(root).startswith(("http://", "https://"))


def join_location(root: str, *parts: str) -> str:
    """Build the location of a document below ``root``."""
    if is_remote(root):
        return "/".join([str(root).rstrip("/"), *(p.strip("/") for p in parts)])
    return str(Path(root).joinpath(*parts))


@contextlib.asynccontextmanager
async def open_session(root: str):
    """Yield an aiohttp session for remote roots, None for local ones."""
    if not is_remote(root):
        yield None
        return
    timeout = aiohttp.ClientTimeout(total=HTTP_TIMEOUT_S)
    async with aiohttp.ClientSession(timeout=timeout) as session:
        yield session


async def _read_local(location: str) -> str:
    path = Path(location)
    try:
        return await asyncio.to_thread(path.read_text, encoding="utf-8-sig")
    except FileNotFoundError:
        raise DataSourceMissing(location) from None
    except (OSError, UnicodeDecodeError) as e:
        logger.exception("Failed to read %s", location)
        raise DataSourceFetchFailed(location, str(e)) from e


async def _read_remote(location: str, session: aiohttp.ClientSession) -> str:
    try:
        async with session.get(location) as response:
            if response.status == 404:
                raise DataSourceMissing(location)
            response.raise_for_status()
            return await response.text(encoding="utf-8")
    except aiohttp.ClientError as e:
        logger.exception("HTTP error fetching %s", location)
        raise DataSourceFetchFailed(location, str(e)) from e
    except asyncio.TimeoutError as e:
        logger.error("Timed out fetching %s", location)
        raise DataSourceFetchFailed(location, "timeout") from e


async def fetch_text(location: str, session: aiohttp.ClientSession | None = None) -> str:
    """Return the text content of ``location``.

    Parameters
    ----------
    location : Local path or http(s) URL.
    session : Required for remote locations; see open_session().

    Raises
    ------
    DataSourceMissing : the document does not exist.
    DataSourceFetchFailed : any other read failure.
    """
    if is_remote(location):
        if session is None:
            async with aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=HTTP_TIMEOUT_S)
            ) as own_session:
                return await _read_remote(location, own_session)
        return await _read_remote(location, session)
    return await _read_local(location)
