"""
Loader for client CSV extracts.

Each extract is a header row followed by data rows. Every cell is kept as a
whitespace-trimmed string; numeric and date coercion happens in the formulas
and chart transforms that read the column.

Tolerated irregularities:
    - blank or whitespace-only lines (skipped, including trailing ones);
      a line of empty fields such as "," is a row, not a blank line
    - repeated header names (later copies get a ".1", ".2" suffix)
    - short rows (missing trailing fields become "")
    - long rows (fields beyond the header are dropped)
    - a missing file (empty dataset flagged as missing)
"""

import csv
import io
import logging
from dataclasses import dataclass

import aiohttp
import pandas as pd

from ..config import CSV_DELIMITER
from ..errors import DataSourceMissing
from .sources import fetch_text

logger = logging.getLogger(__name__)


def _dedupe_header(header: list[str]) -> list[str]:
    """Suffix repeated column names: ["a", "a", "b"] -> ["a", "a.1", "b"]."""
    result: list[str] = []
    for name in header:
        candidate, n = name, 0
        while candidate in result:
            n += 1
            candidate = f"{name}.{n}"
        if candidate != name:
            logger.warning("Duplicate column '%s' renamed to '%s'", name, candidate)
        result.append(candidate)
    return result


@dataclass(frozen=True, eq=False)
class LoadedExtract:
    """Result of loading one data source.

    ``missing`` distinguishes a source that does not exist from one that
    exists but has no rows. Both carry an empty frame.
    """

    name: str
    frame: pd.DataFrame
    missing: bool = False


def parse_rows(text: str, delimiter: str = CSV_DELIMITER) -> pd.DataFrame:
    """Parse delimited text into a string-valued DataFrame.

    Parameters
    ----------
    text : Raw file content. The first non-blank line is the header.
    delimiter : Single-character field separator.

    Returns
    -------
    DataFrame with one column per header field and one row per data line,
    in file order. Empty text gives an empty DataFrame with no columns.
    """
    reader = csv.reader(io.StringIO(text), delimiter=delimiter)

    header: list[str] | None = None
    records = []
    for fields in reader:
        if not fields or (len(fields) == 1 and fields[0].isspace()):
            continue
        fields = [f.strip() for f in fields]
        if header is None:
            header = _dedupe_header(fields)
            continue

        width = len(header)
        if len(fields) > width:
            logger.debug("Dropping %d extra field(s) on line %d", len(fields) - width, reader.line_num)
        records.append(fields[:width] + [""] * (width - len(fields)))

    if header is None:
        return pd.DataFrame()

    return pd.DataFrame(records, columns=header, dtype=object)


def rows_to_text(df: pd.DataFrame, delimiter: str = CSV_DELIMITER) -> str:
    """Write a parsed dataset back to delimited text, header first."""
    buf = io.StringIO()
    writer = csv.writer(buf, delimiter=delimiter, lineterminator="\n")
    writer.writerow(list(df.columns))
    writer.writerows(df.itertuples(index=False, name=None))
    return buf.getvalue()


async def load_extract(
    name: str,
    location: str,
    session: aiohttp.ClientSession | None = None,
    delimiter: str = CSV_DELIMITER,
) -> LoadedExtract:
    """Fetch and parse one extract.

    A missing document resolves to an empty, ``missing`` extract. Any other
    fetch failure propagates as DataSourceFetchFailed.
    """
    try:
        text = await fetch_text(location, session)
    except DataSourceMissing:
        logger.warning("Data source '%s' not found at %s; using empty dataset", name, location)
        return LoadedExtract(name=name, frame=pd.DataFrame(), missing=True)

    df = parse_rows(text, delimiter)
    logger.info("Loaded %d rows for '%s' from %s", len(df), name, location)
    return LoadedExtract(name=name, frame=df)
