"""
Chart transforms: group raw extract rows into the series behind each
layout section.

Each section in config.SECTIONS names a dataset, a grouping dimension
(calendar month of a date column, or a label column) and an aggregate
(sum of an amount column, or a row count). Column roles resolve through
the client's column mapping.
"""

import logging
from typing import Iterable

import pandas as pd

from .config import AGING_BUCKET_ORDER, SECTIONS
from .datasets import DatasetCollection
from .loaders.utils import clean_labels, to_amounts, to_months

logger = logging.getLogger(__name__)


def _order_groups(grouped: pd.Series, dimension: str) -> pd.Series:
    """Apply the display order for a section's dimension."""
    if dimension == "month":
        return grouped.sort_index()
    if dimension == "agingBucket":
        known = [b for b in AGING_BUCKET_ORDER if b in grouped.index]
        unknown = [b for b in grouped.index if b not in AGING_BUCKET_ORDER]
        return grouped.reindex(known + unknown)
    return grouped.sort_values(ascending=False, kind="stable")


def build_section_series(section_id: str, datasets: DatasetCollection) -> list[dict] | None:
    """Build the points of one section.

    Returns
    -------
    List of ``{"label": str, "value": number}`` dicts in display order, or
    None for sections that carry no chart series (kpiCards).

    Rows with a blank or unparseable group label are excluded. Rows with an
    unparseable amount are left out of their group's sum; the group itself
    is kept.
    """
    section = SECTIONS[section_id]
    if section is None:
        return None

    name = section["dataset"]
    df = datasets.frame(name)
    if df.empty:
        return []

    dimension = section["dimension"]
    if dimension == "month":
        labels = to_months(datasets.column(name, section["date_column"]))
    else:
        labels = clean_labels(datasets.column(name, dimension))

    valid = labels.notna()
    if not valid.all():
        logger.warning(
            "%s: excluded %d row(s) with a blank or malformed %s",
            section_id, int((~valid).sum()), dimension,
        )

    value_role = section["value_column"]
    if value_role is None:
        grouped = labels[valid].groupby(labels[valid], sort=False).size()
    else:
        amounts = to_amounts(datasets.column(name, value_role))
        bad_amounts = int((valid & amounts.isna()).sum())
        if bad_amounts:
            logger.warning("%s: %d malformed amount(s) left out of sums", section_id, bad_amounts)
        grouped = amounts[valid].groupby(labels[valid], sort=False).sum()

    grouped = _order_groups(grouped, dimension)
    return [
        {"label": str(label), "value": value.item() if hasattr(value, "item") else value}
        for label, value in grouped.items()
    ]


def build_chart_data(sections: Iterable[str], datasets: DatasetCollection) -> dict[str, list[dict]]:
    """Build the series for every declared section that has one.

    Parameters
    ----------
    sections : Section ids from the client's layout, in layout order.
    datasets : Loaded datasets for the client.

    Returns
    -------
    Dict of section id -> points, in layout order.
    """
    chart_data: dict[str, list[dict]] = {}
    for section_id in sections:
        points = build_section_series(section_id, datasets)
        if points is None:
            continue
        chart_data[section_id] = points
        if datasets.is_missing(SECTIONS[section_id]["dataset"]):
            logger.warning("%s: source '%s' is missing", section_id, SECTIONS[section_id]["dataset"])

    logger.info("Built %d chart series", len(chart_data))
    return chart_data
