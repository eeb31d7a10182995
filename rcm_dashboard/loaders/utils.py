"""
Shared utilities for extract columns: amount coercion, month parsing,
label cleaning.

Datasets keep every cell as a string; these helpers are where formulas and
chart sections turn cells into numbers and dates.
"""

import logging

import pandas as pd

logger = logging.getLogger(__name__)


def column_or_empty(df: pd.DataFrame, column: str) -> pd.Series:
    """Return ``df[column]``, or an all-blank series when the column is absent."""
    if column in df.columns:
        return df[column]
    if not df.empty:
        logger.warning("Column '%s' not present (have: %s)", column, list(df.columns))
    return pd.Series([""] * len(df), index=df.index, dtype=object)


def to_amounts(series: pd.Series) -> pd.Series:
    """Coerce amount strings to floats.

    Handles currency symbols, thousands separators and accounting-style
    negatives like "(1,250.00)". Unparseable cells become NaN.
    """
    s = series.astype(str).str.strip()
    negative = s.str.startswith("(") & s.str.endswith(")")
    s = s.str.replace(r"[$,()\s]", "", regex=True)
    values = pd.to_numeric(s, errors="coerce")
    return values.where(~negative, -values)


def to_months(series: pd.Series) -> pd.Series:
    """Parse date strings and return the calendar month as "YYYY-MM".

    Unparseable or blank cells become None. Cells with a UTC offset are
    converted to UTC; naive cells are taken as UTC.
    """
    dates = pd.to_datetime(series, errors="coerce", format="mixed", utc=True)
    months = dates.dt.strftime("%Y-%m")
    return months.where(dates.notna(), None)


def clean_labels(series: pd.Series) -> pd.Series:
    """Strip group labels; blank labels become None."""
    s = series.astype(str).str.strip()
    return s.where(s != "", None)


def safe_sum(series: pd.Series) -> float:
    """Sum of the parseable amounts in ``series``; 0.0 when there are none."""
    values = to_amounts(series).dropna()
    if values.empty:
        return 0.0
    return float(values.sum())
