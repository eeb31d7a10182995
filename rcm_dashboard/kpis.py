"""
KPI engine — evaluates the KPIs a client declares.

Provides display formatting, period-over-period change, trend RAG
classification, and the compute_kpis() entry point.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Sequence

from .config import AMBER_BAND_PCT, CURRENCY_SYMBOL, MISSING_PLACEHOLDER
from .datasets import DatasetCollection
from .formulas import Formula, get_formula
from .loaders.client_config import KpiDefinition

logger = logging.getLogger(__name__)

_MAGNITUDES = ((1e3, "K"), (1e6, "M"), (1e9, "B"))


@dataclass(frozen=True)
class KpiResult:
    key: str
    label: str
    value: str
    raw_value: float
    change: str
    change_raw: float
    format: str
    down_better: bool
    status: str = "grey"

    def to_dict(self) -> dict:
        d = asdict(self)
        return {
            "key": d["key"],
            "label": d["label"],
            "value": d["value"],
            "rawValue": d["raw_value"],
            "change": d["change"],
            "changeRaw": d["change_raw"],
            "format": d["format"],
            "downBetter": d["down_better"],
            "status": d["status"],
        }


def format_value(value: float, fmt: str) -> str:
    """Format a raw KPI value for display.

    number   -> "1,234"
    percent  -> "61.7%"
    currency -> "$1.2M", "$12.5K", "$950"
    """
    if fmt == "percent":
        return f"{value:.1f}%"
    if fmt == "currency":
        sign = "-" if value < 0 else ""
        return f"{sign}{CURRENCY_SYMBOL}{_abbreviate(abs(value))}"
    return f"{int(round(value)):,}"


def _abbreviate(magnitude: float) -> str:
    """Shortest unit whose rounded mantissa stays below 1000."""
    if round(magnitude) < 1000:
        return f"{magnitude:,.0f}"
    for threshold, suffix in _MAGNITUDES[:-1]:
        if round(magnitude / threshold, 1) < 1000:
            return f"{magnitude / threshold:.1f}{suffix}"
    threshold, suffix = _MAGNITUDES[-1]
    return f"{magnitude / threshold:.1f}{suffix}"


def calc_variance(actual: float, baseline: float) -> tuple[float, float | None]:
    """Return (absolute_variance, pct_variance).

    pct_variance is None if baseline == 0.
    """
    absolute = actual - baseline
    if baseline == 0:
        return absolute, None
    pct = (absolute / abs(baseline)) * 100
    return absolute, pct


def calc_change(current: float, previous: float, fmt: str) -> tuple[str, float]:
    """Return (display_change, change_raw) against the prior period.

    Percent KPIs change by points; the others by relative percentage,
    which is undefined when the prior value is zero.
    """
    absolute, pct = calc_variance(current, previous)
    if fmt == "percent":
        return f"{absolute:+.1f} pts", absolute
    if pct is None:
        return MISSING_PLACEHOLDER, 0.0
    return f"{pct:+.1f}%", pct


def classify_trend(
    current: float,
    previous: float,
    down_better: bool,
    amber_band_pct: float = AMBER_BAND_PCT,
) -> str:
    """Return 'green', 'amber', or 'red' for the move from previous to current.

    Logic
    -----
    - down_better=False:
        green  if current >= previous
        amber  if current >= previous * (1 - amber_band_pct/100)
        red    otherwise

    - down_better=True:
        green  if current <= previous
        amber  if current <= previous * (1 + amber_band_pct/100)
        red    otherwise

    A zero prior value gives 'grey'.
    """
    if previous == 0:
        return "grey"

    if not down_better:
        if current >= previous:
            return "green"
        if current >= previous * (1 - amber_band_pct / 100):
            return "amber"
        return "red"
    else:
        if current <= previous:
            return "green"
        if current <= previous * (1 + amber_band_pct / 100):
            return "amber"
        return "red"


def _depends_on_missing(formula: Formula, datasets: DatasetCollection) -> bool:
    return any(datasets.is_missing(name) for name in formula.requires)


def compute_kpi(
    definition: KpiDefinition,
    datasets: DatasetCollection,
    previous: DatasetCollection | None = None,
) -> KpiResult:
    formula = get_formula(definition.formula_key)
    raw = float(formula.compute(datasets))

    degraded = _depends_on_missing(formula, datasets)
    value = MISSING_PLACEHOLDER if degraded else format_value(raw, formula.format)

    change, change_raw, status = MISSING_PLACEHOLDER, 0.0, "grey"
    if previous is not None and not degraded and not _depends_on_missing(formula, previous):
        prior = float(formula.compute(previous))
        change, change_raw = calc_change(raw, prior, formula.format)
        status = classify_trend(raw, prior, formula.down_better)

    return KpiResult(
        key=definition.key,
        label=definition.label,
        value=value,
        raw_value=raw,
        change=change,
        change_raw=change_raw,
        format=formula.format,
        down_better=formula.down_better,
        status=status,
    )


def compute_kpis(
    definitions: Sequence[KpiDefinition],
    datasets: DatasetCollection,
    previous: DatasetCollection | None = None,
) -> list[KpiResult]:
    """Evaluate every declared KPI, in declaration order.

    Parameters
    ----------
    definitions : KPIs from the client config.
    datasets : Current-period datasets.
    previous : Prior-period datasets. When None, change is "N/A" and
               change_raw is 0 for every KPI.

    Raises
    ------
    UnknownFormula : a definition names an unregistered formula. Config
                     validation rejects such documents first.
    """
    results = [compute_kpi(d, datasets, previous) for d in definitions]
    degraded = [r.key for r in results if r.value == MISSING_PLACEHOLDER]
    if degraded:
        logger.warning("KPIs shown as placeholders (missing sources): %s", degraded)
    logger.info("Computed %d KPIs", len(results))
    return results
