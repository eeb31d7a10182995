"""
Formula registry — the closed table of KPI computations.

FORMULAS maps each formula key to its display format, polarity, the
datasets it reads, and a pure compute function over a DatasetCollection.
Every compute returns a number for empty inputs; ratio formulas return 0
when their denominator is empty or not positive.

To add a KPI:
    Write a compute function below and add a Formula entry to FORMULAS.
    Client configs reference it by key; no config changes are needed for
    clients that do not use it.
"""

from dataclasses import dataclass
from typing import Callable

from .config import ADJUSTMENTS, CHARGES, DENIALS, OPEN_AR, PAYMENTS
from .datasets import DatasetCollection
from .errors import UnknownFormula
from .loaders.utils import safe_sum

FORMATS = ("number", "percent", "currency")


@dataclass(frozen=True)
class Formula:
    format: str
    down_better: bool
    compute: Callable[[DatasetCollection], float]
    requires: tuple[str, ...]


def _ratio_pct(numerator: float, denominator: float) -> float:
    if denominator <= 0:
        return 0.0
    return 100.0 * numerator / denominator


def count_claims(ds: DatasetCollection) -> float:
    return ds.row_count(CHARGES)


def gross_collection_rate(ds: DatasetCollection) -> float:
    payments = safe_sum(ds.column(PAYMENTS, "paymentAmount"))
    charges = safe_sum(ds.column(CHARGES, "chargeAmount"))
    return _ratio_pct(payments, charges)


def net_collection_rate(ds: DatasetCollection) -> float:
    payments = safe_sum(ds.column(PAYMENTS, "paymentAmount"))
    charges = safe_sum(ds.column(CHARGES, "chargeAmount"))
    adjustments = safe_sum(ds.column(ADJUSTMENTS, "adjustmentAmount"))
    return _ratio_pct(payments, charges - adjustments)


def denial_rate(ds: DatasetCollection) -> float:
    return _ratio_pct(ds.row_count(DENIALS), ds.row_count(CHARGES))


def first_pass_rate(ds: DatasetCollection) -> float:
    charges = ds.row_count(CHARGES)
    return _ratio_pct(charges - ds.row_count(DENIALS), charges)


def total_payments(ds: DatasetCollection) -> float:
    return safe_sum(ds.column(PAYMENTS, "paymentAmount"))


def total_open_ar(ds: DatasetCollection) -> float:
    return safe_sum(ds.column(OPEN_AR, "arAmount"))


FORMULAS: dict[str, Formula] = {
    "countClaims": Formula("number", False, count_claims, (CHARGES,)),
    "grossCollectionRate": Formula(
        "percent", False, gross_collection_rate, (PAYMENTS, CHARGES)
    ),
    "netCollectionRate": Formula(
        "percent", False, net_collection_rate, (PAYMENTS, CHARGES, ADJUSTMENTS)
    ),
    "denialRate": Formula("percent", True, denial_rate, (DENIALS, CHARGES)),
    "firstPassRate": Formula("percent", False, first_pass_rate, (DENIALS, CHARGES)),
    # Same body as firstPassRate. A true clean-claim rate would also exclude
    # claims with correction activity; extracts carry no such flag.
    "cleanClaimRate": Formula("percent", False, first_pass_rate, (DENIALS, CHARGES)),
    "totalPayments": Formula("currency", False, total_payments, (PAYMENTS,)),
    "totalOpenAR": Formula("currency", True, total_open_ar, (OPEN_AR,)),
}


def get_formula(key: str) -> Formula:
    try:
        return FORMULAS[key]
    except KeyError:
        raise UnknownFormula(key) from None
