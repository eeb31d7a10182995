"""
Configuration: data locations, column defaults, section enumeration, constants.

DEFAULT_COLUMNS maps each logical column role used by formulas and chart
sections to the CSV header it is read from. Clients override individual
roles through the optional ``columnMapping`` block of their config document.
"""

import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Data locations — a local directory or an http(s) base URL
# ---------------------------------------------------------------------------
PROJECT_DIR = Path(__file__).resolve().parent.parent

DATA_ROOT = os.environ.get("RCM_DATA_ROOT", str(PROJECT_DIR / "data"))

CLIENT_REGISTRY_FILE = "clients.json"
CONFIG_DIR = "configs"
EXTRACTS_DIR = "extracts"

# Client ids become path segments under CONFIG_DIR and EXTRACTS_DIR.
CLIENT_ID_PATTERN = r"^[A-Za-z0-9_-]+$"

HTTP_TIMEOUT_S = 30.0

# ---------------------------------------------------------------------------
# Extract parsing
# ---------------------------------------------------------------------------
CSV_DELIMITER = ","

# ---------------------------------------------------------------------------
# Logical dataset names referenced by formulas and sections
# ---------------------------------------------------------------------------
CHARGES = "chargeByPostDate"
PAYMENTS = "payments"
ADJUSTMENTS = "adjustments"
DENIALS = "denials"
OPEN_AR = "openAR"

# ---------------------------------------------------------------------------
# Column roles -> default CSV header
# ---------------------------------------------------------------------------
DEFAULT_COLUMNS: dict[str, str] = {
    "claimId": "claim_id",
    "postDate": "post_date",
    "chargeAmount": "charge_amount",
    "paymentAmount": "payment_amount",
    "adjustmentAmount": "adjustment_amount",
    "arAmount": "ar_amount",
    "agingBucket": "aging_bucket",
    "denialReason": "denial_reason",
}

# ---------------------------------------------------------------------------
# Layout sections
# ---------------------------------------------------------------------------
# dataset: logical source the series is built from
# dimension: "month" | column role holding the group label
# date_column: column role parsed for month grouping
# value_column: column role summed; None means the aggregate is a row count
SECTIONS: dict[str, dict | None] = {
    "kpiCards": None,
    "chargesByMonth": {
        "dataset": CHARGES,
        "dimension": "month",
        "date_column": "postDate",
        "value_column": "chargeAmount",
    },
    "claimsByMonth": {
        "dataset": CHARGES,
        "dimension": "month",
        "date_column": "postDate",
        "value_column": None,
    },
    "paymentsByMonth": {
        "dataset": PAYMENTS,
        "dimension": "month",
        "date_column": "postDate",
        "value_column": "paymentAmount",
    },
    "arAging": {
        "dataset": OPEN_AR,
        "dimension": "agingBucket",
        "date_column": None,
        "value_column": "arAmount",
    },
    "denialsByReason": {
        "dataset": DENIALS,
        "dimension": "denialReason",
        "date_column": None,
        "value_column": None,
    },
}

AGING_BUCKET_ORDER = ["0-30", "31-60", "61-90", "91-120", "120+"]

# ---------------------------------------------------------------------------
# Display constants
# ---------------------------------------------------------------------------
MISSING_PLACEHOLDER = "N/A"
CURRENCY_SYMBOL = "$"

# Tolerance (percentage points of change) before a worsening trend turns red
AMBER_BAND_PCT = 5.0
