import json

import pandas as pd
import pytest

from rcm_dashboard.datasets import DatasetCollection


def make_frame(rows: list[dict]) -> pd.DataFrame:
    """String-valued frame, the shape parse_rows() produces."""
    if not rows:
        return pd.DataFrame()
    return pd.DataFrame(rows, dtype=object)


@pytest.fixture
def scenario_datasets():
    """charges=[100,100,100], payments=[90,95], one denial on claim 2."""
    return DatasetCollection(frames={
        "chargeByPostDate": make_frame([
            {"claim_id": "1", "post_date": "2024-01-05", "charge_amount": "100"},
            {"claim_id": "2", "post_date": "2024-01-20", "charge_amount": "100"},
            {"claim_id": "3", "post_date": "2024-02-03", "charge_amount": "100"},
        ]),
        "payments": make_frame([
            {"claim_id": "1", "post_date": "2024-01-30", "payment_amount": "90"},
            {"claim_id": "3", "post_date": "2024-02-25", "payment_amount": "95"},
        ]),
        "denials": make_frame([
            {"claim_id": "2", "denial_reason": "Eligibility"},
        ]),
    })


def _config_doc(client_id: str, **overrides) -> dict:
    doc = {
        "clientId": client_id,
        "name": "Test Clinic",
        "shortName": "Test",
        "dataSources": {
            "chargeByPostDate": "charges.csv",
            "payments": "payments.csv",
            "denials": "denials.csv",
        },
        "kpis": [
            {"key": "claims", "label": "Claims", "formulaKey": "countClaims"},
            {"key": "gcr", "label": "Gross Collection Rate", "formulaKey": "grossCollectionRate"},
            {"key": "denials", "label": "Denial Rate", "formulaKey": "denialRate"},
            {"key": "fpr", "label": "First Pass Rate", "formulaKey": "firstPassRate"},
        ],
        "layout": {"sections": ["kpiCards", "chargesByMonth", "denialsByReason"]},
    }
    doc.update(overrides)
    return doc


@pytest.fixture
def config_doc():
    return _config_doc


@pytest.fixture
def data_root(tmp_path):
    """Local data root with one complete client, 'test_clinic'."""
    (tmp_path / "configs").mkdir()
    extracts = tmp_path / "extracts" / "test_clinic"
    extracts.mkdir(parents=True)

    (tmp_path / "clients.json").write_text(json.dumps([
        {"id": "test_clinic", "name": "Test Clinic", "shortName": "Test"},
    ]))
    (tmp_path / "configs" / "test_clinic.json").write_text(json.dumps(_config_doc("test_clinic")))

    (extracts / "charges.csv").write_text(
        "claim_id,post_date,charge_amount\n"
        "1,2024-01-05,100\n"
        "2,2024-01-20,100\n"
        "3,2024-02-03,100\n"
    )
    (extracts / "payments.csv").write_text(
        "claim_id,post_date,payment_amount\n"
        "1,2024-01-30,90\n"
        "3,2024-02-25,95\n"
    )
    (extracts / "denials.csv").write_text(
        "claim_id,denial_reason\n"
        "2,Eligibility\n"
    )
    return tmp_path
