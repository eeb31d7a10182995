from rcm_dashboard.datasets import DatasetCollection
from rcm_dashboard.transforms import build_chart_data, build_section_series

from .conftest import make_frame


def test_charges_by_month(scenario_datasets):
    points = build_section_series("chargesByMonth", scenario_datasets)
    assert points == [
        {"label": "2024-01", "value": 200.0},
        {"label": "2024-02", "value": 100.0},
    ]


def test_months_sorted_chronologically():
    ds = DatasetCollection(frames={"chargeByPostDate": make_frame([
        {"post_date": "2024-03-01", "charge_amount": "1"},
        {"post_date": "2023-12-15", "charge_amount": "2"},
        {"post_date": "2024-01-09", "charge_amount": "3"},
    ])})
    labels = [p["label"] for p in build_section_series("chargesByMonth", ds)]
    assert labels == ["2023-12", "2024-01", "2024-03"]


def test_malformed_cells_excluded_without_dropping_group():
    ds = DatasetCollection(frames={"payments": make_frame([
        {"post_date": "2024-01-03", "payment_amount": "50"},
        {"post_date": "2024-01-09", "payment_amount": "garbage"},
        {"post_date": "not a date", "payment_amount": "999"},
        {"post_date": "", "payment_amount": "999"},
        {"post_date": "2024-02-11", "payment_amount": ""},
    ])})
    points = build_section_series("paymentsByMonth", ds)
    assert points == [
        {"label": "2024-01", "value": 50.0},
        {"label": "2024-02", "value": 0.0},
    ]


def test_mixed_timezone_dates():
    ds = DatasetCollection(frames={"chargeByPostDate": make_frame([
        {"post_date": "2024-01-05T10:00:00Z", "charge_amount": "10"},
        {"post_date": "2024-01-06", "charge_amount": "5"},
        {"post_date": "2024-02-01T08:30:00+00:00", "charge_amount": "1"},
    ])})
    assert build_section_series("chargesByMonth", ds) == [
        {"label": "2024-01", "value": 15.0},
        {"label": "2024-02", "value": 1.0},
    ]


def test_claims_by_month_counts_rows(scenario_datasets):
    points = build_section_series("claimsByMonth", scenario_datasets)
    assert points == [{"label": "2024-01", "value": 2}, {"label": "2024-02", "value": 1}]


def test_ar_aging_bucket_order():
    ds = DatasetCollection(frames={"openAR": make_frame([
        {"aging_bucket": "120+", "ar_amount": "10"},
        {"aging_bucket": "Unbilled", "ar_amount": "7"},
        {"aging_bucket": "0-30", "ar_amount": "5"},
        {"aging_bucket": "31-60", "ar_amount": "1"},
        {"aging_bucket": "0-30", "ar_amount": "5"},
    ])})
    points = build_section_series("arAging", ds)
    assert points == [
        {"label": "0-30", "value": 10.0},
        {"label": "31-60", "value": 1.0},
        {"label": "120+", "value": 10.0},
        {"label": "Unbilled", "value": 7.0},
    ]


def test_denials_by_reason_sorted_by_count():
    ds = DatasetCollection(frames={"denials": make_frame([
        {"denial_reason": "Eligibility"},
        {"denial_reason": "Missing modifier"},
        {"denial_reason": "Missing modifier"},
        {"denial_reason": " "},
        {"denial_reason": "Timely filing"},
    ])})
    points = build_section_series("denialsByReason", ds)
    assert points == [
        {"label": "Missing modifier", "value": 2},
        {"label": "Eligibility", "value": 1},
        {"label": "Timely filing", "value": 1},
    ]


def test_column_mapping_override():
    ds = DatasetCollection(
        frames={"chargeByPostDate": make_frame([
            {"DOS": "03/04/2024", "BilledAmt": "1,450.00"},
            {"DOS": "03/19/2024", "BilledAmt": "50"},
        ])},
        columns={"postDate": "DOS", "chargeAmount": "BilledAmt"},
    )
    assert build_section_series("chargesByMonth", ds) == [{"label": "2024-03", "value": 1500.0}]


def test_kpi_cards_have_no_series():
    assert build_section_series("kpiCards", DatasetCollection()) is None


def test_chart_data_follows_layout(scenario_datasets):
    chart = build_chart_data(["denialsByReason", "kpiCards", "arAging", "chargesByMonth"], scenario_datasets)
    assert list(chart) == ["denialsByReason", "arAging", "chargesByMonth"]
    assert chart["arAging"] == []
    assert chart["denialsByReason"] == [{"label": "Eligibility", "value": 1}]
