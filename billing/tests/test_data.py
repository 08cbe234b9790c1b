"""
Tests for billing.core.data: record parsing and DataFrame conversion.
"""

from datetime import date, time
from decimal import Decimal

import pandas as pd

from billing.core.calculator import calculate_batch
from billing.core.data import (
    LINE_ITEM_COLUMNS,
    SKIPPED_VISIT_COLUMNS,
    daily_totals,
    line_items_to_dataframe,
    skipped_visits_to_dataframe,
    visits_from_records,
)
from billing.core.types import BillingSummary, SkipReason


def _record(**overrides):
    record = {
        "visit_id": "v1",
        "client_id": "c1",
        "visit_date": "2024-01-01",
        "planned_start": "09:00",
        "planned_end": "10:00",
    }
    record.update(overrides)
    return record


def test_visits_from_records_separates_malformed_rows():
    records = [
        _record(visit_id="v1"),
        _record(visit_id="v2", planned_start="not a time"),
        _record(visit_id="v3", visit_date="2024-01-02"),
    ]

    visits, rejected = visits_from_records(records)

    assert [visit.visit_id for visit in visits] == ["v1", "v3"]
    assert len(rejected) == 1
    assert rejected[0].visit_id == "v2"
    assert rejected[0].reason == SkipReason.INVALID_VISIT
    assert rejected[0].visit_date is None


def test_visits_from_records_empty():
    assert visits_from_records([]) == ([], [])


def _summary(visit_factory, hourly_rate):
    visits = [
        visit_factory(visit_id="v1", visit_date=date(2024, 1, 2)),
        visit_factory(visit_id="v2", visit_date=date(2024, 1, 1), planned_end=time(9, 30)),
        visit_factory(visit_id="v3", visit_date=date(2024, 1, 2), planned_end=time(10, 15)),
        visit_factory(visit_id="v4", visit_date=date(2024, 1, 6)),
    ]
    return calculate_batch(visits, {"c1": [hourly_rate]})


def test_line_items_to_dataframe(visit_factory, hourly_rate):
    summary = _summary(visit_factory, hourly_rate)

    df = line_items_to_dataframe(summary)

    assert list(df.columns) == LINE_ITEM_COLUMNS
    assert list(df["visit_id"]) == ["v1", "v2", "v3"]
    assert list(df["billing_duration_minutes"]) == [60, 30, 120]
    assert df["line_total"].sum() == summary.net_amount
    assert df.loc[0, "rate_id"] == "r1"


def test_line_items_to_dataframe_empty():
    df = line_items_to_dataframe(BillingSummary())

    assert df.empty
    assert list(df.columns) == LINE_ITEM_COLUMNS


def test_skipped_visits_to_dataframe(visit_factory, hourly_rate):
    df = skipped_visits_to_dataframe(_summary(visit_factory, hourly_rate))

    assert list(df.columns) == SKIPPED_VISIT_COLUMNS
    assert df.to_dict("records") == [
        {
            "visit_id": "v4",
            "visit_date": date(2024, 1, 6),
            "reason": "no_rate",
            "detail": "No applicable rate for visit on 2024-01-06",
        }
    ]


def test_daily_totals(visit_factory, hourly_rate):
    totals = daily_totals(_summary(visit_factory, hourly_rate))

    assert list(totals.index) == [date(2024, 1, 1), date(2024, 1, 2)]
    assert list(totals["visits"]) == [1, 2]
    assert list(totals["billing_minutes"]) == [30, 180]
    assert totals.loc[date(2024, 1, 2), "net_amount"] == Decimal("60")
    assert totals.loc[date(2024, 1, 1), "vat_amount"] == Decimal("0")


def test_daily_totals_empty():
    totals = daily_totals(BillingSummary())

    assert isinstance(totals, pd.DataFrame)
    assert totals.empty
    assert list(totals.columns) == ["visits", "billing_minutes", "net_amount", "vat_amount"]
    assert totals.index.name == "visit_date"
