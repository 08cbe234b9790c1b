"""
Conversion between billing DTOs and tabular (pandas) data.
"""

from collections.abc import Iterable, Mapping
from dataclasses import asdict
from typing import Any

import pandas as pd

from .types import (
    BillingSummary,
    InvalidVisitError,
    SkippedVisit,
    SkipReason,
    Visit,
)

LINE_ITEM_COLUMNS = [
    "visit_id",
    "visit_date",
    "description",
    "planned_duration_minutes",
    "actual_duration_minutes",
    "billing_duration_minutes",
    "rate_id",
    "rate_type",
    "base_rate",
    "multiplier",
    "unit_rate",
    "line_total",
    "is_vatable",
    "vat_amount",
    "is_bank_holiday",
    "applies_60_min_rule",
]

SKIPPED_VISIT_COLUMNS = ["visit_id", "visit_date", "reason", "detail"]


def visits_from_records(
    records: Iterable[Mapping[str, Any]],
) -> tuple[list[Visit], list[SkippedVisit]]:
    """
    Build Visits from raw records, setting aside the ones that are malformed.

    Args:
        records: mappings as accepted by Visit.from_record

    Returns:
        Tuple of (valid visits, skipped visits with reason INVALID_VISIT)
    """
    visits: list[Visit] = []
    rejected: list[SkippedVisit] = []

    for record in records:
        try:
            visits.append(Visit.from_record(record))
        except InvalidVisitError as e:
            rejected.append(
                SkippedVisit(
                    visit_id=e.visit_id or "",
                    visit_date=None,
                    reason=SkipReason.INVALID_VISIT,
                    detail=str(e),
                )
            )

    return visits, rejected


def line_items_to_dataframe(summary: BillingSummary) -> pd.DataFrame:
    """
    Convert a summary's line items to a DataFrame, one row per billed visit.

    Monetary columns keep their Decimal values (object dtype).

    Returns:
        DataFrame with LINE_ITEM_COLUMNS
    """
    rows = [asdict(item) for item in summary.line_items]
    return pd.DataFrame(rows, columns=LINE_ITEM_COLUMNS)


def skipped_visits_to_dataframe(summary: BillingSummary) -> pd.DataFrame:
    """Convert a summary's skipped visits to a DataFrame with SKIPPED_VISIT_COLUMNS."""
    rows = [
        {
            "visit_id": skipped.visit_id,
            "visit_date": skipped.visit_date,
            "reason": skipped.reason.value,
            "detail": skipped.detail,
        }
        for skipped in summary.skipped_visits
    ]
    return pd.DataFrame(rows, columns=SKIPPED_VISIT_COLUMNS)


def daily_totals(summary: BillingSummary) -> pd.DataFrame:
    """
    Group billed line items by visit date.

    Returns:
        DataFrame indexed by visit_date with columns visits, billing_minutes,
        net_amount, vat_amount, sorted by date
    """
    df = line_items_to_dataframe(summary)
    if df.empty:
        return pd.DataFrame(
            columns=["visits", "billing_minutes", "net_amount", "vat_amount"]
        ).rename_axis("visit_date")

    return (
        df.groupby("visit_date")
        .agg(
            visits=("visit_id", "count"),
            billing_minutes=("billing_duration_minutes", "sum"),
            net_amount=("line_total", "sum"),
            vat_amount=("vat_amount", "sum"),
        )
        .sort_index()
    )
