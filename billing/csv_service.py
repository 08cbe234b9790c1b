"""
CSV import/export for billing data.

Provides LineItemCSVExporter for handing computed line items to invoice
rendering, and VisitCSVReader for billing visits supplied as CSV rather than
loaded from the database.
"""

import io

import pandas as pd

from billing.core.data import (
    LINE_ITEM_COLUMNS,
    line_items_to_dataframe,
    skipped_visits_to_dataframe,
    visits_from_records,
)
from billing.core.types import BillingSummary, SkippedVisit, Visit


class LineItemCSVExporter:
    """Export a billing summary's line items to CSV format."""

    def __init__(self, summary: BillingSummary):
        """
        Initialize exporter with a billing summary.

        Args:
            summary: BillingSummary whose line items should be exported
        """
        self.summary = summary

    def export_to_csv(self) -> str:
        """
        Export line items to CSV string.

        Returns:
            CSV string with a header row and one row per line item
        """
        df = line_items_to_dataframe(self.summary)
        df["visit_date"] = df["visit_date"].map(lambda d: d.isoformat())
        return df.to_csv(index=False, columns=LINE_ITEM_COLUMNS)

    def export_skipped_to_csv(self) -> str:
        """Export visits that were not billed to CSV string."""
        df = skipped_visits_to_dataframe(self.summary)
        df["visit_date"] = df["visit_date"].map(lambda d: d.isoformat() if d else "")
        return df.to_csv(index=False)


class VisitCSVReader:
    """
    Read visits from CSV format.

    Required columns: visit_id, client_id, visit_date, planned_start, planned_end.
    Optional columns: actual_start, actual_end, is_bank_holiday.
    """

    REQUIRED_COLUMNS = ("visit_id", "client_id", "visit_date", "planned_start", "planned_end")

    def __init__(self, csv_content: str):
        """
        Initialize reader with CSV content.

        Args:
            csv_content: CSV string to parse
        """
        self.csv_content = csv_content

    def read_visits(self) -> tuple[list[Visit], list[SkippedVisit]]:
        """
        Parse visits from the CSV content.

        Malformed rows do not stop the read; they are returned as skipped visits.

        Returns:
            Tuple of (visits, skipped visits with reason INVALID_VISIT)

        Raises:
            ValueError: If the CSV is empty or missing required columns
        """
        df = self._parse_csv()
        return visits_from_records(df.to_dict("records"))

    def _parse_csv(self) -> pd.DataFrame:
        """Parse CSV content with error handling."""
        try:
            df = pd.read_csv(
                io.StringIO(self.csv_content), dtype=str, keep_default_na=False
            )
        except pd.errors.EmptyDataError:
            raise ValueError("CSV file is empty")

        df.columns = [column.strip() for column in df.columns]
        missing = [column for column in self.REQUIRED_COLUMNS if column not in df.columns]
        if missing:
            raise ValueError(f"Missing required column(s): {', '.join(missing)}")

        return df.apply(lambda column: column.str.strip())
