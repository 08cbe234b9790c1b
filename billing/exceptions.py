"""Custom exceptions for billing services."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from clients.models import Client


class BillingServiceError(Exception):
    """Base exception for billing service errors."""

    pass


class InvalidDateRangeError(BillingServiceError):
    """Raised when date range is invalid."""

    def __init__(self, message: str, start_date: date, end_date: date):
        super().__init__(message)
        self.start_date = start_date
        self.end_date = end_date


class NoVisitsError(BillingServiceError):
    """Raised when a client has no billable visits in the requested period."""

    def __init__(self, client: Client, start_date: date, end_date: date):
        self.client = client
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(
            f"No billable visits found for {client.name} "
            f"between {start_date} and {end_date}"
        )


class NoRateSchedulesError(BillingServiceError):
    """Raised when a client has no active rate schedule to bill against."""

    def __init__(self, client: Client):
        self.client = client
        super().__init__(f"No active rate schedule found for {client.name}")
