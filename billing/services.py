"""
Billing service layer.

Orchestrates loading visits, rate schedules and bank holidays from Django
models, and calculating invoices using the core billing engine.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

import pandas as pd
from django.conf import settings

from billing.adapters import rate_schedule_to_dto, rate_schedules_by_client, visit_to_dto
from billing.core.applicability import find_overlapping_rates
from billing.core.calculator import calculate_batch
from billing.core.data import daily_totals, line_items_to_dataframe
from billing.core.types import BillingSummary, RateSchedule, SkipReason, Visit
from billing.exceptions import (
    BillingServiceError,
    InvalidDateRangeError,
    NoRateSchedulesError,
    NoVisitsError,
)
from calendars.models import BankHoliday
from rates.models import RateSchedule as RateScheduleModel
from visits.models import Visit as VisitModel

if TYPE_CHECKING:
    from clients.models import Client

logger = logging.getLogger(__name__)


@dataclass
class ClientBillingResult:
    """Result of billing one client for a period."""

    client: Client
    period_start: date
    period_end: date
    summary: BillingSummary
    warnings: list[str] = field(default_factory=list)

    @property
    def line_items_df(self) -> pd.DataFrame:
        return line_items_to_dataframe(self.summary)

    @property
    def daily_totals(self) -> pd.DataFrame:
        return daily_totals(self.summary)

    @property
    def report(self) -> str:
        """One-line outcome, e.g. '2 of 3 visits billed, 1 skipped (no matching rate)'."""
        no_rate = sum(
            1 for skipped in self.summary.skipped_visits if skipped.reason == SkipReason.NO_RATE
        )
        invalid = self.summary.skipped_count - no_rate
        message = (
            f"{self.summary.billed_count} of {self.summary.visit_count} visits billed, "
            f"{no_rate} skipped (no matching rate)"
        )
        if invalid:
            message += f", {invalid} skipped (invalid visit times)"
        return message


@dataclass
class ClientBillingError:
    """A client that could not be billed in a bulk run."""

    client_id: str
    client_name: str
    reason: str
    visit_count: int


@dataclass
class BulkBillingResult:
    """Result of billing every client with billable visits in a period."""

    period_start: date
    period_end: date
    results: list[ClientBillingResult] = field(default_factory=list)
    errors: list[ClientBillingError] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.results)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def total_amount(self) -> Decimal:
        return sum(
            (result.summary.total_amount for result in self.results), start=Decimal("0")
        )


def get_use_actual_time() -> bool:
    """Read the configured billing mode (actual vs planned time) from settings."""
    return bool(getattr(settings, "CARE_BILLING", {}).get("USE_ACTUAL_TIME", False))


def get_bank_holiday_dates(start_date: date, end_date: date) -> set[date]:
    """
    Get set of active bank holiday dates within a date range.

    Args:
        start_date: Start of date range (inclusive)
        end_date: End of date range (inclusive)

    Returns:
        Set of holiday dates within the range
    """
    holidays = BankHoliday.objects.filter(
        status="active",
        registered_on__gte=start_date,
        registered_on__lte=end_date,
    ).values_list("registered_on", flat=True)
    return set(holidays)


def _billable_visits(start_date: date, end_date: date):
    return VisitModel.objects.filter(
        status__in=VisitModel.BILLABLE_STATUSES,
        visit_date__gte=start_date,
        visit_date__lte=end_date,
    ).order_by("visit_date", "planned_start", "id")


def load_visits(
    client: Client,
    start_date: date,
    end_date: date,
    holiday_dates: set[date] | None = None,
) -> list[Visit]:
    """
    Load a client's billable (done or completed) visits as DTOs.

    Args:
        client: Client to load visits for
        start_date: Start of period (inclusive)
        end_date: End of period (inclusive)
        holiday_dates: Bank holiday dates, defaults to those in the period

    Returns:
        List of Visit DTOs ordered by date and planned start
    """
    if holiday_dates is None:
        holiday_dates = get_bank_holiday_dates(start_date, end_date)
    visits_qs = _billable_visits(start_date, end_date).filter(client=client)
    return [visit_to_dto(visit, holiday_dates) for visit in visits_qs]


def load_rate_schedules(client: Client) -> tuple[RateSchedule, ...]:
    """
    Load a client's active rate schedules as DTOs in resolution order.

    Schedules are ordered by start_date then id; the resolver takes the first
    one that covers a visit.
    """
    schedules_qs = RateScheduleModel.objects.filter(client=client, is_active=True).order_by(
        "start_date", "id"
    )
    return tuple(rate_schedule_to_dto(schedule) for schedule in schedules_qs)


def _bill_client(
    client: Client,
    visits: list[Visit],
    rates: tuple[RateSchedule, ...],
    start_date: date,
    end_date: date,
    use_actual_time: bool,
) -> ClientBillingResult:
    if not rates:
        raise NoRateSchedulesError(client)

    warnings: list[str] = []
    for first, second in find_overlapping_rates(rates):
        first_name = first.name or first.rate_id
        second_name = second.name or second.rate_id
        warnings.append(
            f"Rate schedules '{first_name}' and '{second_name}' overlap; "
            f"'{first_name}' takes precedence"
        )

    summary = calculate_batch(visits, {str(client.pk): rates}, use_actual_time)

    for skipped in summary.skipped_visits:
        warnings.append(f"Visit {skipped.visit_id} not billed: {skipped.detail}")

    result = ClientBillingResult(
        client=client,
        period_start=start_date,
        period_end=end_date,
        summary=summary,
        warnings=warnings,
    )
    logger.info("Billed %s for %s to %s: %s", client.name, start_date, end_date, result.report)
    return result


def calculate_client_invoice(
    client: Client,
    start_date: date,
    end_date: date,
    use_actual_time: bool | None = None,
) -> ClientBillingResult:
    """
    Calculate the invoice figures for one client over a period.

    Args:
        client: Client to bill
        start_date: Start of billing period (inclusive)
        end_date: End of billing period (inclusive)
        use_actual_time: Bill by actual time; defaults to settings.CARE_BILLING

    Returns:
        ClientBillingResult with the billing summary and any warnings

    Raises:
        InvalidDateRangeError: If date range is invalid
        NoVisitsError: If the client has no billable visits in the period
        NoRateSchedulesError: If the client has no active rate schedule
    """
    if start_date > end_date:
        raise InvalidDateRangeError(
            "Start date must be before or equal to end date", start_date, end_date
        )
    if use_actual_time is None:
        use_actual_time = get_use_actual_time()

    visits = load_visits(client, start_date, end_date)
    if not visits:
        raise NoVisitsError(client, start_date, end_date)

    rates = load_rate_schedules(client)
    return _bill_client(client, visits, rates, start_date, end_date, use_actual_time)


def calculate_bulk_invoices(
    start_date: date,
    end_date: date,
    use_actual_time: bool | None = None,
) -> BulkBillingResult:
    """
    Calculate invoice figures for every client with billable visits in a period.

    A client that cannot be billed (e.g. no active rate schedule) is recorded
    in the result's errors and does not stop the run.

    Args:
        start_date: Start of billing period (inclusive)
        end_date: End of billing period (inclusive)
        use_actual_time: Bill by actual time; defaults to settings.CARE_BILLING

    Returns:
        BulkBillingResult with one ClientBillingResult per billed client

    Raises:
        InvalidDateRangeError: If date range is invalid
    """
    if start_date > end_date:
        raise InvalidDateRangeError(
            "Start date must be before or equal to end date", start_date, end_date
        )
    if use_actual_time is None:
        use_actual_time = get_use_actual_time()

    bulk_result = BulkBillingResult(period_start=start_date, period_end=end_date)
    holiday_dates = get_bank_holiday_dates(start_date, end_date)

    visits_by_client: dict[int, list[VisitModel]] = defaultdict(list)
    for visit in _billable_visits(start_date, end_date).select_related("client"):
        visits_by_client[visit.client_id].append(visit)

    if not visits_by_client:
        logger.info("No billable visits found between %s and %s", start_date, end_date)
        return bulk_result

    logger.info("Billing %d clients for %s to %s", len(visits_by_client), start_date, end_date)

    rates_by_client = rate_schedules_by_client(
        RateScheduleModel.objects.filter(
            client_id__in=visits_by_client.keys(), is_active=True
        ).order_by("client_id", "start_date", "id")
    )

    for client_id, client_visits in visits_by_client.items():
        client = client_visits[0].client
        visits = [visit_to_dto(visit, holiday_dates) for visit in client_visits]
        rates = rates_by_client.get(str(client_id), ())
        try:
            bulk_result.results.append(
                _bill_client(client, visits, rates, start_date, end_date, use_actual_time)
            )
        except BillingServiceError as e:
            logger.warning("Could not bill %s: %s", client.name, e)
            bulk_result.errors.append(
                ClientBillingError(
                    client_id=str(client.pk),
                    client_name=client.name,
                    reason=str(e),
                    visit_count=len(visits),
                )
            )

    logger.info(
        "Bulk billing complete: %d billed, %d errors, total %s",
        bulk_result.success_count,
        bulk_result.error_count,
        bulk_result.total_amount,
    )
    return bulk_result
