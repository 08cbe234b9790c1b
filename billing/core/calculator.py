"""
Core billing calculator functions.

Prices individual visits against their resolved rate schedule and aggregates
line items into an invoice-level summary.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from decimal import Decimal

from .applicability import resolve_rate
from .charges import calculate_unit_rate
from .types import (
    VAT_RATE,
    BillingCalculation,
    BillingSummary,
    ChargeType,
    InvalidVisitError,
    RateSchedule,
    SkippedVisit,
    SkipReason,
    Visit,
)
from .util import MINUTES_PER_HOUR, _duration_minutes, _round_up_to_hour

logger = logging.getLogger(__name__)


def _format_multiplier(multiplier: Decimal) -> str:
    return f"{multiplier.normalize():f}"


def describe_line(visit: Visit, rate: RateSchedule, use_actual_time: bool = False) -> str:
    """
    Build the human-readable description of a line item.

    Example:
        "Service on 15/01/2024 09:00 - 10:15 (75 mins (planned)) - Bank Holiday (1.5x)"
    """
    if use_actual_time and visit.has_actual_times:
        start, end, tag = visit.actual_start, visit.actual_end, "actual"
    else:
        start, end, tag = visit.planned_start, visit.planned_end, "planned"
    minutes = _duration_minutes(start, end, visit.visit_id)

    description = (
        f"Service on {visit.visit_date:%d/%m/%Y} {start:%H:%M} - {end:%H:%M} "
        f"({minutes} mins ({tag}))"
    )
    if visit.is_bank_holiday:
        multiplier = _format_multiplier(rate.effective_bank_holiday_multiplier)
        description += f" - Bank Holiday ({multiplier}x)"
    return description


def calculate_line(
    visit: Visit,
    rate: RateSchedule | None,
    use_actual_time: bool = False,
) -> BillingCalculation | None:
    """
    Calculate the invoice line item for a single visit.

    Args:
        visit: the visit to bill
        rate: the rate schedule resolved for the visit, or None
        use_actual_time: bill recorded actual time instead of planned time

    Returns:
        BillingCalculation, or None when there is no applicable rate

    Raises:
        InvalidVisitError: If the visit's planned or actual end is before its start
    """
    if rate is None:
        return None

    planned_minutes = _duration_minutes(visit.planned_start, visit.planned_end, visit.visit_id)
    if visit.has_actual_times:
        actual_minutes = _duration_minutes(visit.actual_start, visit.actual_end, visit.visit_id)
    else:
        actual_minutes = planned_minutes

    raw_billing_minutes = actual_minutes if use_actual_time else planned_minutes
    billing_minutes, applies_60_min_rule = _round_up_to_hour(raw_billing_minutes)

    if visit.is_bank_holiday:
        multiplier = rate.effective_bank_holiday_multiplier
    else:
        multiplier = Decimal("1")

    unit_rate = calculate_unit_rate(rate, billing_minutes)
    line_total = unit_rate * Decimal(billing_minutes) / Decimal(MINUTES_PER_HOUR) * multiplier
    vat_amount = line_total * VAT_RATE if rate.is_vatable else Decimal("0")

    return BillingCalculation(
        visit_id=visit.visit_id,
        description=describe_line(visit, rate, use_actual_time),
        visit_date=visit.visit_date,
        planned_duration_minutes=planned_minutes,
        actual_duration_minutes=actual_minutes,
        billing_duration_minutes=billing_minutes,
        rate_type=rate.charge_type or ChargeType.PRO_RATA_PER_MINUTE.value,
        base_rate=rate.base_rate,
        multiplier=multiplier,
        unit_rate=unit_rate,
        line_total=line_total,
        is_vatable=rate.is_vatable,
        vat_amount=vat_amount,
        is_bank_holiday=visit.is_bank_holiday,
        applies_60_min_rule=applies_60_min_rule,
        rate_id=rate.rate_id,
    )


def summarize(
    line_items: Sequence[BillingCalculation],
    skipped_visits: Sequence[SkippedVisit] = (),
) -> BillingSummary:
    """
    Fold line items into invoice totals.

    Returns:
        BillingSummary with net, VAT and gross totals and billable time
    """
    net_amount = sum((item.line_total for item in line_items), start=Decimal("0"))
    vat_amount = sum((item.vat_amount for item in line_items), start=Decimal("0"))
    total_minutes = sum(item.billing_duration_minutes for item in line_items)

    return BillingSummary(
        line_items=tuple(line_items),
        skipped_visits=tuple(skipped_visits),
        net_amount=net_amount,
        vat_amount=vat_amount,
        total_amount=net_amount + vat_amount,
        total_billable_minutes=total_minutes,
        total_billable_hours=total_minutes // MINUTES_PER_HOUR,
    )


def calculate_batch(
    visits: Iterable[Visit],
    candidate_rates_by_client: Mapping[str, Sequence[RateSchedule]],
    use_actual_time: bool = False,
) -> BillingSummary:
    """
    Bill a batch of visits.

    Resolves each visit's rate from its client's schedules and computes its
    line item. A visit with no applicable rate, or with invalid times, is
    recorded in skipped_visits and never aborts the batch.

    Args:
        visits: visits to bill
        candidate_rates_by_client: each client's rate schedules, in priority order
        use_actual_time: bill recorded actual time instead of planned time

    Returns:
        BillingSummary over the visits that could be billed
    """
    line_items: list[BillingCalculation] = []
    skipped: list[SkippedVisit] = []

    for visit in visits:
        candidates = candidate_rates_by_client.get(visit.client_id, ())
        rate = resolve_rate(visit, candidates)
        if rate is None:
            skipped.append(
                SkippedVisit(
                    visit_id=visit.visit_id,
                    visit_date=visit.visit_date,
                    reason=SkipReason.NO_RATE,
                    detail=f"No applicable rate for visit on {visit.visit_date}",
                )
            )
            continue

        try:
            line_item = calculate_line(visit, rate, use_actual_time)
        except InvalidVisitError as e:
            logger.warning("Skipping invalid visit %s: %s", visit.visit_id, e)
            skipped.append(
                SkippedVisit(
                    visit_id=visit.visit_id,
                    visit_date=visit.visit_date,
                    reason=SkipReason.INVALID_VISIT,
                    detail=str(e),
                )
            )
            continue

        line_items.append(line_item)

    return summarize(line_items, skipped)
