"""
Helper functions for deciding which rate schedule applies to a visit.

A client's schedules form an ordered list. The first schedule that passes all
four checks (active, validity window, covered day, time window) wins.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import date
from itertools import combinations

from .types import BANK_HOLIDAY_TOKEN, DAY_NAMES, RateSchedule, Visit

logger = logging.getLogger(__name__)


def day_names(visit_date: date) -> tuple[str, str]:
    """
    Return the full and abbreviated lowercase day names for a date.

    Examples:
        >>> day_names(date(2024, 1, 1))
        ('monday', 'mon')
    """
    full_name = DAY_NAMES[visit_date.weekday()]
    return full_name, full_name[:3]


def is_rate_active(rate: RateSchedule) -> bool:
    return rate.is_active


def covers_date(rate: RateSchedule, visit_date: date) -> bool:
    """Check the visit date falls within [start_date, end_date]; no end_date means open ended."""
    if visit_date < rate.start_date:
        return False
    if rate.end_date is not None and visit_date > rate.end_date:
        return False
    return True


def covers_day(rate: RateSchedule, visit: Visit) -> bool:
    """
    Check the rate covers the visit's day of week.

    Matches either the full or abbreviated day name, or the bank holiday token
    when the visit falls on a bank holiday.
    """
    full_name, short_name = day_names(visit.visit_date)
    if full_name in rate.days_covered or short_name in rate.days_covered:
        return True
    return visit.is_bank_holiday and BANK_HOLIDAY_TOKEN in rate.days_covered


def covers_time(rate: RateSchedule, visit: Visit) -> bool:
    """Check the visit's planned start time is within [time_from, time_until], inclusive."""
    return rate.time_from <= visit.planned_start <= rate.time_until


def rate_applies(rate: RateSchedule, visit: Visit) -> bool:
    """Apply all four checks, logging the first one that rejects the rate."""
    if not is_rate_active(rate):
        logger.debug("Rate %s skipped for visit %s - inactive", rate.rate_id, visit.visit_id)
        return False
    if not covers_date(rate, visit.visit_date):
        logger.debug(
            "Rate %s skipped for visit %s - date %s out of range",
            rate.rate_id,
            visit.visit_id,
            visit.visit_date,
        )
        return False
    if not covers_day(rate, visit):
        logger.debug(
            "Rate %s skipped for visit %s - day not covered (%s)",
            rate.rate_id,
            visit.visit_id,
            sorted(rate.days_covered),
        )
        return False
    if not covers_time(rate, visit):
        logger.debug(
            "Rate %s skipped for visit %s - time %s not in range %s-%s",
            rate.rate_id,
            visit.visit_id,
            visit.planned_start,
            rate.time_from,
            rate.time_until,
        )
        return False
    return True


def resolve_rate(visit: Visit, candidate_rates: Iterable[RateSchedule]) -> RateSchedule | None:
    """
    Select the rate schedule that applies to a visit.

    Args:
        visit: the visit to price
        candidate_rates: the client's rate schedules, in priority order

    Returns:
        The first schedule passing every check, or None if no schedule applies.
    """
    for rate in candidate_rates:
        if rate_applies(rate, visit):
            logger.debug("Found matching rate %s for visit %s", rate.rate_id, visit.visit_id)
            return rate

    logger.warning(
        "No matching rate found for visit %s on %s", visit.visit_id, visit.visit_date
    )
    return None


def _covered_weekdays(rate: RateSchedule) -> set[str]:
    """Expand a rate's covered days into full day names plus the bank holiday token."""
    covered: set[str] = set()
    for full_name in DAY_NAMES:
        if full_name in rate.days_covered or full_name[:3] in rate.days_covered:
            covered.add(full_name)
    if BANK_HOLIDAY_TOKEN in rate.days_covered:
        covered.add(BANK_HOLIDAY_TOKEN)
    return covered


def rates_overlap(first: RateSchedule, second: RateSchedule) -> bool:
    """
    Check whether two active schedules could both match the same visit.

    Two schedules overlap when their validity windows intersect, they share a
    covered day, and their time windows intersect. A bank holiday cover
    overlaps with any weekday cover since a bank holiday falls on a weekday
    too.
    """
    if not (first.is_active and second.is_active):
        return False

    if first.end_date is not None and first.end_date < second.start_date:
        return False
    if second.end_date is not None and second.end_date < first.start_date:
        return False

    first_days = _covered_weekdays(first)
    second_days = _covered_weekdays(second)
    shared_days = first_days & second_days
    if not shared_days:
        first_holiday = BANK_HOLIDAY_TOKEN in first_days
        second_holiday = BANK_HOLIDAY_TOKEN in second_days
        if not (
            (first_holiday and second_days - {BANK_HOLIDAY_TOKEN})
            or (second_holiday and first_days - {BANK_HOLIDAY_TOKEN})
        ):
            return False

    return first.time_from <= second.time_until and second.time_from <= first.time_until


def find_overlapping_rates(
    rates: Sequence[RateSchedule],
) -> list[tuple[RateSchedule, RateSchedule]]:
    """
    Find pairs of schedules that could both match a single visit.

    The resolver picks whichever of an overlapping pair comes first, so these
    pairs are worth surfacing to whoever maintains the schedules.

    Returns:
        List of (earlier, later) pairs in the given order
    """
    return [
        (first, second)
        for first, second in combinations(rates, 2)
        if rates_overlap(first, second)
    ]
