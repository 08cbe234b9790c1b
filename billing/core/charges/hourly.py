"""
Unit rates for time-based charge types (pro-rata, hourly, daily flat).
"""

from decimal import Decimal

from ..types import RateSchedule


def hourly_unit_rate(rate: RateSchedule) -> Decimal:
    """
    Unit rate for pro-rata and hourly charge types.

    base_rate is an hourly figure; proration to the billed minutes happens in
    the line total.
    """
    return rate.base_rate


def daily_flat_unit_rate(rate: RateSchedule) -> Decimal:
    """Unit rate for the daily flat charge type, independent of duration."""
    return rate.base_rate
