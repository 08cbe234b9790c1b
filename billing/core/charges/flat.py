"""
Unit rates for tiered flat charge types.
"""

from decimal import Decimal
from typing import Optional

from ..types import RateSchedule

TIER_BREAKPOINTS_MINUTES = (15, 30, 45, 60)


def _tier_rate(rate: RateSchedule, breakpoint_minutes: int) -> Optional[Decimal]:
    return getattr(rate, f"rate_{breakpoint_minutes}_minutes")


def tiered_flat_unit_rate(rate: RateSchedule, duration_minutes: int) -> Decimal:
    """
    Pick the tier rate for a billed duration.

    Uses the smallest breakpoint at or above the duration whose tier rate is
    configured (set and non-zero). Durations beyond the last breakpoint, or
    with no configured tier, fall back to base_rate.

    Args:
        rate: the rate schedule
        duration_minutes: billed duration, after the 60 minute rounding rule

    Returns:
        The unit rate to apply
    """
    for breakpoint_minutes in TIER_BREAKPOINTS_MINUTES:
        tier_rate = _tier_rate(rate, breakpoint_minutes)
        if duration_minutes <= breakpoint_minutes and tier_rate:
            return tier_rate
    return rate.base_rate
