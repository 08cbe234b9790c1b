"""
Unit rate calculation, dispatched on a rate schedule's charge type.
"""

from decimal import Decimal

from ..types import ChargeType, RateSchedule
from .flat import tiered_flat_unit_rate
from .hourly import daily_flat_unit_rate, hourly_unit_rate

HOURLY_CHARGE_TYPES = frozenset(
    {
        ChargeType.PRO_RATA_PER_MINUTE,
        ChargeType.PRO_RATA,
        ChargeType.HOURLY,
        ChargeType.RATE_PER_HOUR,
        ChargeType.HOUR_MINUTES,
    }
)

TIERED_CHARGE_TYPES = frozenset({ChargeType.FLAT})


def calculate_unit_rate(rate: RateSchedule, duration_minutes: int) -> Decimal:
    """
    Compute the hourly unit rate for a visit.

    Unrecognised charge types are billed at base_rate rather than rejected.

    Args:
        rate: the rate schedule that applies to the visit
        duration_minutes: billed duration, after the 60 minute rounding rule

    Returns:
        The unit rate (currency per hour)
    """
    try:
        charge_type = ChargeType(rate.charge_type or ChargeType.PRO_RATA_PER_MINUTE.value)
    except ValueError:
        return rate.base_rate

    if charge_type in HOURLY_CHARGE_TYPES:
        return hourly_unit_rate(rate)
    if charge_type == ChargeType.DAILY_FLAT:
        return daily_flat_unit_rate(rate)
    if charge_type in TIERED_CHARGE_TYPES:
        return tiered_flat_unit_rate(rate, duration_minutes)
    return rate.base_rate
