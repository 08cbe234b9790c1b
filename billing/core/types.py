"""
Define lightweight dataclasses to use for visit billing calculations.

Adapters to convert between Django ORM and these classes are in billing.adapters.
"""

from __future__ import annotations

import datetime
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, time
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

VAT_RATE = Decimal("0.20")

BANK_HOLIDAY_TOKEN = "bank_holiday"

DAY_NAMES = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


class InvalidVisitError(ValueError):
    """Raised when a visit's times are malformed or describe a negative duration."""

    def __init__(self, message: str, visit_id: str | None = None):
        super().__init__(message)
        self.visit_id = visit_id


class ChargeType(str, Enum):
    """Recognised rate schedule charge types."""

    PRO_RATA_PER_MINUTE = "rate_per_minutes_pro_rata"
    PRO_RATA = "pro_rata"
    HOURLY = "hourly_rate"
    RATE_PER_HOUR = "rate_per_hour"
    HOUR_MINUTES = "hour_minutes"
    DAILY_FLAT = "daily_flat_rate"
    FLAT = "flat_rate"
    FLAT_PER_MINUTES = "rate_per_minutes_flat_rate"


class SkipReason(str, Enum):
    """Why a visit produced no line item."""

    NO_RATE = "no_rate"
    INVALID_VISIT = "invalid_visit"


TRUE_VALUES = frozenset({"true", "1", "yes", "y"})


def parse_flag(value: Any) -> bool:
    """
    Read a yes/no field that may arrive as a bool or as text.

    Strings are true only when they match TRUE_VALUES (case-insensitive), so
    "false", "0" and "" are all false.

    Examples:
        >>> parse_flag("Yes"), parse_flag("false"), parse_flag(True)
        (True, False, True)
    """
    if isinstance(value, str):
        return value.strip().lower() in TRUE_VALUES
    return bool(value)


def parse_time_of_day(value: time | str) -> time:
    """
    Parse a wall-clock time in HH:MM or HH:MM:SS format.

    `time` instances are returned unchanged.

    Raises:
        ValueError: If the string is not a valid time of day
    """
    if isinstance(value, time):
        return value
    if not isinstance(value, str) or not value:
        raise ValueError(f"Invalid time: {value!r}. Expected HH:MM or HH:MM:SS")

    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.datetime.strptime(value, fmt).time()
        except ValueError:
            pass
    raise ValueError(f"Invalid time format: '{value}'. Expected HH:MM or HH:MM:SS")


@dataclass(frozen=True, slots=True)
class Visit:
    """
    A scheduled unit of care service.

    Times are wall-clock times of day on `visit_date`. Actual times are only
    used when both are present.
    """

    visit_id: str
    client_id: str
    visit_date: date
    planned_start: time
    planned_end: time
    actual_start: Optional[time] = None
    actual_end: Optional[time] = None
    is_bank_holiday: bool = False

    @property
    def has_actual_times(self) -> bool:
        return self.actual_start is not None and self.actual_end is not None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Visit:
        """
        Build a Visit from a mapping of (mostly string) fields.

        Expected keys: visit_id, client_id, visit_date (YYYY-MM-DD),
        planned_start, planned_end, and optionally actual_start, actual_end
        (HH:MM or HH:MM:SS) and is_bank_holiday (a bool, or text read by
        parse_flag).

        Raises:
            InvalidVisitError: If a required field is missing or malformed
        """
        visit_id = str(record.get("visit_id", ""))
        try:
            visit_date = record["visit_date"]
            if isinstance(visit_date, str):
                visit_date = datetime.datetime.strptime(visit_date, "%Y-%m-%d").date()
            actual_start = record.get("actual_start") or None
            actual_end = record.get("actual_end") or None
            return cls(
                visit_id=visit_id,
                client_id=str(record["client_id"]),
                visit_date=visit_date,
                planned_start=parse_time_of_day(record["planned_start"]),
                planned_end=parse_time_of_day(record["planned_end"]),
                actual_start=parse_time_of_day(actual_start) if actual_start else None,
                actual_end=parse_time_of_day(actual_end) if actual_end else None,
                is_bank_holiday=parse_flag(record.get("is_bank_holiday", False)),
            )
        except KeyError as e:
            raise InvalidVisitError(f"Visit missing required field: {e.args[0]}", visit_id)
        except ValueError as e:
            raise InvalidVisitError(str(e), visit_id)


@dataclass(frozen=True, slots=True)
class RateSchedule:
    """
    Client-specific pricing rule scoped by validity dates, days and time of day.

    Notes:
        - end_date of None means the schedule is open ended.
        - days_covered holds lowercase day names ("monday"), abbreviations
          ("mon") and/or the "bank_holiday" token. Values are lowercased on
          construction.
        - time_from/time_until are both inclusive and are compared against the
          visit's planned start time.
        - charge_type is a plain string so unrecognised values survive; they
          are billed at base_rate.
        - bank_holiday_multiplier of None (or zero) means 1.
    """

    rate_id: str
    client_id: str
    start_date: date
    base_rate: Decimal
    end_date: Optional[date] = None
    is_active: bool = True
    days_covered: frozenset[str] = frozenset()
    time_from: time = time(0, 0)
    time_until: time = time(23, 59, 59)
    charge_type: str = ChargeType.PRO_RATA_PER_MINUTE.value
    rate_15_minutes: Optional[Decimal] = None
    rate_30_minutes: Optional[Decimal] = None
    rate_45_minutes: Optional[Decimal] = None
    rate_60_minutes: Optional[Decimal] = None
    bank_holiday_multiplier: Optional[Decimal] = None
    is_vatable: bool = False
    name: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "days_covered", frozenset(day.lower() for day in self.days_covered)
        )

    @property
    def effective_bank_holiday_multiplier(self) -> Decimal:
        return self.bank_holiday_multiplier or Decimal("1")


@dataclass(frozen=True, slots=True)
class BillingCalculation:
    """
    One computed invoice line item for a visit, suitable for display and persistence.
    """

    visit_id: str
    description: str
    visit_date: date
    planned_duration_minutes: int
    actual_duration_minutes: int
    billing_duration_minutes: int
    rate_type: str
    base_rate: Decimal
    multiplier: Decimal
    unit_rate: Decimal
    line_total: Decimal
    is_vatable: bool
    vat_amount: Decimal
    is_bank_holiday: bool
    applies_60_min_rule: bool
    rate_id: str = ""


@dataclass(frozen=True, slots=True)
class SkippedVisit:
    """A visit that was not billed, and why."""

    visit_id: str
    visit_date: Optional[date]
    reason: SkipReason
    detail: str = ""


@dataclass(frozen=True, slots=True)
class BillingSummary:
    """
    Invoice-level aggregation over a batch of visits.

    total_billable_hours is the floor of total_billable_minutes / 60; the
    remainder is not reported separately.
    """

    line_items: tuple[BillingCalculation, ...] = ()
    skipped_visits: tuple[SkippedVisit, ...] = ()
    net_amount: Decimal = Decimal("0")
    vat_amount: Decimal = Decimal("0")
    total_amount: Decimal = Decimal("0")
    total_billable_minutes: int = 0
    total_billable_hours: int = 0

    @property
    def billed_count(self) -> int:
        return len(self.line_items)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped_visits)

    @property
    def visit_count(self) -> int:
        return self.billed_count + self.skipped_count
