"""
Adapters for converting Django ORM models to billing DTOs.

This module provides lightweight mappings from the clients, visits and rates
apps' Django models to the immutable dataclasses used by the billing engine
core.
"""

from collections import defaultdict
from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from billing.core.types import RateSchedule, Visit
from rates.models import RateSchedule as RateScheduleModel
from visits.models import Visit as VisitModel


def build_days_covered(days: Iterable[str] | None) -> frozenset[str]:
    """
    Normalize a stored days_covered list into the DTO's frozenset.

    Examples:
        >>> sorted(build_days_covered(["Monday", "tue", "bank_holiday"]))
        ['bank_holiday', 'monday', 'tue']
        >>> build_days_covered(None)
        frozenset()
    """
    if not days:
        return frozenset()
    return frozenset(str(day).strip().lower() for day in days)


def _optional_decimal(value) -> Decimal | None:
    if value is None:
        return None
    return Decimal(str(value))


def rate_schedule_to_dto(schedule: RateScheduleModel) -> RateSchedule:
    """
    Convert Django RateSchedule model to RateSchedule DTO.

    Args:
        schedule: Django RateSchedule model instance

    Returns:
        RateSchedule DTO keyed by the model's primary key
    """
    return RateSchedule(
        rate_id=str(schedule.pk),
        client_id=str(schedule.client_id),
        name=schedule.name,
        start_date=schedule.start_date,
        end_date=schedule.end_date,
        is_active=schedule.is_active,
        days_covered=build_days_covered(schedule.days_covered),
        time_from=schedule.time_from,
        time_until=schedule.time_until,
        charge_type=schedule.charge_type,
        base_rate=Decimal(str(schedule.base_rate)),
        rate_15_minutes=_optional_decimal(schedule.rate_15_minutes),
        rate_30_minutes=_optional_decimal(schedule.rate_30_minutes),
        rate_45_minutes=_optional_decimal(schedule.rate_45_minutes),
        rate_60_minutes=_optional_decimal(schedule.rate_60_minutes),
        bank_holiday_multiplier=_optional_decimal(schedule.bank_holiday_multiplier),
        is_vatable=schedule.is_vatable,
    )


def visit_to_dto(visit: VisitModel, holiday_dates: set[date] | None = None) -> Visit:
    """
    Convert Django Visit model to Visit DTO.

    Args:
        visit: Django Visit model instance
        holiday_dates: Dates of active bank holidays; a visit on one of these
            dates is flagged as a bank holiday visit

    Returns:
        Visit DTO keyed by the model's primary key
    """
    return Visit(
        visit_id=str(visit.pk),
        client_id=str(visit.client_id),
        visit_date=visit.visit_date,
        planned_start=visit.planned_start,
        planned_end=visit.planned_end,
        actual_start=visit.actual_start,
        actual_end=visit.actual_end,
        is_bank_holiday=visit.visit_date in (holiday_dates or set()),
    )


def rate_schedules_by_client(schedules_queryset) -> dict[str, tuple[RateSchedule, ...]]:
    """
    Batch convert rate schedules to DTOs grouped by client.

    The queryset's ordering is kept within each client, since the resolver
    takes the first matching schedule.

    Args:
        schedules_queryset: Django QuerySet of RateSchedule objects

    Returns:
        Dictionary mapping client id (as a string) to a tuple of RateSchedule DTOs
    """
    grouped: dict[str, list[RateSchedule]] = defaultdict(list)
    for schedule in schedules_queryset:
        grouped[str(schedule.client_id)].append(rate_schedule_to_dto(schedule))
    return {client_id: tuple(schedules) for client_id, schedules in grouped.items()}
