"""
Shared fixtures for billing tests.

Consolidates Visit/RateSchedule DTO factories and Django model fixtures used
across test files.
"""

from datetime import date, time
from decimal import Decimal

import pytest

from billing.core.types import RateSchedule, Visit
from clients.models import Client

WEEKDAYS = frozenset({"monday", "tuesday", "wednesday", "thursday", "friday"})
ALL_DAYS = WEEKDAYS | {"saturday", "sunday"}


@pytest.fixture
def visit_factory():
    """Factory fixture for creating Visit DTOs.

    Defaults to a 60 minute visit (09:00-10:00) on Monday, January 1, 2024.
    Times may be given as `time` objects or "HH:MM" strings.
    """

    def _create_visit(
        visit_id: str = "v1",
        client_id: str = "c1",
        visit_date: date = date(2024, 1, 1),
        planned_start: time | str = time(9, 0),
        planned_end: time | str = time(10, 0),
        actual_start: time | str | None = None,
        actual_end: time | str | None = None,
        is_bank_holiday: bool = False,
    ) -> Visit:
        def _t(value):
            if isinstance(value, str):
                hours, minutes = value.split(":")
                return time(int(hours), int(minutes))
            return value

        return Visit(
            visit_id=visit_id,
            client_id=client_id,
            visit_date=visit_date,
            planned_start=_t(planned_start),
            planned_end=_t(planned_end),
            actual_start=_t(actual_start),
            actual_end=_t(actual_end),
            is_bank_holiday=is_bank_holiday,
        )

    return _create_visit


@pytest.fixture
def rate_factory():
    """Factory fixture for creating RateSchedule DTOs.

    Defaults to an hourly £20 rate covering every weekday, all day, from
    January 1, 2024 with no end date.
    """

    def _create_rate(
        rate_id: str = "r1",
        client_id: str = "c1",
        base_rate: Decimal | str = Decimal("20"),
        charge_type: str = "hourly_rate",
        days_covered=WEEKDAYS,
        time_from: time = time(0, 0),
        time_until: time = time(23, 59),
        start_date: date = date(2024, 1, 1),
        end_date: date | None = None,
        is_active: bool = True,
        bank_holiday_multiplier: Decimal | None = None,
        is_vatable: bool = False,
        **tier_rates,
    ) -> RateSchedule:
        return RateSchedule(
            rate_id=rate_id,
            client_id=client_id,
            base_rate=Decimal(base_rate),
            charge_type=charge_type,
            days_covered=frozenset(days_covered),
            time_from=time_from,
            time_until=time_until,
            start_date=start_date,
            end_date=end_date,
            is_active=is_active,
            bank_holiday_multiplier=bank_holiday_multiplier,
            is_vatable=is_vatable,
            **tier_rates,
        )

    return _create_rate


@pytest.fixture
def hourly_rate(rate_factory):
    """£20/hour weekday rate, not VATable."""
    return rate_factory()


@pytest.fixture
def care_client(db):
    """Create a test client."""
    return Client.objects.create(name="Jane Smith")


@pytest.fixture
def other_care_client(db):
    """Create a second test client."""
    return Client.objects.create(name="John Jones")
