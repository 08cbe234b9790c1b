"""
Unit tests for rate resolution.

Tests each applicability check independently, resolve_rate() ordering, and
overlap detection.
"""

import logging
from datetime import date, time
from decimal import Decimal

import pytest

from billing.core.applicability import (
    covers_date,
    covers_day,
    covers_time,
    day_names,
    find_overlapping_rates,
    rate_applies,
    rates_overlap,
    resolve_rate,
)
from billing.tests.conftest import ALL_DAYS


@pytest.mark.parametrize(
    "visit_date,expected",
    [
        (date(2024, 1, 1), ("monday", "mon")),
        (date(2024, 1, 3), ("wednesday", "wed")),
        (date(2024, 1, 6), ("saturday", "sat")),
        (date(2024, 1, 7), ("sunday", "sun")),
    ],
)
def test_day_names(visit_date, expected):
    assert day_names(visit_date) == expected


# Validity window


def test_covers_date_inclusive_bounds(rate_factory):
    rate = rate_factory(start_date=date(2024, 1, 1), end_date=date(2024, 1, 31))

    assert covers_date(rate, date(2024, 1, 1))
    assert covers_date(rate, date(2024, 1, 31))
    assert not covers_date(rate, date(2023, 12, 31))
    assert not covers_date(rate, date(2024, 2, 1))


def test_covers_date_open_ended(rate_factory):
    rate = rate_factory(start_date=date(2024, 1, 1), end_date=None)

    assert covers_date(rate, date(2030, 6, 1))


def test_rate_outside_validity_window_never_matches(rate_factory, visit_factory):
    """A rate outside its validity window never matches, even covering every day and time."""
    rate = rate_factory(
        start_date=date(2024, 2, 1),
        days_covered=ALL_DAYS | {"bank_holiday"},
        time_from=time(0, 0),
        time_until=time(23, 59, 59),
    )
    visit = visit_factory(visit_date=date(2024, 1, 15), is_bank_holiday=True)

    assert resolve_rate(visit, [rate]) is None


# Covered days


def test_covers_day_full_name(rate_factory, visit_factory):
    rate = rate_factory(days_covered={"monday"})

    assert covers_day(rate, visit_factory(visit_date=date(2024, 1, 1)))
    assert not covers_day(rate, visit_factory(visit_date=date(2024, 1, 2)))


def test_covers_day_abbreviated_name(rate_factory, visit_factory):
    rate = rate_factory(days_covered={"sat", "sun"})

    assert covers_day(rate, visit_factory(visit_date=date(2024, 1, 6)))
    assert covers_day(rate, visit_factory(visit_date=date(2024, 1, 7)))
    assert not covers_day(rate, visit_factory(visit_date=date(2024, 1, 5)))


def test_covers_day_is_case_insensitive(rate_factory, visit_factory):
    rate = rate_factory(days_covered={"Monday"})

    assert covers_day(rate, visit_factory(visit_date=date(2024, 1, 1)))


def test_bank_holiday_token_only_matches_bank_holidays(rate_factory, visit_factory):
    rate = rate_factory(days_covered={"bank_holiday"})

    assert covers_day(rate, visit_factory(visit_date=date(2024, 1, 1), is_bank_holiday=True))
    assert not covers_day(rate, visit_factory(visit_date=date(2024, 1, 1)))


def test_rate_not_covering_weekday_never_matches(rate_factory, visit_factory):
    """A rate not covering the weekday never matches, regardless of validity window."""
    rate = rate_factory(
        days_covered={"saturday", "sunday"},
        start_date=date(2000, 1, 1),
        end_date=None,
    )
    visit = visit_factory(visit_date=date(2024, 1, 3))

    assert resolve_rate(visit, [rate]) is None


# Time window


@pytest.mark.parametrize(
    "start,expected",
    [
        (time(8, 0), True),
        (time(12, 30), True),
        (time(18, 0), True),
        (time(7, 59), False),
        (time(18, 1), False),
    ],
)
def test_covers_time_inclusive(rate_factory, visit_factory, start, expected):
    rate = rate_factory(time_from=time(8, 0), time_until=time(18, 0))
    visit = visit_factory(planned_start=start, planned_end=time(23, 0))

    assert covers_time(rate, visit) is expected


def test_rate_excluding_start_time_never_matches(rate_factory, visit_factory):
    """A rate whose window excludes the start time never matches even if day and dates match."""
    rate = rate_factory(time_from=time(18, 0), time_until=time(22, 0))
    visit = visit_factory(planned_start=time(9, 0), planned_end=time(10, 0))

    assert covers_date(rate, visit.visit_date)
    assert covers_day(rate, visit)
    assert resolve_rate(visit, [rate]) is None


def test_time_window_uses_planned_start_only(rate_factory, visit_factory):
    """A visit starting inside the window matches even if it ends after the window."""
    rate = rate_factory(time_from=time(8, 0), time_until=time(18, 0))
    visit = visit_factory(planned_start=time(17, 30), planned_end=time(19, 0))

    assert resolve_rate(visit, [rate]) == rate


# Active flag


def test_inactive_rate_never_matches(rate_factory, visit_factory):
    rate = rate_factory(is_active=False)

    assert not rate_applies(rate, visit_factory())
    assert resolve_rate(visit_factory(), [rate]) is None


# Resolution order


def test_resolve_rate_returns_first_match(rate_factory, visit_factory):
    first = rate_factory(rate_id="first", base_rate="20")
    second = rate_factory(rate_id="second", base_rate="25")

    assert resolve_rate(visit_factory(), [first, second]).rate_id == "first"
    assert resolve_rate(visit_factory(), [second, first]).rate_id == "second"


def test_resolve_rate_skips_non_matching_rates(rate_factory, visit_factory):
    weekend = rate_factory(rate_id="weekend", days_covered={"saturday", "sunday"})
    evening = rate_factory(rate_id="evening", time_from=time(18, 0), time_until=time(23, 0))
    daytime = rate_factory(rate_id="daytime", time_from=time(7, 0), time_until=time(17, 59))

    result = resolve_rate(visit_factory(), [weekend, evening, daytime])

    assert result.rate_id == "daytime"


def test_resolve_rate_bank_holiday_override(rate_factory, visit_factory):
    holiday = rate_factory(
        rate_id="holiday", days_covered={"bank_holiday"}, bank_holiday_multiplier=Decimal("2")
    )
    weekday = rate_factory(rate_id="weekday")

    assert resolve_rate(visit_factory(is_bank_holiday=True), [holiday, weekday]).rate_id == (
        "holiday"
    )
    assert resolve_rate(visit_factory(is_bank_holiday=False), [holiday, weekday]).rate_id == (
        "weekday"
    )


def test_resolve_rate_no_candidates_logs_warning(visit_factory, caplog):
    with caplog.at_level(logging.WARNING, logger="billing.core.applicability"):
        assert resolve_rate(visit_factory(visit_id="v42"), []) is None

    assert "No matching rate found for visit v42" in caplog.text


def test_resolve_rate_accepts_any_iterable(rate_factory, visit_factory):
    rates = (rate for rate in [rate_factory()])

    assert resolve_rate(visit_factory(), rates) is not None


# Overlap detection


def test_rates_overlap_same_days_and_times(rate_factory):
    assert rates_overlap(rate_factory(rate_id="a"), rate_factory(rate_id="b"))


def test_rates_do_not_overlap_on_disjoint_days(rate_factory):
    weekday = rate_factory(rate_id="a", days_covered={"mon", "tue", "wed", "thu", "fri"})
    weekend = rate_factory(rate_id="b", days_covered={"saturday", "sunday"})

    assert not rates_overlap(weekday, weekend)


def test_rates_overlap_mixing_full_and_abbreviated_names(rate_factory):
    first = rate_factory(rate_id="a", days_covered={"monday"})
    second = rate_factory(rate_id="b", days_covered={"mon"})

    assert rates_overlap(first, second)


def test_rates_do_not_overlap_on_disjoint_times(rate_factory):
    day = rate_factory(rate_id="a", time_from=time(7, 0), time_until=time(17, 59))
    night = rate_factory(rate_id="b", time_from=time(18, 0), time_until=time(23, 59))

    assert not rates_overlap(day, night)


def test_rates_do_not_overlap_on_disjoint_validity(rate_factory):
    old = rate_factory(rate_id="a", start_date=date(2023, 1, 1), end_date=date(2023, 12, 31))
    new = rate_factory(rate_id="b", start_date=date(2024, 1, 1))

    assert not rates_overlap(old, new)


def test_bank_holiday_rate_overlaps_weekday_rate(rate_factory):
    holiday = rate_factory(rate_id="a", days_covered={"bank_holiday"})
    weekday = rate_factory(rate_id="b", days_covered={"monday"})

    assert rates_overlap(holiday, weekday)


def test_inactive_rates_do_not_overlap(rate_factory):
    assert not rates_overlap(rate_factory(rate_id="a"), rate_factory(rate_id="b", is_active=False))


def test_find_overlapping_rates_returns_ordered_pairs(rate_factory):
    first = rate_factory(rate_id="a")
    weekend = rate_factory(rate_id="b", days_covered={"saturday"})
    second = rate_factory(rate_id="c")

    pairs = find_overlapping_rates([first, weekend, second])

    assert [(x.rate_id, y.rate_id) for x, y in pairs] == [("a", "c")]
