"""Tests for calendar helpers."""

from datetime import date, datetime

from roadmap.services.timeplan import (
    add_business_days,
    as_date,
    business_days_between,
    business_days_inclusive,
    format_working_days,
    is_unavailable,
    parse_working_days,
    prorated_block_hours,
    ranges_overlap,
    week_start,
)
from factories import make_block, make_engineer


def test_as_date_coerces_inputs():
    assert as_date("2025-03-03") == date(2025, 3, 3)
    assert as_date(datetime(2025, 3, 3, 15, 30)) == date(2025, 3, 3)
    assert as_date(None) is None


def test_working_days_round_trip_is_normalized():
    assert parse_working_days("4,0, 2") == {0, 2, 4}
    assert format_working_days([4, 0, 2, 2]) == "0,2,4"
    assert parse_working_days("") == set()


def test_week_start_is_monday():
    assert week_start(date(2025, 3, 6)) == date(2025, 3, 3)
    assert week_start(date(2025, 3, 9)) == date(2025, 3, 3)  # Sunday
    assert week_start(date(2025, 3, 3)) == date(2025, 3, 3)


def test_business_days_between_excludes_later_day():
    """Mon -> Fri counts four weekdays; callers add one for an inclusive span."""
    assert business_days_between(date(2025, 3, 7), date(2025, 3, 3)) == 4
    assert business_days_between(date(2025, 3, 10), date(2025, 3, 7)) == 1  # Fri -> Mon
    assert business_days_between(date(2025, 3, 17), date(2025, 3, 3)) == 10
    assert business_days_between(date(2025, 3, 3), date(2025, 3, 7)) == -4


def test_business_days_inclusive_skips_weekends():
    assert business_days_inclusive(date(2025, 3, 3), date(2025, 3, 14)) == 10
    assert business_days_inclusive(date(2025, 3, 1), date(2025, 3, 2)) == 0


def test_add_business_days_skips_weekends():
    assert add_business_days(date(2025, 3, 7), 1) == date(2025, 3, 10)
    assert add_business_days(date(2025, 3, 3), 4) == date(2025, 3, 7)
    assert add_business_days(date(2025, 3, 10), -1) == date(2025, 3, 7)
    assert add_business_days(date(2025, 3, 3), 0) == date(2025, 3, 3)


def test_ranges_overlap_is_inclusive():
    assert ranges_overlap(date(2025, 3, 3), date(2025, 3, 7), date(2025, 3, 7), date(2025, 3, 10))
    assert not ranges_overlap(date(2025, 3, 3), date(2025, 3, 7), date(2025, 3, 8), date(2025, 3, 10))


def test_is_unavailable_uses_closed_intervals():
    engineer = make_engineer("ana", unavailability=[(date(2025, 3, 4), date(2025, 3, 5))])
    assert is_unavailable(date(2025, 3, 4), engineer.unavailability)
    assert is_unavailable(date(2025, 3, 5), engineer.unavailability)
    assert not is_unavailable(date(2025, 3, 6), engineer.unavailability)


def test_prorated_block_hours():
    """Block hours are spread over business days; only the overlap counts."""
    block = make_block("b1", "i1", "ana", date(2025, 3, 3), date(2025, 3, 14), hours=80.0)

    assert prorated_block_hours(block, date(2025, 3, 3), date(2025, 3, 7)) == 40.0
    assert prorated_block_hours(block, date(2025, 3, 12), date(2025, 3, 20)) == 24.0
    assert prorated_block_hours(block, date(2025, 3, 17), date(2025, 3, 21)) == 0.0
