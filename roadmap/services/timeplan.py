"""Calendar helpers shared by the recommender, generator and placement services."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable, Iterator, Set

WEEKEND = {5, 6}  # Saturday, Sunday (date.weekday())


def as_date(value) -> date | None:
    """Coerce a date, datetime or ISO string to a date (None passes through)."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def parse_working_days(value: str | Iterable[int] | None) -> Set[int]:
    """
    Parse a working-day mask into weekday indices.

    Args:
        value: "0,1,2,3,4" style string (0=Mon..6=Sun) or an iterable of ints

    Returns:
        Set of weekday indices
    """
    if value is None:
        return set()
    if isinstance(value, str):
        return {int(part) for part in value.split(",") if part.strip()}
    return {int(day) for day in value}


def format_working_days(days: Iterable[int]) -> str:
    return ",".join(str(d) for d in sorted(set(days)))


def is_weekend(day: date) -> bool:
    return day.weekday() in WEEKEND


def week_start(day: date) -> date:
    """Monday of the week containing day."""
    return day - timedelta(days=day.weekday())


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day in [start, end]."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def business_days_between(later: date, earlier: date) -> int:
    """
    Count weekdays in [earlier, later); negative when later < earlier.

    Mon -> Fri of the same week is 4, so callers add 1 for an inclusive span.
    """
    diff = (later - earlier).days
    sign = -1 if diff < 0 else 1
    weeks = int(diff / 7)
    result = weeks * 5
    moving = earlier + timedelta(days=weeks * 7)
    while moving != later:
        if not is_weekend(moving):
            result += sign
        moving += timedelta(days=sign)
    return result


def business_days_inclusive(start: date, end: date) -> int:
    """Count weekdays in [start, end]."""
    return sum(1 for day in iter_days(start, end) if not is_weekend(day))


def add_business_days(day: date, count: int) -> date:
    """Step count weekdays forward (or backward when negative), skipping weekends."""
    result = day
    remaining = abs(count)
    step = timedelta(days=1 if count >= 0 else -1)
    while remaining > 0:
        result += step
        if not is_weekend(result):
            remaining -= 1
    return result


def ranges_overlap(start1: date, end1: date, start2: date, end2: date) -> bool:
    return start1 <= end2 and start2 <= end1


def is_unavailable(day: date, unavailability: Iterable) -> bool:
    """True if day falls inside any closed [start_date, end_date] interval."""
    return any(
        as_date(block.start_date) <= day <= as_date(block.end_date)
        for block in unavailability
    )


def prorated_block_hours(block, window_start: date, window_end: date) -> float:
    """
    Hours of a scheduled block falling inside a window.

    The block's hours are spread evenly over its business days; the overlap is
    measured the same way. Returns 0.0 when the block misses the window.
    """
    block_start = as_date(block.start_date)
    block_end = as_date(block.end_date)
    if not (block_start <= window_end and block_end >= window_start):
        return 0.0

    overlap_start = max(block_start, window_start)
    overlap_end = min(block_end, window_end)
    overlap_days = business_days_between(overlap_end, overlap_start) + 1

    block_days = business_days_between(block_end, block_start) + 1
    rate = float(block.hours_allocated or 0.0) / max(block_days, 1)
    return rate * overlap_days
