"""Clinic opening hours and legal booking slots.

Pure functions: no state, no I/O. A date that cannot be parsed behaves like
a closed day and yields no slots.
"""

import re
from datetime import date, datetime, time

# Inclusive hour ranges per weekday (Monday=0 ... Sunday=6)
WEEKDAY_BLOCKS: tuple[tuple[int, int], ...] = ((8, 12), (13, 21))
SATURDAY_BLOCKS: tuple[tuple[int, int], ...] = ((8, 12),)

_TIME_PATTERN = re.compile(r"(\d{1,2}):(\d{2})")


def parse_date(value: date | str | None) -> date | None:
    """Parse an ISO ``YYYY-MM-DD`` value; return None when it is not a date."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value.strip())
    except (AttributeError, ValueError):
        return None


def normalize_time(value: time | str | None) -> str:
    """Return ``HH:MM`` for a time or time-like string, or ``""`` if there is none."""
    if value is None:
        return ""
    if isinstance(value, time):
        return value.strftime("%H:%M")
    match = _TIME_PATTERN.search(value)
    if not match:
        return ""
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return ""
    return f"{hour:02d}:{minute:02d}"


def parse_time(value: time | str | None) -> time | None:
    """Parse a time value down to minute precision."""
    normalized = normalize_time(value)
    if not normalized:
        return None
    hour, minute = normalized.split(":")
    return time(int(hour), int(minute))


def blocks_for(day: date) -> tuple[tuple[int, int], ...]:
    """Opening blocks for a calendar date."""
    weekday = day.weekday()
    if weekday == 6:
        return ()
    if weekday == 5:
        return SATURDAY_BLOCKS
    return WEEKDAY_BLOCKS


def legal_slots(value: date | str | None) -> list[time]:
    """
    Compute the bookable hourly slots for a date.

    Args:
        value: Calendar date or ISO date string

    Returns:
        Sorted, duplicate-free slot start times; empty for Sundays and
        for values that are not dates
    """
    day = parse_date(value)
    if day is None:
        return []

    slots = {time(hour, 0) for start, end in blocks_for(day) for hour in range(start, end + 1)}
    return sorted(slots)


def is_legal_slot(value: date | str | None, start: time | str | None) -> bool:
    """Check whether a start time is one of the date's legal slots."""
    parsed = parse_time(start)
    return parsed is not None and parsed in legal_slots(value)


def clear_illegal_time(value: date | str | None, start: time | str | None) -> time | None:
    """Keep a previously chosen time only if it is still legal on the new date."""
    parsed = parse_time(start)
    if parsed is not None and parsed in legal_slots(value):
        return parsed
    return None


def format_slots(slots: list[time]) -> list[str]:
    return [slot.strftime("%H:%M") for slot in slots]
