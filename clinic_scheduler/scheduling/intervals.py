"""Clock-time parsing and half-open interval helpers shared by the scheduling core."""

import re
from datetime import date, datetime, time, timedelta
from typing import TypeVar

from clinic_scheduler.core.errors import InvalidDuration, InvalidInputError, InvalidRange, InvalidTimeFormat

DAYS_OF_WEEK = ('monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday')

_HHMM_PATTERN = re.compile(r'^([0-1][0-9]|2[0-3]):([0-5][0-9])$')

T = TypeVar('T', int, datetime)


def overlaps(start_a: T, end_a: T, start_b: T, end_b: T) -> bool:
    """Half-open overlap test: [a) and [b) overlap iff each starts before the other ends."""
    return start_a < end_b and start_b < end_a


def parse_hhmm(value: str) -> int:
    """Return minutes since midnight for an ``HH:MM`` string."""
    if not isinstance(value, str) or not _HHMM_PATTERN.match(value):
        raise InvalidTimeFormat(f'Invalid time format: {value!r}, must be HH:MM.')
    hours, minutes = value.split(':')
    return int(hours) * 60 + int(minutes)


def format_hhmm(minutes: int) -> str:
    return f'{minutes // 60:02d}:{minutes % 60:02d}'


def normalize_day(value: str) -> str:
    normalized = (value or '').strip().lower()
    if normalized not in DAYS_OF_WEEK:
        raise InvalidInputError(f'Invalid day of week: {value!r}.')
    return normalized


def day_of_week_for(target_date: date) -> str:
    return DAYS_OF_WEEK[target_date.weekday()]


def validate_window(start_time: str, end_time: str, duration_minutes: int) -> tuple[int, int]:
    start_minutes = parse_hhmm(start_time)
    end_minutes = parse_hhmm(end_time)

    if start_minutes >= end_minutes:
        raise InvalidRange(f'Start time {start_time} must be before end time {end_time}.')

    if duration_minutes is None or duration_minutes <= 0:
        raise InvalidDuration('Slot duration must be greater than 0 minutes.')

    return start_minutes, end_minutes


def at_clock_time(target_date: date, minutes: int) -> datetime:
    return datetime.combine(target_date, time(0, 0)) + timedelta(minutes=minutes)


def day_bounds(target_date: date) -> tuple[datetime, datetime]:
    start_of_day = datetime.combine(target_date, time(0, 0))
    return start_of_day, start_of_day + timedelta(days=1)
