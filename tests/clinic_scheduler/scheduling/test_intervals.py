from datetime import date, datetime

import pytest

from clinic_scheduler.core.errors import InvalidDuration, InvalidInputError, InvalidRange, InvalidTimeFormat
from clinic_scheduler.scheduling.intervals import (
    day_of_week_for,
    format_hhmm,
    normalize_day,
    overlaps,
    parse_hhmm,
    validate_window,
)

INTERVALS = [(0, 30), (15, 45), (30, 60), (60, 90), (0, 120), (45, 50)]


@pytest.mark.parametrize('first', INTERVALS)
@pytest.mark.parametrize('second', INTERVALS)
def test_overlap_is_symmetric(first, second) -> None:
    assert overlaps(*first, *second) == overlaps(*second, *first)


def test_touching_intervals_do_not_overlap() -> None:
    assert overlaps(540, 600, 600, 660) is False
    assert overlaps(600, 660, 540, 600) is False


def test_overlap_works_on_datetimes() -> None:
    start = datetime(2026, 3, 2, 9, 0)
    end = datetime(2026, 3, 2, 9, 30)

    assert overlaps(start, end, datetime(2026, 3, 2, 9, 29), datetime(2026, 3, 2, 10, 0)) is True
    assert overlaps(start, end, datetime(2026, 3, 2, 9, 30), datetime(2026, 3, 2, 10, 0)) is False


def test_contained_interval_overlaps() -> None:
    assert overlaps(0, 120, 45, 50) is True


def test_parse_and_format_hhmm() -> None:
    assert parse_hhmm('00:00') == 0
    assert parse_hhmm('09:30') == 570
    assert parse_hhmm('23:59') == 1439
    assert format_hhmm(570) == '09:30'
    assert format_hhmm(parse_hhmm('17:05')) == '17:05'


@pytest.mark.parametrize('value', ['9:00', '24:00', '12:60', '0900', '', 'ab:cd', '09:00:00'])
def test_parse_hhmm_rejects_malformed_times(value: str) -> None:
    with pytest.raises(InvalidTimeFormat):
        parse_hhmm(value)


def test_validate_window_rejects_empty_or_reversed_range() -> None:
    with pytest.raises(InvalidRange):
        validate_window('10:00', '10:00', 30)

    with pytest.raises(InvalidRange):
        validate_window('11:00', '10:00', 30)


@pytest.mark.parametrize('duration', [0, -15])
def test_validate_window_rejects_non_positive_duration(duration: int) -> None:
    with pytest.raises(InvalidDuration):
        validate_window('09:00', '10:00', duration)


def test_normalize_day_accepts_any_case() -> None:
    assert normalize_day(' Monday ') == 'monday'

    with pytest.raises(InvalidInputError):
        normalize_day('funday')


def test_day_of_week_for_date() -> None:
    assert day_of_week_for(date(2026, 3, 2)) == 'monday'
    assert day_of_week_for(date(2026, 3, 8)) == 'sunday'
