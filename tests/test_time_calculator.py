"""Tests for time slot parsing and the same-day buffer rule."""

from datetime import date
from types import SimpleNamespace

import pytest

from fieldops.domain.scheduling import (
    MIN_BUFFER_MINUTES,
    compute_window,
    find_buffer_conflict,
    format_time_slot,
    parse_time_slot,
    satisfies_buffer,
    validate_time_slot_format,
)
from fieldops.shared.errors import InvalidFormatError


@pytest.mark.parametrize(
    "text,expected",
    [
        ("9:00 AM", 540),
        ("12:00 PM", 720),
        ("12:30 AM", 30),
        ("11:59 PM", 1439),
        ("  2:30 pm ", 870),
        ("09 : 05AM", 545),
    ],
)
def test_parse_time_slot_valid(text, expected):
    assert parse_time_slot(text) == expected


@pytest.mark.parametrize("text", ["25:00 AM", "9:60 AM", "9:00", "abc", "", "0:30 AM", "13:00 PM", None])
def test_parse_time_slot_rejects_malformed(text):
    with pytest.raises(InvalidFormatError):
        parse_time_slot(text)


def test_every_minute_of_day_survives_format_and_parse():
    for minute in range(0, 1440):
        assert parse_time_slot(format_time_slot(minute)) == minute


def test_format_time_slot_is_canonical():
    assert format_time_slot(0) == "12:00 AM"
    assert format_time_slot(545) == "9:05 AM"
    assert format_time_slot(720) == "12:00 PM"
    with pytest.raises(ValueError):
        format_time_slot(1440)


def test_compute_window_does_not_clamp_at_midnight():
    window = compute_window("11:00 PM", 120)
    assert window.start_minutes == 1380
    assert window.end_minutes == 1500


def test_compute_window_propagates_parse_failure():
    with pytest.raises(InvalidFormatError):
        compute_window("noon", 60)


def test_buffer_exactly_two_hours_after():
    assert MIN_BUFFER_MINUTES == 120
    assert satisfies_buffer(540, 600, 720, 780) is True


def test_buffer_one_minute_short():
    assert satisfies_buffer(540, 600, 719, 780) is False


def test_buffer_before_existing_job():
    assert satisfies_buffer(540, 600, 300, 419) is True
    assert satisfies_buffer(540, 600, 300, 421) is False


def test_buffer_rejects_overlap():
    assert satisfies_buffer(540, 660, 600, 720) is False


def test_buffer_threshold_is_configurable():
    assert satisfies_buffer(540, 600, 630, 660, buffer_minutes=30) is True


def test_validate_time_slot_format_messages():
    assert validate_time_slot_format("  9:00 AM ") == "9:00 AM"

    with pytest.raises(InvalidFormatError, match="Time slot is required"):
        validate_time_slot_format("   ")
    with pytest.raises(InvalidFormatError, match="Expected format"):
        validate_time_slot_format("9am")


def _job(day, slot, duration, job_id=1):
    return SimpleNamespace(id=job_id, date=day, time_slot=slot, duration_minutes=duration)


def test_find_buffer_conflict_only_compares_same_day():
    day = date(2030, 5, 10)
    new_window = compute_window("10:00 AM", 60)
    others = [_job(date(2030, 5, 11), "10:00 AM", 60, job_id=7)]

    assert find_buffer_conflict(new_window, day, others) is None


def test_find_buffer_conflict_returns_first_clash():
    day = date(2030, 5, 10)
    new_window = compute_window("1:00 PM", 60)
    far = _job(day, "6:00 AM", 60, job_id=1)
    near = _job(day, "11:30 AM", 60, job_id=2)

    assert find_buffer_conflict(new_window, day, [far, near]) is near


def test_find_buffer_conflict_treats_unparsable_slot_as_clash():
    day = date(2030, 5, 10)
    broken = _job(day, "half past nine", 60, job_id=3)

    assert find_buffer_conflict(compute_window("5:00 PM", 30), day, [broken]) is broken
