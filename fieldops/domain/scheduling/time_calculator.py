"""
Time slot parsing and same-day buffer checks.

All functions here are pure; callers load the rows and decide what to do with
the result.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from ...shared.errors import InvalidFormatError

logger = logging.getLogger(__name__)

# Minimum gap between two jobs of one agent on the same calendar day
MIN_BUFFER_MINUTES = 120

# A competing job whose stored time slot cannot be parsed counts as a clash,
# so malformed legacy rows block a booking instead of letting it through.
UNPARSABLE_SLOT_BLOCKS_BOOKING = True

TIME_SLOT_PATTERN = re.compile(r"^\s*(\d{1,2})\s*:\s*(\d{2})\s*(AM|PM)\s*$", re.IGNORECASE)

TIME_SLOT_FORMAT_MESSAGE = (
    'Invalid time slot format. Expected format: "HH:MM AM/PM" (e.g., "9:00 AM", "2:30 PM")'
)


@dataclass(frozen=True)
class JobWindow:
    """[start, end) in minutes from midnight; end may pass 1439 for late jobs"""

    start_minutes: int
    end_minutes: int


def parse_time_slot(text: str) -> int:
    """
    Convert a time slot such as "9:00 AM" or "2:30 pm" to minutes from midnight.

    12:00 AM is 0 and 12:00 PM is 720.

    Raises:
        InvalidFormatError: If the text is not "H:MM AM/PM" with hour 1-12 and minute 0-59
    """
    trimmed = (text or "").strip()
    match = TIME_SLOT_PATTERN.match(trimmed)
    if not match:
        raise InvalidFormatError(f"Invalid time slot format: {text}")

    hours = int(match.group(1))
    minutes = int(match.group(2))
    period = match.group(3).upper()

    if hours < 1 or hours > 12 or minutes > 59:
        raise InvalidFormatError(f"Invalid time: {text}")

    if period == "PM" and hours != 12:
        hours += 12
    if period == "AM" and hours == 12:
        hours = 0

    return hours * 60 + minutes


def format_time_slot(minute_of_day: int) -> str:
    """Render minutes from midnight as a canonical time slot ("9:05 AM")"""
    if minute_of_day < 0 or minute_of_day > 1439:
        raise ValueError(f"Minute of day out of range: {minute_of_day}")

    hours, minutes = divmod(minute_of_day, 60)
    period = "AM" if hours < 12 else "PM"
    display_hour = hours % 12 or 12
    return f"{display_hour}:{minutes:02d} {period}"


def compute_window(time_slot: str, duration_minutes: int) -> JobWindow:
    """Start/end minutes for a job; no clamping at midnight"""
    start = parse_time_slot(time_slot)
    return JobWindow(start_minutes=start, end_minutes=start + duration_minutes)


def satisfies_buffer(
    existing_start: int,
    existing_end: int,
    new_start: int,
    new_end: int,
    buffer_minutes: int = MIN_BUFFER_MINUTES,
) -> bool:
    """
    True when the new job starts at least buffer_minutes after the existing one
    ends, or ends at least buffer_minutes before it starts.
    """
    new_starts_after_gap = new_start >= existing_end + buffer_minutes
    new_ends_before_gap = new_end <= existing_start - buffer_minutes
    return new_starts_after_gap or new_ends_before_gap


def validate_time_slot_format(time_slot: str) -> str:
    """
    Guard used before persisting a time slot.

    Returns the trimmed slot; raises InvalidFormatError with a user-facing
    message when it is empty or cannot be parsed.
    """
    trimmed = (time_slot or "").strip()
    if not trimmed:
        raise InvalidFormatError("Time slot is required")
    try:
        parse_time_slot(trimmed)
    except InvalidFormatError as e:
        raise InvalidFormatError(TIME_SLOT_FORMAT_MESSAGE) from e
    return trimmed


def find_buffer_conflict(new_window: JobWindow, day: date, others: Iterable) -> Optional[object]:
    """
    Return the first job in `others` that clashes with `new_window` on `day`.

    Each item needs `date`, `time_slot` and `duration_minutes` attributes
    (a Schedule row). Jobs on other calendar days are never compared, even when
    a late job runs past midnight.
    """
    for other in others:
        if other is None or other.date != day:
            continue
        try:
            other_window = compute_window(other.time_slot, other.duration_minutes)
        except InvalidFormatError:
            logger.warning(
                f"⚠️ Stored time slot {other.time_slot!r} on schedule {getattr(other, 'id', None)} is unparsable"
            )
            if UNPARSABLE_SLOT_BLOCKS_BOOKING:
                return other
            continue

        if not satisfies_buffer(
            other_window.start_minutes,
            other_window.end_minutes,
            new_window.start_minutes,
            new_window.end_minutes,
        ):
            return other
    return None
