"""
Scheduling domain - time slot arithmetic shared by schedules and assignments.

Time slots are stored as human-readable strings ("9:00 AM", "2:30 PM") and
converted to minutes from local midnight for comparison. Two active jobs of the
same agent on the same calendar day must be separated by MIN_BUFFER_MINUTES.
"""

from .time_calculator import (
    MIN_BUFFER_MINUTES,
    UNPARSABLE_SLOT_BLOCKS_BOOKING,
    JobWindow,
    compute_window,
    find_buffer_conflict,
    format_time_slot,
    parse_time_slot,
    satisfies_buffer,
    validate_time_slot_format,
)

__all__ = [
    "MIN_BUFFER_MINUTES",
    "UNPARSABLE_SLOT_BLOCKS_BOOKING",
    "JobWindow",
    "compute_window",
    "find_buffer_conflict",
    "format_time_slot",
    "parse_time_slot",
    "satisfies_buffer",
    "validate_time_slot_format",
]
