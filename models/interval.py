"""
Half-open interval value type and predicates.

Room stays are date ranges ``[check_in, check_out)``. Hall events are
time-of-day ranges on one event date; they are anchored to that date as
``datetime`` values so intervals on different dates never overlap and the
maintenance buffer can be added without wrapping past midnight.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any

from .exceptions import ValidationError


ONE_HOUR = timedelta(hours=1)


@dataclass(frozen=True)
class Interval:
    """Closed-open interval ``[start, end)``."""

    start: Any
    end: Any

    @property
    def is_well_formed(self) -> bool:
        return self.start < self.end


# =============================================================================
# CONSTRUCTORS
# =============================================================================

def room_interval(check_in: date, check_out: date) -> Interval:
    """Stay from check-in date up to (not including) check-out date."""
    return Interval(check_in, check_out)


def hall_interval(event_date: date, start_time: time, end_time: time) -> Interval:
    """Event on a single date between two times of day."""
    return Interval(
        datetime.combine(event_date, start_time),
        datetime.combine(event_date, end_time)
    )


# =============================================================================
# PREDICATES
# =============================================================================

def overlaps(a: Interval, b: Interval) -> bool:
    """True iff the intervals share any point. Touching endpoints do not overlap."""
    return a.start < b.end and b.start < a.end


def is_adjacent(a: Interval, b: Interval) -> bool:
    """True iff one interval ends exactly where the other starts."""
    return a.end == b.start or b.end == a.start


def contains(outer: Interval, inner: Interval) -> bool:
    return outer.start <= inner.start and inner.end <= outer.end


# =============================================================================
# ARITHMETIC
# =============================================================================

def with_buffer(interval: Interval, buffer: timedelta) -> Interval:
    """Extend the end of an interval by a buffer. Used for hall checks only."""
    return Interval(interval.start, interval.end + buffer)


def duration_nights(interval: Interval) -> int:
    """
    Number of nights in a room stay.

    Raises:
        ValidationError: If check-out is not after check-in
    """
    if not interval.is_well_formed:
        raise ValidationError('Check-out date must be after check-in date')
    return (interval.end - interval.start).days


def duration_hours(interval: Interval) -> int:
    """
    Number of whole hours in a hall interval.

    Fractional durations are rejected rather than rounded.

    Raises:
        ValidationError: If end is not after start, or duration is not whole hours
    """
    if not interval.is_well_formed:
        raise ValidationError('End time must be after start time')

    hours, remainder = divmod(interval.end - interval.start, ONE_HOUR)
    if remainder:
        raise ValidationError(
            'Reservation duration must be in whole hours (e.g., 2 hours, 3 hours)'
        )
    return hours
