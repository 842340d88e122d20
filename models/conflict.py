"""
Admission rules for a candidate booking.

Decides whether a candidate interval may be booked on a resource given the
resource's confirmed bookings. Pure: no store access, no clock, the policy
is passed in. Horizon checks belong to the booking lifecycle, which runs
them before calling in here.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Type

from .exceptions import (
    BookingError, ResourceUnavailable, SchedulingConflict, ValidationError
)
from .interval import (
    Interval, contains, duration_hours, duration_nights, overlaps, with_buffer
)
from .policy import BookingPolicy
from .resource import Resource, buffer_of, is_bookable, operating_interval


@dataclass(frozen=True)
class Admission:
    """Outcome of an admission check."""

    admissible: bool
    reason: str = ''
    error: Optional[Type[BookingError]] = None
    conflicting_booking_id: Optional[int] = None

    def raise_for_conflict(self) -> None:
        if not self.admissible:
            details = {}
            if self.conflicting_booking_id is not None:
                details['conflicting_booking_id'] = self.conflicting_booking_id
            raise self.error(self.reason, **details)


ADMISSIBLE = Admission(admissible=True)


def _reject(error: Type[BookingError], reason: str, booking_id: int = None) -> Admission:
    return Admission(
        admissible=False, reason=reason, error=error, conflicting_booking_id=booking_id
    )


def check_admissible(
    resource: Resource,
    candidate: Interval,
    occupant_count: int,
    existing: Iterable,
    policy: BookingPolicy
) -> Admission:
    """
    Check a candidate booking against a resource's confirmed bookings.

    Args:
        resource: Resource being booked
        candidate: Interval from room_interval() or hall_interval()
        occupant_count: Guests for the booking
        existing: Confirmed bookings on the resource (objects with
            ``id`` and ``interval``), already excluding the booking being
            modified
        policy: Booking policy

    Returns:
        Admission (admissible, or the reason and the error kind)
    """
    if not is_bookable(resource):
        return _reject(ResourceUnavailable, f'{resource.display_name} is not available for booking')

    if occupant_count < 1:
        return _reject(ValidationError, 'Guest count must be at least 1')

    if occupant_count > resource.capacity:
        return _reject(
            ValidationError,
            f'{resource.display_name} capacity is {resource.capacity} guests'
        )

    if not candidate.is_well_formed:
        if resource.is_room:
            return _reject(ValidationError, 'Check-out date must be after check-in date')
        return _reject(ValidationError, 'End time must be after start time')

    if resource.is_room:
        for booking in existing:
            if overlaps(candidate, booking.interval):
                return _reject(
                    SchedulingConflict,
                    'Room is already booked for the selected dates',
                    booking.id
                )
        return ADMISSIBLE

    try:
        duration_hours(candidate)
    except ValidationError as e:
        return _reject(ValidationError, e.message)

    window = operating_interval(resource, policy, candidate.start.date())
    if not contains(window, candidate):
        return _reject(
            ValidationError,
            'Reservations are only allowed between '
            f'{policy.opening_time:%H:%M} and {policy.closing_time:%H:%M}'
        )

    # Buffer on both sides: the exclusion zone is each event plus its maintenance
    buffer = buffer_of(resource, policy)
    buffered = with_buffer(candidate, buffer)
    for booking in existing:
        if overlaps(buffered, with_buffer(booking.interval, buffer)):
            return _reject(
                SchedulingConflict,
                'Hall is already booked for the selected date and time '
                '(including maintenance period)',
                booking.id
            )

    return ADMISSIBLE


def ensure_admissible(resource, candidate, occupant_count, existing, policy) -> None:
    """Same as check_admissible() but raises the rejection's error."""
    check_admissible(resource, candidate, occupant_count, existing, policy).raise_for_conflict()


def calculate_total_price(resource: Resource, interval: Interval) -> float:
    """
    Price at the resource's current rate.

    Rooms are charged per night, halls per hour of the event itself (the
    maintenance buffer is not charged).
    """
    if resource.is_room:
        units = duration_nights(interval)
    else:
        units = duration_hours(interval)
    return round(resource.rate * units, 2)
