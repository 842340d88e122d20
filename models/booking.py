"""
Booking lifecycle: create, modify, cancel, delete and read bookings.

Every write validates the request shape and the booking horizon first, then
runs the conflict checker against the resource's confirmed bookings inside a
write transaction, so two overlapping requests can never both be admitted.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

from utils.datetime_helpers import get_clock
from .booking_state import (
    BookingStatus, ensure_modifiable, get_status_history, validate_status_transition
)
from .booking_store import (
    Booking, find_bookings_for_resource, get_booking_by_id, insert_booking,
    list_bookings, update_booking, write_transaction
)
from .booking_store import delete_booking as delete_booking_row
from .conflict import calculate_total_price, check_admissible
from .exceptions import (
    BookingNotFound, CancellationWindowExpired, HorizonExceeded,
    InvalidStateTransitionError, PermissionDenied, ValidationError
)
from .interval import Interval, duration_hours, hall_interval, room_interval
from .policy import BookingPolicy, get_policy
from .resource import Resource, ResourceKind, get_resource

logger = logging.getLogger(__name__)

EVENT_TYPE_MAX_LENGTH = 100

ROOM_FIELDS = ('check_in', 'check_out', 'occupant_count')
HALL_FIELDS = ('event_date', 'start_time', 'end_time', 'occupant_count', 'event_type')


@dataclass(frozen=True)
class Principal:
    """The acting user, as far as booking permissions are concerned."""

    user_id: int
    role: str = 'user'
    # Recorded as changed_by on every status history row
    username: str = ''

    @property
    def is_admin(self) -> bool:
        return self.role == 'admin'

    @classmethod
    def from_user(cls, user) -> 'Principal':
        """Build from a Flask-Login user."""
        return cls(user_id=user.id, role=user.role, username=user.username)


# =============================================================================
# VALIDATION HELPERS
# =============================================================================

def _request_kind(check_in=None, check_out=None, event_date=None,
                  start_time=None, end_time=None) -> ResourceKind:
    """Room requests carry stay dates, hall requests an event date and times."""
    if event_date is not None or start_time is not None or end_time is not None:
        if check_in is not None or check_out is not None:
            raise ValidationError('Provide either stay dates or an event date and times, not both')
        return ResourceKind.HALL
    return ResourceKind.ROOM


def _validate_shape(kind: ResourceKind, fields: dict, today: date) -> Interval:
    """
    Validate the request shape and build its interval.

    Raises:
        ValidationError: Missing fields, past start, ill-formed interval,
            fractional hall hours, bad occupant count or event type
    """
    occupant_count = fields.get('occupant_count')
    if not isinstance(occupant_count, int) or isinstance(occupant_count, bool) or occupant_count < 1:
        raise ValidationError('Guest count must be at least 1')

    if kind is ResourceKind.ROOM:
        check_in, check_out = fields.get('check_in'), fields.get('check_out')
        if check_in is None or check_out is None:
            raise ValidationError('Check-in and check-out dates are required')
        if check_in < today:
            raise ValidationError('Check-in date cannot be in the past')
        interval = room_interval(check_in, check_out)
        if not interval.is_well_formed:
            raise ValidationError('Check-out date must be after check-in date')
        return interval

    event_date = fields.get('event_date')
    start_time, end_time = fields.get('start_time'), fields.get('end_time')
    if event_date is None or start_time is None or end_time is None:
        raise ValidationError('Event date, start time and end time are required')
    if event_date < today:
        raise ValidationError('Event date cannot be in the past')
    if len(fields.get('event_type') or '') > EVENT_TYPE_MAX_LENGTH:
        raise ValidationError(f'Event type cannot exceed {EVENT_TYPE_MAX_LENGTH} characters')

    interval = hall_interval(event_date, start_time, end_time)
    duration_hours(interval)
    return interval


def _validate_horizon(kind: ResourceKind, fields: dict, today: date, policy: BookingPolicy) -> None:
    """Both stay dates (or the event date) must fall within today + horizon."""
    max_date = today + timedelta(days=policy.horizon_days)
    if kind is ResourceKind.ROOM:
        last = max(fields['check_in'], fields['check_out'])
    else:
        last = fields['event_date']

    if last > max_date:
        raise HorizonExceeded(
            f'Reservations are only allowed up to {policy.horizon_days} days in advance. '
            f'Maximum allowed date is {max_date.isoformat()}',
            max_date=max_date.isoformat()
        )


def _search_range(interval: Interval, kind: ResourceKind) -> tuple:
    """Dates whose bookings can collide with the interval."""
    if kind is ResourceKind.ROOM:
        return interval.start, interval.end - timedelta(days=1)
    return interval.start.date(), interval.start.date()


def _admit(cursor, resource: Resource, interval: Interval, occupant_count: int,
           policy: BookingPolicy, exclude_booking_id: int = None) -> None:
    """Run the conflict checker against the confirmed bookings read in this transaction."""
    date_from, date_to = _search_range(interval, resource.kind)
    existing = find_bookings_for_resource(
        resource.id, date_from=date_from, date_to=date_to,
        exclude_booking_id=exclude_booking_id, cursor=cursor
    )
    admission = check_admissible(resource, interval, occupant_count, existing, policy)
    if not admission.admissible:
        logger.info('Rejected booking on resource %s: %s', resource.id, admission.reason)
        admission.raise_for_conflict()


def _timestamp(clock) -> str:
    return clock.now().isoformat(sep=' ', timespec='seconds')


# =============================================================================
# ACCESS
# =============================================================================

def _load_booking(principal: Principal, booking_id: int, for_update: bool = True) -> Booking:
    """
    Load a booking the principal may act on.

    Raises:
        BookingNotFound: Missing, or not visible to the principal (reads)
        PermissionDenied: Exists but belongs to someone else (writes)
    """
    booking = get_booking_by_id(booking_id)
    if booking is None:
        raise BookingNotFound('Reservation not found', booking_id=booking_id)

    if not principal.is_admin and booking.owner_id != principal.user_id:
        if for_update:
            logger.warning('User %s denied access to booking %s', principal.user_id, booking_id)
            raise PermissionDenied('You can only manage your own reservations')
        raise BookingNotFound('Reservation not found', booking_id=booking_id)

    return booking


def get_booking(principal: Principal, booking_id: int) -> Booking:
    """Get one booking owned by the principal (any booking for admins)."""
    return _load_booking(principal, booking_id, for_update=False)


def list_my_bookings(principal: Principal) -> list:
    """Principal's bookings, newest first."""
    return list_bookings(owner_id=principal.user_id)


def list_all_bookings(principal: Principal, resource_id: int = None, status: str = None) -> list:
    """
    All bookings, newest first. Admin only.

    Raises:
        PermissionDenied: If the principal is not an admin
    """
    if not principal.is_admin:
        raise PermissionDenied('Administrator access required')
    return list_bookings(resource_id=resource_id, status=status)


def get_booking_history(principal: Principal, booking_id: int) -> list:
    """Status history of a visible booking, newest first."""
    _load_booking(principal, booking_id, for_update=False)
    return get_status_history(booking_id)


# =============================================================================
# CREATE
# =============================================================================

def create_booking(
    principal: Principal,
    resource_id: int,
    occupant_count: int,
    check_in: date = None,
    check_out: date = None,
    event_date: date = None,
    start_time: time = None,
    end_time: time = None,
    event_type: str = '',
    policy: Optional[BookingPolicy] = None,
    clock=None
) -> Booking:
    """
    Create a confirmed booking.

    Rooms take check_in/check_out, halls take event_date/start_time/end_time
    (and an optional event_type).

    Args:
        principal: Booking owner
        resource_id: Room or hall ID
        occupant_count: Number of guests
        policy: Booking policy (default: from app config)
        clock: Clock (default: app clock)

    Returns:
        Created Booking

    Raises:
        ValidationError: Bad request shape, past start, over capacity,
            outside operating hours
        HorizonExceeded: Beyond the booking horizon
        ResourceUnavailable: Resource missing or disabled
        SchedulingConflict: Overlaps a confirmed booking
        StoreUnavailable: Storage failure
    """
    policy = policy or get_policy()
    clock = clock or get_clock()
    today = clock.today()

    kind = _request_kind(check_in, check_out, event_date, start_time, end_time)
    fields = {
        'check_in': check_in, 'check_out': check_out, 'event_date': event_date,
        'start_time': start_time, 'end_time': end_time,
        'occupant_count': occupant_count, 'event_type': event_type,
    }
    interval = _validate_shape(kind, fields, today)
    _validate_horizon(kind, fields, today, policy)

    now = _timestamp(clock)
    with write_transaction('booking creation') as cursor:
        resource = get_resource(resource_id, bookable_only=True)
        if resource.kind is not kind:
            raise ValidationError(
                f'{resource.display_name} is a {resource.kind.value.lower()}; '
                'use check-in/check-out dates for rooms and event date/times for halls'
            )

        _admit(cursor, resource, interval, occupant_count, policy)

        booking = Booking(
            id=None,
            resource_id=resource.id,
            owner_id=principal.user_id,
            kind=kind,
            occupant_count=occupant_count,
            total_price=calculate_total_price(resource, interval),
            status=BookingStatus.CONFIRMED,
            check_in=check_in if kind is ResourceKind.ROOM else None,
            check_out=check_out if kind is ResourceKind.ROOM else None,
            event_date=event_date if kind is ResourceKind.HALL else None,
            start_time=start_time if kind is ResourceKind.HALL else None,
            end_time=end_time if kind is ResourceKind.HALL else None,
            event_type=(event_type or '') if kind is ResourceKind.HALL else '',
            created_at=now,
        )
        booking_id = insert_booking(cursor, booking, principal.username)

    logger.info('Booking %s created on %s for user %s (%.2f)',
                booking_id, resource.display_name, principal.user_id, booking.total_price)
    return get_booking_by_id(booking_id)


# =============================================================================
# MODIFY
# =============================================================================

def modify_booking(
    principal: Principal,
    booking_id: int,
    changes: dict,
    expected_version: int = None,
    policy: Optional[BookingPolicy] = None,
    clock=None
) -> Booking:
    """
    Change the dates, times, guest count or event type of a confirmed booking.

    The working copy is re-validated and re-checked against every other
    confirmed booking on the resource. The price is recomputed at the
    current rate only if the interval changed.

    Args:
        principal: Acting user (owner or admin)
        booking_id: Booking ID
        changes: Subset of check_in, check_out (rooms), event_date,
            start_time, end_time, event_type (halls), occupant_count.
            None values are ignored.
        expected_version: Version the caller last saw (default: current)

    Returns:
        Updated Booking

    Raises:
        InvalidStateTransitionError: Booking is not confirmed
        StaleBookingError: Booking changed since expected_version
        plus every error create_booking() raises
    """
    policy = policy or get_policy()
    clock = clock or get_clock()
    today = clock.today()

    booking = _load_booking(principal, booking_id)
    ensure_modifiable(booking.status)

    allowed = ROOM_FIELDS if booking.kind is ResourceKind.ROOM else HALL_FIELDS
    patch = {k: v for k, v in changes.items() if v is not None}
    unknown = sorted(set(patch) - set(allowed))
    if unknown:
        raise ValidationError(
            f'Cannot change {", ".join(unknown)} on a {booking.kind.value.lower()} reservation'
        )
    if not patch:
        return booking

    working = booking.with_changes(**patch)
    fields = {
        'check_in': working.check_in, 'check_out': working.check_out,
        'event_date': working.event_date, 'start_time': working.start_time,
        'end_time': working.end_time, 'occupant_count': working.occupant_count,
        'event_type': working.event_type,
    }
    interval = _validate_shape(booking.kind, fields, today)
    _validate_horizon(booking.kind, fields, today, policy)

    version = booking.version if expected_version is None else expected_version
    now = _timestamp(clock)

    with write_transaction('booking update') as cursor:
        resource = get_resource(booking.resource_id)
        _admit(cursor, resource, interval, working.occupant_count, policy,
               exclude_booking_id=booking.id)

        if interval != booking.interval:
            working = working.with_changes(total_price=calculate_total_price(resource, interval))

        update_booking(
            cursor, working.with_changes(updated_at=now), version,
            principal.username, action='modified',
            notes=', '.join(sorted(patch))
        )

    logger.info('Booking %s modified by user %s (%s)', booking_id, principal.user_id, ', '.join(sorted(patch)))
    return get_booking_by_id(booking_id)


# =============================================================================
# CANCEL / DELETE
# =============================================================================

def cancel_booking(
    principal: Principal,
    booking_id: int,
    expected_version: int = None,
    policy: Optional[BookingPolicy] = None,
    clock=None
) -> Booking:
    """
    Cancel a confirmed booking.

    The booking starts at 00:00 of its check-in (or event) date; it can only
    be cancelled while that start is more than the lead time away.

    Raises:
        InvalidStateTransitionError: Already cancelled, or completed
        CancellationWindowExpired: Start is within the lead time
        StaleBookingError: Booking changed since expected_version
    """
    policy = policy or get_policy()
    clock = clock or get_clock()

    booking = _load_booking(principal, booking_id)
    validate_status_transition(booking.status, BookingStatus.CANCELLED)

    starts_at = datetime.combine(booking.start_date, time.min)
    if starts_at - clock.now() <= policy.cancellation_lead:
        lead_hours = int(policy.cancellation_lead.total_seconds() // 3600)
        moment = 'check-in' if booking.kind is ResourceKind.ROOM else 'the event date'
        raise CancellationWindowExpired(
            f'Reservations can only be cancelled at least {lead_hours} hours before {moment}',
            booking_id=booking_id
        )

    version = booking.version if expected_version is None else expected_version
    with write_transaction('booking cancellation') as cursor:
        update_booking(
            cursor,
            booking.with_changes(status=BookingStatus.CANCELLED, updated_at=_timestamp(clock)),
            version, principal.username, action='cancelled'
        )

    logger.info('Booking %s cancelled by user %s', booking_id, principal.user_id)
    return get_booking_by_id(booking_id)


def delete_booking(principal: Principal, booking_id: int, force: bool = False) -> bool:
    """
    Permanently remove a booking. Admin only.

    Args:
        principal: Acting admin
        booking_id: Booking ID
        force: Also delete confirmed bookings

    Raises:
        PermissionDenied: Not an admin
        BookingNotFound: Missing booking
        InvalidStateTransitionError: Booking still confirmed and force not set
    """
    if not principal.is_admin:
        raise PermissionDenied('Administrator access required')

    booking = get_booking_by_id(booking_id)
    if booking is None:
        raise BookingNotFound('Reservation not found', booking_id=booking_id)

    if not booking.status.is_terminal and not force:
        raise InvalidStateTransitionError(
            'Only cancelled or completed reservations can be deleted',
            current_status=booking.status.value
        )

    deleted = delete_booking_row(booking_id)
    logger.warning('Booking %s (%s) deleted by admin %s',
                   booking_id, booking.status.value, principal.user_id)
    return deleted
