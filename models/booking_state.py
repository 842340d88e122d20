"""
Booking status management.
Handles the status transition table and status history.
"""

from enum import Enum

from database import get_db, store_errors
from .exceptions import InvalidStateTransitionError


# =============================================================================
# CONSTANTS
# =============================================================================

class BookingStatus(str, Enum):
    CONFIRMED = 'CONFIRMED'
    CANCELLED = 'CANCELLED'
    COMPLETED = 'COMPLETED'

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def is_terminal(self) -> bool:
        return not get_valid_transitions(self)


VALID_TRANSITIONS = {
    BookingStatus.CONFIRMED: {BookingStatus.CANCELLED, BookingStatus.COMPLETED},
    BookingStatus.CANCELLED: set(),  # Terminal
    BookingStatus.COMPLETED: set(),  # Terminal, reached when the stay/event has elapsed
}


# =============================================================================
# TRANSITIONS
# =============================================================================

def get_valid_transitions(status) -> set:
    """Statuses reachable from ``status``."""
    return set(VALID_TRANSITIONS[BookingStatus(status)])


def validate_status_transition(current, new) -> None:
    """
    Validate a status change against the transition table.

    Args:
        current: Current status
        new: Requested status

    Raises:
        InvalidStateTransitionError: If the transition is not in the table
    """
    current = BookingStatus(current)
    new = BookingStatus(new)

    if new in get_valid_transitions(current):
        return

    if current is new:
        message = f'Reservation is already {current.value.lower()}'
    elif current.is_terminal:
        message = f'{current.label} reservations cannot be changed'
    else:
        message = f'Cannot change reservation from {current.label} to {new.label}'

    raise InvalidStateTransitionError(message, current_status=current.value, requested_status=new.value)


def ensure_modifiable(current) -> None:
    """Only confirmed bookings can be modified."""
    if BookingStatus(current) is not BookingStatus.CONFIRMED:
        raise InvalidStateTransitionError(
            'Only confirmed reservations can be modified',
            current_status=BookingStatus(current).value
        )


# =============================================================================
# HISTORY
# =============================================================================

def record_status_history(cursor, booking_id: int, status, action: str,
                          changed_by: str, notes: str = '', created_at: str = None) -> None:
    """Append a history row inside the caller's transaction."""
    cursor.execute('''
        INSERT INTO booking_status_history
        (booking_id, status, action, changed_by, notes, created_at)
        VALUES (?, ?, ?, ?, ?, COALESCE(?, CURRENT_TIMESTAMP))
    ''', (booking_id, BookingStatus(status).value, action, changed_by, notes, created_at))


def get_status_history(booking_id: int) -> list:
    """
    Get status change history for a booking.

    Args:
        booking_id: Booking ID

    Returns:
        list: History entries, newest first
    """
    db = get_db()
    with store_errors('status history lookup'):
        rows = db.execute('''
            SELECT * FROM booking_status_history
            WHERE booking_id = ?
            ORDER BY created_at DESC, id DESC
        ''', (booking_id,)).fetchall()
    return [dict(r) for r in rows]
