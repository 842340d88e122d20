"""
Booking persistence.

SQLite-backed store for bookings. Admission runs its read-check-write
sequence inside write_transaction(), which opens a BEGIN IMMEDIATE
transaction: concurrent writers queue on the database write lock, so the
second of two overlapping requests re-reads after the first commits and is
rejected by the conflict checker. Updates are additionally guarded by the
row version (optimistic concurrency for modify/cancel).
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import date, datetime, time
from typing import Iterable, Optional

from database import get_db, store_errors
from .booking_state import BookingStatus, record_status_history
from .exceptions import BookingNotFound, StaleBookingError
from .interval import Interval, hall_interval, room_interval
from .resource import ResourceKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Booking:
    """A stored booking, joined with the identifying fields of its resource."""

    id: Optional[int]
    resource_id: int
    owner_id: int
    kind: ResourceKind
    occupant_count: int
    total_price: float
    status: BookingStatus = BookingStatus.CONFIRMED
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    event_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    event_type: str = ''
    version: int = 1
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    room_number: Optional[str] = None
    room_type: Optional[str] = None
    hall_name: Optional[str] = None
    owner_name: Optional[str] = None

    @property
    def interval(self) -> Interval:
        if self.kind is ResourceKind.ROOM:
            return room_interval(self.check_in, self.check_out)
        return hall_interval(self.event_date, self.start_time, self.end_time)

    @property
    def start_date(self) -> date:
        """Check-in date for rooms, event date for halls."""
        return self.check_in if self.kind is ResourceKind.ROOM else self.event_date

    def with_changes(self, **changes) -> 'Booking':
        return replace(self, **changes)

    def to_dict(self) -> dict:
        data = {
            'id': self.id,
            'resource_id': self.resource_id,
            'kind': self.kind.value,
            'user_id': self.owner_id,
            'user_name': self.owner_name,
            'guest_count': self.occupant_count,
            'total_price': self.total_price,
            'status': self.status.label,
            'version': self.version,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
        }
        if self.kind is ResourceKind.ROOM:
            data.update({
                'room_number': self.room_number,
                'room_type': self.room_type,
                'check_in_date': self.check_in.isoformat(),
                'check_out_date': self.check_out.isoformat(),
            })
        else:
            data.update({
                'hall_name': self.hall_name,
                'event_date': self.event_date.isoformat(),
                'start_time': self.start_time.strftime('%H:%M'),
                'end_time': self.end_time.strftime('%H:%M'),
                'event_type': self.event_type,
            })
        return data


# =============================================================================
# ROW MAPPING
# =============================================================================

BOOKING_SELECT = '''
    SELECT b.*, r.room_number, r.room_type, r.name AS hall_name,
           u.username AS owner_name
    FROM bookings b
    JOIN resources r ON b.resource_id = r.id
    LEFT JOIN users u ON b.owner_id = u.id
'''


def _parse_date(value) -> Optional[date]:
    return date.fromisoformat(value) if value else None


def _parse_time(value) -> Optional[time]:
    return datetime.strptime(value, '%H:%M').time() if value else None


def _row_to_booking(row) -> Booking:
    return Booking(
        id=row['id'],
        resource_id=row['resource_id'],
        owner_id=row['owner_id'],
        kind=ResourceKind(row['kind']),
        occupant_count=row['occupant_count'],
        total_price=row['total_price'],
        status=BookingStatus(row['status']),
        check_in=_parse_date(row['check_in']),
        check_out=_parse_date(row['check_out']),
        event_date=_parse_date(row['event_date']),
        start_time=_parse_time(row['start_time']),
        end_time=_parse_time(row['end_time']),
        event_type=row['event_type'] or '',
        version=row['version'],
        created_at=row['created_at'],
        updated_at=row['updated_at'],
        room_number=row['room_number'],
        room_type=row['room_type'],
        hall_name=row['hall_name'],
        owner_name=row['owner_name'],
    )


def _booking_columns(booking: Booking) -> dict:
    """Column values for the mutable part of a booking."""
    return {
        'check_in': booking.check_in.isoformat() if booking.check_in else None,
        'check_out': booking.check_out.isoformat() if booking.check_out else None,
        'event_date': booking.event_date.isoformat() if booking.event_date else None,
        'start_time': booking.start_time.strftime('%H:%M') if booking.start_time else None,
        'end_time': booking.end_time.strftime('%H:%M') if booking.end_time else None,
        'event_type': booking.event_type or '',
        'occupant_count': booking.occupant_count,
        'total_price': booking.total_price,
        'status': BookingStatus(booking.status).value,
    }


# =============================================================================
# TRANSACTIONS
# =============================================================================

@contextmanager
def write_transaction(operation: str):
    """
    Run a read-check-write sequence under the database write lock.

    Yields:
        sqlite3.Cursor bound to the open transaction

    Raises:
        StoreUnavailable: If the lock cannot be taken within the busy timeout
    """
    db = get_db()
    with store_errors(operation):
        cursor = db.cursor()
        cursor.execute('BEGIN IMMEDIATE')
        try:
            yield cursor
            db.commit()
        except Exception:
            db.rollback()
            raise


# =============================================================================
# QUERIES
# =============================================================================

def find_bookings_for_resource(
    resource_id: int,
    date_from: date = None,
    date_to: date = None,
    exclude_booking_id: int = None,
    statuses: Iterable = (BookingStatus.CONFIRMED,),
    cursor=None
) -> list:
    """
    Get bookings on a resource, optionally restricted to a date range.

    Args:
        resource_id: Resource ID
        date_from: First date of interest (inclusive)
        date_to: Last date of interest (inclusive)
        exclude_booking_id: Booking to leave out (the one being modified)
        statuses: Statuses to include (default: confirmed only)
        cursor: Cursor of an open write transaction, if any

    Returns:
        list of Booking ordered by start
    """
    query = BOOKING_SELECT + ' WHERE b.resource_id = ?'
    params = [resource_id]

    statuses = [BookingStatus(s).value for s in statuses]
    if statuses:
        placeholders = ','.join('?' * len(statuses))
        query += f' AND b.status IN ({placeholders})'
        params.extend(statuses)

    if date_from is not None:
        # Room stays ending on date_from do not occupy it
        query += '''
            AND ((b.kind = 'ROOM' AND b.check_out > ?)
                 OR (b.kind = 'HALL' AND b.event_date >= ?))
        '''
        params.extend([date_from.isoformat(), date_from.isoformat()])

    if date_to is not None:
        query += '''
            AND ((b.kind = 'ROOM' AND b.check_in <= ?)
                 OR (b.kind = 'HALL' AND b.event_date <= ?))
        '''
        params.extend([date_to.isoformat(), date_to.isoformat()])

    if exclude_booking_id:
        query += ' AND b.id != ?'
        params.append(exclude_booking_id)

    query += ' ORDER BY b.check_in, b.event_date, b.start_time'

    with store_errors('booking lookup'):
        cur = cursor or get_db().cursor()
        cur.execute(query, params)
        rows = cur.fetchall()
    return [_row_to_booking(row) for row in rows]


def get_booking_by_id(booking_id: int, cursor=None) -> Optional[Booking]:
    """
    Get booking by ID.

    Returns:
        Booking or None if not found
    """
    with store_errors('booking lookup'):
        cur = cursor or get_db().cursor()
        cur.execute(BOOKING_SELECT + ' WHERE b.id = ?', (booking_id,))
        row = cur.fetchone()
    return _row_to_booking(row) if row else None


def list_bookings(owner_id: int = None, resource_id: int = None, status=None) -> list:
    """
    List bookings, newest first.

    Args:
        owner_id: Only bookings of this user (optional)
        resource_id: Only bookings on this resource (optional)
        status: Only bookings in this status (optional)
    """
    query = BOOKING_SELECT + ' WHERE 1=1'
    params = []

    if owner_id is not None:
        query += ' AND b.owner_id = ?'
        params.append(owner_id)

    if resource_id is not None:
        query += ' AND b.resource_id = ?'
        params.append(resource_id)

    if status is not None:
        query += ' AND b.status = ?'
        params.append(BookingStatus(status).value)

    query += ' ORDER BY b.created_at DESC, b.id DESC'

    with store_errors('booking listing'):
        rows = get_db().execute(query, params).fetchall()
    return [_row_to_booking(row) for row in rows]


def has_confirmed_bookings(resource_id: int) -> bool:
    """True if any confirmed booking references the resource."""
    with store_errors('booking lookup'):
        row = get_db().execute('''
            SELECT COUNT(*) AS count FROM bookings
            WHERE resource_id = ? AND status = ?
        ''', (resource_id, BookingStatus.CONFIRMED.value)).fetchone()
    return row['count'] > 0


# =============================================================================
# WRITES (inside write_transaction)
# =============================================================================

def insert_booking(cursor, booking: Booking, changed_by: str) -> int:
    """
    Insert a new booking and its 'created' history row.

    Returns:
        New booking ID
    """
    columns = _booking_columns(booking)
    columns.update({
        'resource_id': booking.resource_id,
        'owner_id': booking.owner_id,
        'kind': booking.kind.value,
        'version': 1,
        'created_at': booking.created_at,
    })

    names = ', '.join(columns)
    placeholders = ', '.join('?' * len(columns))
    cursor.execute(
        f'INSERT INTO bookings ({names}) VALUES ({placeholders})',
        list(columns.values())
    )
    booking_id = cursor.lastrowid

    record_status_history(
        cursor, booking_id, booking.status, 'created', changed_by,
        created_at=booking.created_at
    )
    return booking_id


def update_booking(cursor, booking: Booking, expected_version: int,
                   changed_by: str, action: str = 'modified', notes: str = '') -> int:
    """
    Write a booking's mutable fields if its version is still expected_version.

    Args:
        cursor: Cursor of the open write transaction
        booking: Working copy with the new values (id, updated_at set)
        expected_version: Version the caller read
        changed_by: Username for the history row
        action: History action label
        notes: History notes

    Returns:
        The new version

    Raises:
        BookingNotFound: Booking no longer exists
        StaleBookingError: Another writer changed the booking first
    """
    columns = _booking_columns(booking)
    assignments = ', '.join(f'{name} = ?' for name in columns)
    params = list(columns.values()) + [booking.updated_at, booking.id, expected_version]

    cursor.execute(f'''
        UPDATE bookings
        SET {assignments}, updated_at = ?, version = version + 1
        WHERE id = ? AND version = ?
    ''', params)

    if cursor.rowcount == 0:
        cursor.execute('SELECT version FROM bookings WHERE id = ?', (booking.id,))
        if cursor.fetchone() is None:
            raise BookingNotFound('Reservation not found', booking_id=booking.id)
        logger.warning('Stale write rejected for booking %s (expected version %s)',
                       booking.id, expected_version)
        raise StaleBookingError(
            'Reservation was changed by another request, reload and try again',
            booking_id=booking.id
        )

    record_status_history(
        cursor, booking.id, booking.status, action, changed_by, notes,
        created_at=booking.updated_at
    )
    return expected_version + 1


def delete_booking(booking_id: int) -> bool:
    """Hard delete a booking row (history rows cascade)."""
    db = get_db()
    with store_errors('booking deletion'):
        cursor = db.execute('DELETE FROM bookings WHERE id = ?', (booking_id,))
        db.commit()
    return cursor.rowcount > 0
