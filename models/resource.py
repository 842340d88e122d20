"""
Resource catalog: rooms and event halls.

Rooms and halls share identity, capacity, rate and the bookable flag, and
little else, so a resource is a tagged value with a kind-specific payload.
The booking engine reads the catalog through get_resource() and the
capability helpers below; only the administrative functions mutate it.
"""

import logging
import re
import sqlite3
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Optional, Union

from database import get_db, store_errors
from utils.datetime_helpers import get_clock
from .exceptions import ResourceInUse, ResourceUnavailable, ValidationError
from .interval import Interval, hall_interval
from .policy import BookingPolicy

logger = logging.getLogger(__name__)


class ResourceKind(str, Enum):
    ROOM = 'ROOM'
    HALL = 'HALL'


@dataclass(frozen=True)
class RoomDetails:
    room_number: str
    room_type: str


@dataclass(frozen=True)
class HallDetails:
    name: str


@dataclass(frozen=True)
class Resource:
    """A bookable room or hall."""

    id: int
    kind: ResourceKind
    capacity: int
    rate: float
    is_bookable: bool
    details: Union[RoomDetails, HallDetails]
    description: str = ''
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def is_room(self) -> bool:
        return self.kind is ResourceKind.ROOM

    @property
    def is_hall(self) -> bool:
        return self.kind is ResourceKind.HALL

    @property
    def display_name(self) -> str:
        if self.is_room:
            return f'Room {self.details.room_number}'
        return self.details.name

    def to_dict(self) -> dict:
        data = {
            'id': self.id,
            'kind': self.kind.value,
            'capacity': self.capacity,
            'rate': self.rate,
            'rate_unit': rate_unit_of(self),
            'is_bookable': self.is_bookable,
            'description': self.description,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
        }
        if self.is_room:
            data['room_number'] = self.details.room_number
            data['room_type'] = self.details.room_type
        else:
            data['name'] = self.details.name
        return data


# =============================================================================
# CAPABILITIES
# =============================================================================

def is_bookable(resource: Resource) -> bool:
    return resource.is_bookable


def rate_unit_of(resource: Resource) -> str:
    """'night' for rooms, 'hour' for halls."""
    return 'night' if resource.is_room else 'hour'


def buffer_of(resource: Resource, policy: BookingPolicy) -> timedelta:
    """Maintenance buffer after each booking. Rooms have none."""
    return policy.maintenance_buffer if resource.is_hall else timedelta(0)


def operating_window_of(resource: Resource, policy: BookingPolicy) -> Optional[tuple]:
    """Daily (opening, closing) times for halls; None for rooms."""
    if resource.is_hall:
        return policy.opening_time, policy.closing_time
    return None


def operating_interval(resource: Resource, policy: BookingPolicy, event_date) -> Optional[Interval]:
    """Operating window of a hall anchored to a date."""
    window = operating_window_of(resource, policy)
    if window is None:
        return None
    return hall_interval(event_date, window[0], window[1])


# =============================================================================
# QUERIES
# =============================================================================

def _row_to_resource(row) -> Resource:
    kind = ResourceKind(row['kind'])
    if kind is ResourceKind.ROOM:
        details = RoomDetails(room_number=row['room_number'], room_type=row['room_type'] or '')
    else:
        details = HallDetails(name=row['name'])

    return Resource(
        id=row['id'],
        kind=kind,
        capacity=row['capacity'],
        rate=row['rate'],
        is_bookable=bool(row['is_bookable']),
        details=details,
        description=row['description'] or '',
        created_at=row['created_at'],
        updated_at=row['updated_at'],
    )


def get_resource_by_id(resource_id: int) -> Optional[Resource]:
    """
    Get resource by ID.

    Args:
        resource_id: Resource ID

    Returns:
        Resource or None if not found
    """
    db = get_db()
    with store_errors('resource lookup'):
        row = db.execute('SELECT * FROM resources WHERE id = ?', (resource_id,)).fetchone()
    return _row_to_resource(row) if row else None


def get_resource(resource_id: int, bookable_only: bool = False) -> Resource:
    """
    Get resource by ID or fail.

    Args:
        resource_id: Resource ID
        bookable_only: Also fail when the resource is disabled

    Raises:
        ResourceUnavailable: If not found (or disabled with bookable_only)
    """
    resource = get_resource_by_id(resource_id)
    if resource is None:
        raise ResourceUnavailable('Resource not found', resource_id=resource_id)
    if bookable_only and not is_bookable(resource):
        raise ResourceUnavailable(
            f'{resource.display_name} is not available for booking',
            resource_id=resource_id
        )
    return resource


def get_all_resources(kind: Optional[str] = None, include_disabled: bool = False) -> list:
    """
    Get catalog resources.

    Args:
        kind: 'ROOM' or 'HALL' (optional)
        include_disabled: Include resources with is_bookable = 0

    Returns:
        list of Resource ordered by kind, then room number / hall name
    """
    query = 'SELECT * FROM resources WHERE 1=1'
    params = []

    if kind:
        query += ' AND kind = ?'
        params.append(ResourceKind(kind).value)

    if not include_disabled:
        query += ' AND is_bookable = 1'

    query += ' ORDER BY kind DESC, room_number, name'

    db = get_db()
    with store_errors('resource listing'):
        rows = db.execute(query, params).fetchall()
    return [_row_to_resource(row) for row in rows]


# =============================================================================
# VALIDATION
# =============================================================================

ROOM_NUMBER_PATTERN = re.compile(r'^[A-Z0-9-]{1,10}$')

CAPACITY_LIMITS = {
    ResourceKind.ROOM: (1, 10),
    ResourceKind.HALL: (1, 10000),
}

RATE_LIMITS = (0.01, 10000.00)


def validate_resource_fields(kind: ResourceKind, fields: dict) -> None:
    """
    Validate catalog fields present in ``fields``.

    Raises:
        ValidationError: On the first invalid field
    """
    if 'room_number' in fields and kind is ResourceKind.ROOM:
        room_number = fields['room_number']
        if not room_number or not ROOM_NUMBER_PATTERN.match(room_number):
            raise ValidationError(
                'Room number can only contain uppercase letters, numbers, and hyphens '
                '(max 10 characters)'
            )

    if 'room_type' in fields and kind is ResourceKind.ROOM:
        room_type = fields['room_type']
        if not room_type or len(room_type) > 50:
            raise ValidationError('Room type is required (max 50 characters)')

    if 'name' in fields and kind is ResourceKind.HALL:
        name = fields['name']
        if not name or len(name) > 100:
            raise ValidationError('Hall name is required (max 100 characters)')

    if 'capacity' in fields:
        low, high = CAPACITY_LIMITS[kind]
        capacity = fields['capacity']
        if not isinstance(capacity, int) or isinstance(capacity, bool) or not low <= capacity <= high:
            raise ValidationError(f'Capacity must be between {low} and {high}')

    if 'rate' in fields:
        low, high = RATE_LIMITS
        rate = fields['rate']
        if not isinstance(rate, (int, float)) or isinstance(rate, bool) or not low <= rate <= high:
            raise ValidationError(f'Rate must be between {low:.2f} and {high:.2f}')

    if 'description' in fields and fields['description'] and len(fields['description']) > 500:
        raise ValidationError('Description cannot exceed 500 characters')


def _identity_taken(db, kind: ResourceKind, fields: dict, exclude_id: int = None) -> bool:
    if kind is ResourceKind.ROOM and fields.get('room_number'):
        query = "SELECT id FROM resources WHERE kind = 'ROOM' AND room_number = ?"
        params = [fields['room_number']]
    elif kind is ResourceKind.HALL and fields.get('name'):
        query = "SELECT id FROM resources WHERE kind = 'HALL' AND name = ?"
        params = [fields['name']]
    else:
        return False

    if exclude_id:
        query += ' AND id != ?'
        params.append(exclude_id)

    return db.execute(query, params).fetchone() is not None


def _max_confirmed_occupants(db, resource_id: int) -> int:
    row = db.execute('''
        SELECT COALESCE(MAX(occupant_count), 0) AS booked
        FROM bookings
        WHERE resource_id = ? AND status = 'CONFIRMED'
    ''', (resource_id,)).fetchone()
    return row['booked']


def _duplicate_message(kind: ResourceKind) -> str:
    return 'Room number already exists' if kind is ResourceKind.ROOM else 'Hall name already exists'


# =============================================================================
# ADMINISTRATIVE OPERATIONS
# =============================================================================

def create_resource(
    kind: str,
    capacity: int,
    rate: float,
    room_number: str = None,
    room_type: str = None,
    name: str = None,
    description: str = '',
    is_bookable: bool = True
) -> Resource:
    """
    Add a room or hall to the catalog.

    Args:
        kind: 'ROOM' or 'HALL'
        capacity: Max occupants
        rate: Price per night (rooms) or per hour (halls)
        room_number: Room number (rooms)
        room_type: Room type (rooms)
        name: Hall name (halls)
        description: Free text
        is_bookable: Initial availability flag

    Returns:
        Created Resource

    Raises:
        ValidationError: Invalid fields or duplicate room number / hall name
    """
    kind = ResourceKind(kind)
    fields = {'capacity': capacity, 'rate': rate, 'description': description}
    if kind is ResourceKind.ROOM:
        fields.update(room_number=room_number, room_type=room_type)
    else:
        fields.update(name=name)
    validate_resource_fields(kind, fields)

    db = get_db()
    now = get_clock().now().isoformat(sep=' ', timespec='seconds')

    with store_errors('resource creation'):
        if _identity_taken(db, kind, fields):
            raise ValidationError(_duplicate_message(kind))
        try:
            cursor = db.execute('''
                INSERT INTO resources (
                    kind, room_number, room_type, name, description,
                    capacity, rate, is_bookable, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            ''', (
                kind.value, fields.get('room_number'), fields.get('room_type'),
                fields.get('name'), description or '', capacity, float(rate),
                1 if is_bookable else 0, now
            ))
            db.commit()
        except sqlite3.IntegrityError as e:
            db.rollback()
            raise ValidationError(_duplicate_message(kind)) from e

    logger.info('Created %s resource %s', kind.value, cursor.lastrowid)
    return get_resource(cursor.lastrowid)


UPDATABLE_FIELDS = {
    ResourceKind.ROOM: ('room_number', 'room_type', 'description', 'capacity', 'rate', 'is_bookable'),
    ResourceKind.HALL: ('name', 'description', 'capacity', 'rate', 'is_bookable'),
}


def update_resource(resource_id: int, **kwargs) -> Resource:
    """
    Partially update a catalog entry.

    Rate changes apply to future admissions only; stored booking prices are
    never recomputed.

    Args:
        resource_id: Resource ID
        **kwargs: Fields to update (unknown or None values are ignored)

    Returns:
        Updated Resource

    Raises:
        ResourceUnavailable: Resource not found
        ValidationError: Invalid fields, duplicate room number / hall name,
            or capacity below a confirmed booking's guest count
    """
    resource = get_resource(resource_id)
    allowed = UPDATABLE_FIELDS[resource.kind]
    fields = {k: v for k, v in kwargs.items() if k in allowed and v is not None}

    if not fields:
        return resource

    validate_resource_fields(resource.kind, fields)

    if 'is_bookable' in fields:
        fields['is_bookable'] = 1 if fields['is_bookable'] else 0
    if 'rate' in fields:
        fields['rate'] = float(fields['rate'])

    updates = [f'{field} = ?' for field in fields]
    values = list(fields.values())
    updates.append('updated_at = ?')
    values.append(get_clock().now().isoformat(sep=' ', timespec='seconds'))
    values.append(resource_id)

    db = get_db()
    with store_errors('resource update'):
        # Capacity check and write must see the same bookings
        db.execute('BEGIN IMMEDIATE')
        try:
            if _identity_taken(db, resource.kind, fields, exclude_id=resource_id):
                raise ValidationError(_duplicate_message(resource.kind))
            if 'capacity' in fields:
                booked = _max_confirmed_occupants(db, resource_id)
                if booked > fields['capacity']:
                    raise ValidationError(
                        f'Capacity cannot be lower than {booked} guests '
                        'already booked in a confirmed reservation',
                        resource_id=resource_id
                    )
            db.execute(f'UPDATE resources SET {", ".join(updates)} WHERE id = ?', values)
            db.commit()
        except sqlite3.IntegrityError as e:
            db.rollback()
            raise ValidationError(_duplicate_message(resource.kind)) from e
        except Exception:
            db.rollback()
            raise

    return get_resource(resource_id)


def toggle_resource_bookable(resource_id: int) -> Resource:
    """Flip the bookable flag. Existing bookings are untouched."""
    resource = get_resource(resource_id)
    return update_resource(resource_id, is_bookable=not resource.is_bookable)


def delete_resource(resource_id: int) -> bool:
    """
    Remove a resource from the catalog.
    Only allowed while no CONFIRMED booking references it.

    Args:
        resource_id: Resource ID

    Returns:
        True if deleted

    Raises:
        ResourceUnavailable: Resource not found
        ResourceInUse: Resource holds confirmed bookings
    """
    from .booking_store import has_confirmed_bookings

    resource = get_resource(resource_id)
    db = get_db()

    with store_errors('resource deletion'):
        db.execute('BEGIN IMMEDIATE')
        try:
            if has_confirmed_bookings(resource_id):
                raise ResourceInUse(
                    f'Cannot delete {resource.display_name.lower()} with active reservations',
                    resource_id=resource_id
                )
            cursor = db.execute('DELETE FROM resources WHERE id = ?', (resource_id,))
            db.commit()
        except Exception:
            db.rollback()
            raise

    logger.info('Deleted %s resource %s', resource.kind.value, resource_id)
    return cursor.rowcount > 0
