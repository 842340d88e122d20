"""
Booking API routes.
Create, modify, cancel and read room and hall reservations.
"""

from flask import request
from flask_login import login_required

from models.booking import (
    cancel_booking, create_booking, delete_booking, get_booking,
    get_booking_history, list_all_bookings, list_my_bookings, modify_booking
)
from utils.api_response import api_success, api_error
from utils.decorators import admin_required, current_principal
from utils.messages import get_message
from utils.validators import (
    parse_bool, sanitize_input, validate_date, validate_positive_integer, validate_time
)


def _parse_booking_fields(data: dict, partial: bool = False) -> tuple:
    """
    Parse reservation fields from a request body.

    Room requests carry check_in_date/check_out_date, hall requests
    event_date/start_time/end_time. With partial=True only the keys present
    are parsed.

    Returns:
        Tuple of (fields dict, error_message)
    """
    fields = {}

    parsers = (
        ('check_in', 'check_in_date', validate_date, 'Check-in date'),
        ('check_out', 'check_out_date', validate_date, 'Check-out date'),
        ('event_date', 'event_date', validate_date, 'Event date'),
        ('start_time', 'start_time', validate_time, 'Start time'),
        ('end_time', 'end_time', validate_time, 'End time'),
    )
    for name, key, parser, label in parsers:
        if key in data:
            value, error = parser(data[key], label, required=False)
            if error:
                return None, error
            fields[name] = value

    if 'guest_count' in data or not partial:
        value, error = validate_positive_integer(data.get('guest_count'), 'Guest count')
        if error:
            return None, error
        fields['occupant_count'] = value

    if 'event_type' in data:
        fields['event_type'] = sanitize_input(data['event_type'])

    return fields, ''


def _parse_version(data: dict) -> tuple:
    if data.get('version') is None:
        return None, ''
    return validate_positive_integer(data['version'], 'Version')


def register_routes(bp):
    """Register booking routes on the blueprint."""

    @bp.route('/bookings', methods=['POST'])
    @login_required
    def create_booking_route():
        """
        Create a reservation.

        Request body:
            resource_id: Room or hall ID
            guest_count: Number of guests
            check_in_date, check_out_date: YYYY-MM-DD (rooms)
            event_date: YYYY-MM-DD, start_time, end_time: HH:MM,
            event_type: optional (halls)

        Returns:
            JSON with the created reservation (201)
        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return api_error(get_message('json_required'), 400, code='validation_error')

        resource_id, error = validate_positive_integer(data.get('resource_id'), 'Resource')
        if error:
            return api_error(error, 400, code='validation_error')

        fields, error = _parse_booking_fields(data)
        if error:
            return api_error(error, 400, code='validation_error')

        booking = create_booking(current_principal(), resource_id, **fields)
        return api_success(data=booking.to_dict(), message=get_message('booking_created'), status=201)

    @bp.route('/bookings/mine')
    @login_required
    def my_bookings():
        """Current user's reservations, newest first."""
        bookings = list_my_bookings(current_principal())
        return api_success(data=[b.to_dict() for b in bookings], count=len(bookings))

    @bp.route('/bookings')
    @login_required
    @admin_required
    def all_bookings():
        """
        All reservations, newest first (admin).

        Query params:
            resource_id: Filter by resource (optional)
            status: CONFIRMED, CANCELLED or COMPLETED (optional)
        """
        status = (request.args.get('status') or '').upper() or None
        if status not in (None, 'CONFIRMED', 'CANCELLED', 'COMPLETED'):
            return api_error('Unknown status', 400, code='validation_error')

        bookings = list_all_bookings(
            current_principal(),
            resource_id=request.args.get('resource_id', type=int),
            status=status
        )
        return api_success(data=[b.to_dict() for b in bookings], count=len(bookings))

    @bp.route('/bookings/<int:booking_id>')
    @login_required
    def booking_detail(booking_id):
        """One reservation (owner or admin)."""
        return api_success(data=get_booking(current_principal(), booking_id).to_dict())

    @bp.route('/bookings/<int:booking_id>', methods=['PATCH'])
    @login_required
    def modify_booking_route(booking_id):
        """
        Modify a confirmed reservation.

        Request body (all optional):
            check_in_date, check_out_date (rooms)
            event_date, start_time, end_time, event_type (halls)
            guest_count
            version: Version last seen; stale writes are rejected
        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return api_error(get_message('json_required'), 400, code='validation_error')

        changes, error = _parse_booking_fields(data, partial=True)
        if error:
            return api_error(error, 400, code='validation_error')

        version, error = _parse_version(data)
        if error:
            return api_error(error, 400, code='validation_error')

        booking = modify_booking(current_principal(), booking_id, changes, expected_version=version)
        return api_success(data=booking.to_dict(), message=get_message('booking_updated'))

    @bp.route('/bookings/<int:booking_id>/cancel', methods=['POST'])
    @login_required
    def cancel_booking_route(booking_id):
        """Cancel a confirmed reservation at least 24 hours before it starts."""
        data = request.get_json(silent=True) or {}
        version, error = _parse_version(data if isinstance(data, dict) else {})
        if error:
            return api_error(error, 400, code='validation_error')

        booking = cancel_booking(current_principal(), booking_id, expected_version=version)
        return api_success(data=booking.to_dict(), message=get_message('booking_cancelled'))

    @bp.route('/bookings/<int:booking_id>', methods=['DELETE'])
    @login_required
    @admin_required
    def delete_booking_route(booking_id):
        """
        Permanently delete a reservation (admin).

        Query params:
            force: Also delete confirmed reservations
        """
        delete_booking(current_principal(), booking_id, force=parse_bool(request.args.get('force')))
        return api_success(message=get_message('booking_deleted'))

    @bp.route('/bookings/<int:booking_id>/history')
    @login_required
    def booking_history(booking_id):
        """Status history of a reservation, newest first."""
        history = get_booking_history(current_principal(), booking_id)
        return api_success(data=history, count=len(history))
