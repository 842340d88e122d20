"""
Resource catalog API routes.
Room and hall listing, availability calendars, and admin catalog management.
"""

from flask import request
from flask_login import login_required, current_user

from models.availability import get_resource_availability
from models.resource import (
    create_resource, delete_resource, get_all_resources, get_resource,
    toggle_resource_bookable, update_resource
)
from utils.api_response import api_success, api_error
from utils.decorators import admin_required
from utils.messages import get_message
from utils.validators import parse_bool, validate_number

RESOURCE_FIELDS = ('room_number', 'room_type', 'name', 'description', 'capacity', 'rate', 'is_bookable')


def register_routes(bp):
    """Register resource routes on the blueprint."""

    @bp.route('/resources')
    def list_resources():
        """
        List rooms and halls.

        Query params:
            kind: ROOM or HALL (optional)
            include_disabled: Include non-bookable resources (admins only)

        Returns:
            JSON list of resources
        """
        kind = (request.args.get('kind') or '').upper() or None
        if kind not in (None, 'ROOM', 'HALL'):
            return api_error('kind must be ROOM or HALL', 400, code='validation_error')

        include_disabled = (
            parse_bool(request.args.get('include_disabled'))
            and current_user.is_authenticated and current_user.is_admin
        )

        resources = get_all_resources(kind=kind, include_disabled=include_disabled)
        return api_success(data=[r.to_dict() for r in resources], count=len(resources))

    @bp.route('/resources/<int:resource_id>')
    def resource_detail(resource_id):
        """Get one bookable resource (any resource for admins)."""
        is_admin = current_user.is_authenticated and current_user.is_admin
        resource = get_resource(resource_id, bookable_only=not is_admin)
        return api_success(data=resource.to_dict())

    @bp.route('/resources/<int:resource_id>/availability')
    def resource_availability(resource_id):
        """
        Availability calendar from today over the booking horizon.

        Rooms list free nights; halls list continuous free time ranges per day.
        """
        return api_success(data=get_resource_availability(resource_id))

    @bp.route('/resources', methods=['POST'])
    @login_required
    @admin_required
    def create_resource_route():
        """
        Add a room or hall.

        Request body:
            kind: ROOM or HALL
            capacity, rate: Required
            room_number, room_type: Rooms
            name: Halls
            description, is_bookable: Optional
        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return api_error(get_message('json_required'), 400, code='validation_error')

        kind = str(data.get('kind') or '').upper()
        if kind not in ('ROOM', 'HALL'):
            return api_error('kind must be ROOM or HALL', 400, code='validation_error')

        rate, error = validate_number(data.get('rate'), 'Rate')
        if error:
            return api_error(error, 400, code='validation_error')

        resource = create_resource(
            kind=kind,
            capacity=data.get('capacity'),
            rate=rate,
            room_number=data.get('room_number'),
            room_type=data.get('room_type'),
            name=data.get('name'),
            description=data.get('description') or '',
            is_bookable=parse_bool(data.get('is_bookable'), default=True),
        )
        return api_success(
            data=resource.to_dict(),
            message=get_message('resource_created', name=resource.display_name),
            status=201
        )

    @bp.route('/resources/<int:resource_id>', methods=['PATCH'])
    @login_required
    @admin_required
    def update_resource_route(resource_id):
        """Partially update a room or hall."""
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return api_error(get_message('json_required'), 400, code='validation_error')

        fields = {k: data[k] for k in RESOURCE_FIELDS if k in data}
        if 'is_bookable' in fields:
            fields['is_bookable'] = parse_bool(fields['is_bookable'])
        if 'rate' in fields:
            fields['rate'], error = validate_number(fields['rate'], 'Rate', required=False)
            if error:
                return api_error(error, 400, code='validation_error')

        resource = update_resource(resource_id, **fields)
        return api_success(
            data=resource.to_dict(),
            message=get_message('resource_updated', name=resource.display_name)
        )

    @bp.route('/resources/<int:resource_id>/toggle', methods=['POST'])
    @login_required
    @admin_required
    def toggle_resource_route(resource_id):
        """Enable or disable booking of a resource."""
        resource = toggle_resource_bookable(resource_id)
        key = 'resource_enabled' if resource.is_bookable else 'resource_disabled'
        return api_success(data=resource.to_dict(), message=get_message(key, name=resource.display_name))

    @bp.route('/resources/<int:resource_id>', methods=['DELETE'])
    @login_required
    @admin_required
    def delete_resource_route(resource_id):
        """Delete a resource without confirmed bookings."""
        resource = get_resource(resource_id)
        delete_resource(resource_id)
        return api_success(message=get_message('resource_deleted', name=resource.display_name))
