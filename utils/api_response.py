"""
Standardized API response helpers.

Provides consistent JSON response format across all API endpoints:

    Success:  {"success": true, "data": {...}, "message": "..."}
    Error:    {"success": false, "error": "...", "code": "scheduling_conflict"}

Usage:
    from utils.api_response import api_success, api_error

    return api_success(data=booking.to_dict(), message='Reservation created', status=201)
    return api_error('Guest count is required', status=400)
"""

from flask import jsonify
from typing import Any


def api_success(
    data: Any = None,
    message: str | None = None,
    status: int = 200,
    **extra_fields: Any
) -> tuple:
    """
    Build a standardized success JSON response.

    Args:
        data: Optional payload to include as 'data' key.
        message: Optional success message.
        status: HTTP status code (default 200).
        **extra_fields: Additional top-level fields (e.g., count).

    Returns:
        Tuple of (Response, status_code)
    """
    response = {'success': True}

    if data is not None:
        response['data'] = data

    if message:
        response['message'] = message

    if extra_fields:
        response.update(extra_fields)

    return jsonify(response), status


def api_error(error: str, status: int = 400, code: str = 'bad_request', **extra_fields: Any) -> tuple:
    """
    Build a standardized error JSON response.

    Args:
        error: Error message.
        status: HTTP status code (default 400).
        code: Machine-readable error kind.
        **extra_fields: Additional top-level fields (e.g., conflicting_booking_id).

    Returns:
        Tuple of (Response, status_code)
    """
    response = {'success': False, 'error': error, 'code': code}

    if extra_fields:
        response.update(extra_fields)

    return jsonify(response), status


def booking_error_response(exc) -> tuple:
    """Render a BookingError with its code, HTTP status and details."""
    return api_error(exc.message, exc.status_code, code=exc.code, **exc.details)
