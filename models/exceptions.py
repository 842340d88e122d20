"""
Booking error taxonomy.

Every rejection path in the booking engine raises one of these so callers
(the JSON API, CLI commands, tests) can tell business-rule failures apart
from infrastructure failures. Each error carries a stable ``code`` and the
HTTP status the API answers with.
"""


class BookingError(Exception):
    """Base class for all booking engine errors."""

    code = 'booking_error'
    status_code = 400

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        payload = {'error': self.message, 'code': self.code}
        payload.update(self.details)
        return payload


class ValidationError(BookingError):
    """Malformed input: bad interval shape, fractional hall hours, over capacity."""

    code = 'validation_error'
    status_code = 400


class HorizonExceeded(BookingError):
    """Requested interval reaches past the booking horizon."""

    code = 'horizon_exceeded'
    status_code = 400


class ResourceUnavailable(BookingError):
    """Resource does not exist or is disabled."""

    code = 'resource_unavailable'
    status_code = 404


class SchedulingConflict(BookingError):
    """Overlap with an existing confirmed booking. Retry by resubmitting."""

    code = 'scheduling_conflict'
    status_code = 409


class CancellationWindowExpired(BookingError):
    """Booking starts too soon to be cancelled."""

    code = 'cancellation_window_expired'
    status_code = 422


class InvalidStateTransitionError(BookingError):
    """Status change not present in the transition table."""

    code = 'invalid_state_transition'
    status_code = 409


class StaleBookingError(BookingError):
    """Booking changed underneath a modify/cancel (version mismatch)."""

    code = 'stale_booking'
    status_code = 409


class BookingNotFound(BookingError):
    code = 'booking_not_found'
    status_code = 404


class PermissionDenied(BookingError):
    code = 'permission_denied'
    status_code = 403


class ResourceInUse(BookingError):
    """Resource still referenced by confirmed bookings."""

    code = 'resource_in_use'
    status_code = 409


class StoreUnavailable(BookingError):
    """Persistence failure (locked database, I/O error). Not a business rule."""

    code = 'store_unavailable'
    status_code = 503
