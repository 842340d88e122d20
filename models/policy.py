"""
Booking policy: horizon, hall operating window, maintenance buffer,
cancellation lead time.

The policy is an immutable value passed explicitly into the conflict checker
and the availability builders, so tests can vary it per scenario. The running
application builds it from the Flask config.
"""

from dataclasses import dataclass
from datetime import datetime, time, timedelta

from flask import current_app


@dataclass(frozen=True)
class BookingPolicy:
    """Immutable set of booking rules."""

    horizon_days: int = 30
    opening_time: time = time(9, 0)
    closing_time: time = time(22, 0)
    maintenance_buffer: timedelta = timedelta(minutes=30)
    cancellation_lead: timedelta = timedelta(hours=24)
    slot_length: timedelta = timedelta(hours=1)

    @classmethod
    def from_config(cls, config) -> 'BookingPolicy':
        """
        Build a policy from a Flask config mapping.

        Args:
            config: Mapping with BOOKING_* / HALL_* / CANCELLATION_* keys

        Returns:
            BookingPolicy with defaults for any missing key
        """
        defaults = cls()
        return cls(
            horizon_days=int(config.get('BOOKING_HORIZON_DAYS', defaults.horizon_days)),
            opening_time=_parse_time(config.get('HALL_OPENING_TIME'), defaults.opening_time),
            closing_time=_parse_time(config.get('HALL_CLOSING_TIME'), defaults.closing_time),
            maintenance_buffer=timedelta(
                minutes=int(config.get('HALL_MAINTENANCE_MINUTES', 30))
            ),
            cancellation_lead=timedelta(
                hours=int(config.get('CANCELLATION_LEAD_HOURS', 24))
            ),
            slot_length=timedelta(
                minutes=int(config.get('HALL_SLOT_MINUTES', 60))
            ),
        )


def _parse_time(value, default: time) -> time:
    if not value:
        return default
    if isinstance(value, time):
        return value
    return datetime.strptime(value, '%H:%M').time()


def get_policy() -> BookingPolicy:
    """Policy for the current Flask application."""
    return BookingPolicy.from_config(current_app.config)
