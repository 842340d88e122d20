"""Timezone-aware date/time helpers and the injectable clock."""

from datetime import date, datetime
from zoneinfo import ZoneInfo

from flask import current_app


def get_timezone() -> ZoneInfo:
    """Get the configured timezone."""
    tz_name = current_app.config.get('TIMEZONE', 'UTC')
    return ZoneInfo(tz_name)


def get_today() -> date:
    """Get today's date in the configured timezone."""
    return datetime.now(get_timezone()).date()


def get_now() -> datetime:
    """Get current datetime in the configured timezone (naive, local wall time)."""
    return datetime.now(get_timezone()).replace(tzinfo=None)


class SystemClock:
    """Clock backed by the configured timezone."""

    def today(self) -> date:
        return get_today()

    def now(self) -> datetime:
        return get_now()


class FixedClock:
    """Clock frozen at a given local wall time. Used by tests."""

    def __init__(self, now: datetime):
        self._now = now

    def today(self) -> date:
        return self._now.date()

    def now(self) -> datetime:
        return self._now

    def advance(self, delta) -> None:
        self._now = self._now + delta


def get_clock():
    """Clock for the current app: config['CLOCK'] if set, else the system clock."""
    return current_app.config.get('CLOCK') or SystemClock()


def format_time(value) -> str:
    """Format a time of day as HH:MM."""
    return value.strftime('%H:%M')
