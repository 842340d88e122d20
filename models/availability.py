"""
Availability calendars for rooms and halls.

The builders are pure functions of the resource, its confirmed bookings,
today's date and the policy, so the calendar can be recomputed on every
query. Only dates (rooms) or free time ranges (halls) are published; fully
booked days are left out.

The hall calendar marks a slot busy only where it overlaps an event itself.
The maintenance buffer is not shown, so a free range that starts right
after an event can still be refused at admission.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Iterator, Optional

from utils.datetime_helpers import format_time, get_clock
from .booking_store import find_bookings_for_resource
from .interval import Interval, overlaps
from .policy import BookingPolicy, get_policy
from .resource import Resource, get_resource, operating_interval, rate_unit_of


@dataclass(frozen=True)
class RoomDay:
    date: date
    price: float

    @property
    def day_of_week(self) -> str:
        return self.date.strftime('%A')

    def to_dict(self) -> dict:
        return {
            'date': self.date.isoformat(),
            'is_available': True,
            'price': self.price,
            'day_of_week': self.day_of_week,
        }


@dataclass(frozen=True)
class FreeSlot:
    """Maximal run of free hall time on one date."""

    interval: Interval

    @property
    def hours(self) -> float:
        return (self.interval.end - self.interval.start) / timedelta(hours=1)

    @property
    def display_time(self) -> str:
        label = f'{format_time(self.interval.start)} - {format_time(self.interval.end)}'
        if self.hours == 1:
            return label
        return f'{label} ({self.hours:g} hours)'

    def to_dict(self) -> dict:
        return {
            'start_time': format_time(self.interval.start),
            'end_time': format_time(self.interval.end),
            'is_available': True,
            'hours': self.hours,
            'display_time': self.display_time,
        }


@dataclass(frozen=True)
class HallDay:
    date: date
    opening_time: object
    closing_time: object
    slots: tuple

    @property
    def day_of_week(self) -> str:
        return self.date.strftime('%A')

    @property
    def available_hours(self) -> float:
        return sum(slot.hours for slot in self.slots)

    def to_dict(self) -> dict:
        return {
            'date': self.date.isoformat(),
            'day_of_week': self.day_of_week,
            'operating_hours_start': format_time(self.opening_time),
            'operating_hours_end': format_time(self.closing_time),
            'time_slots': [slot.to_dict() for slot in self.slots],
            'available_hours': self.available_hours,
        }


def _horizon_dates(today: date, horizon_days: int) -> Iterator[date]:
    """today through today + horizon_days, inclusive."""
    for offset in range(horizon_days + 1):
        yield today + timedelta(days=offset)


# =============================================================================
# ROOMS
# =============================================================================

def build_room_availability(
    resource: Resource,
    bookings: Iterable,
    today: date,
    horizon_days: int
) -> Iterator[RoomDay]:
    """
    Lazily yield the free nights of a room.

    A date is free iff no booking has check_in <= date < check_out.

    The last date, today + horizon_days, is published like any other, but a
    stay starting that night checks out past the horizon, so admission
    refuses it. Only stays ending by that date can be booked.
    """
    intervals = [b.interval for b in bookings]
    for day in _horizon_dates(today, horizon_days):
        if not any(i.start <= day < i.end for i in intervals):
            yield RoomDay(date=day, price=resource.rate)


# =============================================================================
# HALLS
# =============================================================================

def _day_slots(window: Interval, slot_length: timedelta) -> Iterator[Interval]:
    """Partition the operating window into fixed slots, clipping the last one."""
    start = window.start
    while start < window.end:
        end = min(start + slot_length, window.end)
        yield Interval(start, end)
        start = end


def _merge_free(slots: Iterable[Interval]) -> list:
    """Run-length merge of adjacent free slots into maximal intervals."""
    merged = []
    for slot in slots:
        if merged and merged[-1].end == slot.start:
            merged[-1] = Interval(merged[-1].start, slot.end)
        else:
            merged.append(slot)
    return merged


def build_hall_day(
    resource: Resource,
    day_bookings: Iterable,
    day: date,
    policy: BookingPolicy
) -> Optional[HallDay]:
    """Free ranges of a hall on one date, or None if the day is fully booked."""
    window = operating_interval(resource, policy, day)
    intervals = [b.interval for b in day_bookings]

    free = (
        slot for slot in _day_slots(window, policy.slot_length)
        if not any(overlaps(slot, i) for i in intervals)
    )
    merged = _merge_free(free)
    if not merged:
        return None

    return HallDay(
        date=day,
        opening_time=policy.opening_time,
        closing_time=policy.closing_time,
        slots=tuple(FreeSlot(i) for i in merged),
    )


def build_hall_availability(
    resource: Resource,
    bookings: Iterable,
    today: date,
    horizon_days: int,
    policy: BookingPolicy
) -> Iterator[HallDay]:
    """Lazily yield, per date, the continuous free ranges of a hall."""
    by_date = {}
    for booking in bookings:
        by_date.setdefault(booking.interval.start.date(), []).append(booking)

    for day in _horizon_dates(today, horizon_days):
        hall_day = build_hall_day(resource, by_date.get(day, ()), day, policy)
        if hall_day is not None:
            yield hall_day


def build_availability(
    resource: Resource,
    bookings: Iterable,
    today: date,
    horizon_days: int,
    policy: BookingPolicy
) -> Iterator:
    """Dispatch to the room or hall builder."""
    if resource.is_room:
        return build_room_availability(resource, bookings, today, horizon_days)
    return build_hall_availability(resource, bookings, today, horizon_days, policy)


# =============================================================================
# PUBLISHED CALENDAR
# =============================================================================

def get_resource_availability(resource_id: int, policy: BookingPolicy = None, clock=None) -> dict:
    """
    Availability calendar of a bookable resource from today over the horizon.

    Args:
        resource_id: Room or hall ID
        policy: Booking policy (default: from app config)
        clock: Clock (default: app clock)

    Returns:
        dict: Resource summary plus the sparse daily_availability list

    Raises:
        ResourceUnavailable: Resource missing or disabled
    """
    policy = policy or get_policy()
    clock = clock or get_clock()
    today = clock.today()
    end_date = today + timedelta(days=policy.horizon_days)

    resource = get_resource(resource_id, bookable_only=True)
    bookings = find_bookings_for_resource(resource.id, date_from=today, date_to=end_date)
    days = list(build_availability(resource, bookings, today, policy.horizon_days, policy))

    result = {
        'resource_id': resource.id,
        'kind': resource.kind.value,
        'capacity': resource.capacity,
        'rate': resource.rate,
        'rate_unit': rate_unit_of(resource),
        'start_date': today.isoformat(),
        'end_date': end_date.isoformat(),
        'total_days': policy.horizon_days + 1,
        'daily_availability': [day.to_dict() for day in days],
    }

    if resource.is_room:
        result.update({
            'room_number': resource.details.room_number,
            'room_type': resource.details.room_type,
            'available_nights': len(days),
        })
    else:
        result.update({
            'hall_name': resource.details.name,
            'operating_hours_start': format_time(policy.opening_time),
            'operating_hours_end': format_time(policy.closing_time),
            'total_available_hours': sum(day.available_hours for day in days),
        })

    return result
