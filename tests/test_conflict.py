"""
Tests for admission rules and pricing.
These run without a database: resources and bookings are plain values.
"""

import pytest
from collections import namedtuple
from datetime import date, time, timedelta

from models.conflict import (
    ADMISSIBLE, calculate_total_price, check_admissible, ensure_admissible
)
from models.exceptions import ResourceUnavailable, SchedulingConflict, ValidationError
from models.interval import hall_interval, room_interval
from models.policy import BookingPolicy
from models.resource import HallDetails, Resource, ResourceKind, RoomDetails

Existing = namedtuple('Existing', 'id interval')

POLICY = BookingPolicy()

ROOM = Resource(
    id=1, kind=ResourceKind.ROOM, capacity=2, rate=80.0, is_bookable=True,
    details=RoomDetails(room_number='101', room_type='Standard')
)

HALL = Resource(
    id=2, kind=ResourceKind.HALL, capacity=40, rate=75.0, is_bookable=True,
    details=HallDetails(name='Conference Room A')
)

EVENT_DATE = date(2025, 1, 10)


def stay(check_in_day, check_out_day):
    return room_interval(date(2025, 1, check_in_day), date(2025, 1, check_out_day))


def event(start, end, on=EVENT_DATE):
    return hall_interval(on, start, end)


class TestRoomAdmission:

    def test_empty_room_admits(self):
        assert check_admissible(ROOM, stay(1, 3), 2, [], POLICY) == ADMISSIBLE

    def test_adjacent_stays_admit(self):
        existing = [Existing(10, stay(1, 3))]
        assert check_admissible(ROOM, stay(3, 5), 1, existing, POLICY).admissible
        assert check_admissible(ROOM, room_interval(date(2024, 12, 30), date(2025, 1, 1)),
                                1, existing, POLICY).admissible

    def test_overlap_is_conflict(self):
        existing = [Existing(10, stay(1, 3))]
        admission = check_admissible(ROOM, stay(2, 4), 1, existing, POLICY)
        assert not admission.admissible
        assert admission.error is SchedulingConflict
        assert admission.conflicting_booking_id == 10
        assert admission.reason == 'Room is already booked for the selected dates'

    def test_over_capacity(self):
        admission = check_admissible(ROOM, stay(1, 3), 3, [], POLICY)
        assert admission.error is ValidationError
        assert 'capacity is 2' in admission.reason

    def test_zero_occupants(self):
        assert check_admissible(ROOM, stay(1, 3), 0, [], POLICY).error is ValidationError

    def test_ill_formed_stay(self):
        admission = check_admissible(ROOM, stay(3, 3), 1, [], POLICY)
        assert admission.error is ValidationError

    def test_not_bookable(self):
        disabled = Resource(
            id=3, kind=ResourceKind.ROOM, capacity=2, rate=80.0, is_bookable=False,
            details=RoomDetails(room_number='102', room_type='Standard')
        )
        admission = check_admissible(disabled, stay(1, 3), 1, [], POLICY)
        assert admission.error is ResourceUnavailable

    def test_unavailable_checked_before_conflict(self):
        disabled = Resource(
            id=3, kind=ResourceKind.ROOM, capacity=2, rate=80.0, is_bookable=False,
            details=RoomDetails(room_number='102', room_type='Standard')
        )
        existing = [Existing(10, stay(1, 3))]
        assert check_admissible(disabled, stay(1, 3), 1, existing, POLICY).error is ResourceUnavailable


class TestHallAdmission:

    def test_maintenance_buffer(self):
        existing = [Existing(20, event(time(12), time(14)))]

        at_1415 = check_admissible(HALL, event(time(14, 15), time(15, 15)), 10, existing, POLICY)
        assert at_1415.error is SchedulingConflict

        at_1430 = check_admissible(HALL, event(time(14, 30), time(15, 30)), 10, existing, POLICY)
        assert at_1430.admissible

    def test_buffer_conflict_on_whole_hour_start(self):
        existing = [Existing(20, event(time(12), time(14)))]
        admission = check_admissible(HALL, event(time(14), time(16)), 10, existing, POLICY)
        assert admission.error is SchedulingConflict
        assert 'maintenance period' in admission.reason
        assert admission.conflicting_booking_id == 20

    def test_buffer_applies_before_existing(self):
        existing = [Existing(20, event(time(15), time(17)))]
        admission = check_admissible(HALL, event(time(13), time(15)), 10, existing, POLICY)
        assert admission.error is SchedulingConflict

    def test_gap_of_one_hour_admits(self):
        existing = [Existing(20, event(time(15), time(17)))]
        assert check_admissible(HALL, event(time(12), time(14)), 10, existing, POLICY).admissible

    def test_other_date_does_not_conflict(self):
        existing = [Existing(20, event(time(12), time(14), on=EVENT_DATE + timedelta(days=1)))]
        assert check_admissible(HALL, event(time(12), time(14)), 10, existing, POLICY).admissible

    def test_fractional_hours_rejected(self):
        admission = check_admissible(HALL, event(time(10), time(11, 30)), 10, [], POLICY)
        assert admission.error is ValidationError
        assert 'whole hours' in admission.reason

    def test_outside_operating_window(self):
        early = check_admissible(HALL, event(time(8), time(10)), 10, [], POLICY)
        late = check_admissible(HALL, event(time(21), time(23)), 10, [], POLICY)
        assert early.error is ValidationError
        assert late.error is ValidationError
        assert 'between 09:00 and 22:00' in early.reason

    def test_full_operating_day(self):
        assert check_admissible(HALL, event(time(9), time(22)), 40, [], POLICY).admissible

    def test_custom_policy_buffer(self):
        policy = BookingPolicy(maintenance_buffer=timedelta(hours=1))
        existing = [Existing(20, event(time(12), time(14)))]
        assert not check_admissible(HALL, event(time(14, 30), time(15, 30)), 1, existing, policy).admissible
        assert check_admissible(HALL, event(time(15), time(16)), 1, existing, policy).admissible

    def test_ensure_admissible_raises(self):
        existing = [Existing(20, event(time(12), time(14)))]
        with pytest.raises(SchedulingConflict) as exc_info:
            ensure_admissible(HALL, event(time(13), time(15)), 10, existing, POLICY)
        assert exc_info.value.details['conflicting_booking_id'] == 20


class TestPricing:

    def test_room_price_per_night(self):
        assert calculate_total_price(ROOM, stay(1, 4)) == 240.0

    def test_hall_price_per_hour(self):
        assert calculate_total_price(HALL, event(time(10), time(13))) == 225.0

    def test_price_rounded_to_cents(self):
        cheap = Resource(
            id=4, kind=ResourceKind.ROOM, capacity=1, rate=33.333, is_bookable=True,
            details=RoomDetails(room_number='9', room_type='Single')
        )
        assert calculate_total_price(cheap, stay(1, 4)) == 100.0
