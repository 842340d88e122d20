"""
Tests for the resource catalog.
"""

import pytest
from datetime import date, timedelta

from models.exceptions import ResourceInUse, ResourceUnavailable, ValidationError
from models.policy import BookingPolicy
from models.resource import (
    ResourceKind, buffer_of, create_resource, delete_resource, get_all_resources,
    get_resource, operating_window_of, rate_unit_of, toggle_resource_bookable,
    update_resource
)

pytestmark = pytest.mark.usefixtures('app_ctx')


class TestCapabilities:

    def test_room(self, room):
        assert room.kind is ResourceKind.ROOM
        assert rate_unit_of(room) == 'night'
        assert buffer_of(room, BookingPolicy()) == timedelta(0)
        assert operating_window_of(room, BookingPolicy()) is None

    def test_hall(self, hall):
        assert rate_unit_of(hall) == 'hour'
        assert buffer_of(hall, BookingPolicy()) == timedelta(minutes=30)
        assert operating_window_of(hall, BookingPolicy())[0].hour == 9

    def test_to_dict(self, room, hall):
        assert room.to_dict()['room_number'] == '101'
        assert 'name' not in room.to_dict()
        assert hall.to_dict()['name'] == 'Conference Room A'
        assert hall.to_dict()['rate_unit'] == 'hour'


class TestQueries:

    def test_rooms_listed_before_halls(self):
        resources = get_all_resources()
        kinds = [r.kind for r in resources]
        assert kinds == sorted(kinds, key=lambda k: k is ResourceKind.HALL)
        assert [r.display_name for r in resources[:2]] == ['Room 101', 'Room 102']

    def test_filter_by_kind(self):
        halls = get_all_resources(kind='HALL')
        assert {h.display_name for h in halls} == {'Grand Ballroom', 'Conference Room A'}

    def test_disabled_hidden_by_default(self, room):
        toggle_resource_bookable(room.id)
        assert room.id not in [r.id for r in get_all_resources()]
        assert room.id in [r.id for r in get_all_resources(include_disabled=True)]

    def test_get_missing(self):
        with pytest.raises(ResourceUnavailable, match='not found'):
            get_resource(9999)

    def test_bookable_only(self, room):
        toggle_resource_bookable(room.id)
        assert get_resource(room.id).is_bookable is False
        with pytest.raises(ResourceUnavailable):
            get_resource(room.id, bookable_only=True)


class TestCreateResource:

    def test_create_room(self):
        room = create_resource('ROOM', capacity=2, rate=95.0, room_number='401', room_type='Standard')
        assert room.id is not None
        assert room.display_name == 'Room 401'
        assert room.is_bookable is True
        assert room.created_at == '2025-01-01 10:00:00'

    def test_create_hall(self):
        hall = create_resource('HALL', capacity=120, rate=200.0, name='Garden Pavilion')
        assert hall.kind is ResourceKind.HALL
        assert hall.details.name == 'Garden Pavilion'

    def test_duplicate_room_number(self):
        with pytest.raises(ValidationError, match='Room number already exists'):
            create_resource('ROOM', capacity=2, rate=80.0, room_number='101', room_type='Standard')

    def test_duplicate_hall_name(self):
        with pytest.raises(ValidationError, match='Hall name already exists'):
            create_resource('HALL', capacity=10, rate=80.0, name='Grand Ballroom')

    def test_hall_may_share_room_number_text(self):
        hall = create_resource('HALL', capacity=10, rate=50.0, name='101')
        assert hall.display_name == '101'

    @pytest.mark.parametrize('room_number', ['', 'a1', 'TOO-LONG-NUMBER', '1 01'])
    def test_invalid_room_number(self, room_number):
        with pytest.raises(ValidationError, match='Room number'):
            create_resource('ROOM', capacity=2, rate=80.0, room_number=room_number, room_type='Standard')

    def test_room_capacity_limit(self):
        with pytest.raises(ValidationError, match='between 1 and 10'):
            create_resource('ROOM', capacity=11, rate=80.0, room_number='999', room_type='Dorm')

    def test_rate_must_be_positive(self):
        with pytest.raises(ValidationError, match='Rate'):
            create_resource('HALL', capacity=10, rate=0, name='Free Hall')

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            create_resource('VILLA', capacity=2, rate=80.0, name='Villa')


class TestUpdateResource:

    def test_partial_update(self, room):
        updated = update_resource(room.id, rate=99.5, description='Renovated')
        assert updated.rate == 99.5
        assert updated.description == 'Renovated'
        assert updated.capacity == room.capacity
        assert updated.updated_at == '2025-01-01 10:00:00'

    def test_kind_specific_fields_ignored(self, room):
        updated = update_resource(room.id, name='Not a hall')
        assert updated == room

    def test_rename_to_taken_number(self, room):
        with pytest.raises(ValidationError, match='already exists'):
            update_resource(room.id, room_number='102')

    def test_rate_change_keeps_booked_price(self, room, guest):
        from models.booking import create_booking, get_booking
        booking = create_booking(guest, room.id, 1, check_in=date(2025, 1, 5), check_out=date(2025, 1, 7))
        update_resource(room.id, rate=200.0)
        assert get_booking(guest, booking.id).total_price == 160.0

    def test_toggle_twice(self, hall):
        assert toggle_resource_bookable(hall.id).is_bookable is False
        assert toggle_resource_bookable(hall.id).is_bookable is True

    def test_disable_keeps_bookings(self, room, guest):
        from models.booking import create_booking, get_booking
        booking = create_booking(guest, room.id, 1, check_in=date(2025, 1, 5), check_out=date(2025, 1, 7))
        toggle_resource_bookable(room.id)
        assert get_booking(guest, booking.id).status.value == 'CONFIRMED'

    def test_capacity_below_confirmed_guests(self, room, guest):
        from models.booking import create_booking
        create_booking(guest, room.id, 2, check_in=date(2025, 1, 5), check_out=date(2025, 1, 7))

        with pytest.raises(ValidationError, match='lower than 2 guests'):
            update_resource(room.id, capacity=1)
        assert get_resource(room.id).capacity == 2

    def test_capacity_down_to_largest_booking(self, suite, guest):
        from models.booking import create_booking
        create_booking(guest, suite.id, 2, check_in=date(2025, 1, 5), check_out=date(2025, 1, 7))

        assert update_resource(suite.id, capacity=2).capacity == 2

    def test_capacity_ignores_cancelled(self, room, guest):
        from models.booking import cancel_booking, create_booking
        booking = create_booking(guest, room.id, 2, check_in=date(2025, 1, 5), check_out=date(2025, 1, 7))
        cancel_booking(guest, booking.id)

        assert update_resource(room.id, capacity=1).capacity == 1


class TestDeleteResource:

    def test_delete_unused(self):
        room = create_resource('ROOM', capacity=2, rate=80.0, room_number='501', room_type='Standard')
        assert delete_resource(room.id) is True
        with pytest.raises(ResourceUnavailable):
            get_resource(room.id)

    def test_delete_in_use(self, room, guest):
        from models.booking import create_booking
        create_booking(guest, room.id, 1, check_in=date(2025, 1, 5), check_out=date(2025, 1, 7))

        with pytest.raises(ResourceInUse, match='active reservations'):
            delete_resource(room.id)
        assert get_resource(room.id).id == room.id

    def test_delete_after_cancellation(self, room, guest):
        from models.booking import cancel_booking, create_booking
        booking = create_booking(guest, room.id, 1, check_in=date(2025, 1, 5), check_out=date(2025, 1, 7))
        cancel_booking(guest, booking.id)

        assert delete_resource(room.id) is True

    def test_delete_missing(self):
        with pytest.raises(ResourceUnavailable):
            delete_resource(9999)
