"""
Tests for booking status transitions and status history.
"""

import pytest

from models.booking_state import (
    VALID_TRANSITIONS, BookingStatus, ensure_modifiable, get_valid_transitions,
    validate_status_transition
)
from models.exceptions import InvalidStateTransitionError


class TestTransitionTable:

    def test_confirmed_can_end_either_way(self):
        assert get_valid_transitions('CONFIRMED') == {BookingStatus.CANCELLED, BookingStatus.COMPLETED}

    def test_reachable_set_is_a_copy(self):
        get_valid_transitions('CONFIRMED').clear()
        assert VALID_TRANSITIONS[BookingStatus.CONFIRMED]

    def test_terminal_states(self):
        assert BookingStatus.CANCELLED.is_terminal
        assert BookingStatus.COMPLETED.is_terminal
        assert not BookingStatus.CONFIRMED.is_terminal

    def test_every_status_in_table(self):
        assert set(VALID_TRANSITIONS) == set(BookingStatus)

    def test_labels(self):
        assert BookingStatus.CONFIRMED.label == 'Confirmed'
        assert BookingStatus.CANCELLED.label == 'Cancelled'


class TestValidateTransition:

    @pytest.mark.parametrize('target', ['CANCELLED', 'COMPLETED'])
    def test_allowed(self, target):
        validate_status_transition('CONFIRMED', target)

    def test_same_status(self):
        with pytest.raises(InvalidStateTransitionError, match='already cancelled') as exc_info:
            validate_status_transition(BookingStatus.CANCELLED, BookingStatus.CANCELLED)
        assert exc_info.value.details['current_status'] == 'CANCELLED'

    def test_out_of_terminal(self):
        with pytest.raises(InvalidStateTransitionError, match='Completed reservations cannot be changed'):
            validate_status_transition('COMPLETED', 'CANCELLED')

    def test_back_to_confirmed(self):
        with pytest.raises(InvalidStateTransitionError):
            validate_status_transition('CANCELLED', 'CONFIRMED')

    def test_unknown_status(self):
        with pytest.raises(ValueError):
            validate_status_transition('CONFIRMED', 'PENDING')


class TestEnsureModifiable:

    def test_confirmed(self):
        ensure_modifiable('CONFIRMED')

    @pytest.mark.parametrize('status', ['CANCELLED', 'COMPLETED'])
    def test_not_confirmed(self, status):
        with pytest.raises(InvalidStateTransitionError, match='Only confirmed'):
            ensure_modifiable(status)


@pytest.mark.usefixtures('app_ctx')
class TestStatusHistory:

    def test_created_entry(self, room, guest):
        from datetime import date
        from models.booking import create_booking
        from models.booking_state import get_status_history

        booking = create_booking(guest, room.id, 1, check_in=date(2025, 1, 5), check_out=date(2025, 1, 6))
        history = get_status_history(booking.id)

        assert len(history) == 1
        assert history[0]['action'] == 'created'
        assert history[0]['status'] == 'CONFIRMED'
        assert history[0]['created_at'] == '2025-01-01 10:00:00'

    def test_history_removed_with_booking(self, room, guest, admin):
        from datetime import date
        from models.booking import create_booking, delete_booking
        from models.booking_state import get_status_history

        booking = create_booking(guest, room.id, 1, check_in=date(2025, 1, 5), check_out=date(2025, 1, 6))
        delete_booking(admin, booking.id, force=True)

        assert get_status_history(booking.id) == []
