"""
Tests for room availability checking.

Stays are half-open ranges [check_in, check_out): a check-out and a check-in
on the same day do not collide.
"""

from datetime import date

import pytest

from models.reservation_availability import ranges_overlap, is_room_available


def _reservation(rooms, check_in, check_out, reservation_id=1):
    return {
        'reservation_id': reservation_id,
        'check_in_date': check_in,
        'check_out_date': check_out,
        'rooms': [{'room_number': r} for r in rooms],
    }


class TestRangesOverlap:
    """Tests for the overlap predicate."""

    @pytest.mark.parametrize('a, b', [
        (('2024-06-10', '2024-06-15'), ('2024-06-12', '2024-06-18')),
        (('2024-06-10', '2024-06-15'), ('2024-06-15', '2024-06-20')),
        (('2024-06-01', '2024-06-30'), ('2024-06-10', '2024-06-11')),
        (('2024-06-10', '2024-06-12'), ('2024-06-20', '2024-06-22')),
    ])
    def test_overlap_is_symmetric(self, a, b):
        """Swapping the two ranges never changes the answer."""
        assert ranges_overlap(*a, *b) == ranges_overlap(*b, *a)

    def test_same_day_turnover_is_not_overlap(self):
        assert ranges_overlap('2024-06-10', '2024-06-15', '2024-06-15', '2024-06-20') is False
        assert ranges_overlap('2024-06-15', '2024-06-20', '2024-06-10', '2024-06-15') is False

    def test_strict_overlap(self):
        assert ranges_overlap('2024-06-12', '2024-06-18', '2024-06-10', '2024-06-15') is True

    def test_contained_range_overlaps(self):
        assert ranges_overlap('2024-06-11', '2024-06-12', '2024-06-10', '2024-06-15') is True

    def test_accepts_date_objects(self):
        assert ranges_overlap(date(2024, 6, 12), date(2024, 6, 18), '2024-06-10', '2024-06-15') is True


class TestIsRoomAvailable:
    """Tests for the single-room check over supplied reservations."""

    def test_overlapping_stay_same_room_is_unavailable(self):
        active = [_reservation(['101'], '2024-06-10', '2024-06-15')]
        assert is_room_available('101', '2024-06-12', '2024-06-18', active) is False

    def test_turnover_day_is_available(self):
        active = [_reservation(['101'], '2024-06-10', '2024-06-15')]
        assert is_room_available('101', '2024-06-15', '2024-06-18', active) is True

    def test_different_room_never_conflicts(self):
        active = [_reservation(['101'], '2024-06-10', '2024-06-15')]
        assert is_room_available('102', '2024-06-10', '2024-06-15', active) is True

    def test_unset_dates_are_available(self):
        active = [_reservation(['101'], '2024-06-10', '2024-06-15')]
        assert is_room_available('101', None, '2024-06-15', active) is True
        assert is_room_available('101', '2024-06-10', '', active) is True

    def test_multi_room_reservation(self):
        active = [_reservation(['101', '201'], '2024-06-10', '2024-06-15')]
        assert is_room_available('201', '2024-06-14', '2024-06-16', active) is False

    def test_plain_room_numbers_accepted(self):
        active = [{'check_in_date': '2024-06-10', 'check_out_date': '2024-06-15', 'rooms': ['101']}]
        assert is_room_available('101', '2024-06-11', '2024-06-12', active) is False

    def test_no_reservations(self):
        assert is_room_available('101', '2024-06-10', '2024-06-15', []) is True


class TestStoreBackedAvailability:
    """Tests for availability queries against the database."""

    def test_bookable_rooms_exclude_booked_and_maintenance(self, app_ctx):
        from conftest import make_guest
        from models.reservation import create_reservation, get_bookable_rooms
        from models.room import set_room_maintenance

        guest = make_guest()
        create_reservation(guest['guest_id'], '2024-06-10', '2024-06-15', 2, ['101'])
        set_room_maintenance('102', True)

        rooms = [r['room_number'] for r in get_bookable_rooms('2024-06-12', '2024-06-14')]

        assert '101' not in rooms
        assert '102' not in rooms
        assert '103' in rooms

    def test_bookable_rooms_filters(self, app_ctx):
        from models.reservation import get_bookable_rooms

        rooms = get_bookable_rooms('2024-06-12', '2024-06-14', room_type='Deluxe', min_capacity=3)
        assert [r['room_number'] for r in rooms] == ['201', '202']

    def test_cancelled_reservation_frees_dates(self, app_ctx):
        from conftest import make_guest
        from models.reservation import (
            create_reservation, update_reservation_status, find_conflicts
        )

        guest = make_guest()
        reservation = create_reservation(guest['guest_id'], '2024-06-10', '2024-06-15', 2, ['101'])
        assert find_conflicts(['101'], '2024-06-12', '2024-06-14')

        update_reservation_status(reservation['reservation_id'], 'Cancelled')
        assert find_conflicts(['101'], '2024-06-12', '2024-06-14') == []

    def test_find_conflicts_excludes_edited_reservation(self, app_ctx):
        from conftest import make_guest
        from models.reservation import create_reservation, find_conflicts

        guest = make_guest()
        reservation = create_reservation(guest['guest_id'], '2024-06-10', '2024-06-15', 2, ['101'])

        conflicts = find_conflicts(['101'], '2024-06-11', '2024-06-16')
        assert conflicts[0]['reservation_id'] == reservation['reservation_id']
        assert find_conflicts(
            ['101'], '2024-06-11', '2024-06-16',
            exclude_reservation_id=reservation['reservation_id']
        ) == []

    def test_ensure_rooms_bookable_rejects_maintenance(self, app_ctx):
        from models.reservation import ensure_rooms_bookable, RoomUnavailableError
        from models.room import set_room_maintenance

        set_room_maintenance('301', True)
        with pytest.raises(RoomUnavailableError):
            ensure_rooms_bookable(['301'], '2024-06-10', '2024-06-12')

    def test_ensure_rooms_bookable_rejects_capacity(self, app_ctx):
        from models.reservation import ensure_rooms_bookable

        with pytest.raises(ValueError, match='at most 1 guests'):
            ensure_rooms_bookable(['103'], '2024-06-10', '2024-06-12', total_guests=2)

    def test_ensure_rooms_bookable_rejects_unknown_room(self, app_ctx):
        from models.reservation import ensure_rooms_bookable

        with pytest.raises(ValueError, match='Room 999'):
            ensure_rooms_bookable(['999'], '2024-06-10', '2024-06-12')
