"""
Tests for the role capability table.
"""

import pytest

from utils.permissions import (
    CapabilityError,
    can_access_reservation,
    filter_writable_fields,
    get_role_permissions,
    has_permission,
)


class FakeUser:
    is_authenticated = True

    def __init__(self, role, entity_id=1):
        self.role = role
        self.entity_id = entity_id


class Anonymous:
    is_authenticated = False


class TestRolePermissions:
    """Tests for what each role may do."""

    def test_admin_is_superset_of_front_desk(self):
        assert get_role_permissions('front_desk') < get_role_permissions('admin')

    @pytest.mark.parametrize('code', [
        'reservations.delete', 'rooms.create', 'payments.export', 'reports.view', 'accounts.manage',
    ])
    def test_admin_only(self, code):
        assert has_permission(FakeUser('admin'), code) is True
        assert has_permission(FakeUser('front_desk'), code) is False

    def test_front_desk_operates_bookings(self):
        desk = FakeUser('front_desk')
        assert has_permission(desk, 'reservations.create') is True
        assert has_permission(desk, 'reservations.change_status') is True
        assert has_permission(desk, 'rooms.maintenance') is True

    def test_guest_scope(self):
        guest = FakeUser('guest')
        assert has_permission(guest, 'reservations.create_own') is True
        assert has_permission(guest, 'reservations.view') is False
        assert has_permission(guest, 'guests.view') is False

    def test_anonymous_and_unknown_roles(self):
        assert has_permission(Anonymous(), 'rooms.view') is False
        assert has_permission(None, 'rooms.view') is False
        assert has_permission(FakeUser('janitor'), 'rooms.view') is False


class TestWritableFields:
    """Tests for field-level write rules."""

    def test_guest_profile_fields(self):
        data = {'city': 'Manila', 'contact_number': '09171234567'}
        assert filter_writable_fields('guest', 'guests', data) == data

    def test_guest_cannot_set_vip(self):
        with pytest.raises(CapabilityError, match='vip_status'):
            filter_writable_fields('guest', 'guests', {'vip_status': 1})

    def test_front_desk_cannot_edit_rooms(self):
        with pytest.raises(CapabilityError):
            filter_writable_fields('front_desk', 'rooms', {'daily_rate': 1})

    def test_nobody_writes_room_status(self):
        with pytest.raises(CapabilityError):
            filter_writable_fields('admin', 'rooms', {'status': 'Occupied'})


class TestReservationAccess:
    """Tests for reservation visibility."""

    def test_staff_see_everything(self):
        assert can_access_reservation(FakeUser('front_desk'), {'guest_id': 42}) is True

    def test_guest_sees_own_only(self):
        guest = FakeUser('guest', entity_id=7)
        assert can_access_reservation(guest, {'guest_id': 7}) is True
        assert can_access_reservation(guest, {'guest_id': 8}) is False
        assert can_access_reservation(guest, None) is False
