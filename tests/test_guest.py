"""
Tests for guest records, self-registration and walk-in creation.
"""

import pytest

from conftest import make_guest
from database import ConstraintError
from models.guest import (
    register_guest,
    create_guest,
    create_walk_in_guest,
    search_guests,
    update_guest,
    update_guest_profile,
    delete_guest,
)
from models.reservation import create_reservation
from models.user import check_password
from utils.validators import validate_password


class TestRegistration:
    """Tests for guest self-registration."""

    def test_register_hashes_password(self, app_ctx):
        guest = register_guest(
            'maria.clara', 'Secret1!', 'maria@example.com', 'Maria', 'Clara',
            contact_number='0917 555 1234'
        )

        assert guest['is_walk_in'] == 0
        assert guest['password_hash'] != 'Secret1!'
        assert check_password(guest, 'Secret1!')

    def test_register_rejects_weak_password(self, app_ctx):
        with pytest.raises(ValueError, match='Password must'):
            register_guest('maria.clara', 'secret', 'maria@example.com', 'Maria', 'Clara')

    def test_register_rejects_bad_email(self, app_ctx):
        with pytest.raises(ValueError, match='Invalid email'):
            register_guest('maria.clara', 'Secret1!', 'not-an-email', 'Maria', 'Clara')

    def test_username_unique_across_accounts(self, app_ctx):
        """A guest cannot take a staff account's username."""
        with pytest.raises(ValueError, match='Username already exists'):
            register_guest('admin', 'Secret1!', 'maria@example.com', 'Maria', 'Clara')

    def test_username_unique_across_guests(self, app_ctx):
        make_guest()
        with pytest.raises(ValueError, match='Username already exists'):
            register_guest('juan.delacruz', 'Secret1!', 'juan2@example.com', 'Juan', 'Dela Cruz')


class TestWalkIn:
    """Tests for front-desk walk-in guests."""

    def test_generated_credentials(self, app_ctx):
        guest, password = create_walk_in_guest(
            'Juan', 'Dela Cruz', 'juan@example.com', '09171234567', city='Manila'
        )

        assert guest['username'].startswith('juan.delacruz.')
        assert len(guest['username'].rsplit('.', 1)[1]) == 6
        assert guest['is_walk_in'] == 1
        assert guest['city'] == 'Manila'
        assert validate_password(password)[0]
        assert check_password(guest, password)

    def test_contact_number_required(self, app_ctx):
        with pytest.raises(ValueError, match='contact_number'):
            create_walk_in_guest('Juan', 'Dela Cruz', 'juan@example.com', '')

    def test_staff_created_guest_with_username(self, app_ctx):
        guest = create_guest(
            {'first_name': 'Ana', 'last_name': 'Reyes', 'email': 'ana@example.com', 'vip_status': 1},
            username='ana.reyes', password='Welcome1!'
        )
        assert guest['username'] == 'ana.reyes'
        assert guest['vip_status'] == 1
        assert check_password(guest, 'Welcome1!')


class TestGuestMaintenance:
    """Tests for search, edits and deletion."""

    def test_search_by_name_and_contact(self, app_ctx):
        make_guest()
        make_guest(username='maria.clara', first_name='Maria', last_name='Clara',
                   contact_number='09995551234')

        assert [g['first_name'] for g in search_guests('clara')] == ['Maria']
        assert [g['first_name'] for g in search_guests('0999')] == ['Maria']
        assert len(search_guests('')) == 2

    def test_update_guest(self, app_ctx):
        guest = make_guest()
        updated = update_guest(guest['guest_id'], {'city': 'Cebu', 'loyalty_points': 120})

        assert updated['city'] == 'Cebu'
        assert updated['loyalty_points'] == 120

    def test_profile_update_ignores_staff_fields(self, app_ctx):
        guest = make_guest()
        updated = update_guest_profile(guest['guest_id'], {'country': 'PH', 'vip_status': 1})

        assert updated['country'] == 'PH'
        assert updated['vip_status'] == 0

    def test_update_rejects_bad_phone(self, app_ctx):
        guest = make_guest()
        with pytest.raises(ValueError, match='contact number'):
            update_guest(guest['guest_id'], {'contact_number': 'call me'})

    def test_delete_guest_with_reservations_fails(self, app_ctx):
        guest = make_guest()
        create_reservation(guest['guest_id'], '2024-07-01', '2024-07-04', 2, ['101'])

        with pytest.raises(ConstraintError):
            delete_guest(guest['guest_id'])
