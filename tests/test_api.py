"""
API tests: envelopes, access control and the booking flows.
"""

import io

from conftest import make_guest


def _book(client, **overrides):
    body = {
        'guest_id': 1,
        'check_in_date': '2024-07-01',
        'check_out_date': '2024-07-04',
        'total_guests': 2,
        'room_numbers': ['101'],
    }
    body.update(overrides)
    return client.post('/api/reservations', json=body)


class TestEnvelopes:
    """Tests for the JSON envelope and status codes."""

    def test_health_is_public(self, client):
        response = client.get('/api/health')
        assert response.status_code == 200
        assert response.get_json()['data']['status'] == 'ok'

    def test_unauthenticated_gets_401(self, client):
        response = client.get('/api/reservations')
        assert response.status_code == 401
        assert response.get_json() == {'success': False, 'error': 'Please sign in to continue'}

    def test_guest_gets_403_on_staff_routes(self, guest_client):
        assert guest_client.get('/api/guests').status_code == 403
        assert guest_client.get('/api/dashboard/stats').status_code == 403

    def test_front_desk_gets_403_on_admin_routes(self, front_desk_client):
        assert front_desk_client.delete('/api/rooms/101').status_code == 403
        assert front_desk_client.get('/api/reports/guest-spending').status_code == 403

    def test_unknown_route(self, admin_client):
        response = admin_client.get('/api/bookings')
        assert response.status_code == 404
        assert response.get_json()['success'] is False

    def test_json_body_required(self, admin_client):
        response = admin_client.post('/api/reservations', data='not json', content_type='text/plain')
        assert response.status_code == 400
        assert response.get_json()['error'] == 'A JSON body is required'


class TestBookingRoutes:
    """Tests for staff booking and guest checkout."""

    def test_staff_books_for_guest(self, front_desk_client, app):
        with app.app_context():
            make_guest(guest_id=1)

        response = _book(front_desk_client, staff_ids=[2])

        assert response.status_code == 201
        data = response.get_json()['data']
        assert data['status'] == 'Reserved'
        assert data['created_by'] == 'frontdesk'
        assert 'password_hash' not in data['guest']

    def test_staff_booking_requires_guest(self, front_desk_client):
        response = _book(front_desk_client, guest_id=None)
        assert response.status_code == 400

    def test_conflicting_booking_returns_409(self, front_desk_client, app):
        with app.app_context():
            make_guest(guest_id=1)

        assert _book(front_desk_client).status_code == 201
        response = _book(front_desk_client, check_in_date='2024-07-03', check_out_date='2024-07-06')

        assert response.status_code == 409
        body = response.get_json()
        assert body['success'] is False
        assert body['conflicts'][0]['room_number'] == '101'

    def test_turnover_booking_succeeds(self, front_desk_client, app):
        with app.app_context():
            make_guest(guest_id=1)

        assert _book(front_desk_client).status_code == 201
        response = _book(front_desk_client, check_in_date='2024-07-04', check_out_date='2024-07-06')
        assert response.status_code == 201

    def test_maintenance_room_returns_409(self, front_desk_client, app):
        with app.app_context():
            make_guest(guest_id=1)

        front_desk_client.post('/api/rooms/101/maintenance', json={'maintenance': True})
        response = _book(front_desk_client)

        assert response.status_code == 409

    def test_over_capacity_returns_400(self, front_desk_client, app):
        with app.app_context():
            make_guest(guest_id=1)

        response = _book(front_desk_client, total_guests=5)
        assert response.status_code == 400

    def test_guest_books_for_self(self, guest_client, guest_id):
        response = _book(guest_client, guest_id=999)

        assert response.status_code == 201
        assert response.get_json()['data']['guest_id'] == guest_id

    def test_guest_checkout_confirms(self, guest_client):
        response = guest_client.post('/api/reservations/book', json={
            'check_in_date': '2024-07-01',
            'check_out_date': '2024-07-04',
            'total_guests': 2,
            'room_numbers': ['201'],
            'payment': {'amount_paid': 12600, 'payment_method': 'Credit Card'},
        })

        assert response.status_code == 201
        data = response.get_json()['data']
        assert data['reservation']['status'] == 'Confirmed'
        assert data['payment']['amount_paid'] == 12600.0

        detail = guest_client.get(f"/api/reservations/{data['reservation']['reservation_id']}")
        assert [r['room_number'] for r in detail.get_json()['data']['rooms']] == ['201']

    def test_guest_checkout_requires_payment(self, guest_client):
        response = guest_client.post('/api/reservations/book', json={
            'check_in_date': '2024-07-01',
            'check_out_date': '2024-07-04',
            'room_numbers': ['201'],
        })
        assert response.status_code == 400

    def test_rejected_checkout_payment_books_nothing(self, app, guest_client):
        response = guest_client.post('/api/reservations/book', json={
            'check_in_date': '2024-07-01',
            'check_out_date': '2024-07-04',
            'total_guests': 2,
            'room_numbers': ['201'],
            'payment': {'amount_paid': 12600, 'payment_method': 'Bitcoin'},
        })

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Invalid payment method: Bitcoin'
        with app.app_context():
            from database import get_store

            assert get_store().count('reservations') == 0
            assert get_store().first('rooms', {'room_number': '201'})['status'] == 'Available'

    def test_rejected_checkout_amount_books_nothing(self, app, guest_client):
        response = guest_client.post('/api/reservations/book', json={
            'check_in_date': '2024-07-01',
            'check_out_date': '2024-07-04',
            'room_numbers': ['201'],
            'payment': {'amount_paid': 'lots', 'payment_method': 'Cash'},
        })

        assert response.status_code == 400
        with app.app_context():
            from database import get_store

            assert get_store().count('reservations') == 0

    def test_null_total_guests_defaults_to_one(self, front_desk_client, app):
        with app.app_context():
            make_guest(guest_id=1)

        response = _book(front_desk_client, total_guests=None)

        assert response.status_code == 201
        assert response.get_json()['data']['total_guests'] == 1

    def test_non_numeric_total_guests_returns_400(self, front_desk_client, app):
        with app.app_context():
            make_guest(guest_id=1)

        response = _book(front_desk_client, total_guests='two')

        assert response.status_code == 400
        assert response.get_json()['error'] == 'total_guests must be a whole number'

    def test_walk_in_conflict_creates_no_guest(self, app, front_desk_client):
        with app.app_context():
            from database import get_store

            make_guest(guest_id=1)
            guests_before = get_store().count('guests')

        assert _book(front_desk_client, check_in_date='2030-02-01', check_out_date='2030-02-05').status_code == 201
        response = front_desk_client.post('/api/reservations/walk-in', json={
            'guest': {
                'first_name': 'Pedro',
                'last_name': 'Penduko',
                'email': 'pedro@example.com',
                'contact_number': '09181112222',
            },
            'check_in_date': '2030-02-02',
            'check_out_date': '2030-02-04',
            'total_guests': 1,
            'room_numbers': ['101'],
        })

        assert response.status_code == 409
        with app.app_context():
            from database import get_store

            assert get_store().count('guests') == guests_before

    def test_walk_in_booking_returns_credentials(self, front_desk_client):
        response = front_desk_client.post('/api/reservations/walk-in', json={
            'guest': {
                'first_name': 'Pedro',
                'last_name': 'Penduko',
                'email': 'pedro@example.com',
                'contact_number': '09181112222',
            },
            'check_in_date': '2024-07-01',
            'check_out_date': '2024-07-02',
            'total_guests': 1,
            'room_numbers': ['103'],
        })

        assert response.status_code == 201
        data = response.get_json()['data']
        assert data['reservation']['is_walk_in'] == 1
        assert data['credentials']['username'].startswith('pedro.penduko.')
        assert data['credentials']['password']


class TestReservationRoutes:
    """Tests for visibility, status changes and cancellation."""

    def test_guest_sees_only_own_reservations(self, app, guest_client, guest_id):
        with app.app_context():
            from models.reservation import create_reservation

            other = make_guest(username='maria.clara', first_name='Maria', last_name='Clara')
            mine = create_reservation(guest_id, '2024-07-01', '2024-07-04', 2, ['101'])
            theirs = create_reservation(other['guest_id'], '2024-07-01', '2024-07-04', 2, ['102'])

        listed = guest_client.get('/api/reservations').get_json()
        assert [r['reservation_id'] for r in listed['data']] == [mine['reservation_id']]

        assert guest_client.get(f"/api/reservations/{theirs['reservation_id']}").status_code == 404
        assert guest_client.post(f"/api/reservations/{theirs['reservation_id']}/cancel").status_code == 404

    def test_status_change_and_history(self, app, front_desk_client, guest_id):
        with app.app_context():
            from models.reservation import create_reservation

            reservation = create_reservation(guest_id, '2024-07-01', '2024-07-04', 2, ['101'])
        url = f"/api/reservations/{reservation['reservation_id']}"

        response = front_desk_client.post(f'{url}/status', json={'status': 'Checked-In'})
        assert response.status_code == 200
        assert response.get_json()['message'] == 'Reservation status changed to Checked-In'

        room = front_desk_client.get('/api/rooms/101').get_json()['data']
        assert room['status'] == 'Occupied'

        history = front_desk_client.get(f'{url}/history').get_json()['data']
        assert history[0]['changed_by'] == 'frontdesk'

    def test_enforced_transition_rejected(self, app, front_desk_client, guest_id):
        with app.app_context():
            from models.reservation import create_reservation

            reservation = create_reservation(guest_id, '2024-07-01', '2024-07-04', 2, ['101'])

        response = front_desk_client.post(
            f"/api/reservations/{reservation['reservation_id']}/status",
            json={'status': 'Checked-Out', 'enforce_transitions': True}
        )
        assert response.status_code == 400

    def test_guest_cancels(self, app, guest_client, guest_id):
        with app.app_context():
            from models.reservation import create_reservation

            reservation = create_reservation(guest_id, '2024-07-01', '2024-07-04', 2, ['101'])

        response = guest_client.post(f"/api/reservations/{reservation['reservation_id']}/cancel")

        assert response.status_code == 200
        assert response.get_json()['data']['status'] == 'Cancelled'

    def test_edit_dates_rechecks_conflicts(self, app, front_desk_client, guest_id):
        with app.app_context():
            from models.reservation import create_reservation

            create_reservation(guest_id, '2024-07-05', '2024-07-08', 2, ['101'])
            reservation = create_reservation(guest_id, '2024-07-01', '2024-07-04', 2, ['101'])

        response = front_desk_client.put(
            f"/api/reservations/{reservation['reservation_id']}",
            json={'check_out_date': '2024-07-06'}
        )
        assert response.status_code == 409

    def test_cancelled_reservation_cannot_be_edited(self, app, front_desk_client, guest_id):
        with app.app_context():
            from models.reservation import create_reservation, update_reservation_status

            reservation = create_reservation(guest_id, '2024-07-01', '2024-07-04', 2, ['101'])
            update_reservation_status(reservation['reservation_id'], 'Cancelled')

        response = front_desk_client.put(
            f"/api/reservations/{reservation['reservation_id']}",
            json={'room_numbers': ['102']}
        )

        assert response.status_code == 400
        assert response.get_json()['error'] == 'A Cancelled reservation can no longer be edited'
        with app.app_context():
            from models.room import get_room_by_number

            assert get_room_by_number('102')['status'] == 'Available'

    def test_front_desk_cannot_delete(self, app, front_desk_client, admin_client, guest_id):
        with app.app_context():
            from models.reservation import create_reservation

            reservation = create_reservation(guest_id, '2024-07-01', '2024-07-04', 2, ['101'])
        url = f"/api/reservations/{reservation['reservation_id']}"

        assert front_desk_client.delete(url).status_code == 403
        assert admin_client.delete(url).status_code == 200
        assert admin_client.get(url).status_code == 404


class TestRoomRoutes:
    """Tests for room search and maintenance."""

    def test_available_by_dates(self, app, front_desk_client, guest_id):
        with app.app_context():
            from models.reservation import create_reservation

            create_reservation(guest_id, '2024-07-01', '2024-07-04', 2, ['101'])

        response = front_desk_client.get('/api/rooms/available?check_in=2024-07-02&check_out=2024-07-03&type=Standard')
        assert [r['room_number'] for r in response.get_json()['data']] == ['102', '103']

    def test_available_bad_range(self, front_desk_client):
        response = front_desk_client.get('/api/rooms/available?check_in=2024-07-03&check_out=2024-07-02')
        assert response.status_code == 400

    def test_check_availability(self, app, front_desk_client, guest_id):
        with app.app_context():
            from models.reservation import create_reservation

            create_reservation(guest_id, '2024-07-01', '2024-07-04', 2, ['101'])

        response = front_desk_client.post('/api/rooms/check-availability', json={
            'room_numbers': ['101', '102'],
            'check_in_date': '2024-07-03',
            'check_out_date': '2024-07-05',
        })
        data = response.get_json()['data']
        assert data['available'] is False
        assert [c['room_number'] for c in data['conflicts']] == ['101']

    def test_guest_can_browse_rooms(self, guest_client):
        assert guest_client.get('/api/rooms').status_code == 200

    def test_status_is_not_writable(self, admin_client):
        response = admin_client.put('/api/rooms/101', json={'status': 'Occupied'})
        assert response.status_code == 403


class TestGuestRoutes:
    """Tests for guest management routes."""

    def test_walk_in_guest(self, front_desk_client):
        response = front_desk_client.post('/api/guests/walk-in', json={
            'first_name': 'Juan',
            'last_name': 'Dela Cruz',
            'email': 'juan@example.com',
            'contact_number': '09171234567',
        })

        assert response.status_code == 201
        data = response.get_json()['data']
        assert 'password_hash' not in data['guest']
        assert data['credentials']['username'] == data['guest']['username']

    def test_search(self, front_desk_client, guest_id):
        response = front_desk_client.get('/api/guests?q=dela')
        assert response.get_json()['count'] == 1

    def test_front_desk_cannot_set_loyalty(self, front_desk_client, guest_id):
        response = front_desk_client.put(f'/api/guests/{guest_id}', json={'loyalty_points': 500})
        assert response.status_code == 403


class TestPaymentRoutes:
    """Tests for payment routes and the Excel export."""

    def test_record_and_list(self, app, front_desk_client, guest_id):
        with app.app_context():
            from models.reservation import create_reservation

            reservation = create_reservation(guest_id, '2024-07-01', '2024-07-04', 2, ['101'])

        response = front_desk_client.post('/api/payments', json={
            'reservation_id': reservation['reservation_id'],
            'amount_paid': 3000,
            'payment_method': 'Cash',
        })
        assert response.status_code == 201

        listed = front_desk_client.get(f"/api/reservations/{reservation['reservation_id']}/payments")
        assert listed.get_json()['total_paid'] == 3000.0

    def test_invalid_amount(self, app, front_desk_client, guest_id):
        with app.app_context():
            from models.reservation import create_reservation

            reservation = create_reservation(guest_id, '2024-07-01', '2024-07-04', 2, ['101'])

        response = front_desk_client.post('/api/payments', json={
            'reservation_id': reservation['reservation_id'],
            'amount_paid': 0,
            'payment_method': 'Cash',
        })
        assert response.status_code == 400

    def test_guest_cannot_pay_for_others(self, app, guest_client):
        with app.app_context():
            from models.reservation import create_reservation

            other = make_guest(username='maria.clara', first_name='Maria', last_name='Clara')
            reservation = create_reservation(other['guest_id'], '2024-07-01', '2024-07-04', 2, ['101'])

        response = guest_client.post('/api/payments', json={
            'reservation_id': reservation['reservation_id'],
            'amount_paid': 100,
            'payment_method': 'Cash',
        })
        assert response.status_code == 404

    def test_export_workbook(self, app, admin_client, guest_id):
        from openpyxl import load_workbook

        with app.app_context():
            from models.payment import record_payment
            from models.reservation import create_reservation

            reservation = create_reservation(guest_id, '2024-07-01', '2024-07-04', 2, ['101'])
            record_payment(reservation['reservation_id'], 2500, 'Cash', payment_date='2024-07-01')
            record_payment(reservation['reservation_id'], 5000, 'E-Wallet', payment_date='2024-07-02')

        response = admin_client.get('/api/payments/export')

        assert response.status_code == 200
        assert response.mimetype == 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'

        ws = load_workbook(io.BytesIO(response.data))['Payments']
        assert ws.cell(row=4, column=1).value == 'Payment ID'
        assert ws.cell(row=5, column=4).value == 'Juan Dela Cruz'
        assert ws.cell(row=7, column=4).value == 'Total'
        assert ws.cell(row=7, column=5).value == 7500.0

    def test_export_admin_only(self, front_desk_client):
        assert front_desk_client.get('/api/payments/export').status_code == 403


class TestDashboardRoutes:
    """Tests for dashboard and report routes."""

    def test_stats(self, app, front_desk_client, guest_id):
        with app.app_context():
            from models.reservation import create_reservation, update_reservation_status

            reservation = create_reservation(guest_id, '2024-07-01', '2024-07-04', 2, ['101'])
            update_reservation_status(reservation['reservation_id'], 'Checked-In')
            create_reservation(guest_id, '2024-07-01', '2024-07-04', 2, ['102'])

        stats = front_desk_client.get('/api/dashboard/stats').get_json()['data']

        assert stats['total_guests'] == 1
        assert stats['total_rooms'] == 7
        assert stats['occupied_rooms'] == 1
        assert stats['available_rooms'] == 5
        assert stats['active_reservations'] == 2

        summary = front_desk_client.get('/api/dashboard/rooms').get_json()['data']
        assert summary == {'Available': 5, 'Occupied': 1, 'Reserved': 1, 'Maintenance': 0}

    def test_reports(self, app, admin_client, guest_id):
        with app.app_context():
            from models.payment import record_payment
            from models.reservation import create_reservation, update_reservation_status

            reservation = create_reservation(
                guest_id, '2024-07-01', '2024-07-04', 2, ['101', '102'], staff_ids=[2]
            )
            update_reservation_status(reservation['reservation_id'], 'Checked-In')
            record_payment(reservation['reservation_id'], 4000, 'Cash')

        checked_in = admin_client.get('/api/reports/checked-in').get_json()['data']
        assert checked_in[0]['rooms'] in ('101, 102', '102, 101')

        spending = admin_client.get('/api/reports/guest-spending').get_json()['data']
        assert spending[0]['total_spent'] == 4000.0

        workload = admin_client.get('/api/reports/staff-workload').get_json()['data']
        assert workload[0]['staff_id'] == 2
        assert workload[0]['reservation_count'] == 1
