"""
Reservation API routes: booking, edits, status changes, guest checkout and
cancellation.

Every booking made through these routes runs the availability check.
"""

from flask import request
from flask_login import login_required, current_user

from utils.decorators import permission_required
from models.guest import create_walk_in_guest
from models.payment import record_payment, validate_payment
from models.reservation import (
    get_reservation_by_id, get_all_reservations, get_reservations_by_guest,
    check_booking, create_reservation, update_reservation, update_reservation_status,
    cancel_guest_reservation, delete_reservation, get_status_history
)
from utils.api_response import api_success, api_error
from utils.helpers import get_json_body, parse_bool, strip_private_fields
from utils.messages import MESSAGES
from utils.permissions import can_access_reservation, filter_writable_fields, has_permission
from utils.validators import sanitize_input


def _booking_args(data: dict) -> dict:
    """Pull the booking fields shared by the create routes."""
    for field in ('check_in_date', 'check_out_date', 'room_numbers'):
        if not data.get(field):
            raise ValueError(MESSAGES['field_required'].format(field=field))

    return {
        'check_in_date': data['check_in_date'],
        'check_out_date': data['check_out_date'],
        'total_guests': 1 if data.get('total_guests') is None else data['total_guests'],
        'room_numbers': data['room_numbers'],
        'special_requests': sanitize_input(data.get('special_requests'), max_length=500) or None,
    }


def _reservation_or_404(reservation_id: int):
    """Reservation visible to the current user, or None."""
    reservation = get_reservation_by_id(reservation_id)
    if reservation is None or not can_access_reservation(current_user, reservation):
        return None
    return reservation


def register_routes(bp):
    """Register reservation API routes on the blueprint."""

    # ============================================================================
    # READ
    # ============================================================================

    @bp.route('/reservations')
    @login_required
    @permission_required('reservations.view', 'reservations.view_own')
    def list_reservations():
        """Staff see every reservation (?status= filter); guests see their own."""
        if has_permission(current_user, 'reservations.view'):
            reservations = get_all_reservations(status=request.args.get('status') or None)
        else:
            reservations = get_reservations_by_guest(current_user.entity_id)
        return api_success(data=strip_private_fields(reservations), count=len(reservations))

    @bp.route('/reservations/<int:reservation_id>')
    @login_required
    @permission_required('reservations.view', 'reservations.view_own')
    def reservation_detail(reservation_id):
        reservation = _reservation_or_404(reservation_id)
        if reservation is None:
            return api_error(MESSAGES['not_found'].format(entity='Reservation'), status=404)
        return api_success(data=strip_private_fields(reservation))

    @bp.route('/reservations/<int:reservation_id>/history')
    @login_required
    @permission_required('reservations.view')
    def reservation_history(reservation_id):
        """Status change history, newest first."""
        return api_success(data=get_status_history(reservation_id))

    # ============================================================================
    # CREATE
    # ============================================================================

    @bp.route('/reservations', methods=['POST'])
    @login_required
    @permission_required('reservations.create', 'reservations.create_own')
    def create_reservation_route():
        """
        Book rooms.

        Body: check_in_date, check_out_date, total_guests, room_numbers,
        special_requests; staff also send guest_id and staff_ids.
        Guests always book for themselves.
        """
        data = get_json_body()
        booking = _booking_args(data)

        if has_permission(current_user, 'reservations.create'):
            if not data.get('guest_id'):
                return api_error(MESSAGES['field_required'].format(field='guest_id'), status=400)
            guest_id = data['guest_id']
            staff_ids = data.get('staff_ids')
        else:
            guest_id = current_user.entity_id
            staff_ids = None

        reservation = create_reservation(
            guest_id=guest_id,
            staff_ids=staff_ids,
            created_by=current_user.username,
            check_availability=True,
            **booking
        )
        return api_success(
            data=strip_private_fields(reservation),
            message=MESSAGES['reservation_created'].format(id=reservation['reservation_id']),
            status=201
        )

    @bp.route('/reservations/book', methods=['POST'])
    @login_required
    @permission_required('reservations.create_own')
    def guest_checkout():
        """
        Guest checkout: reserve, pay, confirm.

        The booking and payment are validated first. The reservation then
        starts as Pending Payment, the payment is recorded, and the
        reservation moves to Confirmed.

        Body: booking fields plus payment {amount_paid, payment_method}
        """
        data = get_json_body()
        booking = _booking_args(data)
        payment_data = data.get('payment') or {}
        if not payment_data.get('amount_paid') or not payment_data.get('payment_method'):
            return api_error(MESSAGES['field_required'].format(field='payment'), status=400)
        checked = validate_payment(payment_data['amount_paid'], payment_data['payment_method'])
        check_booking(
            booking['check_in_date'], booking['check_out_date'],
            booking['total_guests'], booking['room_numbers']
        )

        reservation = create_reservation(
            guest_id=current_user.entity_id,
            status='Pending Payment',
            created_by=current_user.username,
            check_availability=True,
            **booking
        )
        reservation_id = reservation['reservation_id']

        payment = record_payment(
            reservation_id,
            checked['amount_paid'],
            checked['payment_method'],
            transaction_id=payment_data.get('transaction_id'),
        )
        update_reservation_status(reservation_id, 'Confirmed', changed_by=current_user.username)

        return api_success(
            data={
                'reservation': strip_private_fields(get_reservation_by_id(reservation_id)),
                'payment': payment,
            },
            message=MESSAGES['reservation_created'].format(id=reservation_id),
            status=201
        )

    @bp.route('/reservations/walk-in', methods=['POST'])
    @login_required
    @permission_required('reservations.create')
    def walk_in_booking():
        """
        Front-desk walk-in: check the rooms, create the guest, then book.

        Body: guest {first_name, last_name, email, contact_number, ...} plus
        booking fields and staff_ids
        """
        data = get_json_body()
        booking = _booking_args(data)
        guest_data = filter_writable_fields(current_user.role, 'guests', data.get('guest') or {})
        address = {k: v for k, v in guest_data.items()
                   if k not in ('first_name', 'last_name', 'email', 'contact_number')}
        check_booking(
            booking['check_in_date'], booking['check_out_date'],
            booking['total_guests'], booking['room_numbers']
        )

        guest, password = create_walk_in_guest(
            guest_data.get('first_name'),
            guest_data.get('last_name'),
            guest_data.get('email'),
            guest_data.get('contact_number'),
            **address
        )
        reservation = create_reservation(
            guest_id=guest['guest_id'],
            staff_ids=data.get('staff_ids'),
            is_walk_in=True,
            created_by=current_user.username,
            check_availability=True,
            **booking
        )
        return api_success(
            data={
                'reservation': strip_private_fields(reservation),
                'credentials': {'username': guest['username'], 'password': password},
            },
            message=MESSAGES['reservation_created'].format(id=reservation['reservation_id']),
            status=201
        )

    # ============================================================================
    # UPDATE
    # ============================================================================

    @bp.route('/reservations/<int:reservation_id>', methods=['PUT', 'PATCH'])
    @login_required
    @permission_required('reservations.edit')
    def update_reservation_route(reservation_id):
        """
        Edit details. room_numbers / staff_ids replace the current links when
        present. Date or room changes are checked for conflicts.
        """
        data = get_json_body()
        room_numbers = data.pop('room_numbers', None)
        staff_ids = data.pop('staff_ids', None)
        fields = filter_writable_fields(current_user.role, 'reservations', data)

        recheck = room_numbers is not None or 'check_in_date' in fields or 'check_out_date' in fields
        reservation = update_reservation(
            reservation_id, fields,
            room_numbers=room_numbers,
            staff_ids=staff_ids,
            updated_by=current_user.username,
            check_availability=recheck
        )
        return api_success(data=strip_private_fields(reservation), message=MESSAGES['reservation_updated'])

    @bp.route('/reservations/<int:reservation_id>/status', methods=['POST'])
    @login_required
    @permission_required('reservations.change_status')
    def change_status(reservation_id):
        """
        Body: {"status": str, "enforce_transitions": bool (optional)}
        """
        data = get_json_body()
        new_status = data.get('status')
        if not new_status:
            return api_error(MESSAGES['field_required'].format(field='status'), status=400)

        reservation = update_reservation_status(
            reservation_id, new_status,
            changed_by=current_user.username,
            enforce_transitions=parse_bool(data.get('enforce_transitions', False))
        )
        return api_success(
            data=reservation,
            message=MESSAGES['reservation_status_updated'].format(status=new_status)
        )

    @bp.route('/reservations/<int:reservation_id>/cancel', methods=['POST'])
    @login_required
    @permission_required('reservations.cancel_own')
    def cancel_own_reservation(reservation_id):
        """Guest cancels one of their own reservations."""
        reservation = cancel_guest_reservation(
            reservation_id, current_user.entity_id, changed_by=current_user.username
        )
        return api_success(data=reservation, message=MESSAGES['reservation_cancelled'])

    # ============================================================================
    # DELETE
    # ============================================================================

    @bp.route('/reservations/<int:reservation_id>', methods=['DELETE'])
    @login_required
    @permission_required('reservations.delete')
    def delete_reservation_route(reservation_id):
        delete_reservation(reservation_id)
        return api_success(message=MESSAGES['reservation_deleted'])
