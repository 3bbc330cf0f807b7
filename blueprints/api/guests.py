"""
Guest API routes: CRUD, search and walk-in creation.
"""

from flask import request
from flask_login import login_required, current_user

from utils.decorators import permission_required
from models.guest import (
    get_all_guests, get_guest_by_id, search_guests, create_guest,
    create_walk_in_guest, update_guest, delete_guest
)
from models.reservation import get_reservations_by_guest
from utils.api_response import api_success, api_error
from utils.helpers import get_json_body, strip_private_fields
from utils.messages import MESSAGES
from utils.permissions import filter_writable_fields


def register_routes(bp):
    """Register guest API routes on the blueprint."""

    @bp.route('/guests')
    @login_required
    @permission_required('guests.view')
    def list_guests():
        """List guests; ?q= searches first name, last name and contact number."""
        query = request.args.get('q', '').strip()
        guests = search_guests(query) if query else get_all_guests()
        return api_success(data=strip_private_fields(guests), count=len(guests))

    @bp.route('/guests/<int:guest_id>')
    @login_required
    @permission_required('guests.view')
    def guest_detail(guest_id):
        guest = get_guest_by_id(guest_id)
        if not guest:
            return api_error(MESSAGES['not_found'].format(entity='Guest'), status=404)
        return api_success(data=strip_private_fields(guest))

    @bp.route('/guests/<int:guest_id>/reservations')
    @login_required
    @permission_required('guests.view')
    def guest_reservations(guest_id):
        return api_success(data=get_reservations_by_guest(guest_id))

    @bp.route('/guests', methods=['POST'])
    @login_required
    @permission_required('guests.create')
    def create_guest_route():
        """
        Create a guest with optional credentials.

        Body: guest fields, plus optional username and password
        """
        data = get_json_body()
        username = data.pop('username', None)
        password = data.pop('password', None)
        fields = filter_writable_fields(current_user.role, 'guests', data)

        guest = create_guest(fields, username=username, password=password)
        return api_success(
            data=strip_private_fields(guest),
            message=MESSAGES['guest_created'],
            status=201
        )

    @bp.route('/guests/walk-in', methods=['POST'])
    @login_required
    @permission_required('guests.create')
    def create_walk_in_route():
        """
        Front-desk walk-in. Returns the generated credentials once.

        Body: first_name, last_name, email, contact_number, address fields
        """
        data = filter_writable_fields(current_user.role, 'guests', get_json_body())
        address = {k: v for k, v in data.items()
                   if k not in ('first_name', 'last_name', 'email', 'contact_number')}

        guest, password = create_walk_in_guest(
            data.get('first_name'),
            data.get('last_name'),
            data.get('email'),
            data.get('contact_number'),
            **address
        )
        name = f"{guest['first_name']} {guest['last_name']}"
        return api_success(
            data={
                'guest': strip_private_fields(guest),
                'credentials': {'username': guest['username'], 'password': password},
            },
            message=MESSAGES['walk_in_created'].format(name=name),
            status=201
        )

    @bp.route('/guests/<int:guest_id>', methods=['PUT', 'PATCH'])
    @login_required
    @permission_required('guests.edit')
    def update_guest_route(guest_id):
        fields = filter_writable_fields(current_user.role, 'guests', get_json_body())
        guest = update_guest(guest_id, fields)
        return api_success(data=strip_private_fields(guest), message=MESSAGES['guest_updated'])

    @bp.route('/guests/<int:guest_id>', methods=['DELETE'])
    @login_required
    @permission_required('guests.delete')
    def delete_guest_route(guest_id):
        delete_guest(guest_id)
        return api_success(message=MESSAGES['guest_deleted'])
