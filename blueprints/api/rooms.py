"""
Room API routes including date-based availability search.
"""

from flask import request
from flask_login import login_required, current_user

from utils.decorators import permission_required
from models.room import (
    get_all_rooms, get_room_by_number, get_available_rooms,
    create_room, update_room, delete_room, set_room_maintenance
)
from models.reservation import get_bookable_rooms, find_conflicts
from utils.api_response import api_success, api_error
from utils.helpers import get_json_body, parse_bool
from utils.messages import MESSAGES
from utils.permissions import filter_writable_fields
from utils.validators import validate_date_range


def register_routes(bp):
    """Register room API routes on the blueprint."""

    @bp.route('/rooms')
    @login_required
    @permission_required('rooms.view')
    def list_rooms():
        """List rooms; optional ?type= and ?status= filters."""
        rooms = get_all_rooms(
            room_type=request.args.get('type') or None,
            status=request.args.get('status') or None
        )
        return api_success(data=rooms, count=len(rooms))

    @bp.route('/rooms/available')
    @login_required
    @permission_required('rooms.view')
    def available_rooms():
        """
        Bookable rooms.

        Query params:
            check_in, check_out: Stay dates (YYYY-MM-DD). Without them, rooms
                whose status flag is Available are returned.
            type: Room type filter
            min_capacity: Minimum capacity
        """
        check_in = request.args.get('check_in')
        check_out = request.args.get('check_out')

        if not check_in or not check_out:
            return api_success(data=get_available_rooms())

        if not validate_date_range(check_in, check_out):
            return api_error(MESSAGES['invalid_date_range'], status=400)

        rooms = get_bookable_rooms(
            check_in, check_out,
            room_type=request.args.get('type') or None,
            min_capacity=request.args.get('min_capacity', type=int)
        )
        return api_success(data=rooms, count=len(rooms))

    @bp.route('/rooms/check-availability', methods=['POST'])
    @login_required
    @permission_required('rooms.view')
    def check_availability():
        """
        Report conflicts for specific rooms.

        Body: room_numbers, check_in_date, check_out_date, exclude_reservation_id
        """
        data = get_json_body()
        room_numbers = data.get('room_numbers') or []
        check_in = data.get('check_in_date')
        check_out = data.get('check_out_date')

        if not room_numbers:
            return api_error(MESSAGES['field_required'].format(field='room_numbers'), status=400)
        if not validate_date_range(check_in, check_out):
            return api_error(MESSAGES['invalid_date_range'], status=400)

        conflicts = find_conflicts(
            room_numbers, check_in, check_out,
            exclude_reservation_id=data.get('exclude_reservation_id')
        )
        return api_success(data={'available': not conflicts, 'conflicts': conflicts})

    @bp.route('/rooms/<room_number>')
    @login_required
    @permission_required('rooms.view')
    def room_detail(room_number):
        room = get_room_by_number(room_number)
        if not room:
            return api_error(MESSAGES['not_found'].format(entity='Room'), status=404)
        return api_success(data=room)

    @bp.route('/rooms', methods=['POST'])
    @login_required
    @permission_required('rooms.create')
    def create_room_route():
        data = get_json_body()
        room_number = data.pop('room_number', None)
        fields = filter_writable_fields(current_user.role, 'rooms', data)

        for required in ('room_type', 'capacity', 'daily_rate'):
            if fields.get(required) in (None, ''):
                return api_error(MESSAGES['field_required'].format(field=required), status=400)

        room = create_room(
            room_number,
            fields.pop('room_type'),
            fields.pop('capacity'),
            fields.pop('daily_rate'),
            **fields
        )
        return api_success(data=room, message=MESSAGES['room_created'], status=201)

    @bp.route('/rooms/<room_number>', methods=['PUT', 'PATCH'])
    @login_required
    @permission_required('rooms.edit')
    def update_room_route(room_number):
        fields = filter_writable_fields(current_user.role, 'rooms', get_json_body())
        room = update_room(room_number, fields)
        return api_success(data=room, message=MESSAGES['room_updated'])

    @bp.route('/rooms/<room_number>/maintenance', methods=['POST'])
    @login_required
    @permission_required('rooms.maintenance')
    def room_maintenance(room_number):
        """Body: {"maintenance": bool}"""
        data = get_json_body()
        if 'maintenance' not in data:
            return api_error(MESSAGES['field_required'].format(field='maintenance'), status=400)

        room = set_room_maintenance(room_number, parse_bool(data['maintenance']))
        return api_success(data=room, message=MESSAGES['room_updated'])

    @bp.route('/rooms/<room_number>', methods=['DELETE'])
    @login_required
    @permission_required('rooms.delete')
    def delete_room_route(room_number):
        delete_room(room_number)
        return api_success(message=MESSAGES['room_deleted'])
