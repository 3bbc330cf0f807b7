"""
Staff API routes.
"""

from flask import request
from flask_login import login_required, current_user

from utils.decorators import permission_required
from models.staff import get_all_staff, get_staff_by_id, create_staff, update_staff, delete_staff
from utils.api_response import api_success, api_error
from utils.helpers import get_json_body
from utils.messages import MESSAGES
from utils.permissions import filter_writable_fields


def register_routes(bp):
    """Register staff API routes on the blueprint."""

    @bp.route('/staff')
    @login_required
    @permission_required('staff.view')
    def list_staff():
        staff = get_all_staff(role=request.args.get('role') or None)
        return api_success(data=staff, count=len(staff))

    @bp.route('/staff/<int:staff_id>')
    @login_required
    @permission_required('staff.view')
    def staff_detail(staff_id):
        member = get_staff_by_id(staff_id)
        if not member:
            return api_error(MESSAGES['not_found'].format(entity='Staff member'), status=404)
        return api_success(data=member)

    @bp.route('/staff', methods=['POST'])
    @login_required
    @permission_required('staff.create')
    def create_staff_route():
        fields = filter_writable_fields(current_user.role, 'staff', get_json_body())
        member = create_staff(
            fields.get('first_name'),
            fields.get('last_name'),
            fields.get('role'),
            fields.get('contact_number')
        )
        return api_success(data=member, message=MESSAGES['staff_created'], status=201)

    @bp.route('/staff/<int:staff_id>', methods=['PUT', 'PATCH'])
    @login_required
    @permission_required('staff.edit')
    def update_staff_route(staff_id):
        fields = filter_writable_fields(current_user.role, 'staff', get_json_body())
        member = update_staff(staff_id, fields)
        return api_success(data=member, message=MESSAGES['staff_updated'])

    @bp.route('/staff/<int:staff_id>', methods=['DELETE'])
    @login_required
    @permission_required('staff.delete')
    def delete_staff_route(staff_id):
        delete_staff(staff_id)
        return api_success(message=MESSAGES['staff_deleted'])
