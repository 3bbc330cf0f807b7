"""
Dashboard and report API routes.
"""

from flask_login import login_required

from utils.decorators import permission_required
from models.dashboard import (
    get_dashboard_stats, get_room_status_summary, get_checked_in_guests,
    get_total_spent_by_guest, get_staff_reservation_counts
)
from utils.api_response import api_success


def register_routes(bp):
    """Register dashboard and report API routes on the blueprint."""

    @bp.route('/dashboard/stats')
    @login_required
    @permission_required('dashboard.view')
    def dashboard_stats():
        return api_success(data=get_dashboard_stats())

    @bp.route('/dashboard/rooms')
    @login_required
    @permission_required('dashboard.view')
    def dashboard_rooms():
        """Room count per status for the room grid."""
        return api_success(data=get_room_status_summary())

    @bp.route('/reports/checked-in')
    @login_required
    @permission_required('reports.view')
    def report_checked_in():
        return api_success(data=get_checked_in_guests())

    @bp.route('/reports/guest-spending')
    @login_required
    @permission_required('reports.view')
    def report_guest_spending():
        return api_success(data=get_total_spent_by_guest())

    @bp.route('/reports/staff-workload')
    @login_required
    @permission_required('reports.view')
    def report_staff_workload():
        return api_success(data=get_staff_reservation_counts())
