"""
Dashboard statistics and management reports.
Aggregations run as plain SQL over the connection; simple counts go through
the store.
"""

from database import get_db, get_store
from utils.datetime_helpers import get_month_start, get_today

ACTIVE_DASHBOARD_STATUSES = ['Reserved', 'Checked-In']


def get_dashboard_stats() -> dict:
    """
    Headline numbers for the staff dashboard.

    Returns:
        dict: {
            'total_guests', 'total_rooms', 'available_rooms', 'occupied_rooms',
            'active_reservations', 'today_check_ins', 'today_check_outs',
            'monthly_revenue'
        }
    """
    store = get_store()
    today = get_today().isoformat()

    db = get_db()
    row = db.execute(
        'SELECT COALESCE(SUM(amount_paid), 0) AS revenue FROM payments WHERE payment_date >= ?',
        (get_month_start().isoformat(),)
    ).fetchone()

    return {
        'total_guests': store.count('guests'),
        'total_rooms': store.count('rooms'),
        'available_rooms': store.count('rooms', {'status': 'Available'}),
        'occupied_rooms': store.count('rooms', {'status': 'Occupied'}),
        'active_reservations': store.count('reservations', {'status__in': ACTIVE_DASHBOARD_STATUSES}),
        'today_check_ins': store.count('reservations', {'check_in_date': today}),
        'today_check_outs': store.count('reservations', {'check_out_date': today}),
        'monthly_revenue': round(row['revenue'], 2),
    }


def get_room_status_summary() -> dict:
    """Room count per status, every status present."""
    summary = {'Available': 0, 'Occupied': 0, 'Reserved': 0, 'Maintenance': 0}
    rows = get_db().execute('SELECT status, COUNT(*) AS total FROM rooms GROUP BY status').fetchall()
    for row in rows:
        summary[row['status']] = row['total']
    return summary


# =============================================================================
# REPORTS
# =============================================================================

def get_checked_in_guests() -> list:
    """Guests with a reservation currently Checked-In."""
    rows = get_db().execute('''
        SELECT g.guest_id, g.first_name, g.last_name, r.reservation_id,
               r.check_in_date, r.check_out_date,
               GROUP_CONCAT(rr.room_number, ', ') AS rooms
        FROM reservations r
        JOIN guests g ON g.guest_id = r.guest_id
        LEFT JOIN reservation_room rr ON rr.reservation_id = r.reservation_id
        WHERE r.status = 'Checked-In'
        GROUP BY r.reservation_id
        ORDER BY g.last_name, g.first_name
    ''').fetchall()
    return [dict(row) for row in rows]


def get_total_spent_by_guest() -> list:
    """Total paid per guest across all reservations, highest first."""
    rows = get_db().execute('''
        SELECT g.guest_id, g.first_name, g.last_name,
               COUNT(p.payment_id) AS payment_count,
               ROUND(SUM(p.amount_paid), 2) AS total_spent
        FROM payments p
        JOIN reservations r ON r.reservation_id = p.reservation_id
        JOIN guests g ON g.guest_id = r.guest_id
        GROUP BY g.guest_id
        ORDER BY total_spent DESC, g.guest_id
    ''').fetchall()
    return [dict(row) for row in rows]


def get_staff_reservation_counts() -> list:
    """Reservations handled per staff member, including staff with none."""
    rows = get_db().execute('''
        SELECT s.staff_id, s.first_name, s.last_name, s.role,
               COUNT(rs.reservation_id) AS reservation_count
        FROM staff s
        LEFT JOIN reservation_staff rs ON rs.staff_id = s.staff_id
        GROUP BY s.staff_id
        ORDER BY reservation_count DESC, s.staff_id
    ''').fetchall()
    return [dict(row) for row in rows]
