"""
Role capability table.

The admin, front-desk and guest portals share one API; what each role may
do is decided here and nowhere else:
- ROLE_PERMISSIONS: role -> set of action codes
- WRITABLE_FIELDS: entity -> role -> fields that role may set
"""

ROLES = ('admin', 'front_desk', 'guest')

_STAFF_COMMON = {
    'guests.view',
    'guests.create',
    'guests.edit',
    'rooms.view',
    'rooms.maintenance',
    'staff.view',
    'reservations.view',
    'reservations.create',
    'reservations.edit',
    'reservations.change_status',
    'payments.view',
    'payments.record',
    'dashboard.view',
}

ROLE_PERMISSIONS = {
    'admin': _STAFF_COMMON | {
        'guests.delete',
        'rooms.create',
        'rooms.edit',
        'rooms.delete',
        'staff.create',
        'staff.edit',
        'staff.delete',
        'reservations.delete',
        'payments.edit',
        'payments.delete',
        'payments.export',
        'reports.view',
        'accounts.manage',
    },
    'front_desk': set(_STAFF_COMMON),
    'guest': {
        'rooms.view',
        'profile.edit',
        'reservations.view_own',
        'reservations.create_own',
        'reservations.cancel_own',
        'payments.view_own',
        'payments.record_own',
    },
}

_GUEST_PROFILE_FIELDS = {
    'first_name', 'last_name', 'email', 'contact_number',
    'street', 'city', 'state_province', 'zip_code', 'country',
}

_RESERVATION_FIELDS = {
    'guest_id', 'check_in_date', 'check_out_date', 'total_guests', 'special_requests',
}

_PAYMENT_FIELDS = {
    'payment_date', 'amount_paid', 'payment_method', 'transaction_id',
    'payment_status', 'refund_amount', 'notes', 'receipt_number',
}

WRITABLE_FIELDS = {
    'guests': {
        'admin': _GUEST_PROFILE_FIELDS | {'preferences', 'loyalty_points', 'vip_status'},
        'front_desk': _GUEST_PROFILE_FIELDS | {'preferences'},
        'guest': _GUEST_PROFILE_FIELDS,
    },
    'rooms': {
        'admin': {
            'room_type', 'bed_type', 'capacity', 'daily_rate', 'description',
            'amenities', 'floor_number', 'room_size_sqft', 'last_maintenance_date',
        },
    },
    'staff': {
        'admin': {'first_name', 'last_name', 'role', 'contact_number'},
    },
    'reservations': {
        'admin': _RESERVATION_FIELDS,
        'front_desk': _RESERVATION_FIELDS,
    },
    'payments': {
        'admin': _PAYMENT_FIELDS,
    },
}


class CapabilityError(Exception):
    """Raised when a role attempts an action or field it is not allowed."""


def get_role_permissions(role: str) -> set:
    """Permission codes granted to a role (empty for unknown roles)."""
    return ROLE_PERMISSIONS.get(role, set())


def has_permission(user, permission_code: str) -> bool:
    """
    Check if user has a specific permission.

    Args:
        user: User object (Flask-Login)
        permission_code: Permission code to check

    Returns:
        True if user has permission
    """
    if user is None or not getattr(user, 'is_authenticated', False):
        return False
    return permission_code in get_role_permissions(user.role)


def filter_writable_fields(role: str, entity: str, data: dict) -> dict:
    """
    Keep only the fields a role may write on an entity.

    Raises:
        CapabilityError: If data carries a field the role may not set
    """
    allowed = WRITABLE_FIELDS.get(entity, {}).get(role, set())
    forbidden = sorted(set(data) - allowed)
    if forbidden:
        raise CapabilityError(f"Role '{role}' may not set {entity} fields: {', '.join(forbidden)}")
    return dict(data)


def can_access_reservation(user, reservation: dict) -> bool:
    """Staff roles see every reservation; guests only their own."""
    if has_permission(user, 'reservations.view'):
        return True
    return (
        has_permission(user, 'reservations.view_own')
        and reservation is not None
        and reservation.get('guest_id') == user.entity_id
    )
