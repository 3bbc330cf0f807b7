"""
Staff data access functions.
Employee records only; staff rows are not login accounts.
"""

from database import get_store
from utils.validators import validate_phone

STAFF_ROLES = ('Manager', 'Receptionist', 'Housekeeping', 'Concierge', 'Maintenance', 'Front Desk')

STAFF_FIELDS = ('first_name', 'last_name', 'role', 'contact_number')


def _validate_staff_fields(data: dict, partial: bool = False) -> None:
    if not partial:
        for field in ('first_name', 'last_name', 'role'):
            if not (data.get(field) or '').strip():
                raise ValueError(f'{field} is required')
    if 'role' in data and data['role'] not in STAFF_ROLES:
        raise ValueError(f"Invalid staff role: {data['role']}")
    if data.get('contact_number') and not validate_phone(data['contact_number']):
        raise ValueError('Invalid contact number')


def get_all_staff(role: str = None) -> list:
    """Get all staff ordered by ID."""
    filters = {'role': role} if role else {}
    return get_store().find('staff', filters, order_by='staff_id')


def get_staff_by_id(staff_id: int) -> dict:
    """Get staff member by ID, or None."""
    return get_store().first('staff', {'staff_id': staff_id})


def create_staff(first_name: str, last_name: str, role: str, contact_number: str = None) -> dict:
    data = {
        'first_name': first_name,
        'last_name': last_name,
        'role': role,
        'contact_number': contact_number,
    }
    _validate_staff_fields(data)
    return get_store().insert('staff', data)


def update_staff(staff_id: int, fields: dict) -> dict:
    patch = {k: v for k, v in fields.items() if k in STAFF_FIELDS}
    _validate_staff_fields(patch, partial=True)
    return get_store().update('staff', {'staff_id': staff_id}, patch)


def delete_staff(staff_id: int) -> None:
    """
    Delete a staff member.

    Raises:
        NotFoundError: If the staff member does not exist
        ConstraintError: If reservations still reference the staff member
    """
    store = get_store()
    store.find_one('staff', {'staff_id': staff_id})
    store.delete('staff', {'staff_id': staff_id})
