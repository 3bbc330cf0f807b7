"""
Guest data access functions.
Handles guest CRUD, self-registration, walk-in creation and search.
"""

import logging

from flask import current_app
from werkzeug.security import generate_password_hash

from database import get_store
from utils.helpers import generate_password, generate_walk_in_username
from utils.validators import validate_email, validate_phone, validate_password, validate_username

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    'first_name', 'last_name', 'email', 'contact_number',
    'street', 'city', 'state_province', 'zip_code', 'country',
)

GUEST_FIELDS = PROFILE_FIELDS + ('preferences', 'loyalty_points', 'vip_status')


def _validate_guest_fields(data: dict, require_identity: bool = True) -> None:
    """Raise ValueError for missing names/email or malformed contact details."""
    if require_identity:
        for field in ('first_name', 'last_name', 'email'):
            if not (data.get(field) or '').strip():
                raise ValueError(f'{field} is required')

    if 'email' in data and not validate_email(data['email']):
        raise ValueError('Invalid email address')

    if data.get('contact_number') and not validate_phone(data['contact_number']):
        raise ValueError('Invalid contact number')


# =============================================================================
# READ
# =============================================================================

def get_all_guests() -> list:
    """Get all guests ordered by ID."""
    return get_store().find('guests', order_by='guest_id')


def get_guest_by_id(guest_id: int) -> dict:
    """
    Get guest by ID.

    Returns:
        Guest dict or None if not found
    """
    return get_store().first('guests', {'guest_id': guest_id})


def search_guests(query: str) -> list:
    """
    Search guests by first name, last name or contact number.

    Args:
        query: Search term (substring, case-insensitive)

    Returns:
        List of matching guest dicts
    """
    query = (query or '').strip()
    if not query:
        return get_all_guests()

    return get_store().find(
        'guests',
        search={'first_name': query, 'last_name': query, 'contact_number': query},
        order_by='guest_id'
    )


# =============================================================================
# CREATE
# =============================================================================

def register_guest(username: str, password: str, email: str, first_name: str, last_name: str,
                   **profile) -> dict:
    """
    Self-service guest signup.

    Args:
        username: Login name (3+ chars, unique across accounts)
        password: Plain text password (validated for strength, then hashed)
        email: Email address
        first_name: First name
        last_name: Last name
        **profile: Optional contact_number and address fields

    Returns:
        New guest dict

    Raises:
        ValueError: If validation fails or the username is taken
    """
    from models.user import is_username_taken

    valid, error = validate_username(username)
    if not valid:
        raise ValueError(error)
    valid, error = validate_password(password)
    if not valid:
        raise ValueError(error)

    data = {'email': email, 'first_name': first_name, 'last_name': last_name}
    data.update({k: v for k, v in profile.items() if k in PROFILE_FIELDS})
    _validate_guest_fields(data)

    if is_username_taken(username):
        raise ValueError('Username already exists')

    guest = get_store().insert('guests', {
        **data,
        'username': username,
        'password_hash': generate_password_hash(password),
        'is_walk_in': 0,
    })
    logger.info("Guest %s registered", guest['guest_id'])
    return guest


def create_guest(data: dict, username: str = None, password: str = None) -> dict:
    """
    Staff-created guest record.

    Args:
        data: Guest fields (see GUEST_FIELDS)
        username: Optional login name; generated when omitted
        password: Optional password; generated when omitted

    Returns:
        New guest dict
    """
    from models.user import is_username_taken

    fields = {k: v for k, v in data.items() if k in GUEST_FIELDS}
    _validate_guest_fields(fields)

    username = username or generate_walk_in_username(fields['first_name'], fields['last_name'])
    if is_username_taken(username):
        raise ValueError('Username already exists')

    password = password or generate_password(current_app.config.get('WALK_IN_PASSWORD_LENGTH', 10))

    return get_store().insert('guests', {
        **fields,
        'username': username,
        'password_hash': generate_password_hash(password),
        'is_walk_in': 1 if data.get('is_walk_in') else 0,
    })


def create_walk_in_guest(first_name: str, last_name: str, email: str, contact_number: str,
                         **address) -> tuple:
    """
    Create a guest at the front desk without online registration.

    Contact number is mandatory for walk-ins. Credentials are generated so the
    guest can later sign in to the guest portal.

    Returns:
        tuple: (guest dict, generated plain text password)
    """
    if not (contact_number or '').strip():
        raise ValueError('contact_number is required')

    password = generate_password(current_app.config.get('WALK_IN_PASSWORD_LENGTH', 10))
    data = {
        'first_name': first_name,
        'last_name': last_name,
        'email': email,
        'contact_number': contact_number,
        'is_walk_in': True,
    }
    data.update({k: v for k, v in address.items() if k in PROFILE_FIELDS})

    guest = create_guest(data, password=password)
    logger.info("Walk-in guest %s created", guest['guest_id'])
    return guest, password


# =============================================================================
# UPDATE / DELETE
# =============================================================================

def update_guest(guest_id: int, fields: dict) -> dict:
    """
    Staff edit of a guest record.

    Returns:
        Updated guest dict

    Raises:
        NotFoundError: If the guest does not exist
    """
    patch = {k: v for k, v in fields.items() if k in GUEST_FIELDS}
    _validate_guest_fields(patch, require_identity=False)
    return get_store().update('guests', {'guest_id': guest_id}, patch)


def update_guest_profile(guest_id: int, fields: dict) -> dict:
    """Self-service profile edit; only contact and address fields are written."""
    patch = {k: v for k, v in fields.items() if k in PROFILE_FIELDS}
    _validate_guest_fields(patch, require_identity=False)
    return get_store().update('guests', {'guest_id': guest_id}, patch)


def update_guest_password(guest_id: int, new_password: str) -> dict:
    """Replace a guest's password hash."""
    valid, error = validate_password(new_password)
    if not valid:
        raise ValueError(error)
    return get_store().update(
        'guests', {'guest_id': guest_id}, {'password_hash': generate_password_hash(new_password)}
    )


def delete_guest(guest_id: int) -> None:
    """
    Hard delete a guest (admin only).

    Raises:
        ConstraintError: If the guest still has reservations
    """
    store = get_store()
    store.find_one('guests', {'guest_id': guest_id})
    store.delete('guests', {'guest_id': guest_id})
