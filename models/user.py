"""
Portal account model and data access functions.
Handles sign-in, account CRUD, and Flask-Login integration.

Admins and front-desk operators live in the users table; guests sign in
with their guest row. Session ids are namespaced as 'user:<id>' or
'guest:<id>' so the two tables never collide.
"""

import logging

from werkzeug.security import generate_password_hash, check_password_hash

from database import get_store
from utils.validators import validate_email, validate_password, validate_username

logger = logging.getLogger(__name__)

STAFF_ROLES = ('admin', 'front_desk')


class AuthError(Exception):
    """Raised when sign-in fails (unknown user, wrong password, disabled account)."""


class User:
    """
    User class for Flask-Login integration.
    Wraps an account or guest row with the properties Flask-Login requires.
    """

    def __init__(self, row: dict, kind: str = 'user'):
        """
        Initialize User from database row.

        Args:
            row: users or guests row
            kind: 'user' for portal accounts, 'guest' for guests
        """
        self.kind = kind
        self.entity_id = row['user_id'] if kind == 'user' else row['guest_id']
        self.username = row['username']
        self.email = row['email']
        self.first_name = row['first_name']
        self.last_name = row['last_name']
        self.role = row['role'] if kind == 'user' else 'guest'
        self.active = row.get('active', 1)

    @property
    def id(self):
        return f'{self.kind}:{self.entity_id}'

    @property
    def full_name(self) -> str:
        return f'{self.first_name} {self.last_name}'.strip()

    @property
    def is_authenticated(self):
        """Required by Flask-Login."""
        return True

    @property
    def is_active(self):
        """Required by Flask-Login."""
        return self.active == 1

    @property
    def is_anonymous(self):
        """Required by Flask-Login."""
        return False

    def get_id(self):
        """Required by Flask-Login."""
        return self.id

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'full_name': self.full_name,
            'role': self.role,
        }


# =============================================================================
# LOOKUPS
# =============================================================================

def get_user_by_id(user_id: int) -> dict:
    """
    Get portal account by ID.

    Returns:
        Account dict or None if not found
    """
    return get_store().first('users', {'user_id': user_id})


def get_user_by_username(username: str) -> dict:
    """
    Get portal account by username.

    Returns:
        Account dict or None if not found
    """
    return get_store().first('users', {'username': username})


def get_all_users(active_only: bool = True) -> list:
    """
    Get all portal accounts.

    Args:
        active_only: If True, only return active accounts

    Returns:
        List of account dicts, newest first
    """
    filters = {'active': 1} if active_only else {}
    return get_store().find('users', filters, order_by='-created_at')


def is_username_taken(username: str) -> bool:
    """Usernames are unique across portal accounts and guests."""
    store = get_store()
    return (
        store.count('users', {'username': username}) > 0
        or store.count('guests', {'username': username}) > 0
    )


def load_account(session_id: str):
    """
    Resolve a namespaced session id back to a User.

    Returns:
        User or None
    """
    kind, _, raw_id = (session_id or '').partition(':')
    if not raw_id.isdigit():
        return None

    store = get_store()
    if kind == 'user':
        row = store.first('users', {'user_id': int(raw_id)})
    elif kind == 'guest':
        row = store.first('guests', {'guest_id': int(raw_id)})
    else:
        return None
    return User(row, kind) if row else None


# =============================================================================
# AUTHENTICATION
# =============================================================================

def check_password(row: dict, password: str) -> bool:
    """
    Verify password against stored hash.

    Args:
        row: Account or guest dict with password_hash
        password: Plain text password to check

    Returns:
        True if password matches
    """
    if not row or not password:
        return False
    return check_password_hash(row['password_hash'], password)


def sign_in(username: str, password: str) -> User:
    """
    Authenticate a portal account or guest.

    Args:
        username: Login name
        password: Plain text password

    Returns:
        User for the matching account

    Raises:
        AuthError: If the credentials do not match or the account is disabled
    """
    row = get_user_by_username(username)
    kind = 'user'
    if row is None:
        row = get_store().first('guests', {'username': username})
        kind = 'guest'

    if row is None or not check_password(row, password):
        logger.info("Failed sign-in for %r", username)
        raise AuthError('Invalid username or password')

    user = User(row, kind)
    if not user.is_active:
        raise AuthError('This account has been disabled')

    if kind == 'user':
        update_last_login(user.entity_id)
    return user


# =============================================================================
# ACCOUNT CRUD
# =============================================================================

def create_user(username: str, email: str, password: str, first_name: str, last_name: str,
                role: str = 'front_desk', contact_number: str = None) -> dict:
    """
    Create a portal account with a hashed password.

    Returns:
        New account dict

    Raises:
        ValueError: If validation fails or the username is taken
    """
    if role not in STAFF_ROLES:
        raise ValueError(f'Invalid role: {role}')

    valid, error = validate_username(username)
    if not valid:
        raise ValueError(error)
    if not validate_email(email):
        raise ValueError('Invalid email address')
    valid, error = validate_password(password)
    if not valid:
        raise ValueError(error)
    if is_username_taken(username):
        raise ValueError('Username already exists')

    return get_store().insert('users', {
        'username': username,
        'email': email,
        'password_hash': generate_password_hash(password),
        'first_name': first_name,
        'last_name': last_name,
        'contact_number': contact_number,
        'role': role,
    })


def update_user(user_id: int, **kwargs) -> dict:
    """
    Update account fields.

    Args:
        user_id: Account ID to update
        **kwargs: Fields to update (email, first_name, last_name, contact_number, role, active)

    Returns:
        Updated account dict
    """
    allowed_fields = ['email', 'first_name', 'last_name', 'contact_number', 'role', 'active']
    patch = {field: kwargs[field] for field in allowed_fields if field in kwargs}

    if 'role' in patch and patch['role'] not in STAFF_ROLES:
        raise ValueError(f"Invalid role: {patch['role']}")
    if 'email' in patch and not validate_email(patch['email']):
        raise ValueError('Invalid email address')

    return get_store().update('users', {'user_id': user_id}, patch)


def update_password(user_id: int, new_password: str) -> dict:
    """
    Update account password.

    Args:
        user_id: Account ID
        new_password: New plain text password (will be hashed)
    """
    valid, error = validate_password(new_password)
    if not valid:
        raise ValueError(error)
    return get_store().update(
        'users', {'user_id': user_id}, {'password_hash': generate_password_hash(new_password)}
    )


def delete_user(user_id: int) -> dict:
    """Soft delete account (set active = 0)."""
    return get_store().update('users', {'user_id': user_id}, {'active': 0})


def update_last_login(user_id: int) -> None:
    """Update last login timestamp."""
    from utils.datetime_helpers import get_now_iso

    get_store().update('users', {'user_id': user_id}, {'last_login': get_now_iso()})
