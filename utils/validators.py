"""
Input validation helper functions.
Provides validation for common input types.
"""

import re
from datetime import date, datetime


PASSWORD_SPECIAL_CHARS = '!@#$%^&*(),.?":{}|<>'


def validate_email(email: str) -> bool:
    """
    Validate email format.

    Args:
        email: Email address to validate

    Returns:
        True if valid email format
    """
    if not email:
        return False

    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return bool(re.match(pattern, email))


def validate_phone(phone: str) -> bool:
    """
    Validate a contact number.
    Accepts an optional leading + and 7 to 15 digits, ignoring spaces,
    dashes and parentheses.

    Args:
        phone: Phone number to validate

    Returns:
        True if valid phone format
    """
    if not phone:
        return False

    cleaned = re.sub(r'[\s\-\(\)]', '', phone)
    return bool(re.match(r'^\+?[0-9]{7,15}$', cleaned))


def parse_date(value) -> date:
    """
    Coerce a date or an ISO YYYY-MM-DD string to a date.

    Raises:
        ValueError: If the value is empty or malformed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        raise ValueError('Date is required')
    try:
        return datetime.strptime(str(value)[:10], '%Y-%m-%d').date()
    except ValueError:
        raise ValueError(f'Invalid date: {value!r} (expected YYYY-MM-DD)')


def validate_date_range(start_date, end_date, allow_same_day: bool = False) -> bool:
    """
    Validate that the end date falls after the start date.

    Args:
        start_date: Start date (date or YYYY-MM-DD)
        end_date: End date (date or YYYY-MM-DD)
        allow_same_day: Accept end == start

    Returns:
        True if valid date range
    """
    try:
        start = parse_date(start_date)
        end = parse_date(end_date)
    except ValueError:
        return False
    return end >= start if allow_same_day else end > start


def validate_room_number(room: str) -> bool:
    """
    Validate hotel room number format.
    Accepts: digits, alphanumeric

    Args:
        room: Room number to validate

    Returns:
        True if valid room format
    """
    if not room:
        return False

    return bool(re.match(r'^[A-Z0-9]{1,10}$', str(room).upper()))


def validate_username(username: str, min_length: int = 3) -> tuple:
    """
    Validate a login username.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not username:
        return False, 'Username is required'

    if len(username) < min_length:
        return False, f'Username must be at least {min_length} characters'

    if not re.match(r'^[A-Za-z0-9._-]+$', username):
        return False, 'Username may only contain letters, numbers, dots, dashes and underscores'

    return True, ''


def validate_password(password: str, min_length: int = 6) -> tuple:
    """
    Validate password strength.
    Requires an uppercase letter, a lowercase letter, a digit and a
    special character.

    Args:
        password: Password to validate
        min_length: Minimum password length

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not password:
        return False, 'Password is required'

    if len(password) < min_length:
        return False, f'Password must be at least {min_length} characters'

    has_upper = any(c.isupper() for c in password)
    has_lower = any(c.islower() for c in password)
    has_digit = any(c.isdigit() for c in password)
    has_special = any(c in PASSWORD_SPECIAL_CHARS for c in password)

    if not (has_upper and has_lower and has_digit and has_special):
        return False, (
            'Password must contain at least one uppercase letter, one lowercase letter, '
            'one number, and one special character'
        )

    return True, ''


def sanitize_input(text: str, max_length: int = None) -> str:
    """
    Sanitize text input by trimming and limiting length.

    Args:
        text: Text to sanitize
        max_length: Maximum length (optional)

    Returns:
        Sanitized text
    """
    if not text:
        return ''

    sanitized = text.strip()

    if max_length and len(sanitized) > max_length:
        sanitized = sanitized[:max_length]

    return sanitized
