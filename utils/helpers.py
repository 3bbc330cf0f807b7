"""
Miscellaneous utility helper functions.
Provides common functionality used across the application.
"""

import random
import re
import secrets
import string
import time

from flask import request

from utils.validators import PASSWORD_SPECIAL_CHARS

PRIVATE_FIELDS = ('password_hash',)


def generate_transaction_id() -> str:
    """
    Generate a payment transaction id.

    Format: TXN-<epoch millis>-<0..9999>
    """
    return f'TXN-{int(time.time() * 1000)}-{random.randint(0, 9999)}'


def generate_receipt_number(prefix: str = 'RCPT', length: int = 8) -> str:
    """
    Generate a receipt number.

    Args:
        prefix: Prefix for the code
        length: Length of random part

    Returns:
        Receipt number string
    """
    random_part = ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))
    return f'{prefix}-{random_part}'


def generate_walk_in_username(first_name: str, last_name: str) -> str:
    """Build a walk-in login name: first.last.<last 6 digits of epoch millis>."""
    def clean(value):
        return re.sub(r'[^a-z0-9]', '', (value or '').lower()) or 'guest'

    suffix = str(int(time.time() * 1000))[-6:]
    return f'{clean(first_name)}.{clean(last_name)}.{suffix}'


def generate_password(length: int = 10) -> str:
    """
    Generate a random password that passes validate_password.

    One character of each required class, the rest drawn from the full
    alphabet, then shuffled.
    """
    length = max(length, 6)
    alphabet = string.ascii_letters + string.digits + PASSWORD_SPECIAL_CHARS
    chars = [
        secrets.choice(string.ascii_uppercase),
        secrets.choice(string.ascii_lowercase),
        secrets.choice(string.digits),
        secrets.choice(PASSWORD_SPECIAL_CHARS),
    ]
    chars += [secrets.choice(alphabet) for _ in range(length - len(chars))]
    secrets.SystemRandom().shuffle(chars)
    return ''.join(chars)


def strip_private_fields(row):
    """Remove credential columns from a row, a list of rows, or nested joins."""
    if isinstance(row, list):
        return [strip_private_fields(r) for r in row]
    if not isinstance(row, dict):
        return row
    return {k: strip_private_fields(v) for k, v in row.items() if k not in PRIVATE_FIELDS}


def get_json_body() -> dict:
    """
    Read the request JSON object.

    Raises:
        ValueError: If the body is missing or not a JSON object
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValueError('A JSON body is required')
    return data


def parse_bool(value) -> bool:
    """Interpret JSON booleans, numbers and 'true'/'false' style strings."""
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'yes', 'on')
    return bool(value)
