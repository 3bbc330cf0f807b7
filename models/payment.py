"""
Payment data access functions.

Payments are recorded as given: partial and over-payments are accepted and
nothing is reconciled against the cost of the stay.
"""

import logging

from database import get_store
from utils.datetime_helpers import get_today
from utils.helpers import generate_receipt_number, generate_transaction_id
from utils.validators import parse_date

logger = logging.getLogger(__name__)

PAYMENT_METHODS = ('Cash', 'Credit Card', 'Debit Card', 'Bank Transfer', 'E-Wallet')
PAYMENT_STATUSES = ('Completed', 'Pending', 'Failed', 'Refunded')

UPDATABLE_FIELDS = (
    'payment_date', 'amount_paid', 'payment_method', 'transaction_id',
    'payment_status', 'refund_amount', 'notes', 'receipt_number',
)


def _validate_payment_fields(data: dict) -> dict:
    """Shape checks only. Returns a normalized copy."""
    data = dict(data)

    if 'amount_paid' in data:
        try:
            data['amount_paid'] = float(data['amount_paid'])
        except (TypeError, ValueError):
            raise ValueError('amount_paid must be a number')
        if data['amount_paid'] <= 0:
            raise ValueError('amount_paid must be greater than zero')

    if 'refund_amount' in data and data['refund_amount'] is not None:
        data['refund_amount'] = float(data['refund_amount'])
        if data['refund_amount'] < 0:
            raise ValueError('refund_amount cannot be negative')

    if 'payment_method' in data and data['payment_method'] not in PAYMENT_METHODS:
        raise ValueError(f"Invalid payment method: {data['payment_method']}")

    if 'payment_status' in data and data['payment_status'] not in PAYMENT_STATUSES:
        raise ValueError(f"Invalid payment status: {data['payment_status']}")

    if 'payment_date' in data:
        data['payment_date'] = parse_date(data['payment_date']).isoformat()

    return data


def validate_payment(amount_paid, payment_method) -> dict:
    """
    Check a payment before anything is written for it.

    Returns:
        dict: {'amount_paid': float, 'payment_method': str}

    Raises:
        ValueError: Missing or invalid amount or method
    """
    if amount_paid in (None, ''):
        raise ValueError('amount_paid is required')
    if not payment_method:
        raise ValueError('payment_method is required')
    return _validate_payment_fields({'amount_paid': amount_paid, 'payment_method': payment_method})


def record_payment(reservation_id: int, amount_paid: float, payment_method: str,
                   payment_date=None, transaction_id: str = None,
                   payment_status: str = 'Completed', notes: str = None) -> dict:
    """
    Record a payment against a reservation.

    Args:
        reservation_id: Reservation being paid
        amount_paid: Amount (> 0)
        payment_method: One of PAYMENT_METHODS
        payment_date: Date paid (default: today)
        transaction_id: External reference (generated when omitted)
        payment_status: One of PAYMENT_STATUSES
        notes: Free text

    Returns:
        dict: Stored payment

    Raises:
        ValueError: Invalid amount, method, status or date
        NotFoundError: Reservation does not exist
    """
    data = _validate_payment_fields({
        'amount_paid': amount_paid,
        'payment_method': payment_method,
        'payment_status': payment_status,
        'payment_date': payment_date or get_today(),
    })

    store = get_store()
    store.find_one('reservations', {'reservation_id': reservation_id})

    payment = store.insert('payments', {
        **data,
        'reservation_id': int(reservation_id),
        'transaction_id': transaction_id or generate_transaction_id(),
        'receipt_number': generate_receipt_number(),
        'notes': notes,
    })
    logger.info("Payment %s of %.2f recorded for reservation %s",
                payment['payment_id'], payment['amount_paid'], reservation_id)
    return payment


def get_payment_by_id(payment_id: int) -> dict:
    return get_store().first('payments', {'payment_id': payment_id}, joins=['reservation'])


def get_payments_by_reservation(reservation_id: int) -> list:
    """Payments for one reservation, oldest first."""
    return get_store().find(
        'payments', {'reservation_id': reservation_id}, order_by=['payment_date', 'payment_id']
    )


def get_all_payments() -> list:
    """All payments, newest first, joined to their reservation and guest."""
    return get_store().find(
        'payments', order_by=['-payment_date', '-payment_id'], joins=['reservation.guest']
    )


def get_total_paid(reservation_id: int) -> float:
    """Sum of completed payments minus refunds for a reservation."""
    total = 0.0
    for payment in get_payments_by_reservation(reservation_id):
        if payment['payment_status'] == 'Completed':
            total += payment['amount_paid'] - (payment['refund_amount'] or 0)
    return round(total, 2)


def update_payment(payment_id: int, fields: dict) -> dict:
    """
    Update payment fields (admin only).

    Raises:
        NotFoundError: Payment does not exist
    """
    patch = _validate_payment_fields({k: v for k, v in fields.items() if k in UPDATABLE_FIELDS})
    return get_store().update('payments', {'payment_id': payment_id}, patch)


def delete_payment(payment_id: int) -> None:
    store = get_store()
    store.find_one('payments', {'payment_id': payment_id})
    store.delete('payments', {'payment_id': payment_id})
    logger.info("Payment %s deleted", payment_id)
