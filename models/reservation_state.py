"""
Reservation state management functions.
Handles status changes, room status cascades, and status history.

Room status is written here and nowhere else (apart from the manual
Maintenance toggle in models.room).
"""

import contextlib
import logging

from flask import current_app

from database import NotFoundError, get_store
from utils.datetime_helpers import get_now_iso

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

STATUS_PENDING_PAYMENT = 'Pending Payment'
STATUS_CONFIRMED = 'Confirmed'
STATUS_RESERVED = 'Reserved'
STATUS_CHECKED_IN = 'Checked-In'
STATUS_CHECKED_OUT = 'Checked-Out'
STATUS_CANCELLED = 'Cancelled'
STATUS_NO_SHOW = 'No-Show'
STATUS_REFUNDED = 'Refunded'

RESERVATION_STATUSES = (
    STATUS_PENDING_PAYMENT,
    STATUS_CONFIRMED,
    STATUS_RESERVED,
    STATUS_CHECKED_IN,
    STATUS_CHECKED_OUT,
    STATUS_CANCELLED,
    STATUS_NO_SHOW,
    STATUS_REFUNDED,
)

TERMINAL_STATUSES = frozenset({
    STATUS_CHECKED_OUT, STATUS_CANCELLED, STATUS_NO_SHOW, STATUS_REFUNDED,
})

# Statuses whose reservations no longer hold their rooms
RELEASING_STATUSES = TERMINAL_STATUSES

# New reservation status -> room status written to its rooms
ROOM_STATUS_CASCADE = {
    STATUS_CHECKED_IN: 'Occupied',
    STATUS_CHECKED_OUT: 'Available',
    STATUS_CANCELLED: 'Available',
    STATUS_NO_SHOW: 'Available',
}

VALID_TRANSITIONS = {
    STATUS_PENDING_PAYMENT: {STATUS_CONFIRMED, STATUS_CANCELLED},
    STATUS_CONFIRMED: {STATUS_RESERVED, STATUS_CHECKED_IN, STATUS_CANCELLED, STATUS_NO_SHOW},
    STATUS_RESERVED: {STATUS_CHECKED_IN, STATUS_CANCELLED, STATUS_NO_SHOW},
    STATUS_CHECKED_IN: {STATUS_CHECKED_OUT},
    STATUS_CHECKED_OUT: set(),
    STATUS_CANCELLED: {STATUS_REFUNDED},
    STATUS_NO_SHOW: set(),
    STATUS_REFUNDED: set(),
}


class InvalidStateTransitionError(ValueError):
    """Raised when a status change is not allowed by VALID_TRANSITIONS."""

    def __init__(self, old_status: str, new_status: str):
        self.old_status = old_status
        self.new_status = new_status
        super().__init__(f"Cannot change reservation from '{old_status}' to '{new_status}'")


def validate_status_transition(old_status: str, new_status: str, enforce: bool = False) -> bool:
    """
    Check a status change against the transition graph.

    Status changes are unguarded by default: any known status may follow any
    other. Callers that want the graph enforced pass enforce=True.

    Args:
        old_status: Current status
        new_status: Requested status
        enforce: Raise on transitions outside VALID_TRANSITIONS

    Returns:
        bool: True if the transition is in the graph (or is a no-op)

    Raises:
        ValueError: If new_status is not a known status
        InvalidStateTransitionError: If enforce is set and the move is not allowed
    """
    if new_status not in RESERVATION_STATUSES:
        raise ValueError(f'Invalid reservation status: {new_status}')

    allowed = old_status == new_status or new_status in VALID_TRANSITIONS.get(old_status, set())
    if not allowed and enforce:
        raise InvalidStateTransitionError(old_status, new_status)
    return allowed


def unit_of_work():
    """
    Transaction for a multi-step reservation write when ATOMIC_RESERVATION_WRITES
    is on; otherwise each store call commits on its own.
    """
    if current_app.config.get('ATOMIC_RESERVATION_WRITES'):
        return get_store().transaction()
    return contextlib.nullcontext()


# =============================================================================
# ROOM CASCADES
# =============================================================================

def get_reservation_room_numbers(reservation_id: int) -> list:
    """Room numbers linked to a reservation, in room order."""
    links = get_store().find(
        'reservation_room', {'reservation_id': reservation_id}, order_by='room_number'
    )
    return [link['room_number'] for link in links]


def set_rooms_status(room_numbers: list, status: str) -> list:
    """
    Write a status to a set of rooms.

    Returns:
        list: Updated room dicts
    """
    if not room_numbers:
        return []
    return get_store().update_many('rooms', {'room_number__in': list(room_numbers)}, {'status': status})


def release_rooms(reservation_id: int) -> list:
    """Set every room of a reservation back to Available."""
    return set_rooms_status(get_reservation_room_numbers(reservation_id), 'Available')


# =============================================================================
# STATUS TRANSITIONS
# =============================================================================

def record_status_change(reservation_id: int, old_status: str, new_status: str, changed_by: str = None) -> dict:
    """Append a status history entry."""
    return get_store().insert('reservation_status_history', {
        'reservation_id': reservation_id,
        'old_status': old_status,
        'new_status': new_status,
        'changed_by': changed_by,
        'created_at': get_now_iso(),
    })


def update_reservation_status(reservation_id: int, new_status: str, changed_by: str = None,
                              enforce_transitions: bool = False) -> dict:
    """
    Change reservation status and cascade to its rooms.

    Behavior:
    1. Checked-In stamps check_in_time and marks rooms Occupied
    2. Checked-Out stamps check_out_time and marks rooms Available
    3. Cancelled / No-Show mark rooms Available
    4. Any other status is a plain status write
    5. Records the change in history

    Args:
        reservation_id: Reservation ID
        new_status: Target status
        changed_by: Username making the change
        enforce_transitions: Reject moves outside VALID_TRANSITIONS

    Returns:
        dict: Updated reservation row

    Raises:
        ValueError: Unknown status
        NotFoundError: Reservation does not exist
        InvalidStateTransitionError: enforce_transitions set and move not allowed
    """
    store = get_store()
    reservation = store.find_one('reservations', {'reservation_id': reservation_id})
    old_status = reservation['status']
    validate_status_transition(old_status, new_status, enforce=enforce_transitions)

    now = get_now_iso()
    patch = {'status': new_status, 'updated_at': now, 'updated_by': changed_by}
    if new_status == STATUS_CHECKED_IN:
        patch['check_in_time'] = now
    elif new_status == STATUS_CHECKED_OUT:
        patch['check_out_time'] = now

    with unit_of_work():
        updated = store.update('reservations', {'reservation_id': reservation_id}, patch)

        room_status = ROOM_STATUS_CASCADE.get(new_status)
        if room_status:
            set_rooms_status(get_reservation_room_numbers(reservation_id), room_status)

        record_status_change(reservation_id, old_status, new_status, changed_by)

    logger.info("Reservation %s: %s -> %s by %s", reservation_id, old_status, new_status, changed_by)
    return updated


def cancel_guest_reservation(reservation_id: int, guest_id: int, changed_by: str = None) -> dict:
    """
    Guest-scoped cancellation.

    Raises:
        NotFoundError: Reservation does not exist or belongs to another guest
        ValueError: Reservation is already finished (checked out, refunded)
    """
    reservation = get_store().first(
        'reservations', {'reservation_id': reservation_id, 'guest_id': guest_id}
    )
    if reservation is None:
        raise NotFoundError(f"reservations not found: {reservation_id}")

    if reservation['status'] in (STATUS_CHECKED_IN, STATUS_CHECKED_OUT, STATUS_REFUNDED, STATUS_NO_SHOW):
        raise ValueError(f"A reservation that is {reservation['status']} cannot be cancelled")

    return update_reservation_status(reservation_id, STATUS_CANCELLED, changed_by=changed_by)


# =============================================================================
# HISTORY
# =============================================================================

def get_status_history(reservation_id: int) -> list:
    """
    Get status change history for reservation.

    Args:
        reservation_id: Reservation ID

    Returns:
        list: History entries, newest first
    """
    return get_store().find(
        'reservation_status_history', {'reservation_id': reservation_id}, order_by=['-created_at', '-id']
    )
