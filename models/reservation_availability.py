"""
Room availability checking.

A room is free for [check_in, check_out) when no active reservation on that
room overlaps the range. Ranges are half-open: a check-out on the same day as
another booking's check-in is a turnover, not a conflict.

Maintenance is a separate predicate: rooms flagged Maintenance are dropped
before the date check ever runs.
"""

from database import get_store
from .reservation_state import RELEASING_STATUSES
from utils.messages import MESSAGES
from utils.validators import parse_date


# =============================================================================
# PURE CHECKS
# =============================================================================

def ranges_overlap(a_in, a_out, b_in, b_out) -> bool:
    """
    Half-open range overlap: a_in < b_out and a_out > b_in.

    Args:
        a_in, a_out: First stay (date or YYYY-MM-DD)
        b_in, b_out: Second stay (date or YYYY-MM-DD)

    Returns:
        bool: True if the two stays share at least one night
    """
    return parse_date(a_in) < parse_date(b_out) and parse_date(a_out) > parse_date(b_in)


def _room_numbers(reservation: dict) -> list:
    rooms = reservation.get('rooms') or []
    return [r['room_number'] if isinstance(r, dict) else r for r in rooms]


def is_room_available(room_number: str, check_in, check_out, active_reservations: list) -> bool:
    """
    Check one room against a list of active reservations.

    Args:
        room_number: Room to check
        check_in: Requested check-in (date, YYYY-MM-DD or None)
        check_out: Requested check-out (date, YYYY-MM-DD or None)
        active_reservations: Reservation dicts with a 'rooms' list
            (room dicts or plain room numbers)

    Returns:
        bool: False on the first conflicting reservation. True when either
        requested date is unset, since there is nothing to compare yet.
    """
    if not check_in or not check_out:
        return True

    room_number = str(room_number)
    for reservation in active_reservations:
        if room_number not in (str(n) for n in _room_numbers(reservation)):
            continue
        if ranges_overlap(check_in, check_out,
                          reservation['check_in_date'], reservation['check_out_date']):
            return False
    return True


# =============================================================================
# STORE-BACKED QUERIES
# =============================================================================

def get_active_reservations(exclude_reservation_id: int = None) -> list:
    """
    Load reservations that still hold their rooms.

    Args:
        exclude_reservation_id: Reservation to leave out (for edits)

    Returns:
        list: Reservation dicts with rooms joined
    """
    active = [
        r for r in get_store().find('reservations', order_by='check_in_date', joins=['rooms'])
        if r['status'] not in RELEASING_STATUSES
    ]
    if exclude_reservation_id is not None:
        active = [r for r in active if r['reservation_id'] != int(exclude_reservation_id)]
    return active


def get_bookable_rooms(check_in, check_out, room_type: str = None, min_capacity: int = None) -> list:
    """
    Rooms that can be booked for a stay.

    Args:
        check_in: Requested check-in
        check_out: Requested check-out
        room_type: Optional room type filter
        min_capacity: Optional minimum capacity

    Returns:
        list: Room dicts ordered by room number
    """
    filters = {'status__ne': 'Maintenance'}
    if room_type:
        filters['room_type'] = room_type
    if min_capacity:
        filters['capacity__gte'] = int(min_capacity)

    rooms = get_store().find('rooms', filters, order_by='room_number')
    active = get_active_reservations()
    return [
        room for room in rooms
        if is_room_available(room['room_number'], check_in, check_out, active)
    ]


def find_conflicts(room_numbers: list, check_in, check_out, exclude_reservation_id: int = None) -> list:
    """
    Report which requested rooms are taken for the stay.

    Args:
        room_numbers: Requested rooms
        check_in: Requested check-in
        check_out: Requested check-out
        exclude_reservation_id: Reservation being edited, ignored in the check

    Returns:
        list: [{'room_number', 'reservation_id', 'check_in_date', 'check_out_date'}]
    """
    if not room_numbers or not check_in or not check_out:
        return []

    conflicts = []
    active = get_active_reservations(exclude_reservation_id)
    for room_number in room_numbers:
        for reservation in active:
            if str(room_number) not in (str(n) for n in _room_numbers(reservation)):
                continue
            if ranges_overlap(check_in, check_out,
                              reservation['check_in_date'], reservation['check_out_date']):
                conflicts.append({
                    'room_number': str(room_number),
                    'reservation_id': reservation['reservation_id'],
                    'check_in_date': reservation['check_in_date'],
                    'check_out_date': reservation['check_out_date'],
                })
    return conflicts


class RoomUnavailableError(ValueError):
    """Raised when requested rooms are under maintenance or already booked."""

    def __init__(self, message: str, conflicts: list = None):
        self.conflicts = conflicts or []
        super().__init__(message)


def ensure_rooms_bookable(room_numbers: list, check_in, check_out, total_guests: int = None,
                          exclude_reservation_id: int = None) -> None:
    """
    Guard used before a booking is written.

    Raises:
        ValueError: Unknown rooms or too many guests for the rooms
        RoomUnavailableError: Maintenance rooms or date conflicts
    """
    rooms = get_store().find('rooms', {'room_number__in': [str(n) for n in room_numbers]})
    missing = sorted(set(str(n) for n in room_numbers) - {r['room_number'] for r in rooms})
    if missing:
        raise ValueError(MESSAGES['not_found'].format(entity=f"Room {', '.join(missing)}"))

    maintenance = [r['room_number'] for r in rooms if r['status'] == 'Maintenance']
    if maintenance:
        raise RoomUnavailableError(MESSAGES['room_in_maintenance'].format(room=', '.join(maintenance)))

    if total_guests:
        capacity = sum(r['capacity'] for r in rooms)
        if int(total_guests) > capacity:
            raise ValueError(MESSAGES['capacity_exceeded'].format(capacity=capacity))

    conflicts = find_conflicts(room_numbers, check_in, check_out, exclude_reservation_id)
    if conflicts:
        rooms_text = ', '.join(sorted({c['room_number'] for c in conflicts}))
        raise RoomUnavailableError(MESSAGES['rooms_unavailable'].format(rooms=rooms_text), conflicts)
