"""
Reservation CRUD operations.
Handles create, read, update, delete for reservations and their room and
staff assignments.
"""

import logging

from database import get_store
from utils.datetime_helpers import get_now_iso
from utils.validators import parse_date, validate_date_range
from .reservation_availability import ensure_rooms_bookable
from .reservation_state import (
    RESERVATION_STATUSES,
    STATUS_CONFIRMED,
    STATUS_PENDING_PAYMENT,
    STATUS_RESERVED,
    get_reservation_room_numbers,
    record_status_change,
    release_rooms,
    set_rooms_status,
    unit_of_work,
)

logger = logging.getLogger(__name__)

RESERVATION_JOINS = ['guest', 'rooms', 'staff']

# Statuses whose details and rooms may still be edited
EDITABLE_STATUSES = (STATUS_PENDING_PAYMENT, STATUS_CONFIRMED, STATUS_RESERVED)

UPDATABLE_FIELDS = ('guest_id', 'check_in_date', 'check_out_date', 'total_guests', 'special_requests')


def _validate_stay(check_in_date, check_out_date, total_guests) -> tuple:
    """Normalize dates to ISO strings and the guest count to an int."""
    check_in = parse_date(check_in_date)
    check_out = parse_date(check_out_date)
    if not validate_date_range(check_in, check_out):
        raise ValueError('Check-out date must be after check-in date')

    if isinstance(total_guests, bool):
        raise ValueError('total_guests must be a whole number')
    try:
        guests = int(total_guests)
    except (TypeError, ValueError):
        raise ValueError('total_guests must be a whole number')
    if guests < 1:
        raise ValueError('total_guests must be at least 1')

    return check_in.isoformat(), check_out.isoformat(), guests


def _normalize_rooms(room_numbers) -> list:
    rooms = []
    if isinstance(room_numbers, str):
        room_numbers = [room_numbers]
    for number in room_numbers or []:
        number = str(number).strip()
        if number and number not in rooms:
            rooms.append(number)
    return rooms


def _normalize_staff(staff_ids) -> list:
    ids = []
    for staff_id in staff_ids or []:
        staff_id = int(staff_id)
        if staff_id not in ids:
            ids.append(staff_id)
    return ids


def check_booking(check_in_date, check_out_date, total_guests, room_numbers,
                  check_availability: bool = True) -> tuple:
    """
    Validate a prospective booking without writing anything.

    Routes that create other records alongside a reservation (walk-in
    guests, checkout payments) call this first so a rejected booking leaves
    nothing behind.

    Returns:
        tuple: (check_in, check_out, total_guests, rooms) normalized

    Raises:
        ValueError: Invalid dates, guest count or rooms
        RoomUnavailableError: check_availability set and rooms are taken
    """
    check_in, check_out, guests = _validate_stay(check_in_date, check_out_date, total_guests)
    rooms = _normalize_rooms(room_numbers)
    if not rooms:
        raise ValueError('At least one room is required')

    if check_availability:
        ensure_rooms_bookable(rooms, check_in, check_out, guests)

    return check_in, check_out, guests, rooms


# =============================================================================
# CREATE
# =============================================================================

def create_reservation(guest_id: int, check_in_date, check_out_date, total_guests: int,
                       room_numbers: list, staff_ids: list = None, special_requests: str = None,
                       status: str = STATUS_RESERVED, is_walk_in: bool = False,
                       created_by: str = None, check_availability: bool = False) -> dict:
    """
    Create a reservation with its rooms and staff.

    Behavior:
    1. Inserts the reservation row
    2. Links each room and marks it Reserved
    3. Links each staff member
    4. Records the initial status in history

    Args:
        guest_id: Guest ID
        check_in_date: Check-in (date or YYYY-MM-DD)
        check_out_date: Check-out (date or YYYY-MM-DD)
        total_guests: Number of guests
        room_numbers: Rooms to book (at least one)
        staff_ids: Staff members handling the booking
        special_requests: Free text
        status: Initial status (Reserved, or Pending Payment for online checkout)
        is_walk_in: Booked at the front desk
        created_by: Username creating the reservation
        check_availability: Reject rooms that are in maintenance or already booked

    Returns:
        dict: Reservation with guest, rooms and staff joined

    Raises:
        ValueError: Invalid input
        RoomUnavailableError: check_availability set and rooms are taken
        StoreError: Store failure (earlier steps stay committed unless
            ATOMIC_RESERVATION_WRITES is on)
    """
    if status not in RESERVATION_STATUSES:
        raise ValueError(f'Invalid reservation status: {status}')
    staff = _normalize_staff(staff_ids)

    check_in, check_out, guests, rooms = check_booking(
        check_in_date, check_out_date, total_guests, room_numbers,
        check_availability=check_availability
    )

    store = get_store()
    with unit_of_work():
        reservation = store.insert('reservations', {
            'guest_id': int(guest_id),
            'check_in_date': check_in,
            'check_out_date': check_out,
            'total_guests': guests,
            'special_requests': special_requests,
            'status': status,
            'is_walk_in': 1 if is_walk_in else 0,
            'created_by': created_by,
            'created_at': get_now_iso(),
        })
        reservation_id = reservation['reservation_id']

        store.insert('reservation_room', [
            {'reservation_id': reservation_id, 'room_number': number} for number in rooms
        ])
        set_rooms_status(rooms, 'Reserved')

        if staff:
            store.insert('reservation_staff', [
                {'reservation_id': reservation_id, 'staff_id': staff_id} for staff_id in staff
            ])

        record_status_change(reservation_id, None, status, created_by)

    logger.info("Reservation %s created for guest %s, rooms %s", reservation_id, guest_id, rooms)
    return get_reservation_by_id(reservation_id)


# =============================================================================
# READ
# =============================================================================

def get_reservation_by_id(reservation_id: int) -> dict:
    """
    Get reservation with guest, rooms and staff.

    Returns:
        Reservation dict or None if not found
    """
    return get_store().first('reservations', {'reservation_id': reservation_id}, joins=RESERVATION_JOINS)


def get_all_reservations(status: str = None) -> list:
    """
    List reservations, newest first.

    Args:
        status: Optional status filter

    Returns:
        list: Reservations with guest, rooms and staff joined
    """
    filters = {'status': status} if status else {}
    return get_store().find(
        'reservations', filters, order_by=['-created_at', '-reservation_id'], joins=RESERVATION_JOINS
    )


def get_reservations_by_guest(guest_id: int) -> list:
    """A guest's reservations, upcoming stays first."""
    return get_store().find(
        'reservations', {'guest_id': guest_id},
        order_by=['-check_in_date', '-reservation_id'], joins=['rooms']
    )


# =============================================================================
# UPDATE
# =============================================================================

def update_reservation(reservation_id: int, fields: dict, room_numbers: list = None,
                       staff_ids: list = None, updated_by: str = None,
                       check_availability: bool = False) -> dict:
    """
    Edit reservation details and optionally replace its rooms or staff.

    When room_numbers is given, the old rooms are released, the links are
    replaced, and the new rooms are marked Reserved. Staff links are replaced
    wholesale when staff_ids is given. Status goes through
    update_reservation_status instead.

    Returns:
        dict: Reservation with guest, rooms and staff joined

    Raises:
        ValueError: Invalid input, a status change was attempted, or the
            reservation is no longer editable (see EDITABLE_STATUSES)
        NotFoundError: Reservation does not exist
    """
    if 'status' in fields:
        raise ValueError('Use the status endpoint to change reservation status')

    store = get_store()
    current = store.find_one('reservations', {'reservation_id': reservation_id})
    if current['status'] not in EDITABLE_STATUSES:
        raise ValueError(f"A {current['status']} reservation can no longer be edited")

    patch = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS}
    check_in, check_out, guests = _validate_stay(
        patch.get('check_in_date', current['check_in_date']),
        patch.get('check_out_date', current['check_out_date']),
        patch.get('total_guests', current['total_guests']),
    )
    if 'total_guests' in patch:
        patch['total_guests'] = guests
    if 'check_in_date' in patch:
        patch['check_in_date'] = check_in
    if 'check_out_date' in patch:
        patch['check_out_date'] = check_out

    rooms = _normalize_rooms(room_numbers) if room_numbers is not None else None
    if rooms is not None and not rooms:
        raise ValueError('At least one room is required')

    if check_availability:
        ensure_rooms_bookable(
            rooms if rooms is not None else get_reservation_room_numbers(reservation_id),
            check_in, check_out, guests,
            exclude_reservation_id=reservation_id,
        )

    patch['updated_at'] = get_now_iso()
    patch['updated_by'] = updated_by

    with unit_of_work():
        store.update('reservations', {'reservation_id': reservation_id}, patch)

        if rooms is not None:
            release_rooms(reservation_id)
            store.delete('reservation_room', {'reservation_id': reservation_id})
            store.insert('reservation_room', [
                {'reservation_id': reservation_id, 'room_number': number} for number in rooms
            ])
            set_rooms_status(rooms, 'Reserved')

        if staff_ids is not None:
            store.delete('reservation_staff', {'reservation_id': reservation_id})
            staff = _normalize_staff(staff_ids)
            if staff:
                store.insert('reservation_staff', [
                    {'reservation_id': reservation_id, 'staff_id': staff_id} for staff_id in staff
                ])

    logger.info("Reservation %s updated by %s", reservation_id, updated_by)
    return get_reservation_by_id(reservation_id)


# =============================================================================
# DELETE
# =============================================================================

def delete_reservation(reservation_id: int) -> None:
    """
    Delete a reservation.
    Its rooms go back to Available; room, staff and payment rows cascade.

    Raises:
        NotFoundError: Reservation does not exist
    """
    store = get_store()
    store.find_one('reservations', {'reservation_id': reservation_id})

    with unit_of_work():
        release_rooms(reservation_id)
        store.delete('reservations', {'reservation_id': reservation_id})

    logger.info("Reservation %s deleted", reservation_id)
