"""
Room data access functions.

Rooms are static reference data apart from status. Reservation-driven
status changes are written only by models.reservation_state; the one manual
flag exposed here is Maintenance.
"""

from database import get_store
from utils.validators import validate_room_number

ROOM_TYPES = ('Standard', 'Deluxe', 'Suite', 'Presidential')
BED_TYPES = ('Single', 'Twin', 'Double', 'Queen', 'King')

ROOM_STATUS_AVAILABLE = 'Available'
ROOM_STATUS_OCCUPIED = 'Occupied'
ROOM_STATUS_RESERVED = 'Reserved'
ROOM_STATUS_MAINTENANCE = 'Maintenance'

ROOM_STATUSES = (
    ROOM_STATUS_AVAILABLE,
    ROOM_STATUS_OCCUPIED,
    ROOM_STATUS_RESERVED,
    ROOM_STATUS_MAINTENANCE,
)

STATIC_FIELDS = (
    'room_type', 'bed_type', 'capacity', 'daily_rate', 'description',
    'amenities', 'floor_number', 'room_size_sqft', 'last_maintenance_date',
)


def _validate_room_fields(data: dict) -> None:
    if 'room_type' in data and data['room_type'] not in ROOM_TYPES:
        raise ValueError(f"Invalid room type: {data['room_type']}")
    if 'bed_type' in data and data['bed_type'] not in BED_TYPES:
        raise ValueError(f"Invalid bed type: {data['bed_type']}")
    if 'capacity' in data and int(data['capacity']) < 1:
        raise ValueError('Capacity must be at least 1')
    if 'daily_rate' in data and float(data['daily_rate']) < 0:
        raise ValueError('Daily rate cannot be negative')


def _serialize_amenities(data: dict) -> dict:
    """Amenities are stored as a comma-separated string."""
    amenities = data.get('amenities')
    if isinstance(amenities, (list, tuple)):
        data = dict(data, amenities=', '.join(str(a).strip() for a in amenities if str(a).strip()))
    return data


def get_all_rooms(room_type: str = None, status: str = None) -> list:
    """Get all rooms ordered by room number, optionally filtered."""
    filters = {}
    if room_type:
        filters['room_type'] = room_type
    if status:
        filters['status'] = status
    return get_store().find('rooms', filters, order_by='room_number')


def get_room_by_number(room_number: str) -> dict:
    """
    Get room by number.

    Returns:
        Room dict or None if not found
    """
    return get_store().first('rooms', {'room_number': room_number})


def get_available_rooms() -> list:
    """Rooms whose status flag is Available."""
    return get_all_rooms(status=ROOM_STATUS_AVAILABLE)


def create_room(room_number: str, room_type: str, capacity: int, daily_rate: float, **fields) -> dict:
    """
    Create a room. New rooms start Available.

    Raises:
        ValueError: If validation fails
        ConstraintError: If the room number exists
    """
    if not validate_room_number(room_number):
        raise ValueError(f'Invalid room number: {room_number}')

    data = {'room_type': room_type, 'capacity': capacity, 'daily_rate': daily_rate}
    data.update({k: v for k, v in fields.items() if k in STATIC_FIELDS})
    _validate_room_fields(data)

    return get_store().insert('rooms', {
        **_serialize_amenities(data),
        'room_number': str(room_number),
        'status': ROOM_STATUS_AVAILABLE,
    })


def update_room(room_number: str, fields: dict) -> dict:
    """
    Update static room fields.

    Raises:
        ValueError: If the patch tries to write status
    """
    if 'status' in fields:
        raise ValueError('Room status is managed by reservations; use the maintenance toggle')

    patch = {k: v for k, v in fields.items() if k in STATIC_FIELDS}
    _validate_room_fields(patch)
    return get_store().update('rooms', {'room_number': room_number}, _serialize_amenities(patch))


def set_room_maintenance(room_number: str, under_maintenance: bool) -> dict:
    """
    Toggle the manual Maintenance flag.

    A room that a reservation holds (Reserved or Occupied) cannot be
    flagged, so leaving maintenance can always return it to Available.

    Raises:
        ValueError: The room is Reserved or Occupied
        NotFoundError: If the room does not exist
    """
    from utils.datetime_helpers import get_today

    store = get_store()
    room = store.find_one('rooms', {'room_number': room_number})

    if under_maintenance:
        if room['status'] in (ROOM_STATUS_RESERVED, ROOM_STATUS_OCCUPIED):
            raise ValueError(
                f"Room {room_number} is {room['status']} and cannot be put under maintenance"
            )
        return store.update('rooms', {'room_number': room_number}, {
            'status': ROOM_STATUS_MAINTENANCE,
            'last_maintenance_date': get_today().isoformat(),
        })
    return store.update('rooms', {'room_number': room_number}, {'status': ROOM_STATUS_AVAILABLE})


def delete_room(room_number: str) -> None:
    """
    Delete a room.

    Raises:
        NotFoundError: If the room does not exist
        ConstraintError: If reservations still reference it
    """
    store = get_store()
    store.find_one('rooms', {'room_number': room_number})
    store.delete('rooms', {'room_number': room_number})
