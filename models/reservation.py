"""
Reservation data access functions.

This module re-exports the split reservation modules:
- reservation_state.py: Status changes, room cascades, history
- reservation_crud.py: Create, read, update, delete operations
- reservation_availability.py: Date-overlap availability checks
"""

# =============================================================================
# RE-EXPORTS
# =============================================================================

# State management
from .reservation_state import (
    # Constants
    RESERVATION_STATUSES,
    TERMINAL_STATUSES,
    RELEASING_STATUSES,
    ROOM_STATUS_CASCADE,
    VALID_TRANSITIONS,
    # Transitions
    InvalidStateTransitionError,
    validate_status_transition,
    update_reservation_status,
    cancel_guest_reservation,
    # Room cascades
    get_reservation_room_numbers,
    set_rooms_status,
    release_rooms,
    # History
    get_status_history,
)

# CRUD operations
from .reservation_crud import (
    EDITABLE_STATUSES,
    check_booking,
    create_reservation,
    get_reservation_by_id,
    get_all_reservations,
    get_reservations_by_guest,
    update_reservation,
    delete_reservation,
)

# Availability
from .reservation_availability import (
    RoomUnavailableError,
    ranges_overlap,
    is_room_available,
    get_active_reservations,
    get_bookable_rooms,
    find_conflicts,
    ensure_rooms_bookable,
)
