"""
Centralized user-facing messages.
All API text lives here for consistency across portals.
"""

MESSAGES = {
    # Success messages
    'login_success': 'Welcome {name}',
    'logout_success': 'Signed out successfully',
    'registration_success': 'Account created successfully',
    'profile_updated': 'Profile updated successfully',
    'password_updated': 'Password changed successfully',
    'account_created': 'Account created successfully',
    'account_deactivated': 'Account deactivated',
    'account_role_updated': 'Account role updated',
    'guest_created': 'Guest created successfully',
    'walk_in_created': 'Walk-in guest {name} has been added',
    'guest_updated': 'Guest updated successfully',
    'guest_deleted': 'Guest deleted',
    'room_created': 'Room created successfully',
    'room_updated': 'Room updated successfully',
    'room_deleted': 'Room deleted',
    'staff_created': 'Staff member created successfully',
    'staff_updated': 'Staff member updated successfully',
    'staff_deleted': 'Staff member deleted',
    'reservation_created': 'Reservation #{id} has been created',
    'reservation_updated': 'Reservation updated successfully',
    'reservation_status_updated': 'Reservation status changed to {status}',
    'reservation_cancelled': 'Reservation cancelled',
    'reservation_deleted': 'Reservation deleted',
    'payment_recorded': 'Payment recorded successfully',
    'payment_updated': 'Payment updated successfully',
    'payment_deleted': 'Payment deleted',

    # Error messages
    'invalid_credentials': 'Invalid username or password',
    'account_disabled': 'This account has been disabled',
    'login_required': 'Please sign in to continue',
    'permission_denied': 'You do not have permission to perform this action',
    'not_found': '{entity} not found',
    'json_required': 'A JSON body is required',
    'invalid_date_range': 'Check-out date must be after check-in date',
    'rooms_unavailable': 'Rooms not available for the selected dates: {rooms}',
    'room_in_maintenance': 'Room {room} is under maintenance',
    'capacity_exceeded': 'The selected rooms accommodate at most {capacity} guests',
    'username_exists': 'Username already exists',
    'invalid_email': 'Invalid email address',
    'invalid_phone': 'Invalid contact number',
    'password_mismatch': 'Passwords do not match',
    'constraint_violation': 'The operation conflicts with existing data',
    'store_error': 'The operation could not be completed',

    # Validation messages
    'field_required': '{field} is required',
    'invalid_value': 'Invalid value for {field}',
}
