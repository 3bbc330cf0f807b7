"""
Database seed data.
Initial data population for fresh database installations.
"""

from werkzeug.security import generate_password_hash


DEFAULT_ACCOUNTS = [
    # username, password, email, first_name, last_name, role
    ('admin', 'GrandAdmin2026!', 'admin@grandhotel.local', 'System', 'Administrator', 'admin'),
    ('frontdesk', 'FrontDesk2026!', 'frontdesk@grandhotel.local', 'Front', 'Desk', 'front_desk'),
]

DEFAULT_ROOMS = [
    # room_number, room_type, bed_type, capacity, daily_rate, floor_number, room_size_sqft
    ('101', 'Standard', 'Double', 2, 2500.0, 1, 250),
    ('102', 'Standard', 'Twin', 2, 2500.0, 1, 250),
    ('103', 'Standard', 'Single', 1, 1800.0, 1, 200),
    ('201', 'Deluxe', 'Queen', 3, 4200.0, 2, 350),
    ('202', 'Deluxe', 'King', 3, 4500.0, 2, 380),
    ('301', 'Suite', 'King', 4, 7800.0, 3, 600),
    ('401', 'Presidential', 'King', 6, 15000.0, 4, 1200),
]

DEFAULT_STAFF = [
    # first_name, last_name, role, contact_number
    ('Maria', 'Santos', 'Manager', '09171234567'),
    ('Jose', 'Reyes', 'Receptionist', '09181234567'),
    ('Ana', 'Cruz', 'Housekeeping', '09191234567'),
    ('Luis', 'Garcia', 'Concierge', '09201234567'),
    ('Pedro', 'Ramos', 'Maintenance', '09211234567'),
]


def seed_database(db):
    """Insert initial seed data."""

    # 1. Portal accounts
    for username, password, email, first_name, last_name, role in DEFAULT_ACCOUNTS:
        db.execute('''
            INSERT INTO users (username, password_hash, email, first_name, last_name, role)
            VALUES (?, ?, ?, ?, ?, ?)
        ''', (username, generate_password_hash(password), email, first_name, last_name, role))

    # 2. Rooms
    for room_number, room_type, bed_type, capacity, daily_rate, floor, size in DEFAULT_ROOMS:
        db.execute('''
            INSERT INTO rooms (room_number, room_type, bed_type, capacity, daily_rate,
                               status, floor_number, room_size_sqft)
            VALUES (?, ?, ?, ?, ?, 'Available', ?, ?)
        ''', (room_number, room_type, bed_type, capacity, daily_rate, floor, size))

    # 3. Staff
    for first_name, last_name, role, contact_number in DEFAULT_STAFF:
        db.execute('''
            INSERT INTO staff (first_name, last_name, role, contact_number)
            VALUES (?, ?, ?, ?)
        ''', (first_name, last_name, role, contact_number))
