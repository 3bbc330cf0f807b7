"""
Database schema definitions.
Table creation, indexes, and the relation map used by the store for joins.
"""

from collections import namedtuple


# =============================================================================
# RELATIONS
# =============================================================================

# kind: 'many_to_one' or 'many_to_many'
# local_key: column on the source table
# target_key: column on the target table
# through/through_local/through_target: junction table and its two columns
Relation = namedtuple(
    'Relation',
    ['kind', 'target', 'local_key', 'target_key', 'through', 'through_local', 'through_target'],
    defaults=(None, None, None)
)

RELATIONS = {
    'reservations': {
        'guest': Relation('many_to_one', 'guests', 'guest_id', 'guest_id'),
        'rooms': Relation(
            'many_to_many', 'rooms', 'reservation_id', 'room_number',
            through='reservation_room', through_local='reservation_id', through_target='room_number'
        ),
        'staff': Relation(
            'many_to_many', 'staff', 'reservation_id', 'staff_id',
            through='reservation_staff', through_local='reservation_id', through_target='staff_id'
        ),
    },
    'payments': {
        'reservation': Relation('many_to_one', 'reservations', 'reservation_id', 'reservation_id'),
    },
    'reservation_status_history': {
        'reservation': Relation('many_to_one', 'reservations', 'reservation_id', 'reservation_id'),
    },
}

TABLES = (
    'users',
    'guests',
    'rooms',
    'staff',
    'reservations',
    'reservation_room',
    'reservation_staff',
    'payments',
    'reservation_status_history',
)


def drop_tables(db):
    """Drop all existing tables."""
    db.execute('PRAGMA foreign_keys = OFF')

    for table in reversed(TABLES):
        db.execute(f'DROP TABLE IF EXISTS {table}')

    db.execute('PRAGMA foreign_keys = ON')


def create_tables(db):
    """Create all database tables."""

    # 1. Portal accounts (admin and front desk). Guests sign in with their guest row.
    db.execute('''
        CREATE TABLE users (
            user_id INTEGER PRIMARY KEY AUTOINCREMENT,
            username TEXT UNIQUE NOT NULL,
            password_hash TEXT NOT NULL,
            email TEXT UNIQUE NOT NULL,
            first_name TEXT NOT NULL,
            last_name TEXT NOT NULL,
            contact_number TEXT,
            role TEXT NOT NULL CHECK (role IN ('admin', 'front_desk')),
            active INTEGER DEFAULT 1,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            last_login TEXT
        )
    ''')

    # 2. Guests
    db.execute('''
        CREATE TABLE guests (
            guest_id INTEGER PRIMARY KEY AUTOINCREMENT,
            username TEXT UNIQUE NOT NULL,
            password_hash TEXT NOT NULL,
            email TEXT NOT NULL,
            first_name TEXT NOT NULL,
            last_name TEXT NOT NULL,
            contact_number TEXT,
            street TEXT,
            city TEXT,
            state_province TEXT,
            zip_code TEXT,
            country TEXT,
            is_walk_in INTEGER DEFAULT 0,
            preferences TEXT,
            loyalty_points INTEGER DEFAULT 0,
            vip_status INTEGER DEFAULT 0,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    # 3. Rooms
    db.execute('''
        CREATE TABLE rooms (
            room_number TEXT PRIMARY KEY,
            room_type TEXT NOT NULL
                CHECK (room_type IN ('Standard', 'Deluxe', 'Suite', 'Presidential')),
            bed_type TEXT DEFAULT 'Double'
                CHECK (bed_type IN ('Single', 'Twin', 'Double', 'Queen', 'King')),
            capacity INTEGER NOT NULL DEFAULT 2,
            daily_rate REAL NOT NULL DEFAULT 0,
            status TEXT NOT NULL DEFAULT 'Available'
                CHECK (status IN ('Available', 'Occupied', 'Reserved', 'Maintenance')),
            description TEXT,
            amenities TEXT,
            floor_number INTEGER,
            room_size_sqft INTEGER,
            last_maintenance_date TEXT
        )
    ''')

    # 4. Staff (employee records, not login accounts)
    db.execute('''
        CREATE TABLE staff (
            staff_id INTEGER PRIMARY KEY AUTOINCREMENT,
            first_name TEXT NOT NULL,
            last_name TEXT NOT NULL,
            role TEXT NOT NULL,
            contact_number TEXT
        )
    ''')

    # 5. Reservations
    db.execute('''
        CREATE TABLE reservations (
            reservation_id INTEGER PRIMARY KEY AUTOINCREMENT,
            guest_id INTEGER NOT NULL REFERENCES guests(guest_id),
            check_in_date TEXT NOT NULL,
            check_out_date TEXT NOT NULL,
            check_in_time TEXT,
            check_out_time TEXT,
            total_guests INTEGER NOT NULL DEFAULT 1,
            special_requests TEXT,
            status TEXT NOT NULL DEFAULT 'Reserved',
            is_walk_in INTEGER DEFAULT 0,
            created_by TEXT,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            updated_at TEXT,
            updated_by TEXT
        )
    ''')

    # 6. Junctions
    db.execute('''
        CREATE TABLE reservation_room (
            reservation_id INTEGER NOT NULL REFERENCES reservations(reservation_id) ON DELETE CASCADE,
            room_number TEXT NOT NULL REFERENCES rooms(room_number),
            PRIMARY KEY (reservation_id, room_number)
        )
    ''')

    db.execute('''
        CREATE TABLE reservation_staff (
            reservation_id INTEGER NOT NULL REFERENCES reservations(reservation_id) ON DELETE CASCADE,
            staff_id INTEGER NOT NULL REFERENCES staff(staff_id),
            PRIMARY KEY (reservation_id, staff_id)
        )
    ''')

    # 7. Payments
    db.execute('''
        CREATE TABLE payments (
            payment_id INTEGER PRIMARY KEY AUTOINCREMENT,
            reservation_id INTEGER NOT NULL REFERENCES reservations(reservation_id) ON DELETE CASCADE,
            payment_date TEXT NOT NULL,
            amount_paid REAL NOT NULL,
            payment_method TEXT NOT NULL,
            transaction_id TEXT,
            payment_status TEXT NOT NULL DEFAULT 'Completed',
            refund_amount REAL DEFAULT 0,
            notes TEXT,
            receipt_number TEXT,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    # 8. Status history
    db.execute('''
        CREATE TABLE reservation_status_history (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            reservation_id INTEGER NOT NULL REFERENCES reservations(reservation_id) ON DELETE CASCADE,
            old_status TEXT,
            new_status TEXT NOT NULL,
            changed_by TEXT,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP
        )
    ''')


def create_indexes(db):
    """Create indexes for the common lookups."""
    db.execute('CREATE INDEX idx_reservations_guest ON reservations(guest_id)')
    db.execute('CREATE INDEX idx_reservations_status ON reservations(status)')
    db.execute('CREATE INDEX idx_reservations_dates ON reservations(check_in_date, check_out_date)')
    db.execute('CREATE INDEX idx_reservation_room_room ON reservation_room(room_number)')
    db.execute('CREATE INDEX idx_payments_reservation ON payments(reservation_id)')
    db.execute('CREATE INDEX idx_payments_date ON payments(payment_date)')
    db.execute('CREATE INDEX idx_rooms_status ON rooms(status)')
    db.execute('CREATE INDEX idx_status_history_reservation ON reservation_status_history(reservation_id)')
