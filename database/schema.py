"""
Database schema definitions.
Table creation, indexes, and structure management.

Dates are stored as ISO strings (YYYY-MM-DD), times of day as HH:MM, so
range predicates can be evaluated directly in SQL.
"""


def drop_tables(db):
    """Drop all existing tables."""
    # Disable foreign key constraints before dropping
    db.execute('PRAGMA foreign_keys = OFF')

    tables = [
        'booking_status_history',
        'bookings',
        'resources',
        'users'
    ]

    for table in tables:
        db.execute(f'DROP TABLE IF EXISTS {table}')

    # Re-enable foreign key constraints
    db.execute('PRAGMA foreign_keys = ON')


def create_tables(db):
    """Create all database tables."""

    # 1. Users (identity collaborator)
    db.execute('''
        CREATE TABLE users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            username TEXT UNIQUE NOT NULL,
            email TEXT UNIQUE NOT NULL,
            password_hash TEXT NOT NULL,
            full_name TEXT,
            role TEXT NOT NULL DEFAULT 'user' CHECK (role IN ('user', 'admin')),
            active INTEGER DEFAULT 1,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            last_login TEXT
        )
    ''')

    # 2. Resource catalog (rooms and halls share one table, tagged by kind)
    db.execute('''
        CREATE TABLE resources (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            kind TEXT NOT NULL CHECK (kind IN ('ROOM', 'HALL')),
            room_number TEXT,
            room_type TEXT,
            name TEXT,
            description TEXT DEFAULT '',
            capacity INTEGER NOT NULL CHECK (capacity > 0),
            rate REAL NOT NULL CHECK (rate > 0),
            is_bookable INTEGER NOT NULL DEFAULT 1,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            updated_at TEXT,
            CHECK (kind != 'ROOM' OR room_number IS NOT NULL),
            CHECK (kind != 'HALL' OR name IS NOT NULL)
        )
    ''')

    # 3. Bookings
    db.execute('''
        CREATE TABLE bookings (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            resource_id INTEGER NOT NULL REFERENCES resources(id) ON DELETE CASCADE,
            owner_id INTEGER NOT NULL REFERENCES users(id),
            kind TEXT NOT NULL CHECK (kind IN ('ROOM', 'HALL')),
            check_in TEXT,
            check_out TEXT,
            event_date TEXT,
            start_time TEXT,
            end_time TEXT,
            event_type TEXT DEFAULT '',
            occupant_count INTEGER NOT NULL CHECK (occupant_count > 0),
            total_price REAL NOT NULL,
            status TEXT NOT NULL DEFAULT 'CONFIRMED'
                CHECK (status IN ('CONFIRMED', 'CANCELLED', 'COMPLETED')),
            version INTEGER NOT NULL DEFAULT 1,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            updated_at TEXT
        )
    ''')

    # 4. Status history
    db.execute('''
        CREATE TABLE booking_status_history (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            booking_id INTEGER NOT NULL REFERENCES bookings(id) ON DELETE CASCADE,
            status TEXT NOT NULL,
            action TEXT NOT NULL,
            changed_by TEXT,
            notes TEXT,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP
        )
    ''')


def create_indexes(db):
    """Create uniqueness and lookup indexes."""

    # Catalog uniqueness per kind
    db.execute('''
        CREATE UNIQUE INDEX idx_resources_room_number
        ON resources(room_number) WHERE kind = 'ROOM'
    ''')
    db.execute('''
        CREATE UNIQUE INDEX idx_resources_hall_name
        ON resources(name) WHERE kind = 'HALL'
    ''')

    # Booking lookups
    db.execute('CREATE INDEX idx_bookings_resource_status ON bookings(resource_id, status)')
    db.execute('CREATE INDEX idx_bookings_room_dates ON bookings(resource_id, check_in, check_out)')
    db.execute('CREATE INDEX idx_bookings_hall_date ON bookings(resource_id, event_date)')
    db.execute('CREATE INDEX idx_bookings_owner ON bookings(owner_id)')

    db.execute('CREATE INDEX idx_status_history_booking ON booking_status_history(booking_id)')
