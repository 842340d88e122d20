"""
Database seed data.
Initial data population for fresh database installations.
"""

from werkzeug.security import generate_password_hash


DEMO_ROOMS = [
    # room_number, room_type, capacity, rate, description
    ('101', 'Standard', 2, 80.00, 'Standard double room'),
    ('102', 'Standard', 2, 80.00, 'Standard double room'),
    ('201', 'Deluxe', 3, 120.00, 'Deluxe room with balcony'),
    ('301', 'Suite', 4, 250.00, 'Suite with separate living area'),
]

DEMO_HALLS = [
    # name, capacity, hourly rate, description
    ('Grand Ballroom', 300, 500.00, 'Main event hall'),
    ('Conference Room A', 40, 75.00, 'Meeting room with projector'),
]


def seed_database(db):
    """Insert initial seed data: administrator account and demo catalog."""

    # 1. Administrator account
    db.execute('''
        INSERT INTO users (username, email, password_hash, full_name, role)
        VALUES (?, ?, ?, ?, 'admin')
    ''', ('admin', 'admin@hotel.com', generate_password_hash('admin123'), 'Administrator'))

    # 2. Rooms and halls
    seed_demo_catalog(db)


def seed_demo_catalog(db) -> int:
    """
    Insert the demo rooms and halls that are not in the catalog yet.

    Args:
        db: Database connection (caller commits)

    Returns:
        Number of resources added
    """
    added = 0

    for room_number, room_type, capacity, rate, description in DEMO_ROOMS:
        exists = db.execute(
            "SELECT 1 FROM resources WHERE kind = 'ROOM' AND room_number = ?", (room_number,)
        ).fetchone()
        if exists:
            continue
        db.execute('''
            INSERT INTO resources (kind, room_number, room_type, capacity, rate, description)
            VALUES ('ROOM', ?, ?, ?, ?, ?)
        ''', (room_number, room_type, capacity, rate, description))
        added += 1

    for name, capacity, rate, description in DEMO_HALLS:
        exists = db.execute(
            "SELECT 1 FROM resources WHERE kind = 'HALL' AND name = ?", (name,)
        ).fetchone()
        if exists:
            continue
        db.execute('''
            INSERT INTO resources (kind, name, capacity, rate, description)
            VALUES ('HALL', ?, ?, ?, ?)
        ''', (name, capacity, rate, description))
        added += 1

    return added
