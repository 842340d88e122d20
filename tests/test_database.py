"""
Database tests.
Tests database initialization, seed data and store error translation.
"""

import sqlite3

import pytest

from database import get_db, init_db, store_errors
from database.seed import DEMO_HALLS, DEMO_ROOMS, seed_demo_catalog
from models.exceptions import StoreUnavailable

pytestmark = pytest.mark.usefixtures('app_ctx')


class TestSchema:

    def test_database_tables(self):
        db = get_db()
        rows = db.execute("SELECT name FROM sqlite_master WHERE type='table' ORDER BY name").fetchall()
        tables = [row['name'] for row in rows]

        for table in ['users', 'resources', 'bookings', 'booking_status_history']:
            assert table in tables, f"Table {table} should exist"

    def test_wal_and_foreign_keys(self):
        db = get_db()
        assert db.execute('PRAGMA journal_mode').fetchone()[0] == 'wal'
        assert db.execute('PRAGMA foreign_keys').fetchone()[0] == 1

    def test_booking_requires_existing_resource(self, guest):
        db = get_db()
        with pytest.raises(sqlite3.IntegrityError):
            db.execute('''
                INSERT INTO bookings (resource_id, owner_id, kind, occupant_count, total_price, status,
                                      check_in, check_out, version, created_at)
                VALUES (9999, ?, 'ROOM', 1, 80.0, 'CONFIRMED', '2025-01-05', '2025-01-06', 1, '2025-01-01')
            ''', (guest.user_id,))
        db.rollback()

    def test_unique_room_number(self):
        db = get_db()
        with pytest.raises(sqlite3.IntegrityError):
            db.execute('''
                INSERT INTO resources (kind, room_number, room_type, capacity, rate)
                VALUES ('ROOM', '101', 'Standard', 2, 80.0)
            ''')
        db.rollback()


class TestSeedData:

    def test_admin_seeded(self):
        db = get_db()
        admin = db.execute("SELECT username, role FROM users WHERE username='admin'").fetchone()
        assert admin is not None, "Admin user should exist"
        assert admin['role'] == 'admin'

    def test_demo_catalog_seeded(self):
        db = get_db()
        rooms = db.execute("SELECT COUNT(*) FROM resources WHERE kind='ROOM'").fetchone()[0]
        halls = db.execute("SELECT COUNT(*) FROM resources WHERE kind='HALL'").fetchone()[0]
        assert rooms == len(DEMO_ROOMS)
        assert halls == len(DEMO_HALLS)

    def test_demo_catalog_idempotent(self):
        db = get_db()
        assert seed_demo_catalog(db) == 0

    def test_init_without_seed(self):
        init_db(seed=False)
        db = get_db()
        assert db.execute('SELECT COUNT(*) FROM users').fetchone()[0] == 0
        assert db.execute('SELECT COUNT(*) FROM resources').fetchone()[0] == 0

        assert seed_demo_catalog(db) == len(DEMO_ROOMS) + len(DEMO_HALLS)


class TestStoreErrors:

    def test_operational_error_becomes_store_unavailable(self):
        db = get_db()
        with pytest.raises(StoreUnavailable, match='during broken query'):
            with store_errors('broken query'):
                db.execute('SELECT * FROM missing_table')

    def test_integrity_error_passes_through(self):
        with pytest.raises(sqlite3.IntegrityError):
            with store_errors('insert'):
                raise sqlite3.IntegrityError('UNIQUE constraint failed')

    def test_other_exceptions_untouched(self):
        with pytest.raises(KeyError):
            with store_errors('lookup'):
                raise KeyError('x')

    def test_store_unavailable_is_not_a_conflict(self):
        from models.exceptions import SchedulingConflict
        assert not issubclass(StoreUnavailable, SchedulingConflict)
        assert StoreUnavailable.status_code == 503


class TestUsers:

    def test_create_user(self):
        from models.user import create_user, get_user_by_username
        user_id = create_user('carol', 'carol@example.com', 'secret1', full_name='Carol')
        assert get_user_by_username('carol')['id'] == user_id

    def test_invalid_email(self):
        from models.exceptions import ValidationError
        from models.user import create_user
        with pytest.raises(ValidationError, match='Invalid email address'):
            create_user('carol', 'not-an-email', 'secret1')

    def test_short_password(self):
        from models.exceptions import ValidationError
        from models.user import create_user
        with pytest.raises(ValidationError, match='at least 6 characters'):
            create_user('carol', 'carol@example.com', 'abc')

    def test_duplicate_username(self, guest_user):
        from models.exceptions import ValidationError
        from models.user import create_user
        with pytest.raises(ValidationError, match='already exists'):
            create_user('guest', 'another@example.com', 'secret1')
