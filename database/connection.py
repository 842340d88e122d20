"""
Database connection management.
Handles per-context connections, initialization, and teardown.
"""

import sqlite3
from contextlib import contextmanager

from flask import g, current_app

from models.exceptions import StoreUnavailable


def get_db():
    """
    Get the database connection for the current app context.

    Each app context (request, CLI command, worker thread) gets its own
    connection, so concurrent writers are serialized by SQLite itself.

    Returns:
        sqlite3.Connection: Database connection object
    """
    if 'db' not in g:
        db_path = current_app.config.get('DATABASE_PATH', 'instance/hotel_booking.db')
        g.db = sqlite3.connect(
            db_path,
            timeout=current_app.config.get('DATABASE_TIMEOUT', 5)
        )
        g.db.row_factory = sqlite3.Row
        # Enable foreign key constraints
        g.db.execute('PRAGMA foreign_keys = ON')
        # Enable WAL mode for better concurrency
        g.db.execute('PRAGMA journal_mode = WAL')
    return g.db


def close_db(e=None):
    """
    Close database connection.

    Args:
        e: Exception if any (from Flask teardown context)
    """
    db = g.pop('db', None)
    if db is not None:
        db.close()


def init_db(seed: bool = True):
    """
    Initialize database: drop existing tables, create new schema, insert seed data.
    WARNING: This will delete all existing data!

    Args:
        seed: Insert the admin user and demo rooms/halls
    """
    from database.schema import drop_tables, create_tables, create_indexes
    from database.seed import seed_database

    db = get_db()

    # Drop existing tables (in reverse order of dependencies)
    drop_tables(db)

    # Create all tables
    create_tables(db)

    # Create indexes
    create_indexes(db)

    if seed:
        seed_database(db)

    db.commit()
    current_app.logger.info('Database initialized at %s', current_app.config.get('DATABASE_PATH'))


@contextmanager
def store_errors(operation: str):
    """
    Translate low-level SQLite failures into StoreUnavailable.

    Locked databases past the busy timeout and I/O errors are infrastructure
    failures; they must never surface as business-rule errors such as
    SchedulingConflict. Integrity errors are left to the caller.

    Args:
        operation: Short description used in the log and error message
    """
    try:
        yield
    except sqlite3.IntegrityError:
        raise
    except sqlite3.DatabaseError as e:
        current_app.logger.error('Store failure during %s: %s', operation, e, exc_info=True)
        raise StoreUnavailable(f'Storage unavailable during {operation}') from e
