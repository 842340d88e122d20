"""
Pytest configuration and fixtures.
Ensures tests use an isolated test database, not the production database.

Model-level tests run inside the ``app_ctx`` fixture. HTTP tests do not, so
every request gets its own app context (and its own Flask-Login user).
"""

import os
import pytest
import tempfile
from datetime import datetime

# Set test database path BEFORE importing app
# This ensures all tests use an isolated database
TEST_DB_PATH = os.path.join(tempfile.gettempdir(), 'hotel_booking_test.db')
os.environ['DATABASE_PATH'] = TEST_DB_PATH

# Wednesday morning; every booking date in the tests is relative to this
FIXED_NOW = datetime(2025, 1, 1, 10, 0)


@pytest.fixture(scope='session', autouse=True)
def setup_test_environment():
    """Set up test environment before any tests run."""
    # Ensure test database path is set
    os.environ['DATABASE_PATH'] = TEST_DB_PATH
    os.environ['FLASK_ENV'] = 'test'

    yield

    # Cleanup: remove test database after all tests
    for path in (TEST_DB_PATH, TEST_DB_PATH + '-wal', TEST_DB_PATH + '-shm'):
        if os.path.exists(path):
            try:
                os.remove(path)
            except PermissionError:
                pass  # Windows may have file locked


@pytest.fixture
def clock():
    """Fixed clock at FIXED_NOW."""
    from utils.datetime_helpers import FixedClock
    return FixedClock(FIXED_NOW)


@pytest.fixture
def app(clock):
    """Create test application with a freshly initialized database."""
    from app import create_app
    from database import init_db

    # Ensure test database path
    os.environ['DATABASE_PATH'] = TEST_DB_PATH

    app = create_app('test')
    app.config['TESTING'] = True
    app.config['DATABASE_PATH'] = TEST_DB_PATH
    app.config['CLOCK'] = clock

    with app.app_context():
        init_db()

    yield app


@pytest.fixture
def app_ctx(app):
    """Active application context for model-level tests."""
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


def _login(app, username, password):
    client = app.test_client()
    response = client.post('/login', json={'username': username, 'password': password})
    assert response.status_code == 200, response.get_json()
    return client


@pytest.fixture
def admin_client(app):
    """Test client logged in as the seeded admin."""
    return _login(app, 'admin', 'admin123')


@pytest.fixture
def guest_user(app):
    """Regular user account: (id, username)."""
    from models.user import create_user
    with app.app_context():
        user_id = create_user('guest', 'guest@example.com', 'guest123', full_name='Guest User')
    return user_id, 'guest'


@pytest.fixture
def other_user(app):
    """Second regular user, for ownership checks."""
    from models.user import create_user
    with app.app_context():
        user_id = create_user('other', 'other@example.com', 'other123')
    return user_id, 'other'


@pytest.fixture
def user_client(app, guest_user):
    """Test client logged in as the regular guest user."""
    return _login(app, 'guest', 'guest123')


@pytest.fixture
def other_client(app, other_user):
    return _login(app, 'other', 'other123')


@pytest.fixture
def guest(guest_user):
    """Principal for the guest user."""
    from models.booking import Principal
    return Principal(user_id=guest_user[0], role='user', username=guest_user[1])


@pytest.fixture
def other(other_user):
    from models.booking import Principal
    return Principal(user_id=other_user[0], role='user', username=other_user[1])


@pytest.fixture
def admin(app):
    """Principal for the seeded admin."""
    from models.booking import Principal
    from models.user import get_user_by_username
    with app.app_context():
        user = get_user_by_username('admin')
    return Principal(user_id=user['id'], role='admin', username='admin')


def _find_resource(app, kind, label):
    from models.resource import get_all_resources
    with app.app_context():
        resources = get_all_resources(kind=kind, include_disabled=True)
    return next(r for r in resources if r.display_name == label)


@pytest.fixture
def room(app):
    """Standard room 101 (capacity 2, 80.00 per night)."""
    return _find_resource(app, 'ROOM', 'Room 101')


@pytest.fixture
def suite(app):
    """Suite 301 (capacity 4, 250.00 per night)."""
    return _find_resource(app, 'ROOM', 'Room 301')


@pytest.fixture
def hall(app):
    """Conference Room A (capacity 40, 75.00 per hour)."""
    return _find_resource(app, 'HALL', 'Conference Room A')
