"""
Pytest configuration and fixtures.
Each test gets its own SQLite file, initialized with the seed data.
"""

import os
import pytest

os.environ['FLASK_ENV'] = 'test'

GUEST_PASSWORD = 'GuestPass1!'


@pytest.fixture
def app(tmp_path):
    """Create test application with an isolated, freshly seeded database."""
    from app import create_app
    from database import init_db

    app = create_app('test')
    app.config['TESTING'] = True
    app.config['WTF_CSRF_ENABLED'] = False
    app.config['DATABASE_PATH'] = str(tmp_path / 'grand_hotel_test.db')
    app.config['ATOMIC_RESERVATION_WRITES'] = False

    with app.app_context():
        init_db()

    yield app


@pytest.fixture
def app_ctx(app):
    """Application context for calling models directly."""
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


def login(client, username, password):
    """Sign a test client in through the auth endpoint."""
    return client.post('/auth/login', json={'username': username, 'password': password})


def make_guest(username='juan.delacruz', first_name='Juan', last_name='Dela Cruz', **extra):
    """Insert a guest row directly (requires an app context)."""
    from werkzeug.security import generate_password_hash
    from database import get_store

    row = {
        'username': username,
        'password_hash': generate_password_hash(GUEST_PASSWORD),
        'email': f'{username}@example.com',
        'first_name': first_name,
        'last_name': last_name,
        'contact_number': '09170000000',
    }
    row.update(extra)
    return get_store().insert('guests', row)


@pytest.fixture
def guest_id(app):
    """A guest that exists before the test's requests run."""
    with app.app_context():
        return make_guest()['guest_id']


@pytest.fixture
def admin_client(app):
    client = app.test_client()
    response = login(client, 'admin', 'GrandAdmin2026!')
    assert response.status_code == 200
    return client


@pytest.fixture
def front_desk_client(app):
    client = app.test_client()
    response = login(client, 'frontdesk', 'FrontDesk2026!')
    assert response.status_code == 200
    return client


@pytest.fixture
def guest_client(app, guest_id):
    client = app.test_client()
    response = login(client, 'juan.delacruz', GUEST_PASSWORD)
    assert response.status_code == 200
    return client
