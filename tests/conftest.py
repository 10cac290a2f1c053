"""
Pytest configuration and shared fixtures for goods issue tests.
"""
import os
import shutil
import tempfile

import pytest

from goods_issue import create_app
from goods_issue.extensions import db
from goods_issue.seeders import seed_demo_data

TEST_EMAIL = 'ana.rojas@example.com'
TEST_PASSWORD = 'secret-pass'


@pytest.fixture(scope='function')
def app():
    """Create and configure a new app instance for each test."""
    db_fd, db_path = tempfile.mkstemp()
    session_dir = tempfile.mkdtemp()

    app = create_app({
        'TESTING': True,
        'DATABASE_URL': f'sqlite:///{db_path}',
        'WTF_CSRF_ENABLED': False,
        'RATELIMIT_ENABLED': False,
        'SECRET_KEY': 'test-secret-key',
        'SESSION_FILE_DIR': session_dir,
        'REDIS_URL': None,
    })

    with app.app_context():
        db.create_all()
        seed_demo_data(admin_email=TEST_EMAIL, admin_password=TEST_PASSWORD)

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()

    os.close(db_fd)
    os.unlink(db_path)
    shutil.rmtree(session_dir, ignore_errors=True)


@pytest.fixture
def client(app):
    """A test client for the app."""
    return app.test_client()


@pytest.fixture
def runner(app):
    """A test runner for the app's Click commands."""
    return app.test_cli_runner()


@pytest.fixture
def app_context(app):
    """Provide an application context for tests that need it."""
    with app.app_context():
        yield


@pytest.fixture
def auth_client(client):
    """Test client logged in as the seeded approver."""
    response = client.post('/auth/login', json={'email': TEST_EMAIL, 'password': TEST_PASSWORD})
    assert response.status_code == 200
    return client
