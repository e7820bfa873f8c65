"""
Shared fixtures for the email marketer test suite.

NOTE: pytest and pytest-flask are listed under extras_require["dev"] in setup.py.
Install with: pip install -e ".[dev]"
"""

import shutil
import tempfile

import pytest

from emailmarketer import create_app
from emailmarketer.core.errors import TransportError
from emailmarketer.modules.auth import UserDatabase


class FakeTransport:
    """Records every send; raises TransportError for addresses in fail_for."""

    def __init__(self, fail_for=()):
        self.fail_for = set(fail_for)
        self.sent = []

    def send(self, to, subject, html, text=None, tags=()):
        if to in self.fail_for:
            raise TransportError(f"Rejected recipient {to}")
        self.sent.append({'to': to, 'subject': subject, 'html': html, 'text': text, 'tags': list(tags)})
        return f"<msg-{len(self.sent)}@mg.example.com>"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def tmp_db_dir():
    """Create a temporary directory for the test database, cleaned up after."""
    d = tempfile.mkdtemp(prefix="emailmarketer-test-")
    yield d
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def app(tmp_db_dir):
    """
    App on a fresh database, unsigned webhooks allowed, no Mailgun credentials.
    admin@example.com registers as an admin.
    """
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret',
        'JWT_SECRET': 'test-jwt-secret',
        'DB_DIR': tmp_db_dir,
        'MAILGUN_API_KEY': None,
        'MAILGUN_DOMAIN': None,
        'MAILGUN_WEBHOOK_SIGNING_KEY': None,
        'WEBHOOK_ALLOW_UNSIGNED': True,
        'TRACKING_MARK_FAILED': True,
        'ADMIN_EMAILS': ['admin@example.com'],
    })
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return app.extensions['emailmarketer'].db


@pytest.fixture
def transport(app):
    """Replace the Mailgun transport with an in-memory fake."""
    fake = FakeTransport()
    app.extensions['emailmarketer'].transport = fake
    return fake


@pytest.fixture
def owner(db):
    """A user row created directly in the store."""
    return UserDatabase(db).create_user('owner@example.com', 'secret123', 'Owner')


def register(client, email, password='secret123', name=''):
    """Register through the API; returns (auth headers, user dict)."""
    resp = client.post('/api/auth/register', json={'email': email, 'password': password, 'name': name})
    assert resp.status_code == 201, resp.get_json()
    body = resp.get_json()
    return {'Authorization': f"Bearer {body['token']}"}, body['user']


@pytest.fixture
def alice(client):
    return register(client, 'alice@example.com', name='Alice')


@pytest.fixture
def bob(client):
    return register(client, 'bob@example.com', name='Bob')


@pytest.fixture
def admin(client):
    return register(client, 'admin@example.com', name='Admin')
