"""
Critical Integration Tests for the Email Marketer
=================================================

Focused tests covering the integration points most likely to break:
app factory, storage, error handlers and persisted logging.
Run with: pytest tests/test_critical.py -v
"""

import os
import threading

import pytest

from emailmarketer import EmailMarketer, create_app
from emailmarketer.core import Database, LoggingService
from emailmarketer.core.errors import ConflictError, NotFoundError, ValidationError


# ---------------------------------------------------------------------------
# 1. App factory -- create_app() boots and stores its state on the app
# ---------------------------------------------------------------------------

def test_create_app_initialises_extension(app, tmp_db_dir):
    """create_app() applies overrides and registers the extension state."""
    state = app.extensions['emailmarketer']
    assert isinstance(state, EmailMarketer)
    assert app.config['DATABASE_PATH'] == os.path.join(tmp_db_dir, 'email-marketer.db')
    assert os.path.exists(app.config['DATABASE_PATH']), "schema must be created on startup"
    assert state.transport is not None


def test_jwt_secret_follows_configured_secret_key(tmp_db_dir, monkeypatch):
    """Tokens are signed with the app's own SECRET_KEY unless JWT_SECRET is set."""
    from emailmarketer.core import Config
    monkeypatch.setattr(Config, 'JWT_SECRET', None)

    app = create_app({'SECRET_KEY': 'prod-secret', 'DB_DIR': tmp_db_dir})
    assert app.config['JWT_SECRET'] == 'prod-secret'

    explicit = create_app({'SECRET_KEY': 'prod-secret', 'JWT_SECRET': 'jwt-only', 'DB_DIR': tmp_db_dir})
    assert explicit.config['JWT_SECRET'] == 'jwt-only'


def test_token_signed_with_default_secret_is_rejected(tmp_db_dir, monkeypatch):
    import jwt
    from emailmarketer.core import Config
    monkeypatch.setattr(Config, 'JWT_SECRET', None)

    app = create_app({'SECRET_KEY': 'prod-secret', 'DB_DIR': tmp_db_dir})
    client = app.test_client()
    client.post('/api/auth/register', json={'email': 'a@example.com', 'password': 'secret123'})

    forged = jwt.encode({'userId': 1, 'email': 'a@example.com'},
                        'dev-secret-key-change-in-production', algorithm='HS256')
    resp = client.get('/api/auth/me', headers={'Authorization': f'Bearer {forged}'})
    assert resp.status_code == 401


def test_health(client):
    resp = client.get('/health')
    assert resp.status_code == 200
    assert resp.get_json()['status'] == 'ok'
    assert resp.get_json()['version']


def test_cors_headers_present(client):
    resp = client.get('/health', headers={'Origin': 'http://localhost:3000'})
    assert resp.headers.get('Access-Control-Allow-Origin') in ('*', 'http://localhost:3000')


# ---------------------------------------------------------------------------
# 2. Error handlers -- every error is JSON {error}
# ---------------------------------------------------------------------------

def test_unknown_route_is_json_404(client):
    resp = client.get('/api/does-not-exist')
    assert resp.status_code == 404
    assert 'error' in resp.get_json()


def test_unexpected_exception_is_logged_and_500(tmp_db_dir):
    app = create_app({'TESTING': False, 'DB_DIR': tmp_db_dir, 'PROPAGATE_EXCEPTIONS': False})

    @app.route('/boom')
    def boom():
        raise RuntimeError('kaboom')

    resp = app.test_client().get('/boom')
    assert resp.status_code == 500
    assert resp.get_json() == {'error': 'Internal server error'}

    logs = LoggingService(app.extensions['emailmarketer'].db).recent(level='error')
    assert any('RuntimeError' in entry['message'] for entry in logs)


def test_non_object_json_body_is_400(client, alice):
    headers, _ = alice
    for path in ('/api/contacts', '/api/lists', '/api/templates', '/api/campaigns', '/api/shares'):
        resp = client.post(path, json=[1, 2], headers=headers)
        assert resp.status_code == 400, path
        assert resp.get_json()['error'] == 'Request body must be a JSON object'


def test_error_status_codes():
    assert ValidationError('x').status_code == 400
    assert NotFoundError('Campaign').message == 'Campaign not found'
    assert ConflictError('x').status_code == 409


# ---------------------------------------------------------------------------
# 3. Storage -- transactions roll back and nest
# ---------------------------------------------------------------------------

def test_transaction_rolls_back_on_error(db, owner):
    with pytest.raises(RuntimeError):
        with db.transaction() as conn:
            conn.execute("INSERT INTO lists (owner_id, name) VALUES (?, 'ghost')", (owner['id'],))
            raise RuntimeError('abort')
    assert db.fetch_all("SELECT * FROM lists WHERE name = 'ghost'") == []


def test_nested_transactions_share_one_connection(db, owner):
    with db.transaction() as outer:
        with db.transaction() as inner:
            assert inner is outer
            inner.execute("INSERT INTO lists (owner_id, name) VALUES (?, 'nested')", (owner['id'],))
    assert len(db.fetch_all("SELECT * FROM lists WHERE name = 'nested'")) == 1


def test_concurrent_claims_only_one_wins(db, owner):
    """Only one of many concurrent draft->sending claims succeeds."""
    from emailmarketer.modules.campaigns.models import claim_for_sending, create_campaign

    campaign = create_campaign(db, owner['id'], {'name': 'C', 'subject': 'S', 'html_content': 'x'})
    results = []

    def claim():
        results.append(claim_for_sending(db, campaign['id']))

    threads = [threading.Thread(target=claim) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(True) == 1


def test_init_schema_is_idempotent(tmp_db_dir):
    database = Database(os.path.join(tmp_db_dir, 'again.db'))
    database.init_schema()
    database.init_schema()
    assert database.fetch_one("SELECT COUNT(*) AS n FROM users")['n'] == 0


# ---------------------------------------------------------------------------
# 4. Persisted logging
# ---------------------------------------------------------------------------

def test_failed_login_is_logged(app, client, alice):
    client.post('/api/auth/login', json={'email': 'alice@example.com', 'password': 'wrong-pass'})
    logs = LoggingService(app.extensions['emailmarketer'].db).recent(source='auth')
    entry = next(e for e in logs if e['message'] == 'Failed login attempt')
    assert entry['level'] == 'WARNING'
    assert entry['request_path'] == '/api/auth/login'


def test_cleanup_old_logs(db):
    service = LoggingService(db)
    with db.transaction() as conn:
        conn.execute("""
            INSERT INTO app_logs (timestamp, level, source, message)
            VALUES ('2000-01-01T00:00:00', 'INFO', 'test', 'ancient')
        """)
    service.info('test', 'fresh')

    assert service.cleanup_old_logs(days_to_keep=30) == 1
    messages = [e['message'] for e in service.recent(source='test')]
    assert messages == ['fresh']


def test_admin_can_read_and_prune_logs(client, db, alice, admin):
    alice_headers, _ = alice
    admin_headers, _ = admin
    with db.transaction() as conn:
        conn.execute("""
            INSERT INTO app_logs (timestamp, level, source, message)
            VALUES ('2000-01-01T00:00:00', 'INFO', 'test', 'ancient')
        """)

    assert client.get('/api/logs', headers=alice_headers).status_code == 403
    assert client.post('/api/logs/cleanup', json={'days': 30}, headers=alice_headers).status_code == 403

    entries = client.get('/api/logs?source=auth', headers=admin_headers).get_json()
    assert entries and all(e['source'] == 'auth' for e in entries)

    resp = client.post('/api/logs/cleanup', json={'days': 30}, headers=admin_headers)
    assert resp.get_json() == {'deleted': 1}
    messages = [e['message'] for e in client.get('/api/logs?source=test', headers=admin_headers).get_json()]
    assert 'ancient' not in messages
