"""Registration, login, bearer tokens, and per-resource sharing."""

from emailmarketer.modules.auth import UserDatabase

from conftest import register


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

def test_register_returns_token_and_public_user(client):
    resp = client.post('/api/auth/register', json={
        'email': 'New@Example.com', 'password': 'secret123', 'name': 'New'
    })
    assert resp.status_code == 201
    body = resp.get_json()
    assert body['token']
    assert body['user']['email'] == 'new@example.com'
    assert 'password_hash' not in body['user']


def test_register_validation(client, alice):
    assert client.post('/api/auth/register', json={'email': 'x@example.com'}).status_code == 400
    assert client.post('/api/auth/register', json={
        'email': 'x@example.com', 'password': '123'
    }).status_code == 400, "passwords shorter than 6 characters are rejected"
    assert client.post('/api/auth/register', json={
        'email': 'alice@example.com', 'password': 'secret123'
    }).status_code == 400, "duplicate email is rejected"


def test_login_and_me(client, alice):
    resp = client.post('/api/auth/login', json={'email': 'ALICE@example.com', 'password': 'secret123'})
    assert resp.status_code == 200
    token = resp.get_json()['token']

    me = client.get('/api/auth/me', headers={'Authorization': f'Bearer {token}'})
    assert me.status_code == 200
    assert me.get_json()['email'] == 'alice@example.com'


def test_login_with_wrong_password_is_401(client, alice):
    resp = client.post('/api/auth/login', json={'email': 'alice@example.com', 'password': 'nope-nope'})
    assert resp.status_code == 401


def test_inactive_user_cannot_login(client, db, alice):
    _, user = alice
    UserDatabase(db).update_user(user['id'], active=0)
    resp = client.post('/api/auth/login', json={'email': 'alice@example.com', 'password': 'secret123'})
    assert resp.status_code == 401


def test_deactivated_user_token_is_rejected(client, db, alice):
    headers, user = alice
    assert client.get('/api/contacts', headers=headers).status_code == 200

    UserDatabase(db).update_user(user['id'], active=0)
    resp = client.get('/api/contacts', headers=headers)
    assert resp.status_code == 401
    assert resp.get_json()['error'] == 'Account is deactivated'


def test_deleted_user_token_is_rejected(client, db, alice):
    headers, user = alice
    with db.transaction() as conn:
        conn.execute('DELETE FROM users WHERE id = ?', (user['id'],))
    assert client.get('/api/auth/me', headers=headers).status_code == 401
    assert client.get('/api/lists', headers=headers).status_code == 401


def test_admin_role_comes_from_admin_emails(alice, admin):
    assert alice[1]['role'] == 'user'
    assert admin[1]['role'] == 'admin'


def test_auth_rejects_non_string_fields(client):
    assert client.post('/api/auth/register', json={
        'email': 'x@example.com', 'password': 12345678
    }).status_code == 400
    assert client.post('/api/auth/login', json={'email': ['a'], 'password': 'x'}).status_code == 400
    assert client.post('/api/auth/login', json=['a', 'b']).status_code == 400


def test_protected_routes_need_a_token(client):
    assert client.get('/api/contacts').status_code == 401
    resp = client.get('/api/lists', headers={'Authorization': 'Bearer not-a-jwt'})
    assert resp.status_code == 401
    assert resp.get_json()['error'] == 'Invalid or expired token.'


# ---------------------------------------------------------------------------
# Sharing
# ---------------------------------------------------------------------------

def _make_list(client, headers, name='Shared list'):
    return client.post('/api/lists', json={'name': name}, headers=headers).get_json()['id']


def test_unshared_resource_is_not_found_for_others(client, alice, bob):
    alice_headers, _ = alice
    bob_headers, _ = bob
    list_id = _make_list(client, alice_headers)

    assert client.get(f'/api/lists/{list_id}', headers=bob_headers).status_code == 404
    assert client.get('/api/lists/9999', headers=bob_headers).status_code == 404


def test_view_share_allows_read_but_not_edit(client, alice, bob):
    alice_headers, _ = alice
    bob_headers, _ = bob
    list_id = _make_list(client, alice_headers)

    resp = client.post('/api/shares', json={
        'resourceType': 'list', 'resourceId': list_id, 'sharedWithEmail': 'bob@example.com'
    }, headers=alice_headers)
    assert resp.status_code == 200
    assert resp.get_json()['shares'][0]['permission'] == 'view'

    detail = client.get(f'/api/lists/{list_id}', headers=bob_headers)
    assert detail.status_code == 200
    assert detail.get_json()['permission'] == 'view'

    assert client.put(f'/api/lists/{list_id}', json={'name': 'x'}, headers=bob_headers).status_code == 403
    assert client.delete(f'/api/lists/{list_id}', headers=bob_headers).status_code == 403


def test_edit_share_allows_edit_but_not_delete_or_reshare(client, alice, bob):
    alice_headers, _ = alice
    bob_headers, _ = bob
    register(client, 'carol@example.com')
    list_id = _make_list(client, alice_headers)

    client.post('/api/shares', json={
        'resourceType': 'list', 'resourceId': list_id,
        'sharedWithEmail': 'bob@example.com', 'permission': 'edit'
    }, headers=alice_headers)

    resp = client.put(f'/api/lists/{list_id}', json={'name': 'Renamed'}, headers=bob_headers)
    assert resp.status_code == 200
    assert resp.get_json()['name'] == 'Renamed'

    assert client.delete(f'/api/lists/{list_id}', headers=bob_headers).status_code == 403
    reshare = client.post('/api/shares', json={
        'resourceType': 'list', 'resourceId': list_id, 'sharedWithEmail': 'carol@example.com'
    }, headers=bob_headers)
    assert reshare.status_code == 403


def test_resharing_updates_permission(client, alice, bob):
    alice_headers, _ = alice
    list_id = _make_list(client, alice_headers)
    for permission in ('view', 'edit'):
        resp = client.post('/api/shares', json={
            'resourceType': 'lists', 'resourceId': list_id,
            'sharedWithEmail': 'bob@example.com', 'permission': permission
        }, headers=alice_headers)
    shares = resp.get_json()['shares']
    assert len(shares) == 1
    assert shares[0]['permission'] == 'edit'


def test_share_validation(client, alice, bob):
    alice_headers, _ = alice
    list_id = _make_list(client, alice_headers)

    missing_user = client.post('/api/shares', json={
        'resourceType': 'list', 'resourceId': list_id, 'sharedWithEmail': 'nobody@example.com'
    }, headers=alice_headers)
    assert missing_user.status_code == 404

    bad_type = client.post('/api/shares', json={
        'resourceType': 'contacts', 'resourceId': list_id, 'sharedWithEmail': 'bob@example.com'
    }, headers=alice_headers)
    assert bad_type.status_code == 400

    bad_permission = client.post('/api/shares', json={
        'resourceType': 'list', 'resourceId': list_id,
        'sharedWithEmail': 'bob@example.com', 'permission': 'admin'
    }, headers=alice_headers)
    assert bad_permission.status_code == 400

    self_share = client.post('/api/shares', json={
        'resourceType': 'list', 'resourceId': list_id, 'sharedWithEmail': 'alice@example.com'
    }, headers=alice_headers)
    assert self_share.status_code == 400


def test_shared_with_me_and_revoke(client, alice, bob):
    alice_headers, _ = alice
    bob_headers, _ = bob
    template_id = client.post('/api/templates', json={
        'name': 'T', 'subject': 'S', 'htmlContent': 'x'
    }, headers=alice_headers).get_json()['id']

    client.post('/api/shares', json={
        'resourceType': 'template', 'resourceId': template_id, 'sharedWithEmail': 'bob@example.com'
    }, headers=alice_headers)

    shared = client.get('/api/shared-with-me', headers=bob_headers).get_json()
    assert shared['lists'] == [] and shared['campaigns'] == []
    assert [t['id'] for t in shared['templates']] == [template_id]
    assert shared['templates'][0]['owner_email'] == 'alice@example.com'

    shares = client.get(f'/api/shares/template/{template_id}', headers=alice_headers).get_json()
    assert shares[0]['email'] == 'bob@example.com'
    assert client.get(f'/api/shares/template/{template_id}', headers=bob_headers).status_code == 403

    share_id = shares[0]['id']
    assert client.delete(f'/api/shares/{share_id}', headers=bob_headers).status_code == 404
    assert client.delete(f'/api/shares/{share_id}', headers=alice_headers).status_code == 200
    assert client.get(f'/api/templates/{template_id}', headers=bob_headers).status_code == 404


def test_shared_list_can_be_used_for_a_campaign(client, alice, bob):
    alice_headers, _ = alice
    bob_headers, _ = bob
    list_id = _make_list(client, alice_headers)

    denied = client.post('/api/campaigns', json={
        'name': 'C', 'subject': 'S', 'htmlContent': 'x', 'listId': list_id
    }, headers=bob_headers)
    assert denied.status_code == 404

    client.post('/api/shares', json={
        'resourceType': 'list', 'resourceId': list_id, 'sharedWithEmail': 'bob@example.com'
    }, headers=alice_headers)
    allowed = client.post('/api/campaigns', json={
        'name': 'C', 'subject': 'S', 'htmlContent': 'x', 'listId': list_id
    }, headers=bob_headers)
    assert allowed.status_code == 201
