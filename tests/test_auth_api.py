import pytest
from werkzeug.security import check_password_hash

from backend.extensions import db
from backend.models import StatusUpdate, StatusHistory, User


def _user_id(app, username):
    with app.app_context():
        return User.query.filter_by(username=username).one().id


# --- Listing ---

def test_user_list_requires_admin(client, auth):
    assert client.get('/api/users', headers=auth('islamabad')).status_code == 403


def test_user_list_hides_passwords(client, auth):
    res = client.get('/api/users', headers=auth('manager'))
    assert res.status_code == 200
    users = res.get_json()
    assert {u['username'] for u in users} >= {'admin', 'manager', 'islamabad', 'peshawar'}
    for u in users:
        assert 'password' not in u
        assert 'passwordIsHashed' not in u


def test_get_single_user(client, app, auth):
    uid = _user_id(app, 'peshawar')
    res = client.get(f'/api/users/{uid}', headers=auth('manager'))
    assert res.status_code == 200
    assert res.get_json()['zoneRef'] == 'PES001'
    assert client.get('/api/users/9999', headers=auth('manager')).status_code == 404


# --- Creation ---

def test_only_superadmin_creates_users(client, auth):
    payload = {"username": "quetta", "password": "pw", "role": "user", "zoneRef": "ISB001"}
    assert client.post('/api/users', json=payload, headers=auth('manager')).status_code == 403


def test_created_user_password_is_hashed(client, app, auth):
    payload = {"username": "newbie", "password": "secret1", "role": "user", "zoneRef": "ISB001", "email": "n@example.com"}
    res = client.post('/api/users', json=payload, headers=auth('admin'))
    assert res.status_code == 201
    assert res.get_json()['zoneRef'] == 'ISB001'
    with app.app_context():
        user = User.query.filter_by(username='newbie').one()
        assert user.password_is_hashed
        assert user.password != 'secret1'
        assert check_password_hash(user.password, 'secret1')

    login = client.post('/api/auth/login', json={"username": "newbie", "password": "secret1"})
    assert login.status_code == 200


def test_admin_accounts_get_sentinel_zone(client, auth):
    payload = {"username": "boss", "password": "pw", "role": "admin", "zoneRef": "ISB001"}
    res = client.post('/api/users', json=payload, headers=auth('admin'))
    assert res.status_code == 201
    assert res.get_json()['zoneRef'] == 'ADMIN'


@pytest.mark.parametrize('payload, status', [
    ({"username": "manager", "password": "pw", "role": "admin"}, 409),
    ({"username": "nozone", "password": "pw", "role": "user"}, 400),
    ({"username": "badzone", "password": "pw", "role": "user", "zoneRef": "XYZ001"}, 400),
    ({"username": "badrole", "password": "pw", "role": "owner"}, 400),
    ({"username": "nopass", "role": "admin"}, 400),
    ({"username": 5, "password": "pw", "role": "admin"}, 400),
    ({"username": ["boss"], "password": "pw", "role": "admin"}, 400),
    ({"username": "numpass", "password": 1234, "role": "admin"}, 400),
    ({"username": "listzone", "password": "pw", "role": "user", "zoneRef": ["ISB001"]}, 400),
    ({"username": "bademail", "password": "pw", "role": "admin", "email": 5}, 400),
])
def test_create_user_validation(client, auth, payload, status):
    res = client.post('/api/users', json=payload, headers=auth('admin'))
    assert res.status_code == status
    assert res.get_json()['message']


# --- Updates ---

def test_update_user_moves_zone(client, app, auth):
    uid = _user_id(app, 'peshawar')
    res = client.put(f'/api/users/{uid}', json={"zoneRef": "ISB001", "email": "p@example.com"}, headers=auth('admin'))
    assert res.status_code == 200
    assert res.get_json()['zoneRef'] == 'ISB001'
    assert res.get_json()['email'] == 'p@example.com'


def test_seed_admin_role_cannot_change(client, app, auth):
    uid = _user_id(app, 'admin')
    res = client.put(f'/api/users/{uid}', json={"role": "user", "zoneRef": "ISB001"}, headers=auth('admin'))
    assert res.status_code == 403
    with app.app_context():
        assert db.session.get(User, uid).role == 'superadmin'


def test_renamed_seed_admin_keeps_its_protection(client, app, auth):
    uid = _user_id(app, 'admin')
    res = client.put(f'/api/users/{uid}', json={"username": "root"}, headers=auth('admin'))
    assert res.status_code == 200
    client.post('/api/users', json={"username": "boss", "password": "pw", "role": "superadmin"}, headers=auth('admin'))

    boss = auth('boss', 'pw')
    res = client.put(f'/api/users/{uid}', json={"role": "user", "zoneRef": "ISB001"}, headers=boss)
    assert res.status_code == 403
    assert client.delete(f'/api/users/{uid}', headers=boss).status_code == 403
    with app.app_context():
        seed = db.session.get(User, uid)
        assert seed is not None
        assert (seed.username, seed.role) == ('root', 'superadmin')


def test_new_account_named_like_seed_admin_is_not_protected(client, app, auth):
    uid = _user_id(app, 'admin')
    client.put(f'/api/users/{uid}', json={"username": "root"}, headers=auth('admin'))
    res = client.post('/api/users', json={"username": "admin", "password": "pw", "role": "admin"}, headers=auth('admin'))
    assert res.status_code == 201

    impostor = res.get_json()['id']
    assert client.put(f'/api/users/{impostor}', json={"role": "user", "zoneRef": "ISB001"}, headers=auth('admin')).status_code == 200
    assert client.delete(f'/api/users/{impostor}', headers=auth('admin')).status_code == 200


@pytest.mark.parametrize('payload', [
    {"username": 5},
    {"email": ["p@example.com"]},
    {"password": 1234},
    {"zoneRef": 7},
])
def test_update_user_rejects_non_text_fields(client, app, auth, payload):
    uid = _user_id(app, 'peshawar')
    res = client.put(f'/api/users/{uid}', json=payload, headers=auth('admin'))
    assert res.status_code == 400
    with app.app_context():
        user = db.session.get(User, uid)
        assert (user.username, user.zone_ref, user.email) == ('peshawar', 'PES001', None)


def test_update_to_taken_username_conflicts(client, app, auth):
    uid = _user_id(app, 'peshawar')
    res = client.put(f'/api/users/{uid}', json={"username": "islamabad"}, headers=auth('admin'))
    assert res.status_code == 409


def test_update_requires_superadmin(client, app, auth):
    uid = _user_id(app, 'peshawar')
    assert client.put(f'/api/users/{uid}', json={"email": "x"}, headers=auth('manager')).status_code == 403


# --- Deletion ---

def test_cannot_delete_self(client, app, auth):
    uid = _user_id(app, 'admin')
    res = client.delete(f'/api/users/{uid}', headers=auth('admin'))
    assert res.status_code == 403


def test_cannot_delete_seed_admin(client, app, auth):
    client.post('/api/users', json={"username": "root2", "password": "pw", "role": "superadmin"}, headers=auth('admin'))
    uid = _user_id(app, 'admin')
    res = client.delete(f'/api/users/{uid}', headers=auth('root2', 'pw'))
    assert res.status_code == 403


def test_delete_user(client, app, auth):
    uid = _user_id(app, 'peshawar')
    assert client.delete(f'/api/users/{uid}', headers=auth('admin')).status_code == 200
    with app.app_context():
        assert db.session.get(User, uid) is None


def test_delete_user_with_history_conflicts(client, app, auth):
    client.post('/api/status-update', json={"cityId": 2, "status": "uploaded", "comment": "done"}, headers=auth('peshawar'))
    with app.app_context():
        assert StatusUpdate.query.count() == 1
        assert StatusHistory.query.count() == 1
    uid = _user_id(app, 'peshawar')
    assert client.delete(f'/api/users/{uid}', headers=auth('admin')).status_code == 409


def test_admin_cannot_delete_users(client, app, auth):
    uid = _user_id(app, 'peshawar')
    assert client.delete(f'/api/users/{uid}', headers=auth('manager')).status_code == 403


# --- Password changes ---

def test_change_own_password(client, app, auth):
    uid = _user_id(app, 'islamabad')
    res = client.put(
        f'/api/users/{uid}/change-password',
        json={"currentPassword": "user123", "newPassword": "fresh-pass"},
        headers=auth('islamabad'),
    )
    assert res.status_code == 200
    assert client.post('/api/auth/login', json={"username": "islamabad", "password": "user123"}).status_code == 401
    assert client.post('/api/auth/login', json={"username": "islamabad", "password": "fresh-pass"}).status_code == 200


def test_change_own_password_requires_matching_current(client, app, auth):
    uid = _user_id(app, 'islamabad')
    url = f'/api/users/{uid}/change-password'
    assert client.put(url, json={"newPassword": "x"}, headers=auth('islamabad')).status_code == 400
    assert client.put(url, json={"currentPassword": "wrong", "newPassword": "x"}, headers=auth('islamabad')).status_code == 400


def test_cannot_change_someone_elses_password(client, app, auth):
    uid = _user_id(app, 'peshawar')
    res = client.put(
        f'/api/users/{uid}/change-password',
        json={"currentPassword": "user123", "newPassword": "hijack"},
        headers=auth('manager'),
    )
    assert res.status_code == 403


def test_superadmin_resets_any_password_without_current(client, app, auth):
    uid = _user_id(app, 'peshawar')
    res = client.put(f'/api/users/{uid}/change-password', json={"newPassword": "reset-1"}, headers=auth('admin'))
    assert res.status_code == 200
    assert client.post('/api/auth/login', json={"username": "peshawar", "password": "reset-1"}).status_code == 200


def test_plaintext_account_is_hashed_after_change(client, app, auth):
    uid = _user_id(app, 'admin')
    res = client.put(
        f'/api/users/{uid}/change-password',
        json={"currentPassword": "admin123", "newPassword": "much-better"},
        headers=auth('admin'),
    )
    assert res.status_code == 200
    with app.app_context():
        user = db.session.get(User, uid)
        assert user.password_is_hashed
        assert user.password != 'much-better'


def test_login_alone_does_not_migrate_plaintext(client, app):
    client.post('/api/auth/login', json={"username": "admin", "password": "admin123"})
    with app.app_context():
        assert User.query.filter_by(username='admin').one().password_is_hashed is False
