"""
Shared fixtures: an app on a throwaway SQLite file, seeded with the bootstrap
superadmin, two admins and two zone users.

  admin      / admin123    superadmin, plain text (bootstrap state)
  manager    / manager123  admin
  manager2   / manager123  admin
  islamabad  / user123     user of ISB001
  peshawar   / user123     user of PES001
"""
import pytest
from werkzeug.security import generate_password_hash

from backend.app import create_app, seed_admin
from backend.extensions import db
from backend.models import City, User
from backend.session import Actor

PASSWORDS = {
    'admin': 'admin123',
    'manager': 'manager123',
    'manager2': 'manager123',
    'islamabad': 'user123',
    'peshawar': 'user123',
}


def make_user(username, password, role='user', zone_ref='ADMIN'):
    user = User(
        username=username,
        password=generate_password_hash(password),
        password_is_hashed=True,
        role=role,
        zone_ref=zone_ref,
    )
    db.session.add(user)
    db.session.commit()
    return user


def make_city(name, identifier):
    city = City(name=name, identifier=identifier)
    db.session.add(city)
    db.session.commit()
    return city


@pytest.fixture
def app(tmp_path):
    app = create_app('testing', {'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'test.db'}"})
    with app.app_context():
        seed_admin('admin')
        make_user('manager', PASSWORDS['manager'], role='admin')
        make_user('manager2', PASSWORDS['manager2'], role='admin')
        make_city('Islamabad', 'ISB001')
        make_city('Peshawar', 'PES001')
        make_user('islamabad', PASSWORDS['islamabad'], zone_ref='ISB001')
        make_user('peshawar', PASSWORDS['peshawar'], zone_ref='PES001')

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def ctx(app):
    """App context for calling services directly."""
    with app.app_context():
        yield
        db.session.remove()


@pytest.fixture
def auth(client):
    """auth('manager') -> Authorization header for that seeded account."""
    tokens = {}

    def headers(username, password=None):
        if username not in tokens:
            res = client.post('/api/auth/login', json={
                "username": username,
                "password": password or PASSWORDS[username],
            })
            assert res.status_code == 200, res.get_json()
            tokens[username] = res.get_json()['token']
        return {"Authorization": f"Bearer {tokens[username]}"}

    return headers


@pytest.fixture
def actor(ctx):
    """actor('islamabad') -> Actor for a seeded account, for service calls."""
    def build(username):
        user = User.query.filter_by(username=username).one()
        return Actor(id=user.id, username=user.username, role=user.role, zone_ref=user.zone_ref)
    return build
