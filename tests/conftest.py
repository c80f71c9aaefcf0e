"""Pytest fixtures: an isolated app per test on in-memory SQLite."""

import pytest

import config
from app import create_app
from database import db
from models import Branch, Customer, User, UserProfile

PASSWORD = 'correct-horse-battery'


@pytest.fixture
def app():
    """A fresh application with its own empty database."""
    app = create_app(config.TestingConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


def _make_user(username: str, role: str, first_name: str | None = 'Test', last_name: str | None = 'User',
               email: str | None = None) -> User:
    user = User(username=username, email=email or f'{username}@example.com', role=role)
    user.set_password(PASSWORD)
    db.session.add(user)
    db.session.flush()
    if first_name and last_name:
        db.session.add(UserProfile(user_id=user.id, first_name=first_name, last_name=last_name))
    db.session.commit()
    return user


@pytest.fixture
def make_user(app):
    return _make_user


@pytest.fixture
def admin(app) -> User:
    return _make_user('admin', User.ROLE_ADMIN, 'Avery', 'Admin')


@pytest.fixture
def officer(app) -> User:
    return _make_user('officer', User.ROLE_COMPLIANCE, 'Casey', 'Officer')


@pytest.fixture
def teller(app) -> User:
    return _make_user('teller', User.ROLE_TELLER, 'Taylor', 'Teller')


@pytest.fixture
def branch(app) -> Branch:
    branch = Branch(name='Head Office', code='HQ', address='1 Main Street')
    db.session.add(branch)
    db.session.commit()
    return branch


@pytest.fixture
def customer(app, admin) -> Customer:
    customer = Customer(first_name='Jordan', last_name='Lee', nationality='CA', created_by=admin.id)
    db.session.add(customer)
    db.session.commit()
    return customer


def login(client, username: str, password: str = PASSWORD):
    return client.post('/auth/login', json={'username': username, 'password': password})


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(client, admin):
    response = login(client, admin.username)
    assert response.status_code == 200
    return client
