from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from passlib.context import CryptContext

from config import Settings
from main import create_app
from security import PasswordHasher, TokenService


class FakeClock:
    """Settable clock for the token service."""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        database_url="sqlite:///:memory:",
        jwt_secret="test-secret",
    )


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def hasher():
    # bcrypt is too slow for every test; same interface, cheap scheme
    return PasswordHasher(CryptContext(schemes=["sha256_crypt"], sha256_crypt__default_rounds=1000))


@pytest.fixture
def tokens(settings, clock):
    return TokenService(settings.jwt_secret, ttl=timedelta(hours=24), clock=clock)


@pytest.fixture
def app(settings, hasher, tokens):
    app = create_app(settings, hasher=hasher, tokens=tokens)
    yield app
    app.state.engine.dispose()


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(app):
    session = app.state.session_local()
    yield session
    session.close()


def register(client, name="Alice", email="alice@example.com", password="s3cret-pass"):
    return client.post("/api/auth/register", json={"name": name, "email": email, "password": password})


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def alice(client):
    resp = register(client)
    assert resp.status_code == 201
    return resp.json()


@pytest.fixture
def bob(client):
    resp = register(client, name="Bob", email="bob@example.com", password="hunter22")
    assert resp.status_code == 201
    return resp.json()
