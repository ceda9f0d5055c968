"""Shared fixtures: a fresh SQLite file database per test."""

import pytest
from fastapi.testclient import TestClient

from ideahub.database import build_engine, build_session_factory, create_schema
from ideahub.main import create_app
from ideahub.services import identity


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'ideahub.db'}"


@pytest.fixture
async def db(database_url):
    engine = build_engine(database_url)
    await create_schema(engine)
    session_factory = build_session_factory(engine)
    async with session_factory() as session:
        yield session
    await engine.dispose()


@pytest.fixture
async def alice(db):
    user, _ = await identity.sign_up(db, "alice@example.com", "pw-alice", "Alice")
    return user


@pytest.fixture
async def bob(db):
    user, _ = await identity.sign_up(db, "bob@example.com", "pw-bob", "Bob")
    return user


@pytest.fixture
def client(database_url):
    with TestClient(create_app(database_url)) as test_client:
        yield test_client


@pytest.fixture
def signup(client):
    """Sign a user up over HTTP; returns (user json, auth headers)."""

    def _signup(email, password="pw", name="Someone"):
        resp = client.post(
            "/api/auth/signup",
            json={"email": email, "password": password, "name": name},
        )
        assert resp.status_code == 201, resp.text
        body = resp.json()
        return body["user"], {"Authorization": f"Bearer {body['token']}"}

    return _signup
