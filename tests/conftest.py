"""
Shared pytest fixtures.

Uses a file-backed SQLite database so no external store is required for tests.
Every test gets its own user id, so tests never see each other's ledgers.
"""
import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from regretless.db.base import Base, get_db
from regretless.main import app
from regretless.routers.deps import get_blob_store
from regretless.services.blobs import LocalBlobStore
import regretless.models  # noqa: F401

SQLITE_URL = "sqlite:///./test_regretless.db"

engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session", autouse=True)
def create_tables():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def blob_root(tmp_path):
    return tmp_path / "blobs"


@pytest.fixture()
def client(db, blob_root):
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_store] = lambda: LocalBlobStore(
        root=blob_root, base_url="https://cdn.test/blobs"
    )
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def user_id():
    return f"user-{uuid.uuid4().hex[:12]}"


@pytest.fixture()
def headers(user_id):
    return {"X-User-Id": user_id}


@pytest.fixture()
def registered(client, headers):
    """A profile created through the API with the onboarding defaults."""
    r = client.post("/profile", json={"username": "RecoveryJourney"}, headers=headers)
    assert r.status_code == 201
    return headers


@pytest.fixture()
def session_factory():
    """Opens extra sessions, one per worker thread, closed at teardown."""
    opened = []

    def _open():
        session = TestingSessionLocal()
        opened.append(session)
        return session

    yield _open
    for session in opened:
        session.close()
