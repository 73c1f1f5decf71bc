import os

# point the engine at a throwaway file before textilehome is imported
os.environ["DATABASE_URL"] = "sqlite:///./test_textilehome.db"
os.environ["ENVIRONMENT"] = "production"

import pytest
from fastapi.testclient import TestClient

from textilehome.db import SessionLocal, init_db
from textilehome.main import app
from textilehome.services.admin_service import AdminService

ORIGIN = {"Origin": "http://testserver"}


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture(autouse=True)
def fresh_state():
    init_db(reset=True, seed=True)
    app.state.security.reset()
    yield


@pytest.fixture
def client():
    c = TestClient(app)
    # state-changing requests must look same-origin to pass the CSRF check
    c.headers.update(ORIGIN)
    return c


@pytest.fixture
def db():
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def admin_headers(client, db):
    AdminService(db).create_admin("admin", "admin123", "admin@textilehome.com")
    res = client.post("/api/admin/login", json={"username": "admin", "password": "admin123"})
    assert res.status_code == 200
    return {"admin-session": res.json()["sessionId"]}
