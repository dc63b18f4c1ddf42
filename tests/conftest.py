"""
Shared fixtures. The database is a throwaway SQLite file; the environment is
set before anything from bananadb is imported so that the engine binds to it.
"""
import asyncio
import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="bananadb-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["DEFAULT_AI_PROVIDER"] = "gemini"

import pytest
from fastapi.testclient import TestClient
from bananadb.auth import hash_password
from bananadb import crud
from bananadb.db import Base, SessionLocal, engine
from bananadb.main import app
from bananadb.schemas import ParsedCarListing, ProjectIn


class FakeStore:
    """In-memory stand-in for SettingsStore with the same async interface."""

    def __init__(self, values=None, fail_on=None, delay=0, fail_writes=False):
        self.values = dict(values or {})
        self.fail_on = set(fail_on or ())
        self.fail_writes = fail_writes
        self.delay = delay
        self.active = 0
        self.max_active = 0

    async def get(self, key):
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if key in self.fail_on:
                raise RuntimeError(f"lookup of {key} failed")
            return self.values.get(key)
        finally:
            self.active -= 1

    async def set(self, key, value):
        await self.set_many({key: value})

    async def set_many(self, values):
        await asyncio.sleep(0)
        if self.fail_writes:
            raise RuntimeError("database is read-only")
        self.values.update(values)


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    def _make(email="user@example.com", password="secret123", full_name=None, is_admin=False):
        return crud.create_user(db, email, hash_password(password, iterations=1000), full_name, is_admin=is_admin)
    return _make


@pytest.fixture
def make_project(db):
    def _make(user, make="BMW", model="X5", freename="pikachu", **fields):
        data = ProjectIn(make=make, model=model, **fields)
        return crud.create_project(db, user, data, freename)
    return _make


@pytest.fixture
def listing():
    def _make(**fields):
        data = {"make": "BMW", "model": "X5", "year": 2019, "mileage": 85000, "price": 42000}
        data.update(fields)
        return ParsedCarListing.model_validate(data)
    return _make


@pytest.fixture
def client(db):
    app.dependency_overrides.clear()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def login(client, email="user@example.com", password="secret123"):
    resp = client.post("/login", data={"email": email, "password": password}, follow_redirects=False)
    assert resp.status_code == 303
    return resp
