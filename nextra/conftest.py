"""
nextra/conftest.py

Shared pytest fixtures.

The database file and upload directory are isolated per test session via
environment variables set BEFORE importing the app (config is read at
import time). Every test starts from a freshly created schema with the
default roles seeded.

Run:
    pytest nextra -v
"""

import os
import tempfile

_TEST_ROOT = tempfile.mkdtemp(prefix="nextra-tests-")
os.environ["DATABASE_URL"] = ""
os.environ["DATABASE_PATH"] = os.path.join(_TEST_ROOT, "test.db")
os.environ["STORAGE_LOCAL_BASE_PATH"] = os.path.join(_TEST_ROOT, "uploads")
os.environ["STORAGE_LOCAL_BASE_URL"] = "http://testserver"
os.environ["ADMIN_USERNAME"] = ""
os.environ["PASSWORD_HASH_ITERATIONS"] = "1000"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select

# Import after setting environment variables
from nextra.auth_context import create_access_token, hash_password
from nextra.bootstrap import seed_roles
from nextra.db import SessionLocal, drop_db, init_db
from nextra.main import app
from nextra.models import Role, User
from nextra.rbac import ROLE_ADMIN, ROLE_AGENT, ROLE_NORMAL
from nextra.storage import LocalStorageService, get_storage_service

TEST_PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def database():
    """Fresh schema + default roles for every test."""
    drop_db()
    init_db()
    with SessionLocal() as session:
        seed_roles(session)
    yield


@pytest.fixture
def session():
    with SessionLocal() as db_session:
        yield db_session


@pytest.fixture
def storage(tmp_path):
    """Local storage rooted in the test's tmp dir, injected into the app."""
    service = LocalStorageService(tmp_path / "uploads", "http://testserver")
    app.dependency_overrides[get_storage_service] = lambda: service
    yield service
    app.dependency_overrides.pop(get_storage_service, None)


@pytest.fixture
def client(storage):
    return TestClient(app)


@pytest.fixture
def make_user():
    """Factory: persist a user with the given role names and return it."""

    def _make_user(username, roles=(ROLE_NORMAL,), active=True, password=TEST_PASSWORD, email=None):
        with SessionLocal() as db_session:
            role_rows = list(db_session.scalars(select(Role).where(Role.name.in_(list(roles)))))
            user = User(
                username=username,
                password=hash_password(password),
                email=email or f"{username}@example.com",
                active=active,
                roles=role_rows,
            )
            db_session.add(user)
            db_session.commit()
            return user

    return _make_user


def bearer(username):
    return {"Authorization": f"Bearer {create_access_token(username)}"}


@pytest.fixture
def headers_for():
    """Factory: Authorization header for a username."""
    return bearer


@pytest.fixture
def admin_user(make_user):
    return make_user("admin", [ROLE_ADMIN])


@pytest.fixture
def agent_user(make_user):
    return make_user("agent", [ROLE_AGENT])


@pytest.fixture
def normal_user(make_user):
    return make_user("normal", [ROLE_NORMAL])


@pytest.fixture
def admin_headers(admin_user):
    return bearer(admin_user.username)


@pytest.fixture
def agent_headers(agent_user):
    return bearer(agent_user.username)


@pytest.fixture
def normal_headers(normal_user):
    return bearer(normal_user.username)
