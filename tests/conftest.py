import os
import tempfile
import uuid

# Point the app at a throwaway database before anything imports db.py
_TMP_DIR = tempfile.mkdtemp(prefix="updrill-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_TMP_DIR, "test.db")
os.environ.pop("GATEWAY_API_KEY", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from bank import seed_drills  # noqa: E402
from catalog import catalog  # noqa: E402
from db import SessionLocal, init_db  # noqa: E402
from main import app  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def database():
    init_db()
    with SessionLocal() as db:
        seed_drills(db)
    yield


@pytest.fixture(autouse=True)
def _fresh_listing_cache():
    catalog.invalidate()
    yield
    catalog.invalidate()


@pytest.fixture
def client():
    return TestClient(app)


def identity(email=None, name="Test User", provider="google", subject=None):
    email = email or f"user-{uuid.uuid4().hex[:8]}@example.com"
    return {
        "x-user-email": email,
        "x-user-name": name,
        "x-auth-provider": provider,
        "x-auth-subject": subject or uuid.uuid4().hex,
    }


@pytest.fixture
def alice():
    return identity(name="Alice")


@pytest.fixture
def bob():
    return identity(name="Bob")


@pytest.fixture
def new_identity():
    return identity
