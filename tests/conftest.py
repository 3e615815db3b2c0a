"""
Campus Feedback API - test configuration and fixtures
"""
import os
import uuid

# Must be set before the application modules are imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ.pop("MASTER_ADMIN_EMAIL", None)

import pytest
from fastapi.testclient import TestClient

from main import app
from core.security import create_access_token
from database.database import SessionLocal, engine
from models.base import Base
from models.admin import Admin
from models.feedback import Feedback
import models.auth_user  # noqa: F401
import models.invited_email  # noqa: F401
import models.audit_log  # noqa: F401
import models.access_log  # noqa: F401


@pytest.fixture(autouse=True)
def _tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def auth_header(admin_id: str, email: str) -> dict:
    token = create_access_token({"sub": admin_id, "email": email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_staff(db):
    """Create a staff record and return (record, headers)."""

    def _make(role="admin", approved=True, email=None):
        admin_id = str(uuid.uuid4())
        email = email or f"{role}-{admin_id[:8]}@campus.edu"
        record = Admin(id=admin_id, email=email, role=role, approved=approved)
        db.add(record)
        db.commit()
        db.refresh(record)
        db.expunge(record)
        return record, auth_header(admin_id, email)

    return _make


@pytest.fixture
def superadmin(make_staff):
    return make_staff("superadmin")


@pytest.fixture
def admin(make_staff):
    return make_staff("admin")


@pytest.fixture
def resolver(make_staff):
    return make_staff("resolver")


@pytest.fixture
def make_feedback(db):
    def _make(**overrides):
        data = {"category": "general", "message": "Test message", "priority": "medium", "status": "new"}
        data.update(overrides)
        item = Feedback(**data)
        db.add(item)
        db.commit()
        db.refresh(item)
        db.expunge(item)
        return item

    return _make
