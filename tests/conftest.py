# tests/conftest.py
"""
Shared fixtures. Tests run against a single in-memory SQLite database that is
rebuilt for every test; the settings below must be in place before app modules load.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_DIR"] = ""
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SESSION_SECRET"] = "test-session-secret"
for _name in ("SMTP_HOST", "WEBHOOK_SECRET", "NOTIFICATION_WEBHOOK_URL"):
    os.environ.pop(_name, None)

import pytest
from fastapi.testclient import TestClient

import app.models  # noqa: F401  (registers every mapper)
from app.database import SessionLocal, create_tables, drop_tables
from app.main import app
from app.models.user import User
from app.models.vehicle import Vehicle
from app.services.auth_service import create_access_token, hash_password
from app.utils.time import utc_now

VIN = "1HGCM82633A004352"


@pytest.fixture
def db():
    drop_tables()
    create_tables()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    return TestClient(app)


@pytest.fixture
def make_user(db):
    def _make(email="user@example.com", role="USER", password="password123", team_id=None, phone=None):
        user = User(
            email=email,
            name=email.split("@")[0],
            password_hash=hash_password(password),
            role=role,
            team_id=team_id,
            phone=phone,
            is_active=True,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def make_vehicle(db):
    def _make(vin=VIN, status="PENDING", **fields):
        now = utc_now()
        vehicle = Vehicle(
            vin=vin,
            year=fields.pop("year", 2019),
            make=fields.pop("make", "Honda"),
            model=fields.pop("model", "Accord"),
            status=status,
            created_at=fields.pop("created_at", now),
            updated_at=now,
            **fields,
        )
        db.add(vehicle)
        db.commit()
        db.refresh(vehicle)
        return vehicle
    return _make


def auth_headers(user):
    token, _ = create_access_token(user)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin(make_user):
    return make_user("admin@example.com", role="ADMIN")


@pytest.fixture
def manager(make_user):
    return make_user("manager@example.com", role="MANAGER")


@pytest.fixture
def tech(make_user):
    return make_user("tech@example.com", role="USER")
