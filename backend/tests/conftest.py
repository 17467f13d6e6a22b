"""
conftest.py: Shared pytest fixtures for the Pocket Kintai API test suite.

Every test runs against a fresh in-memory SQLite database. ``get_db`` is
overridden to hand out one shared session, and ``get_now`` is overridden by
a movable clock so clock-in/out tests are deterministic.

DATABASE_URL is pointed at SQLite before any ``pocket_kintai`` import so the
module-level engine never tries to reach Postgres.
"""

import os
from datetime import datetime

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pocket_kintai.api.deps import get_now
from pocket_kintai.core.database import Base, get_db
from pocket_kintai.core.security import (
    create_access_token,
    generate_public_company_id,
    get_password_hash,
)
from pocket_kintai.main import app
from pocket_kintai.models import Company, User, UserRole

PASSWORD = "Passw0rdX"


class FrozenClock:
    """Stands in for the wall clock; tests move ``now`` explicitly."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


# ---------------------------------------------------------------------------
# Database / app
# ---------------------------------------------------------------------------

@pytest.fixture()
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def clock():
    # A Tuesday
    return FrozenClock(datetime(2025, 4, 1, 9, 0, 0))


@pytest.fixture()
def client(db, clock):
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_now] = clock
    try:
        # No context manager: the lifespan would create tables on the real engine
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Tenants and users
# ---------------------------------------------------------------------------

def make_company(db, name="Acme"):
    company = Company(name=name, settings={})
    db.add(company)
    db.flush()
    company.public_id = generate_public_company_id(company.id)
    db.commit()
    db.refresh(company)
    return company


def make_user(db, email, role=UserRole.EMPLOYEE, company=None, name=None, verified=True):
    user = User(
        email=email,
        name=name or email.split("@")[0],
        hashed_password=get_password_hash(PASSWORD),
        role=role.value,
        company_id=company.id if company else None,
        is_email_verified=verified,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user, company_public_id=None):
    headers = {"Authorization": f"Bearer {create_access_token(user)}"}
    if company_public_id:
        headers["X-Company-ID"] = company_public_id
    return headers


@pytest.fixture()
def company(db):
    return make_company(db, "Acme")


@pytest.fixture()
def other_company(db):
    return make_company(db, "Globex")


@pytest.fixture()
def super_admin(db):
    return make_user(db, "root@example.com", UserRole.SUPER_ADMIN, name="Root")


@pytest.fixture()
def admin(db, company):
    return make_user(db, "admin@acme.com", UserRole.ADMIN, company, name="Alice Admin")


@pytest.fixture()
def employee(db, company):
    return make_user(db, "emp@acme.com", UserRole.EMPLOYEE, company, name="Eve Employee")


@pytest.fixture()
def coworker(db, company):
    return make_user(db, "bob@acme.com", UserRole.EMPLOYEE, company, name="Bob Coworker")


@pytest.fixture()
def outsider(db, other_company):
    return make_user(db, "zed@globex.com", UserRole.EMPLOYEE, other_company, name="Zed Outsider")
