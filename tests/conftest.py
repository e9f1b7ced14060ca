"""
Shared test fixtures.

Provides a FastAPI TestClient wired to:
  • an in-memory SQLite database (one connection via StaticPool)
  • a seeded club with two active courts and one inactive court
  • member, club admin and super admin users with ready-made bearer headers

PayFast settings are blanked so no test talks to the real gateway.
"""

from __future__ import annotations

import os
import uuid

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["PAYFAST_MERCHANT_ID"] = ""
os.environ["PAYFAST_MERCHANT_KEY"] = ""
os.environ["PAYFAST_PASSPHRASE"] = ""
os.environ["PAYFAST_ONSITE_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from courtside.core.config import settings
from courtside.core.security import create_access_token, hash_password
from courtside.db.session import Base, get_db
from courtside.main import app
from courtside.models.audit_log import AuditLog  # noqa: F401
from courtside.models.booking import Booking
from courtside.models.club import Club
from courtside.models.court import Court
from courtside.models.payment import Payment  # noqa: F401
from courtside.models.user import User
from courtside.models.user_club_role import UserClubRole


# ── Database ───────────────────────────────────────────────────────────────


@pytest.fixture()
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


# ── Domain objects ─────────────────────────────────────────────────────────


def _user(db, email: str, role: str) -> User:
    u = User(
        id=str(uuid.uuid4()),
        email=email,
        full_name=email.split("@")[0].title(),
        role=role,
        password_hash=hash_password("password123"),
        is_active=True,
    )
    db.add(u)
    db.commit()
    return u


@pytest.fixture()
def member(db) -> User:
    return _user(db, "member@example.com", "member")


@pytest.fixture()
def other_member(db) -> User:
    return _user(db, "other@example.com", "member")


@pytest.fixture()
def admin(db, club) -> User:
    """Club admin of test-club only."""
    u = _user(db, "admin@example.com", "member")
    db.add(UserClubRole(id=str(uuid.uuid4()), user_id=u.id, club_id=club.id, role="club_admin"))
    db.commit()
    return u


@pytest.fixture()
def super_admin(db) -> User:
    return _user(db, "root@example.com", "super_admin")


@pytest.fixture()
def club(db) -> Club:
    c = Club(id=str(uuid.uuid4()), slug="test-club", name="Test Tennis Club",
             member_rate=60, visitor_rate=400, flood_lights_fee=50)
    db.add(c)
    db.flush()
    db.add_all([
        Court(id=str(uuid.uuid4()), club_id=c.id, name="Court 1", number=1, sport_type="TENNIS", is_active=True),
        Court(id=str(uuid.uuid4()), club_id=c.id, name="Court 2", number=2, sport_type="PADEL", is_active=True),
        Court(id=str(uuid.uuid4()), club_id=c.id, name="Court 9", number=9, sport_type="TENNIS", is_active=False),
    ])
    db.commit()
    return c


@pytest.fixture()
def other_club(db) -> Club:
    c = Club(id=str(uuid.uuid4()), slug="other-club", name="Other Padel Club")
    db.add(c)
    db.flush()
    db.add(Court(id=str(uuid.uuid4()), club_id=c.id, name="Court 1", number=1, sport_type="PADEL", is_active=True))
    db.commit()
    return c


@pytest.fixture()
def make_booking(db, club, member):
    """Insert a booking row directly, bypassing the conflict check."""

    def _make(start: str, end: str, status: str = "confirmed", court_number: int = 1,
              booking_date: str = "2026-11-02", user: User | None = None,
              at: Club | None = None) -> Booking:
        b = Booking(
            id=str(uuid.uuid4()),
            club_id=(at or club).id,
            user_id=(user or member).id,
            court_number=court_number,
            booking_date=booking_date,
            start_time=start,
            end_time=end,
            duration=0,
            status=status,
            payment_status="unpaid",
        )
        db.add(b)
        db.commit()
        return b

    return _make


# ── HTTP ───────────────────────────────────────────────────────────────────


@pytest.fixture()
def client(session_factory) -> TestClient:
    def _get_test_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_test_db
    with TestClient(app, raise_server_exceptions=False) as tc:
        yield tc
    app.dependency_overrides.clear()


def bearer(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture()
def member_headers(member) -> dict:
    return bearer(member)


@pytest.fixture()
def other_member_headers(other_member) -> dict:
    return bearer(other_member)


@pytest.fixture()
def admin_headers(admin) -> dict:
    return bearer(admin)


@pytest.fixture()
def super_admin_headers(super_admin) -> dict:
    return bearer(super_admin)


@pytest.fixture()
def payfast_settings(monkeypatch):
    """Configured sandbox merchant (PayFast's public sandbox credentials)."""
    monkeypatch.setattr(settings, "PAYFAST_MERCHANT_ID", "10000100")
    monkeypatch.setattr(settings, "PAYFAST_MERCHANT_KEY", "46f0cd694581a")
    monkeypatch.setattr(settings, "PAYFAST_PASSPHRASE", "jt7NOE43FZPn")
    monkeypatch.setattr(settings, "PAYFAST_SANDBOX", True)
    monkeypatch.setattr(settings, "PAYFAST_ONSITE_ENABLED", False)
    return settings
