import os
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from dotenv import load_dotenv
import pytest

# Route app.database at in-memory SQLite before anything imports it
os.environ.setdefault("PYTEST_RUN", "1")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

# Load environment variables for tests
load_dotenv(Path(__file__).resolve().parents[1] / '.env.test')

from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.core.config import settings  # noqa: E402
from app.models import (  # noqa: E402
    AccountStatus,
    Booking,
    BookingStatus,
    User,
    UserRole,
)
from app.models.base import BaseModel  # noqa: E402


def setup_db():
    engine = create_engine(
        "sqlite:///:memory:", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    BaseModel.metadata.create_all(engine)
    Session = sessionmaker(bind=engine)
    return Session


@pytest.fixture
def Session():
    return setup_db()


@pytest.fixture
def db(Session):
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role=UserRole.CUSTOMER, balance=0, status=AccountStatus.APPROVED, **extra):
        counter["n"] += 1
        user = User(
            name=extra.pop("name", f"{role.value} {counter['n']}"),
            phone=extra.pop("phone", f"90000000{counter['n']:02d}"),
            password="x",
            role=role,
            status=status,
            wallet_balance=Decimal(str(balance)),
            **extra,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_booking(db):
    def _make(customer, worker, status=BookingStatus.PENDING, **extra):
        booking = Booking(
            customer_id=customer.id,
            worker_id=worker.id,
            contractor_id=extra.pop("contractor_id", worker.contractor_id),
            work_type=extra.pop("work_type", "Plumbing"),
            location=extra.pop("location", "Pune"),
            start_date=extra.pop("start_date", datetime(2030, 1, 1, 9, 0)),
            status=status,
            **extra,
        )
        db.add(booking)
        db.commit()
        db.refresh(booking)
        return booking

    return _make


@pytest.fixture
def crew(make_user):
    """A customer, a contractor and one contract worker attached to it."""
    customer = make_user(UserRole.CUSTOMER, balance=1000, name="Cara Customer")
    contractor = make_user(UserRole.CONTRACTOR, name="Ravi Builders")
    worker = make_user(UserRole.WORKER, contractor_id=contractor.id, name="Sam Worker")
    return customer, contractor, worker


@pytest.fixture
def fallback_enabled(monkeypatch):
    monkeypatch.setattr(settings, "CONTRACTOR_FALLBACK_ENABLED", True)


@pytest.fixture
def client(Session):
    """TestClient whose requests use the per-test database."""
    from fastapi.testclient import TestClient

    from app.database import get_db
    from app.main import app

    def override_db():
        session = Session()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def auth_headers():
    from app.api.auth import create_access_token

    def _headers(user):
        token = create_access_token({"sub": str(user.id), "role": user.role.value})
        return {"Authorization": f"Bearer {token}"}

    return _headers
