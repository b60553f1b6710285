from datetime import date, datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.clock import BUSINESS_TZ, FixedClock, get_clock
from app.database import Base, get_db
from app.main import app
from app.models.coupon import Coupon
from app.models.employee import Employee
from app.services.barcode_service import BarcodeService, get_barcode_service

# File-based SQLite so the app and the test code share one database
TEST_DATABASE_URL = "sqlite:///./test_coupons.db"

engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def setup_database():
    """Fresh schema for each test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def clock():
    # Wednesday, 12 March 2025, mid-morning in Manila
    return FixedClock(datetime(2025, 3, 12, 10, 0, tzinfo=BUSINESS_TZ))


@pytest.fixture
def renderer(tmp_path):
    return BarcodeService(str(tmp_path / "barcodes"))


@pytest.fixture
def client(clock, renderer):
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_barcode_service] = lambda: renderer
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_employee(db):
    counter = {"n": 0}

    def _make(department="Engineering", first_name="Ana", last_name="Reyes"):
        counter["n"] += 1
        n = counter["n"]
        employee = Employee(
            employee_code=f"EMP-{n:03d}",
            first_name=first_name,
            last_name=f"{last_name}{n}",
            email=f"employee{n}@company.com",
            department=department,
        )
        db.add(employee)
        db.commit()
        db.refresh(employee)
        return employee

    return _make


@pytest.fixture
def make_coupon(db):
    counter = {"n": 0}

    def _make(employee, coupon_date: date, is_claimed=False, claimed_at=None):
        counter["n"] += 1
        n = counter["n"]
        if is_claimed and claimed_at is None:
            claimed_at = datetime(coupon_date.year, coupon_date.month, coupon_date.day, 12, 0, tzinfo=BUSINESS_TZ)
        coupon = Coupon(
            employee_id=employee.id,
            coupon_date=coupon_date,
            barcode=f"MC{90000000 + n:08d}",
            workday_code=f"WD{employee.id}{coupon_date:%Y%m%d}{100 + n % 900}",
            is_claimed=is_claimed,
            claimed_at=claimed_at,
        )
        db.add(coupon)
        db.commit()
        db.refresh(coupon)
        return coupon

    return _make
