from datetime import date

import pytest

import app.cli as cli
from app.models.coupon import Coupon
from app.models.notification import Notification
from conftest import TestingSessionLocal, engine


@pytest.fixture(autouse=True)
def cli_env(monkeypatch, clock, renderer):
    monkeypatch.setattr(cli, "SessionLocal", TestingSessionLocal)
    monkeypatch.setattr(cli, "engine", engine)
    monkeypatch.setattr(cli, "get_clock", lambda: clock)
    monkeypatch.setattr(cli, "get_barcode_service", lambda: renderer)


def test_generate_for_one_employee(db, make_employee, capsys):
    employee = make_employee()

    code = cli.main(["generate", "--month", "3", "--year", "2025", "--employee-id", str(employee.id)])

    assert code == 0
    assert db.query(Coupon).filter(Coupon.employee_id == employee.id).count() == 21
    assert "Generated 21 coupons" in capsys.readouterr().out


def test_generate_for_all_employees(db, make_employee, capsys):
    make_employee(), make_employee()

    assert cli.main(["generate", "--month", "3", "--year", "2025"]) == 0
    assert db.query(Coupon).count() == 42
    assert "2 processed, 0 skipped, 0 failed" in capsys.readouterr().out


def test_generate_rejects_bad_month(make_employee, capsys):
    make_employee()

    assert cli.main(["generate", "--month", "13", "--year", "2025"]) == 1
    assert "Error:" in capsys.readouterr().err


def test_notifications_sweep(db, make_employee, make_coupon, capsys):
    make_coupon(make_employee(department="Finance"), date(2025, 3, 13))

    assert cli.main(["notifications"]) == 0
    assert "Notifications generated: 2" in capsys.readouterr().out
    assert db.query(Notification).count() == 2

    assert cli.main(["notifications"]) == 0
    assert "Notifications generated: 0" in capsys.readouterr().out
