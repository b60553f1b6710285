from datetime import date, datetime, timedelta

import pytest

from app.clock import BUSINESS_TZ, FixedClock
from app.models.notification import Notification
from app.services.exceptions import NotFound
from app.services.notification_service import NotificationService


def of_type(notifications, type_):
    return [n for n in notifications if n.type == type_]


def past_days(count):
    start = date(2025, 3, 3)
    return [start + timedelta(days=i) for i in range(count)]


def test_low_department_performance_alert_once_per_day(db, clock, make_employee, make_coupon):
    employee = make_employee(department="Finance")
    for i, day in enumerate(past_days(3)):
        make_coupon(employee, day, is_claimed=(i == 0))

    created = NotificationService.run_notification_sweep(db, clock)

    alerts = of_type(created, "department_alert")
    assert len(alerts) == 1
    assert alerts[0].department == "Finance"
    assert alerts[0].priority == "medium"
    assert alerts[0].data == {"claim_rate": 33.3}
    assert "33.3%" in alerts[0].message

    again = NotificationService.run_notification_sweep(db, clock)
    assert of_type(again, "department_alert") == []
    assert db.query(Notification).filter(Notification.type == "department_alert").count() == 1


def test_department_alert_repeats_on_a_new_day(db, clock, make_employee, make_coupon):
    employee = make_employee(department="Finance")
    for day in past_days(3):
        make_coupon(employee, day)

    NotificationService.run_notification_sweep(db, clock)
    next_day = FixedClock(clock.now() + timedelta(days=1))
    created = NotificationService.run_notification_sweep(db, next_day)

    assert len(of_type(created, "department_alert")) == 1
    assert db.query(Notification).filter(Notification.type == "department_alert").count() == 2


def test_department_at_threshold_is_not_flagged(db, clock, make_employee, make_coupon):
    employee = make_employee(department="Operations")
    for i, day in enumerate(past_days(10)):
        make_coupon(employee, day, is_claimed=(i < 7))

    assert of_type(NotificationService.run_notification_sweep(db, clock), "department_alert") == []


def test_each_department_is_scoped_separately(db, clock, make_employee, make_coupon):
    finance = make_employee(department="Finance")
    sales = make_employee(department="Sales")
    make_coupon(finance, date(2025, 3, 3))
    make_coupon(sales, date(2025, 3, 3))

    created = NotificationService.run_notification_sweep(db, clock)

    assert sorted(n.department for n in of_type(created, "department_alert")) == ["Finance", "Sales"]


def test_expiring_coupons_alert(db, clock, make_employee, make_coupon):
    first, second, third = make_employee(), make_employee(), make_employee()
    make_coupon(first, date(2025, 3, 13))
    make_coupon(second, date(2025, 3, 13))
    make_coupon(first, date(2025, 3, 12))
    make_coupon(third, date(2025, 3, 13), is_claimed=True)

    created = of_type(NotificationService.run_notification_sweep(db, clock), "coupon_expiry")

    assert len(created) == 1
    assert created[0].priority == "high"
    assert created[0].data == {"count": 2}
    assert of_type(NotificationService.run_notification_sweep(db, clock), "coupon_expiry") == []


def test_no_expiry_alert_without_coupons_tomorrow(db, clock, make_employee, make_coupon):
    make_coupon(make_employee(), date(2025, 3, 17))
    assert of_type(NotificationService.run_notification_sweep(db, clock), "coupon_expiry") == []


def test_achievement_for_perfect_claim_rate(db, clock, make_employee, make_coupon):
    achiever = make_employee(department="Engineering")
    almost = make_employee(department="Engineering")
    for day in past_days(5):
        make_coupon(achiever, day, is_claimed=True)
    for day in past_days(4):
        make_coupon(almost, day, is_claimed=True)

    created = of_type(NotificationService.run_notification_sweep(db, clock), "achievement")

    assert [n.employee_id for n in created] == [achiever.id]
    assert created[0].data == {"claim_rate": 100, "total_coupons": 5}
    assert created[0].priority == "low"
    assert of_type(NotificationService.run_notification_sweep(db, clock), "achievement") == []


def test_sweep_with_no_coupons(db, clock):
    assert NotificationService.run_notification_sweep(db, clock) == []


def test_mark_read_and_delete(db, clock, make_employee, make_coupon):
    make_coupon(make_employee(department="Finance"), date(2025, 3, 3))
    notification = NotificationService.run_notification_sweep(db, clock)[0]

    assert NotificationService.mark_as_read(db, notification.id).read is True
    NotificationService.delete_notification(db, notification.id)
    assert db.get(Notification, notification.id) is None

    with pytest.raises(NotFound):
        NotificationService.mark_as_read(db, notification.id)


# HTTP surface

def test_notification_endpoints(client, make_employee, make_coupon):
    make_coupon(make_employee(department="Finance"), date(2025, 3, 3))
    make_coupon(make_employee(department="Sales"), date(2025, 3, 13))

    response = client.post("/notifications/generate")
    assert response.status_code == 200
    created = response.json()["created"]
    assert {n["type"] for n in created} == {"coupon_expiry", "department_alert"}

    listing = client.get("/notifications").json()
    assert listing["unread_count"] == len(created)
    assert all(n["notification_date"] == "2025-03-12" for n in listing["notifications"])

    first_id = listing["notifications"][0]["id"]
    assert client.post(f"/notifications/{first_id}/read").json()["read"] is True
    assert client.get("/notifications").json()["unread_count"] == len(created) - 1

    assert client.post("/notifications/read-all").json()["success"] is True
    assert client.get("/notifications").json()["unread_count"] == 0

    assert client.delete(f"/notifications/{first_id}").status_code == 204
    assert client.delete(f"/notifications/{first_id}").status_code == 404


def test_generate_twice_same_day_creates_nothing_new(client, make_employee, make_coupon):
    make_coupon(make_employee(department="Finance"), date(2025, 3, 3))
    assert len(client.post("/notifications/generate").json()["created"]) == 1
    assert client.post("/notifications/generate").json()["created"] == []


def test_notification_date_is_business_day(db, make_employee, make_coupon):
    clock = FixedClock(datetime(2025, 3, 12, 23, 30, tzinfo=BUSINESS_TZ))
    make_coupon(make_employee(department="Finance"), date(2025, 3, 3))
    notification = NotificationService.run_notification_sweep(db, clock)[0]
    assert notification.notification_date == date(2025, 3, 12)
