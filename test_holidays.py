import json
from datetime import date, timedelta

from app.services.holiday_service import DEFAULT_HOLIDAYS, HolidayCalendar

calendar = HolidayCalendar()


def test_weekends_are_never_working_days():
    d = date(2024, 1, 1)
    while d <= date(2026, 12, 31):
        if d.weekday() >= 5:
            assert not calendar.is_working_day(d), d
        d += timedelta(days=1)


def test_working_day_matches_weekday_and_holiday_table():
    d = date(2024, 1, 1)
    while d <= date(2026, 12, 31):
        listed = d.isoformat() in DEFAULT_HOLIDAYS[d.year]
        assert calendar.is_working_day(d) == (d.weekday() < 5 and not listed), d
        d += timedelta(days=1)


def test_holiday_lookup():
    assert calendar.is_holiday(date(2025, 12, 25))
    assert calendar.holiday_name(date(2025, 6, 12)) == "Independence Day"
    assert calendar.holiday_name(date(2025, 6, 13)) is None


def test_year_outside_table_uses_weekday_rule_only():
    # Christmas 2023 fell on a Monday; 2023 is not in the table
    assert calendar.is_working_day(date(2023, 12, 25))
    assert calendar.holidays_for_year(2023) == {}


def test_working_days_in_march_2025():
    days = calendar.working_days_in_month(2025, 3)
    assert len(days) == 21
    assert days[0] == date(2025, 3, 3)
    assert days[-1] == date(2025, 3, 31)
    assert days == sorted(days)


def test_working_days_in_april_2025_skip_holidays():
    days = calendar.working_days_in_month(2025, 4)
    assert len(days) == 18
    for holiday in (date(2025, 4, 1), date(2025, 4, 9), date(2025, 4, 17), date(2025, 4, 18)):
        assert holiday not in days


def test_working_days_in_range_is_inclusive_and_restartable():
    start, end = date(2025, 3, 3), date(2025, 3, 7)
    first = calendar.working_days_in_range(start, end)
    assert first == [date(2025, 3, d) for d in range(3, 8)]
    assert calendar.working_days_in_range(start, end) == first


def test_working_days_in_empty_range():
    assert calendar.working_days_in_range(date(2025, 3, 7), date(2025, 3, 3)) == []
    assert calendar.working_days_in_range(date(2025, 3, 8), date(2025, 3, 9)) == []


def test_next_working_day_skips_weekend():
    assert calendar.next_working_day(date(2025, 3, 14)) == date(2025, 3, 17)


def test_next_working_day_is_exclusive():
    assert calendar.next_working_day(date(2025, 3, 3)) == date(2025, 3, 4)


def test_next_working_day_skips_holy_week():
    assert calendar.next_working_day(date(2025, 4, 16)) == date(2025, 4, 21)


def test_injected_table_replaces_default():
    custom = HolidayCalendar({2025: {"2025-03-05": "Company Foundation Day"}})
    assert not custom.is_working_day(date(2025, 3, 5))
    assert custom.is_working_day(date(2025, 12, 25))
    assert len(custom.working_days_in_month(2025, 3)) == 20


def test_table_loaded_from_json_file(tmp_path):
    path = tmp_path / "holidays.json"
    path.write_text(json.dumps({"2027": {"2027-01-01": "New Year's Day"}}), encoding="utf-8")
    loaded = HolidayCalendar.from_json_file(str(path))
    assert loaded.years == [2027]
    assert loaded.holiday_name(date(2027, 1, 1)) == "New Year's Day"


def test_calendar_endpoints(client):
    response = client.get("/calendar/working-days", params={"start": "2025-04-14", "end": "2025-04-20"})
    assert response.status_code == 200
    data = response.json()
    assert data["working_days"] == ["2025-04-14", "2025-04-15", "2025-04-16"]
    assert data["count"] == 3

    response = client.get("/calendar/next-working-day", params={"date": "2025-04-16"})
    assert response.json()["next_working_day"] == "2025-04-21"

    response = client.get("/calendar/holidays/2026")
    assert response.json()["holidays"]["2026-08-31"] == "National Heroes Day"


def test_calendar_rejects_reversed_range(client):
    response = client.get("/calendar/working-days", params={"start": "2025-04-20", "end": "2025-04-14"})
    assert response.status_code == 422
    assert response.json()["error"]["type"] == "ValidationError"
