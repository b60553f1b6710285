from datetime import date, timedelta

from fastapi import APIRouter, Depends, Query

from app.schemas.calendar import HolidaysResponse, NextWorkingDayResponse, WorkingDaysResponse
from app.services.exceptions import ValidationError
from app.services.holiday_service import HolidayCalendar, get_holiday_calendar

router = APIRouter(prefix="/calendar", tags=["calendar"])

MAX_RANGE_DAYS = 366


@router.get("/working-days", response_model=WorkingDaysResponse)
def working_days(
    start: date = Query(...),
    end: date = Query(...),
    calendar: HolidayCalendar = Depends(get_holiday_calendar),
):
    if end < start:
        raise ValidationError("end must not be before start")
    if end - start > timedelta(days=MAX_RANGE_DAYS):
        raise ValidationError(f"range must not exceed {MAX_RANGE_DAYS} days")
    days = calendar.working_days_in_range(start, end)
    return WorkingDaysResponse(start=start, end=end, count=len(days), working_days=days)


@router.get("/holidays/{year}", response_model=HolidaysResponse)
def holidays(year: int, calendar: HolidayCalendar = Depends(get_holiday_calendar)):
    return HolidaysResponse(year=year, holidays=calendar.holidays_for_year(year))


@router.get("/next-working-day", response_model=NextWorkingDayResponse)
def next_working_day(
    date_: date = Query(..., alias="date"),
    calendar: HolidayCalendar = Depends(get_holiday_calendar),
):
    return NextWorkingDayResponse(from_date=date_, next_working_day=calendar.next_working_day(date_))
