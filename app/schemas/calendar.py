from datetime import date
from typing import Dict, List

from pydantic import BaseModel


class WorkingDaysResponse(BaseModel):
    start: date
    end: date
    count: int
    working_days: List[date]


class HolidaysResponse(BaseModel):
    year: int
    holidays: Dict[str, str]


class NextWorkingDayResponse(BaseModel):
    from_date: date
    next_working_day: date
