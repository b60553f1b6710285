import calendar
import json
import logging
from datetime import date, timedelta
from typing import Dict, List, Mapping, Optional

from app.config import settings

logger = logging.getLogger(__name__)

# Philippine regular and moveable holidays, keyed by year.
DEFAULT_HOLIDAYS: Dict[int, Dict[str, str]] = {
    2024: {
        "2024-01-01": "New Year's Day",
        "2024-02-10": "Chinese New Year",
        "2024-03-28": "Maundy Thursday",
        "2024-03-29": "Good Friday",
        "2024-03-30": "Black Saturday",
        "2024-04-09": "Araw ng Kagitingan (Day of Valor)",
        "2024-04-10": "Eid al-Fitr",
        "2024-05-01": "Labor Day",
        "2024-06-12": "Independence Day",
        "2024-06-17": "Eid al-Adha",
        "2024-08-26": "National Heroes Day",
        "2024-11-01": "All Saints' Day",
        "2024-11-30": "Bonifacio Day",
        "2024-12-25": "Christmas Day",
        "2024-12-30": "Rizal Day",
    },
    2025: {
        "2025-01-01": "New Year's Day",
        "2025-01-29": "Chinese New Year",
        "2025-04-01": "Eid al-Fitr",
        "2025-04-09": "Araw ng Kagitingan (Day of Valor)",
        "2025-04-17": "Maundy Thursday",
        "2025-04-18": "Good Friday",
        "2025-04-19": "Black Saturday",
        "2025-05-01": "Labor Day",
        "2025-06-07": "Eid al-Adha",
        "2025-06-12": "Independence Day",
        "2025-08-25": "National Heroes Day",
        "2025-11-01": "All Saints' Day",
        "2025-11-30": "Bonifacio Day",
        "2025-12-25": "Christmas Day",
        "2025-12-30": "Rizal Day",
    },
    2026: {
        "2026-01-01": "New Year's Day",
        "2026-02-17": "Chinese New Year",
        "2026-03-20": "Eid al-Fitr",
        "2026-04-02": "Maundy Thursday",
        "2026-04-03": "Good Friday",
        "2026-04-04": "Black Saturday",
        "2026-04-09": "Araw ng Kagitingan (Day of Valor)",
        "2026-05-01": "Labor Day",
        "2026-05-27": "Eid al-Adha",
        "2026-06-12": "Independence Day",
        "2026-08-31": "National Heroes Day",
        "2026-11-01": "All Saints' Day",
        "2026-11-30": "Bonifacio Day",
        "2026-12-25": "Christmas Day",
        "2026-12-30": "Rizal Day",
    },
}


class HolidayCalendar:
    """
    Working-day rules: Monday-Friday and not listed in the holiday table.

    The table maps year -> {ISO date -> label}. Years missing from the table
    fall back to the weekday rule alone.
    """

    def __init__(self, holidays: Optional[Mapping[int, Mapping[str, str]]] = None):
        source = DEFAULT_HOLIDAYS if holidays is None else holidays
        self._holidays: Dict[int, Dict[str, str]] = {
            int(year): dict(days) for year, days in source.items()
        }

    @classmethod
    def from_json_file(cls, path: str) -> "HolidayCalendar":
        with open(path, encoding="utf-8") as fh:
            raw = json.load(fh)
        logger.info("Loaded holiday table from %s (years: %s)", path, sorted(raw))
        return cls({int(year): days for year, days in raw.items()})

    @property
    def years(self) -> List[int]:
        return sorted(self._holidays)

    @staticmethod
    def is_weekend(d: date) -> bool:
        return d.weekday() >= 5

    def holiday_name(self, d: date) -> Optional[str]:
        return self._holidays.get(d.year, {}).get(d.isoformat())

    def is_holiday(self, d: date) -> bool:
        return self.holiday_name(d) is not None

    def holidays_for_year(self, year: int) -> Dict[str, str]:
        return dict(sorted(self._holidays.get(year, {}).items()))

    def is_working_day(self, d: date) -> bool:
        return not self.is_weekend(d) and not self.is_holiday(d)

    def working_days_in_range(self, start: date, end: date) -> List[date]:
        days = []
        current = start
        while current <= end:
            if self.is_working_day(current):
                days.append(current)
            current += timedelta(days=1)
        return days

    def working_days_in_month(self, year: int, month: int) -> List[date]:
        last = calendar.monthrange(year, month)[1]
        return self.working_days_in_range(date(year, month, 1), date(year, month, last))

    def next_working_day(self, d: date) -> date:
        current = d + timedelta(days=1)
        while not self.is_working_day(current):
            current += timedelta(days=1)
        return current


_calendar: Optional[HolidayCalendar] = None


def get_holiday_calendar() -> HolidayCalendar:
    """Calendar loaded once per process, from HOLIDAYS_FILE when configured."""
    global _calendar
    if _calendar is None:
        if settings.HOLIDAYS_FILE:
            _calendar = HolidayCalendar.from_json_file(settings.HOLIDAYS_FILE)
        else:
            _calendar = HolidayCalendar()
    return _calendar
