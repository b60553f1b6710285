from datetime import date, datetime
from zoneinfo import ZoneInfo

# ZoneInfo needs the tzdata package on platforms without an IANA database (Windows)
BUSINESS_TZ = ZoneInfo("Asia/Manila")


class BusinessClock:
    """Current date/time in the business timezone (Asia/Manila)."""

    def now(self) -> datetime:
        return datetime.now(BUSINESS_TZ)

    def today(self) -> date:
        return self.now().date()


class FixedClock(BusinessClock):
    """Clock pinned to a given instant; used by tests and replays."""

    def __init__(self, moment: datetime):
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=BUSINESS_TZ)
        self._moment = moment.astimezone(BUSINESS_TZ)

    def now(self) -> datetime:
        return self._moment


_clock = BusinessClock()


def get_clock() -> BusinessClock:
    return _clock
