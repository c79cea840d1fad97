"""
Calendar-day handling for check-ins

Every "today"/"yesterday" comparison in the engines goes through a Clock so
that:
1. Day strings are always YYYY-MM-DD in one configured timezone
2. Tests can pin the current instant
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from habitplanet.config import APP_TIMEZONE

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"


def now_utc() -> datetime:
    """Current datetime in UTC (timezone-aware)"""
    return datetime.now(ZoneInfo("UTC"))


def to_date_string(moment: datetime) -> str:
    """Format a datetime as a calendar day string"""
    return moment.strftime(DATE_FORMAT)


def to_epoch_ms(moment: datetime) -> int:
    """Milliseconds since the Unix epoch"""
    return int(moment.timestamp() * 1000)


class Clock:
    """
    Source of the current instant and the canonical day strings derived from it

    Args:
        timezone: IANA timezone name the calendar day is taken in
        now_func: Returns an aware datetime; defaults to the wall clock
    """

    def __init__(self, timezone: str = APP_TIMEZONE, now_func: Optional[Callable[[], datetime]] = None):
        self.tz = ZoneInfo(timezone)
        self._now_func = now_func or now_utc

    def now(self) -> datetime:
        return self._now_func().astimezone(self.tz)

    def now_ms(self) -> int:
        return to_epoch_ms(self.now())

    def today(self) -> str:
        """Today's day string, e.g. 2024-03-09"""
        return to_date_string(self.now())

    def yesterday(self) -> str:
        return to_date_string(self.now() - timedelta(days=1))


class FixedClock(Clock):
    """Clock pinned to one instant; advance() moves it forward"""

    def __init__(self, moment: datetime, timezone: str = "UTC"):
        self._moment = moment
        super().__init__(timezone=timezone, now_func=lambda: self._moment)

    def advance(self, **delta) -> None:
        self._moment = self._moment + timedelta(**delta)
        logger.debug(f"FixedClock advanced to {self._moment.isoformat()}")
