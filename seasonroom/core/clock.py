"""Time sources.

Every piece of calendar logic reads "now" through a clock object so the
availability rules can be evaluated against a fixed instant in tests.
"""
from datetime import date, datetime, timedelta
from typing import Optional, Protocol

import pytz


class Clock(Protocol):
    """Anything that can tell the current wall-clock instant."""

    def now(self) -> datetime:
        ...

    def today(self) -> date:
        ...


class SystemClock:
    """Clock backed by the machine's wall clock.

    Without a timezone the naive local time is returned, which is what the
    crew calendar has always been computed against. With a timezone name
    (e.g. ``Asia/Seoul``) the instant is converted to that zone and the
    tzinfo dropped, so all comparisons stay naive.
    """

    def __init__(self, timezone: Optional[str] = None):
        self.timezone = pytz.timezone(timezone) if timezone else None

    def now(self) -> datetime:
        if self.timezone is None:
            return datetime.now()
        current_time_utc = datetime.utcnow().replace(tzinfo=pytz.UTC)
        return current_time_utc.astimezone(self.timezone).replace(tzinfo=None)

    def today(self) -> date:
        return self.now().date()


class FixedClock:
    """Clock pinned to a given instant; can be moved forward manually."""

    def __init__(self, instant: datetime):
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def today(self) -> date:
        return self._instant.date()

    def set(self, instant: datetime) -> None:
        self._instant = instant

    def advance(self, **kwargs) -> None:
        self._instant = self._instant + timedelta(**kwargs)
